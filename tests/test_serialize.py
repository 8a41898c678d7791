import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../')))

from puzzlevm.errors import ParseError, RangeError
from puzzlevm.serialize import _atom_prefix, sexp_from_bytes, sexp_from_hex, sexp_to_bytes, sexp_to_hex
from puzzlevm.sexp import NIL, Atom, Pair, sexp_list

FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")


class TestSerialize(unittest.TestCase):

    def test_small_atoms(self):
        self.assertEqual(sexp_to_bytes(NIL), b"\x80")
        self.assertEqual(sexp_to_bytes(Atom(b"\x01")), b"\x01")
        self.assertEqual(sexp_to_bytes(Atom(b"\x7f")), b"\x7f")
        self.assertEqual(sexp_to_bytes(Atom(b"\x80")), b"\x81\x80")
        self.assertEqual(sexp_to_bytes(Atom(b"ab")), b"\x82ab")

    def test_size_prefixes(self):
        for size, prefix in ((0x3f, b"\xbf"), (0x40, b"\xc0\x40"), (0x1fff, b"\xdf\xff"), (0x2000, b"\xe0\x20\x00")):
            blob = sexp_to_bytes(Atom(b"\x00" * size))
            self.assertEqual(blob[:len(prefix)], prefix, f"size {size}")
            self.assertEqual(sexp_from_bytes(blob), Atom(b"\x00" * size))

    def test_pairs(self):
        self.assertEqual(sexp_to_hex(Pair(Atom(b"\x02"), Atom(b"\x03"))), "ff0203")
        self.assertEqual(sexp_to_hex(sexp_list(1, 2)), "ff01ff0280")

    def test_templates_round_trip(self):
        for name in sorted(os.listdir(FIXTURES)):
            if not name.endswith(".clvm.hex"):
                continue
            with open(os.path.join(FIXTURES, name)) as f:
                text = f.read().strip()
            self.assertEqual(sexp_to_hex(sexp_from_hex(text)), text, name)

    def test_errors(self):
        for blob in (b"", b"\xff\x01", b"\x82a", b"\x01\x02", b"\xfc"):
            with self.assertRaises(ParseError, msg=blob.hex()):
                sexp_from_bytes(blob)
        with self.assertRaises(ParseError):
            sexp_from_hex("f")

    def test_atom_too_long(self):
        with self.assertRaises(RangeError):
            _atom_prefix(0x400000000)

    def test_deep_nesting(self):
        depth = 20000
        v = NIL
        for _ in range(depth):
            v = Pair(v, NIL)
        blob = sexp_to_bytes(v)
        self.assertEqual(len(blob), 2 * depth + 1)
        self.assertEqual(sexp_from_bytes(blob), v)


if __name__ == "__main__":
    unittest.main()
