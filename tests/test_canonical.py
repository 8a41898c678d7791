import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../')))

from puzzlevm.canonical import (
    Int,
    bytes_from_hex,
    bytes_to_hex,
    hash_from_hex,
    int_from_bytes,
    int_to_bytes,
    msb_mask,
)
from puzzlevm.errors import ParseError, RangeError


class TestMsbMask(unittest.TestCase):

    def test_table(self):
        table = {
            0x00: 0x00, 0x01: 0x01, 0x02: 0x02, 0x04: 0x04, 0x08: 0x08,
            0x10: 0x10, 0x20: 0x20, 0x40: 0x40, 0x80: 0x80,
            0x44: 0x40, 0x2a: 0x20, 0xff: 0x80, 0x0f: 0x08,
        }
        for byte, mask in table.items():
            self.assertEqual(msb_mask(byte), mask, f"msb_mask(0x{byte:02x})")

    def test_rejects_non_byte(self):
        with self.assertRaises(RangeError):
            msb_mask(0x100)
        with self.assertRaises(RangeError):
            msb_mask(-1)


class TestHex(unittest.TestCase):

    def test_round_trip(self):
        for blob in (b"", b"\x00", b"\xab\xef", bytes(range(256))):
            self.assertEqual(bytes_from_hex(bytes_to_hex(blob)), blob)

    def test_lowercase(self):
        self.assertEqual(bytes_to_hex(b"\xab\xef"), "abef")

    def test_invalid(self):
        with self.assertRaises(ParseError):
            bytes_from_hex("abc")
        with self.assertRaises(ParseError):
            bytes_from_hex("zz")

    def test_hash_length(self):
        self.assertEqual(len(hash_from_hex("00" * 32)), 32)
        with self.assertRaises(RangeError):
            hash_from_hex("00" * 31)


class TestCanonicalBytes(unittest.TestCase):

    def test_known_encodings(self):
        cases = [
            (0, b""),
            (1, b"\x01"),
            (127, b"\x7f"),
            (128, b"\x00\x80"),
            (255, b"\x00\xff"),
            (256, b"\x01\x00"),
            (-1, b"\xff"),
            (-128, b"\x80"),
            (-129, b"\xff\x7f"),
        ]
        for value, blob in cases:
            self.assertEqual(int_to_bytes(value), blob, f"int_to_bytes({value})")
            self.assertEqual(int_from_bytes(blob), value)

    def test_non_canonical_input_decodes(self):
        self.assertEqual(int_from_bytes(b"\x00\x00\x05"), 5)
        self.assertEqual(int_from_bytes(b"\xff\xff\xfe"), -2)

    def test_big_endian(self):
        self.assertEqual(Int.from_bytes(bytes([0x01, 0x02])).to_int(), 0x0102)


class TestInt(unittest.TestCase):

    def test_round_trip(self):
        for n in (100, -100, 0, 0x1234567812345678 + 0x1234567812345678, -(1 << 200)):
            self.assertEqual(Int.from_bytes(int_to_bytes(n)).value, n)

    def test_add_sub(self):
        a = Int.from_bytes(int_to_bytes(0x1234567812345678))
        b = Int.from_bytes(int_to_bytes(0x1234567812345600))
        self.assertEqual((a + a).value, 0x1234567812345678 * 2)
        self.assertEqual((a - b).to_int(), 0x78)

    def test_division_modes(self):
        self.assertEqual(Int(3) // -2, Int(-2))
        self.assertEqual(Int(-3) // 2, Int(-2))
        self.assertEqual(Int(-3).truncdiv(2), Int(-1))
        self.assertEqual(Int(7).truncdiv(-2), Int(-3))

    def test_mod(self):
        self.assertEqual(Int(-1).mod(7), Int(6))
        with self.assertRaises(RangeError):
            Int(5).mod(0)

    def test_to_int_width(self):
        with self.assertRaises(RangeError):
            Int(1 << 63).to_int()
        self.assertEqual(Int(1 << 63).to_int(bits=64, signed=False), 1 << 63)
        self.assertEqual(Int(255).to_byte(), 255)
        with self.assertRaises(RangeError):
            Int(256).to_byte()

    def test_unsigned_bytes(self):
        self.assertEqual(Int.from_unsigned_bytes(b"\xff").value, 255)
        self.assertEqual(Int.from_bytes(b"\xff").value, -1)
        self.assertEqual(Int.from_hex("ff", signed=False).value, 255)

    def test_fixed_bytes(self):
        self.assertEqual(Int(1).to_fixed_bytes(4), b"\x00\x00\x00\x01")
        with self.assertRaises(RangeError):
            Int(1 << 40).to_fixed_bytes(4)

    def test_immutable(self):
        i = Int(5)
        with self.assertRaises(AttributeError):
            i._value = 6

    def test_rejects_bool(self):
        with self.assertRaises(TypeError):
            Int(True)


if __name__ == "__main__":
    unittest.main()
