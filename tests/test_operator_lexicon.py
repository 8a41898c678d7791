import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../')))

from puzzlevm.errors import UnknownOperatorError
from puzzlevm.operator_lexicon import (
    ALL_OPS,
    DEFAULT_OPERATOR_LOOKUP,
    KEYWORD_TO_ATOM,
    OP_ALIASES,
    OperatorLookup,
)
from puzzlevm.operators import OPERATORS


class TestOperatorLookup(unittest.TestCase):

    def setUp(self):
        self.ol = OperatorLookup()

    def test_known_opcodes(self):
        self.assertEqual(self.ol.keyword_to_atom("q"), b"\x01")
        self.assertEqual(self.ol.keyword_to_atom("a"), b"\x02")
        self.assertEqual(self.ol.keyword_to_atom("add"), b"\x10")
        self.assertEqual(self.ol.keyword_to_atom("+"), b"\x10")
        self.assertEqual(self.ol.keyword_to_atom("point_add"), b"\x1d")
        self.assertEqual(self.ol.keyword_to_atom("pubkey_for_exp"), b"\x1e")
        self.assertEqual(self.ol.keyword_to_atom("softfork"), b"\x24")

    def test_round_trip(self):
        for kw in KEYWORD_TO_ATOM:
            self.assertEqual(self.ol.atom_to_keyword(self.ol.keyword_to_atom(kw)), kw)

    def test_aliases_resolve_to_primary(self):
        for alias, primary in OP_ALIASES.items():
            atom = self.ol.keyword_to_atom(alias)
            self.assertEqual(self.ol.atom_to_keyword(atom), primary)

    def test_unknown(self):
        with self.assertRaises(UnknownOperatorError):
            self.ol.keyword_to_atom("frobnicate")
        with self.assertRaises(UnknownOperatorError):
            self.ol.atom_to_keyword(b"\x0f")
        self.assertFalse(self.ol.is_keyword("frobnicate"))
        self.assertTrue(self.ol.is_keyword("add"))

    def test_keywords_in_opcode_order(self):
        kws = self.ol.keywords()
        self.assertEqual(kws[0], "q")
        self.assertEqual(kws[-1], "softfork")

    def test_custom_table(self):
        ol = OperatorLookup({"q": b"\x01", "plus": b"\x10"}, aliases={})
        self.assertEqual(ol.keyword_to_atom("plus"), b"\x10")
        with self.assertRaises(UnknownOperatorError):
            ol.keyword_to_atom("add")


def test_every_operator_has_an_implementation():
    # q and a are handled by the evaluator itself
    assert ALL_OPS - {"q", "a"} == set(OPERATORS)
    assert set(KEYWORD_TO_ATOM) == ALL_OPS


def test_default_lookup_is_shared():
    assert DEFAULT_OPERATOR_LOOKUP.keyword_to_atom("c") == b"\x04"


if __name__ == "__main__":
    unittest.main()
