"""
puzzlevm Operator Lexicon (Single Source of Truth)

Maps opcode mnemonics to their one-byte atom encodings. The assembler,
disassembler and evaluator all import from this module so that every layer
agrees on the same table.
"""

from typing import Dict, Optional

from .errors import UnknownOperatorError

# Position in this sequence is the opcode byte. "." marks unassigned slots.
KEYWORDS = (
    # core
    ". q a i c f r l x = >s sha256 substr strlen concat . "
    # arithmetic
    "+ - * / divmod > ash lsh "
    # bitwise
    "logand logior logxor lognot . "
    # BLS12-381 G1
    "point_add pubkey_for_exp . "
    # boolean
    "not any all . "
    "softfork "
).split()

KEYWORD_TO_ATOM: Dict[str, bytes] = {
    kw: bytes([idx]) for idx, kw in enumerate(KEYWORDS) if kw != "."
}
ATOM_TO_KEYWORD: Dict[bytes, str] = {v: k for k, v in KEYWORD_TO_ATOM.items()}

# Long-form names accepted by the assembler
OP_ALIASES = {
    "if": "i",
    "cons": "c",
    "first": "f",
    "rest": "r",
    "listp": "l",
    "raise": "x",
    "eq": "=",
    "gr_bytes": ">s",
    "add": "+",
    "subtract": "-",
    "multiply": "*",
    "div": "/",
    "gr": ">",
}

QUOTE_ATOM = KEYWORD_TO_ATOM["q"]
APPLY_ATOM = KEYWORD_TO_ATOM["a"]
CONS_ATOM = KEYWORD_TO_ATOM["c"]

# Derived sets used by the evaluator and the disassembler
CORE_OPS = {"q", "a", "i", "c", "f", "r", "l", "x", "="}
BYTE_OPS = {">s", "sha256", "substr", "strlen", "concat"}
ARITH_OPS = {"+", "-", "*", "/", "divmod", ">", "ash", "lsh"}
BITWISE_OPS = {"logand", "logior", "logxor", "lognot"}
CURVE_OPS = {"point_add", "pubkey_for_exp"}
BOOL_OPS = {"not", "any", "all"}

ALL_OPS = CORE_OPS | BYTE_OPS | ARITH_OPS | BITWISE_OPS | CURVE_OPS | BOOL_OPS | {"softfork"}


class OperatorLookup:
    """
    Bidirectional mnemonic <-> atom table.

    Instances are cheap views over the module tables; a custom table can be
    injected for experiments, but both directions are always derived from the
    same mapping so they agree.
    """

    def __init__(self, keyword_to_atom: Optional[Dict[str, bytes]] = None,
                 aliases: Optional[Dict[str, str]] = None):
        self._kw_to_atom = dict(KEYWORD_TO_ATOM if keyword_to_atom is None else keyword_to_atom)
        self._atom_to_kw = {v: k for k, v in self._kw_to_atom.items()}
        self._aliases = dict(OP_ALIASES if aliases is None else aliases)

    def keyword_to_atom(self, keyword: str) -> bytes:
        kw = self._aliases.get(keyword, keyword)
        try:
            return self._kw_to_atom[kw]
        except KeyError:
            raise UnknownOperatorError(f"unknown operator mnemonic {keyword!r}")

    def atom_to_keyword(self, atom: bytes) -> str:
        try:
            return self._atom_to_kw[bytes(atom)]
        except KeyError:
            raise UnknownOperatorError(f"no operator for atom 0x{bytes(atom).hex()}")

    def is_keyword(self, keyword: str) -> bool:
        return self._aliases.get(keyword, keyword) in self._kw_to_atom

    def is_operator_atom(self, atom: bytes) -> bool:
        return bytes(atom) in self._atom_to_kw

    def keywords(self):
        """Primary mnemonics in opcode order."""
        return sorted(self._kw_to_atom, key=lambda k: self._kw_to_atom[k])


DEFAULT_OPERATOR_LOOKUP = OperatorLookup()
