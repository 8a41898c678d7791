"""
assembler.py

puzzlevm Assembler
------------------

Text <-> Value.

    (a (q . 2) (c 5 ()))      lists, dotted tails, () for NIL
    42  -7  0x00ff            decimal and hex atoms
    "hi\\n"                   string atoms (UTF-8)
    ; comment                 to end of line

Bare symbols are operator mnemonics and assemble to their one-byte atom.
"""

import os
import re
import threading
from collections import OrderedDict
from typing import List

from arpeggio import EOF, NoMatch, Optional, ParserPython, PTNodeVisitor, ZeroOrMore, visit_parse_tree
from arpeggio import RegExMatch as _

from .canonical import int_from_bytes, int_to_bytes
from .errors import ParseError
from .operator_lexicon import DEFAULT_OPERATOR_LOOKUP, QUOTE_ATOM, OperatorLookup
from .sexp import NIL, Atom, Pair, SExp, to_sexp

# Enable with: PUZZLEVM_DEBUG=1
_DEBUG_ENABLED = os.getenv("PUZZLEVM_DEBUG", "0") == "1"


def _debug_print(*args, **kwargs):
    """Print only if debug is enabled."""
    if _DEBUG_ENABLED:
        print(*args, **kwargs)


# ==========================================
# PERFORMANCE: PARSE CACHING
# ==========================================
# Values are immutable, so a cached Value is handed out without copying.

_PARSE_CACHE = OrderedDict()
_PARSE_CACHE_MAX_SIZE = 1024
_PARSE_CACHE_LOCK = threading.Lock()
_PARSER_LOCK = threading.Lock()

_GLOBAL_PARSER = None


# ==========================================
# GRAMMAR
# ==========================================

def comment():
    return _(r';[^\n]*')


def string():
    return _(r'"(?:[^"\\]|\\.)*"')


def token():
    # anything up to a delimiter, except a lone "."
    return _(r'(?!\.(?:[\s()]|$))[^\s()";]+')


def dotted_tail():
    return _(r'\.(?=[\s()])'), expr


def list_form():
    return "(", ZeroOrMore(expr), Optional(dotted_tail), ")"


def expr():
    return [list_form, string, token]


def program():
    return expr, EOF


def _get_or_create_parser():
    """Get global parser instance, creating it if needed."""
    global _GLOBAL_PARSER
    with _PARSER_LOCK:
        if _GLOBAL_PARSER is None:
            _GLOBAL_PARSER = ParserPython(program, comment)
    return _GLOBAL_PARSER


# ==========================================
# ATOM DECODING
# ==========================================

_HEX_RE = re.compile(r'0[xX]([0-9a-fA-F]*)')
_DECIMAL_RE = re.compile(r'-?[0-9]+')
_ESCAPE_RE = re.compile(r'\\(x[0-9a-fA-F]{2}|.)', re.DOTALL)

_SIMPLE_ESCAPES = {
    "\\": b"\\",
    '"': b'"',
    "n": b"\n",
    "t": b"\t",
    "r": b"\r",
    "0": b"\x00",
}


def _hex_atom(digits: str, position: int) -> bytes:
    if not digits:
        raise ParseError("hex literal has no digits", position)
    if len(digits) % 2:
        digits = "0" + digits
    return bytes.fromhex(digits)


def _unescape(body: str, position: int) -> bytes:
    out = bytearray()
    pos = 0
    for m in _ESCAPE_RE.finditer(body):
        out += body[pos:m.start()].encode("utf-8")
        esc = m.group(1)
        if esc[0] == "x" and len(esc) == 3:
            out.append(int(esc[1:], 16))
        elif esc in _SIMPLE_ESCAPES:
            out += _SIMPLE_ESCAPES[esc]
        else:
            raise ParseError(f"invalid escape \\{esc} in string", position + m.start())
        pos = m.end()
    out += body[pos:].encode("utf-8")
    return bytes(out)


# ==========================================
# VISITOR
# ==========================================

class _DottedTail:
    __slots__ = ("value",)

    def __init__(self, value: SExp):
        self.value = value


class SExpVisitor(PTNodeVisitor):
    """Builds Values from the parse tree."""

    def __init__(self, operator_lookup: OperatorLookup = DEFAULT_OPERATOR_LOOKUP, **kwargs):
        super().__init__(**kwargs)
        self.operator_lookup = operator_lookup

    def visit_program(self, node, children):
        return [c for c in children if isinstance(c, SExp)][0]

    def visit_expr(self, node, children):
        return [c for c in children if isinstance(c, SExp)][0]

    def visit_dotted_tail(self, node, children):
        return _DottedTail([c for c in children if isinstance(c, SExp)][0])

    def visit_list_form(self, node, children):
        items: List[SExp] = []
        tail = NIL
        for c in children:
            if isinstance(c, SExp):
                items.append(c)
            elif isinstance(c, _DottedTail):
                tail = c.value
        r = tail
        for item in reversed(items):
            r = Pair(item, r)
        return r

    def visit_string(self, node, children):
        return Atom(_unescape(node.value[1:-1], node.position + 1))

    def visit_token(self, node, children):
        text = node.value
        m = _HEX_RE.fullmatch(text)
        if m:
            return Atom(_hex_atom(m.group(1), node.position))
        if text[:2] in ("0x", "0X"):
            raise ParseError(f"invalid hex literal {text!r}", node.position)
        if _DECIMAL_RE.fullmatch(text):
            return Atom(int_to_bytes(int(text)))
        return Atom(self.operator_lookup.keyword_to_atom(text))


# ==========================================
# PUBLIC API
# ==========================================

def assemble(text: str) -> SExp:
    """
    Parse assembler text into a Value.

    arpeggio parses and visits recursively, so nesting deeper than the
    interpreter's recursion limit allows is reported as a ParseError.

    Raises:
        ParseError: malformed or too deeply nested text
        UnknownOperatorError: a bare symbol that is not a mnemonic
    """
    with _PARSE_CACHE_LOCK:
        if text in _PARSE_CACHE:
            _PARSE_CACHE.move_to_end(text)
            return _PARSE_CACHE[text]

    parser = _get_or_create_parser()
    # arpeggio parsers keep per-parse state
    with _PARSER_LOCK:
        try:
            parse_tree = parser.parse(text)
        except NoMatch as e:
            raise ParseError(f"syntax error: {e}", e.position)
        except RecursionError:
            raise ParseError("nesting too deep to assemble")
    try:
        result = visit_parse_tree(parse_tree, SExpVisitor())
    except RecursionError:
        raise ParseError("nesting too deep to assemble")
    _debug_print(f"[puzzlevm] assembled {len(text)} chars")

    with _PARSE_CACHE_LOCK:
        if len(_PARSE_CACHE) >= _PARSE_CACHE_MAX_SIZE:
            _PARSE_CACHE.popitem(last=False)
        _PARSE_CACHE[text] = result
    return result


def clear_cache() -> None:
    with _PARSE_CACHE_LOCK:
        _PARSE_CACHE.clear()


# ------------------------------------------
# Disassembly
# ------------------------------------------

_PRINTABLE = frozenset(range(0x20, 0x7f)) - {ord('"'), ord("\\")}


def _atom_text(atom: bytes) -> str:
    if not atom:
        return "()"
    if len(atom) > 2 and all(b in _PRINTABLE for b in atom):
        return '"' + atom.decode("ascii") + '"'
    if len(atom) <= 4 and int_to_bytes(int_from_bytes(atom)) == atom:
        return str(int_from_bytes(atom))
    return "0x" + atom.hex()


def _disassemble(sexp: SExp, lookup: OperatorLookup) -> str:
    out: List[str] = []
    # entries are literal text or (Value, quoted) still to render
    todo: list = [(sexp, False)]
    while todo:
        item = todo.pop()
        if isinstance(item, str):
            out.append(item)
            continue
        v, quoted = item
        if isinstance(v, Atom):
            out.append(_atom_text(v.atom))
            continue

        seq: list = ["("]
        head = v.left
        if not quoted and isinstance(head, Atom) and lookup.is_operator_atom(head.atom):
            seq.append(lookup.atom_to_keyword(head.atom))
            # operands of q are data
            quoted = head.atom == QUOTE_ATOM
        else:
            seq.append((head, quoted))

        node = v.right
        while isinstance(node, Pair):
            seq.append(" ")
            seq.append((node.left, quoted))
            node = node.right
        if node.atom:
            seq.append(" . " + _atom_text(node.atom))
        seq.append(")")
        todo.extend(reversed(seq))
    return "".join(out)


def disassemble(sexp, operator_lookup: OperatorLookup = DEFAULT_OPERATOR_LOOKUP) -> str:
    """Render a Value as assembler text; assemble(disassemble(v)) == v."""
    return _disassemble(to_sexp(sexp), operator_lookup)
