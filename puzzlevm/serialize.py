"""
puzzlevm/serialize.py - Binary Value Serialization

Compact prefix encoding used for compiled programs:

    0xff            pair; left then right follow
    0x80            NIL
    0x01 .. 0x7f    single-byte atom encoding itself
    0x81 .. 0xfe    atom with a 1..5 byte length prefix (high bits select width)

Both directions use an explicit stack so untrusted, deeply nested input cannot
exhaust the Python call stack.
"""

from typing import List

from .canonical import bytes_from_hex, bytes_to_hex
from .errors import ParseError, RangeError
from .sexp import NIL, Atom, Pair, SExp

CONS_BOX_MARKER = 0xFF
MAX_SINGLE_BYTE = 0x7F
NIL_MARKER = 0x80

# (length bound, prefix bits, prefix byte count)
_SIZE_PREFIXES = (
    (0x40, 0x80, 1),
    (0x2000, 0xC000, 2),
    (0x100000, 0xE00000, 3),
    (0x8000000, 0xF0000000, 4),
    (0x400000000, 0xF800000000, 5),
)


def _atom_prefix(size: int) -> bytes:
    for bound, bits, width in _SIZE_PREFIXES:
        if size < bound:
            return (bits | size).to_bytes(width, "big")
    raise RangeError(f"atom of {size} bytes is too long to serialize")


def sexp_to_bytes(sexp: SExp) -> bytes:
    out = bytearray()
    todo: List[SExp] = [sexp]
    while todo:
        v = todo.pop()
        if isinstance(v, Pair):
            out.append(CONS_BOX_MARKER)
            todo.append(v.right)
            todo.append(v.left)
            continue
        atom = v.atom
        if len(atom) == 0:
            out.append(NIL_MARKER)
        elif len(atom) == 1 and atom[0] <= MAX_SINGLE_BYTE:
            out += atom
        else:
            out += _atom_prefix(len(atom))
            out += atom
    return bytes(out)


def _read_atom(blob: bytes, pos: int) -> "tuple[SExp, int]":
    b = blob[pos]
    if b == NIL_MARKER:
        return NIL, pos + 1
    if b <= MAX_SINGLE_BYTE:
        return Atom(bytes([b])), pos + 1

    # count leading one bits to find the prefix width
    bit_count = 0
    bit_mask = 0x80
    while b & bit_mask:
        bit_count += 1
        b &= 0xFF ^ bit_mask
        bit_mask >>= 1
    if bit_count > 5:
        raise ParseError("invalid atom size prefix", pos)
    size_blob = bytes([b]) + blob[pos + 1:pos + bit_count]
    if len(size_blob) != bit_count:
        raise ParseError("truncated atom size prefix", pos)
    size = int.from_bytes(size_blob, "big")
    start = pos + bit_count
    end = start + size
    if end > len(blob):
        raise ParseError(f"atom of {size} bytes runs past end of input", pos)
    return Atom(blob[start:end]), end


def sexp_from_bytes(blob: bytes) -> SExp:
    """
    Decode one serialized Value. Trailing bytes are an error.

    Raises:
        ParseError: on truncated, malformed or over-long input
    """
    blob = bytes(blob)
    pos = 0
    # "cons" pops the two Values read since it was scheduled
    pending: List = []
    ops: List[str] = ["read"]
    while ops:
        op = ops.pop()
        if op == "cons":
            right = pending.pop()
            left = pending.pop()
            pending.append(Pair(left, right))
            continue
        if pos >= len(blob):
            raise ParseError("unexpected end of serialized input", pos)
        if blob[pos] == CONS_BOX_MARKER:
            pos += 1
            ops.extend(("cons", "read", "read"))
            continue
        atom, pos = _read_atom(blob, pos)
        pending.append(atom)
    if pos != len(blob):
        raise ParseError(f"{len(blob) - pos} trailing bytes after serialized value", pos)
    return pending[0]


def sexp_from_hex(text: str) -> SExp:
    return sexp_from_bytes(bytes_from_hex(text))


def sexp_to_hex(sexp: SExp) -> str:
    return bytes_to_hex(sexp_to_bytes(sexp))
