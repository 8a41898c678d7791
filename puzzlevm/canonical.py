"""
puzzlevm/canonical.py - Canonical Int and Hex Encoding

Atoms are reinterpreted as signed integers on demand. The canonical byte form
of an integer is the shortest big-endian two's-complement string that decodes
back to the same value; zero is the empty string.
"""

from __future__ import annotations

from typing import Union

from .errors import ParseError, RangeError

HASH_LEN = 32

IntLike = Union["Int", int]


def msb_mask(byte: int) -> int:
    """
    Return the mask isolating the most significant set bit of one byte.

    Examples:
        >>> hex(msb_mask(0x44))
        '0x40'
        >>> msb_mask(0)
        0
    """
    if not 0 <= byte <= 0xFF:
        raise RangeError(f"msb_mask expects a single byte, got {byte}")
    byte |= byte >> 1
    byte |= byte >> 2
    byte |= byte >> 4
    return (byte + 1) >> 1


def int_to_bytes(v: int) -> bytes:
    """
    Encode v as canonical big-endian two's-complement bytes.

    A leading 0x00 is kept only when the next byte has its high bit set, and a
    leading 0xff only when the next byte has its high bit clear.
    """
    if v == 0:
        return b""
    byte_count = (v.bit_length() + 8) >> 3
    r = v.to_bytes(byte_count, "big", signed=True)
    while len(r) > 1:
        sign_bit = msb_mask(r[1]) == 0x80
        if r[0] == 0x00 and not sign_bit:
            r = r[1:]
        elif r[0] == 0xFF and sign_bit:
            r = r[1:]
        else:
            break
    return r


def int_from_bytes(blob: bytes) -> int:
    """Decode signed big-endian bytes. The empty string is zero."""
    if len(blob) == 0:
        return 0
    return int.from_bytes(blob, "big", signed=True)


def bytes_to_hex(blob: bytes) -> str:
    """Lowercase hex, no prefix, no separators."""
    return bytes(blob).hex()


def bytes_from_hex(text: str) -> bytes:
    """
    Decode hex text produced by bytes_to_hex.

    Raises:
        ParseError: on odd length or non-hex characters
    """
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise ParseError(f"invalid hex text: {e}")


def hash_from_hex(text: str) -> bytes:
    blob = bytes_from_hex(text)
    if len(blob) != HASH_LEN:
        raise RangeError(f"expected a {HASH_LEN}-byte hash, got {len(blob)} bytes")
    return blob


# ==========================================
# Int
# ==========================================

class Int:
    """
    Immutable arbitrary-precision signed integer with a canonical byte form.

    Arithmetic always yields new Int instances. ``//`` floors, which is what
    the evaluator's ``/`` operator does; ``truncdiv`` rounds toward zero.
    """

    __slots__ = ("_value",)

    def __init__(self, value: IntLike = 0):
        if isinstance(value, Int):
            value = value._value
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Int expects an int, got {type(value).__name__}")
        object.__setattr__(self, "_value", value)

    def __setattr__(self, name, value):
        raise AttributeError("Int is immutable")

    # --- construction ---

    @classmethod
    def from_bytes(cls, blob: bytes) -> "Int":
        """Signed two's-complement, canonical or not."""
        return cls(int_from_bytes(bytes(blob)))

    @classmethod
    def from_unsigned_bytes(cls, blob: bytes) -> "Int":
        """Treat blob as a big-endian magnitude; the result is never negative."""
        return cls(int.from_bytes(bytes(blob), "big", signed=False))

    @classmethod
    def from_hex(cls, text: str, signed: bool = True) -> "Int":
        blob = bytes_from_hex(text)
        return cls.from_bytes(blob) if signed else cls.from_unsigned_bytes(blob)

    # --- conversion ---

    @property
    def value(self) -> int:
        return self._value

    def to_bytes(self) -> bytes:
        return int_to_bytes(self._value)

    def to_int(self, bits: int = 64, signed: bool = True) -> int:
        """
        Convert to a native integer of the given width.

        Raises:
            RangeError: if the value does not fit in ``bits`` bits
        """
        if signed:
            lo, hi = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        else:
            lo, hi = 0, (1 << bits) - 1
        if not lo <= self._value <= hi:
            kind = "signed" if signed else "unsigned"
            raise RangeError(f"value {self._value} does not fit in {bits}-bit {kind} integer")
        return self._value

    def to_byte(self) -> int:
        return self.to_int(bits=8, signed=False)

    def to_fixed_bytes(self, length: int) -> bytes:
        """Unsigned big-endian encoding padded to exactly ``length`` bytes."""
        try:
            return self._value.to_bytes(length, "big", signed=False)
        except OverflowError:
            raise RangeError(f"value does not fit in {length} unsigned bytes")

    # --- arithmetic ---

    def __add__(self, other: IntLike) -> "Int":
        return Int(self._value + _raw(other))

    __radd__ = __add__

    def __sub__(self, other: IntLike) -> "Int":
        return Int(self._value - _raw(other))

    def __rsub__(self, other: IntLike) -> "Int":
        return Int(_raw(other) - self._value)

    def __mul__(self, other: IntLike) -> "Int":
        return Int(self._value * _raw(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: IntLike) -> "Int":
        d = _raw(other)
        if d == 0:
            raise ZeroDivisionError("Int division by zero")
        return Int(self._value // d)

    def __mod__(self, other: IntLike) -> "Int":
        d = _raw(other)
        if d == 0:
            raise ZeroDivisionError("Int modulo by zero")
        return Int(self._value % d)

    def __neg__(self) -> "Int":
        return Int(-self._value)

    def truncdiv(self, other: IntLike) -> "Int":
        d = _raw(other)
        if d == 0:
            raise ZeroDivisionError("Int division by zero")
        q = abs(self._value) // abs(d)
        return Int(q if (self._value < 0) == (d < 0) else -q)

    def mod(self, modulus: IntLike) -> "Int":
        """Reduce into ``[0, modulus)``; used for scalar field arithmetic."""
        m = _raw(modulus)
        if m <= 0:
            raise RangeError(f"modulus must be positive, got {m}")
        return Int(self._value % m)

    # --- comparison ---

    def __eq__(self, other) -> bool:
        if isinstance(other, Int):
            return self._value == other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: IntLike) -> bool:
        return self._value < _raw(other)

    def __le__(self, other: IntLike) -> bool:
        return self._value <= _raw(other)

    def __gt__(self, other: IntLike) -> bool:
        return self._value > _raw(other)

    def __ge__(self, other: IntLike) -> bool:
        return self._value >= _raw(other)

    def __hash__(self) -> int:
        return hash(self._value)

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __repr__(self) -> str:
        return f"Int({self._value})"


def _raw(v: IntLike) -> int:
    if isinstance(v, Int):
        return v.value
    if isinstance(v, int) and not isinstance(v, bool):
        return v
    raise TypeError(f"expected Int or int, got {type(v).__name__}")
