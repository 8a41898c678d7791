"""
puzzlevm/sexp.py - Value Model

A Value is either an Atom (a byte string) or a Pair (left, right). NIL is the
empty atom and terminates lists. Values are immutable, so sub-trees are shared
freely between parents (curried programs reuse the original program node,
evaluation results reuse environment nodes).
"""

from __future__ import annotations

from typing import Any, Iterator, List, Optional, Tuple

from .canonical import Int, int_from_bytes, int_to_bytes
from .errors import SExpTypeError


class SExp:
    """Common base of Atom and Pair."""

    __slots__ = ()

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    # --- shape ---

    def listp(self) -> bool:
        return isinstance(self, Pair)

    def nullp(self) -> bool:
        return isinstance(self, Atom) and len(self.atom) == 0

    def first(self) -> "SExp":
        raise SExpTypeError("first of non-pair", self)

    def rest(self) -> "SExp":
        raise SExpTypeError("rest of non-pair", self)

    def as_pair(self) -> Tuple["SExp", "SExp"]:
        raise SExpTypeError("expected a pair, got an atom", self)

    def as_atom(self) -> bytes:
        raise SExpTypeError("expected an atom, got a pair", self)

    # --- atom views ---

    def as_int(self) -> Int:
        return Int(int_from_bytes(self.as_atom()))

    def as_str(self) -> str:
        return self.as_atom().decode("utf-8")

    # --- list views ---

    def as_iter(self) -> Iterator["SExp"]:
        """Iterate the elements of a list, ignoring any non-NIL terminator."""
        v = self
        while isinstance(v, Pair):
            yield v.left
            v = v.right

    def list_len(self) -> int:
        n = 0
        v = self
        while isinstance(v, Pair):
            n += 1
            v = v.right
        return n

    def is_proper_list(self) -> bool:
        v = self
        while isinstance(v, Pair):
            v = v.right
        return v.nullp()

    def as_python(self) -> Any:
        """
        Convert to plain Python: bytes for atoms, lists for proper lists,
        (left, right) tuples for improper pairs.
        """
        done: List[Any] = []
        # (node, children_converted)
        todo: List[Tuple["SExp", bool]] = [(self, False)]
        while todo:
            v, ready = todo.pop()
            if isinstance(v, Atom):
                done.append(v.atom)
                continue
            proper = v.is_proper_list()
            if not ready:
                todo.append((v, True))
                children = list(v.as_iter()) if proper else [v.left, v.right]
                for child in reversed(children):
                    todo.append((child, False))
                continue
            n = v.list_len() if proper else 2
            items = done[-n:]
            del done[-n:]
            done.append(items if proper else tuple(items))
        return done[0]

    # --- equality ---

    def __eq__(self, other) -> bool:
        if not isinstance(other, SExp):
            return NotImplemented
        stack = [(self, other)]
        while stack:
            a, b = stack.pop()
            if a is b:
                continue
            if isinstance(a, Atom):
                if not isinstance(b, Atom) or a.atom != b.atom:
                    return False
            else:
                if not isinstance(b, Pair):
                    return False
                stack.append((a.right, b.right))
                stack.append((a.left, b.left))
        return True

    def __ne__(self, other) -> bool:
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    def __hash__(self) -> int:
        from .tree_hash import tree_hash
        return hash(tree_hash(self))

    def __str__(self) -> str:
        from .assembler import disassemble
        return disassemble(self)


class Atom(SExp):
    __slots__ = ("atom",)

    def __init__(self, atom: bytes = b""):
        object.__setattr__(self, "atom", bytes(atom))

    def as_atom(self) -> bytes:
        return self.atom

    def __bool__(self) -> bool:
        return len(self.atom) > 0

    def __repr__(self) -> str:
        return f"Atom({self.atom.hex()})"


class Pair(SExp):
    __slots__ = ("left", "right")

    def __init__(self, left: SExp, right: SExp):
        if not isinstance(left, SExp) or not isinstance(right, SExp):
            raise SExpTypeError("Pair members must be Values")
        object.__setattr__(self, "left", left)
        object.__setattr__(self, "right", right)

    def first(self) -> SExp:
        return self.left

    def rest(self) -> SExp:
        return self.right

    def as_pair(self) -> Tuple[SExp, SExp]:
        return self.left, self.right

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Pair({self.left!r}, {self.right!r})"


NIL = Atom(b"")
ONE = Atom(b"\x01")


# ==========================================
# Construction helpers
# ==========================================

def to_sexp(obj: Any) -> SExp:
    """
    Convert a Python object to a Value.

    - SExp: returned unchanged (shared, not copied)
    - objects with a ``sexp`` attribute (Program): their Value
    - bytes / bytearray: atom
    - str: UTF-8 atom
    - int / Int: canonical integer atom
    - None: NIL
    - 2-tuple: Pair
    - list: proper list
    - objects implementing __bytes__ (e.g. BLS G1 elements): atom
    """
    if isinstance(obj, SExp):
        return obj
    sexp = getattr(obj, "sexp", None)
    if isinstance(sexp, SExp):
        return sexp
    if obj is None:
        return NIL
    if isinstance(obj, (bytes, bytearray)):
        return Atom(bytes(obj))
    if isinstance(obj, str):
        return Atom(obj.encode("utf-8"))
    if isinstance(obj, bool):
        raise SExpTypeError("bool cannot be converted to a Value; use 0 or 1")
    if isinstance(obj, (int, Int)):
        return Atom(int_to_bytes(int(obj)))
    if isinstance(obj, tuple):
        if len(obj) != 2:
            raise SExpTypeError(f"only 2-tuples convert to pairs, got length {len(obj)}")
        return Pair(to_sexp(obj[0]), to_sexp(obj[1]))
    if isinstance(obj, list):
        return sexp_list(*obj)
    if hasattr(obj, "__bytes__"):
        return Atom(bytes(obj))
    raise SExpTypeError(f"cannot convert {type(obj).__name__} to a Value")


def sexp_list(*items: Any, terminator: Optional[SExp] = None) -> SExp:
    """Build the right-nested list (items...) ending in terminator (NIL)."""
    r = NIL if terminator is None else terminator
    for item in reversed(items):
        r = Pair(to_sexp(item), r)
    return r


def is_nil(v: SExp) -> bool:
    return isinstance(v, Atom) and len(v.atom) == 0
