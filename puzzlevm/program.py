"""
puzzlevm/program.py - Program

A Program wraps a Value and adds the operations wallets use on puzzles and
solutions: serialization, tree hashing, running and currying.

    p = Program.fromhex("ff1dff02ffff1effff0bff02ff05808080")
    p.get_tree_hash().hex()
    cost, r = p.run([pk, hidden_hash])
"""

from typing import Any, List, Optional, Tuple

from .assembler import assemble, disassemble
from .costs import CostModel
from .curry import curry, uncurry
from .evaluator import run_program
from .serialize import sexp_from_bytes, sexp_from_hex, sexp_to_bytes
from .sexp import NIL, SExp, to_sexp
from .tree_hash import tree_hash


class Program:
    """Immutable wrapper over a Value; the tree hash is computed once."""

    __slots__ = ("sexp", "_tree_hash")

    def __init__(self, sexp: SExp):
        if not isinstance(sexp, SExp):
            raise TypeError(f"Program wraps a Value, got {type(sexp).__name__}")
        self.sexp = sexp
        self._tree_hash: Optional[bytes] = None

    # --- construction ---

    @classmethod
    def to(cls, obj: Any) -> "Program":
        if isinstance(obj, Program):
            return obj
        return cls(to_sexp(obj))

    @classmethod
    def from_bytes(cls, blob: bytes) -> "Program":
        return cls(sexp_from_bytes(blob))

    @classmethod
    def fromhex(cls, text: str) -> "Program":
        return cls(sexp_from_hex(text))

    from_hex = fromhex

    @classmethod
    def assemble(cls, text: str) -> "Program":
        return cls(assemble(text))

    # --- encoding ---

    def __bytes__(self) -> bytes:
        return sexp_to_bytes(self.sexp)

    def hex(self) -> str:
        return bytes(self).hex()

    def get_tree_hash(self) -> bytes:
        if self._tree_hash is None:
            self._tree_hash = tree_hash(self.sexp)
        return self._tree_hash

    # --- evaluation ---

    def run(self, env: Any = NIL, *, cost_model: Optional[CostModel] = None,
            max_cost: Optional[int] = None) -> Tuple[int, "Program"]:
        cost, r = run_program(self.sexp, to_sexp(env), cost_model=cost_model, max_cost=max_cost)
        return cost, Program(r)

    def curry(self, *args: Any) -> "Program":
        return Program(curry(self.sexp, *args))

    def uncurry(self) -> Optional[Tuple["Program", List["Program"]]]:
        r = uncurry(self.sexp)
        if r is None:
            return None
        mod, args = r
        return Program(mod), [Program(a) for a in args]

    # --- views ---

    def as_python(self) -> Any:
        return self.sexp.as_python()

    def __eq__(self, other) -> bool:
        if isinstance(other, Program):
            return self.sexp == other.sexp
        if isinstance(other, SExp):
            return self.sexp == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.get_tree_hash())

    def __str__(self) -> str:
        return disassemble(self.sexp)

    def __repr__(self) -> str:
        return f"Program({disassemble(self.sexp)})"
