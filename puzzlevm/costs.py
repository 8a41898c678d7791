"""
puzzlevm/costs.py - Evaluation Cost Model

The evaluator charges every reduction step and every operator application
against a CostModel. The table is configuration: callers may supply their own
model, the only contract being that every charge is a non-negative integer
derived from the program and its inputs alone (monotonic, deterministic).
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

# Default per-opcode base charges, loosely following the published
# reference cost table of the dialect.
_DEFAULT_OP_COSTS = {
    "i": 33,
    "c": 50,
    "f": 30,
    "r": 30,
    "l": 19,
    "x": 0,
    "=": 117,
    ">s": 117,
    "sha256": 87,
    "substr": 1,
    "strlen": 173,
    "concat": 142,
    "+": 99,
    "-": 99,
    "*": 92,
    "/": 988,
    "divmod": 1116,
    ">": 498,
    "ash": 596,
    "lsh": 277,
    "logand": 100,
    "logior": 100,
    "logxor": 100,
    "lognot": 331,
    "point_add": 101094,
    "pubkey_for_exp": 1325730,
    "not": 200,
    "any": 200,
    "all": 200,
    "softfork": 0,
}


@dataclass(frozen=True)
class CostModel:
    """
    Charges applied by run_program.

    eval_step:      every node visited by the evaluator
    quote:          a (q . X) form
    apply:          an (a P E) form
    path_base:      an environment lookup
    path_per_leg:   each first/rest step of an environment lookup
    op_costs:       base charge per operator mnemonic
    default_op:     base charge for operators missing from op_costs
    per_arg:        charge per evaluated argument passed to an operator
    per_byte:       charge per byte of a newly produced atom
    """
    eval_step: int = 1
    quote: int = 20
    apply: int = 90
    path_base: int = 40
    path_per_leg: int = 4
    op_costs: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType(dict(_DEFAULT_OP_COSTS)))
    default_op: int = 100
    per_arg: int = 8
    per_byte: int = 10

    def __post_init__(self):
        scalars = {
            "eval_step": self.eval_step, "quote": self.quote, "apply": self.apply,
            "path_base": self.path_base, "path_per_leg": self.path_per_leg,
            "default_op": self.default_op, "per_arg": self.per_arg, "per_byte": self.per_byte,
        }
        for name, value in scalars.items():
            if value < 0:
                raise ValueError(f"CostModel.{name} must be non-negative, got {value}")
        for op, value in self.op_costs.items():
            if value < 0:
                raise ValueError(f"CostModel.op_costs[{op!r}] must be non-negative, got {value}")
        if not isinstance(self.op_costs, MappingProxyType):
            object.__setattr__(self, "op_costs", MappingProxyType(dict(self.op_costs)))

    def op_cost(self, keyword: str, arg_count: int, result_bytes: int) -> int:
        base = self.op_costs.get(keyword, self.default_op)
        return base + self.per_arg * arg_count + self.per_byte * result_bytes

    def path_cost(self, legs: int) -> int:
        return self.path_base + self.path_per_leg * legs

    def with_overrides(self, **kwargs) -> "CostModel":
        """
        Return a copy with fields replaced. ``op_costs`` given here is merged
        over the existing table rather than replacing it.
        """
        ops = kwargs.pop("op_costs", None)
        if ops is not None:
            merged = dict(self.op_costs)
            merged.update(ops)
            kwargs["op_costs"] = merged
        return replace(self, **kwargs)


DEFAULT_COST_MODEL = CostModel()

# Every charge is zero: useful when only the result matters.
FREE_COST_MODEL = CostModel(
    eval_step=0, quote=0, apply=0, path_base=0, path_per_leg=0,
    op_costs={}, default_op=0, per_arg=0, per_byte=0,
)
