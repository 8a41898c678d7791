"""
evaluator.py

puzzlevm Evaluator
------------------

Reduces a (program, environment) pair to a (cost, result) pair.

    atom n >= 0      path into the environment (even -> first, odd -> rest)
    other atom       itself
    (q . X)          X, unevaluated
    (a P E)          P evaluated against E
    (op args...)     args evaluated left to right, then op applied

Reduction runs on an explicit operation stack and value stack; program depth
is bounded by memory, not by Python's recursion limit. Every step charges the
CostModel; when max_cost is given the total is checked after each step.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Tuple

from .costs import DEFAULT_COST_MODEL, CostModel
from .errors import CostExceededError, OperatorError, PathError, UnknownOperatorError
from .operator_lexicon import APPLY_ATOM, DEFAULT_OPERATOR_LOOKUP, QUOTE_ATOM, OperatorLookup
from .operators import OPERATORS, OperatorFn
from .sexp import NIL, Atom, Pair, SExp, to_sexp

# Enable with: PUZZLEVM_DEBUG=1
_DEBUG_ENABLED = os.getenv("PUZZLEVM_DEBUG", "0") == "1"


def _debug_print(*args, **kwargs):
    """Print only if debug is enabled."""
    if _DEBUG_ENABLED:
        print(*args, **kwargs)


# op stack entries: (_EVAL, sexp, env) or (_APPLY, operator_atom, argc)
_EVAL = 0
_APPLY = 1


def traverse_path(path: bytes, env: SExp) -> Tuple[int, SExp]:
    """
    Follow an environment path; returns (legs walked, node).

    The path is read as an unsigned integer and consumed from its low bit:
    0 selects first, 1 selects rest, until only the leading 1 remains.
    """
    n = int.from_bytes(path, "big", signed=False)
    if n == 0:
        return 0, NIL
    legs = 0
    v = env
    while n > 1:
        if not isinstance(v, Pair):
            raise PathError(f"path 0x{path.hex()} walks into an atom after {legs} steps", v)
        v = v.left if n & 1 == 0 else v.right
        n >>= 1
        legs += 1
    return legs, v


def _is_path_atom(atom: bytes) -> bool:
    # negative integers (high bit set) are literals
    return len(atom) == 0 or atom[0] & 0x80 == 0


class Evaluator:
    """
    Configured evaluator. Instances hold no per-run state and may be shared
    between threads.
    """

    def __init__(
        self,
        *,
        cost_model: CostModel = DEFAULT_COST_MODEL,
        operator_lookup: OperatorLookup = DEFAULT_OPERATOR_LOOKUP,
        operators: Optional[Dict[str, OperatorFn]] = None,
    ):
        self.cost_model = cost_model
        self.operator_lookup = operator_lookup
        self.operators = OPERATORS if operators is None else operators

    def run(self, program: Any, env: Any = NIL, max_cost: Optional[int] = None) -> Tuple[int, SExp]:
        """
        Evaluate program against env.

        Args:
            program: Value (or anything to_sexp accepts) in compiled form
            env: the environment / solution, NIL by default
            max_cost: optional limit; exceeding it raises CostExceededError

        Returns:
            (cost, result)

        Raises:
            PathError, SExpTypeError, OperatorError, UnknownOperatorError,
            CostExceededError
        """
        cm = self.cost_model
        ops: List[tuple] = [(_EVAL, to_sexp(program), to_sexp(env))]
        values: List[SExp] = []
        cost = 0

        while ops:
            kind, a, b = ops.pop()

            if kind == _EVAL:
                sexp, args_env = a, b
                cost += cm.eval_step
                if isinstance(sexp, Atom):
                    if _is_path_atom(sexp.atom):
                        legs, r = traverse_path(sexp.atom, args_env)
                        cost += cm.path_cost(legs)
                        values.append(r)
                    else:
                        values.append(sexp)
                else:
                    operator, operands = sexp.left, sexp.right
                    if isinstance(operator, Pair):
                        raise OperatorError("operator must be an atom", node=sexp)
                    if operator.atom == QUOTE_ATOM:
                        cost += cm.quote
                        values.append(operands)
                    else:
                        items = list(operands.as_iter())
                        if not operands.is_proper_list():
                            raise OperatorError("argument list must be a proper list", node=sexp)
                        ops.append((_APPLY, operator.atom, len(items)))
                        for item in reversed(items):
                            ops.append((_EVAL, item, args_env))
            else:
                op_atom, argc = a, b
                split = len(values) - argc
                args = values[split:]
                del values[split:]
                cost += self._apply(op_atom, args, ops, values)

            if max_cost is not None and cost > max_cost:
                raise CostExceededError(f"cost {cost} exceeds limit {max_cost}", cost, max_cost)

        _debug_print(f"[puzzlevm] run_program cost={cost}")
        return cost, values[-1]

    def _apply(self, op_atom: bytes, args: List[SExp], ops: List[tuple], values: List[SExp]) -> int:
        cm = self.cost_model
        if op_atom == APPLY_ATOM:
            if len(args) != 2:
                raise OperatorError(f"a takes exactly 2 arguments, got {len(args)}", opcode="a")
            ops.append((_EVAL, args[0], args[1]))
            return cm.apply

        keyword = self.operator_lookup.atom_to_keyword(op_atom)
        fn = self.operators.get(keyword)
        if fn is None:
            raise UnknownOperatorError(f"operator {keyword!r} has no implementation")
        r = fn(args, keyword)
        values.append(r)
        produced = len(r.atom) if isinstance(r, Atom) else 0
        return cm.op_cost(keyword, len(args), produced)


DEFAULT_EVALUATOR = Evaluator()


def run_program(
    program: Any,
    env: Any = NIL,
    *,
    cost_model: Optional[CostModel] = None,
    max_cost: Optional[int] = None,
) -> Tuple[int, SExp]:
    """Evaluate with the default operator table; see Evaluator.run."""
    evaluator = DEFAULT_EVALUATOR if cost_model is None else Evaluator(cost_model=cost_model)
    return evaluator.run(program, env, max_cost=max_cost)
