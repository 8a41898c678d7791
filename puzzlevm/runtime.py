"""
runtime.py

puzzlevm Runtime
----------------

PuzzleRuntime is the single entrypoint for evaluating puzzles from
untrusted input.

It connects:
    - Assembler          (text -> Value)
    - PredefinedPrograms (named templates)
    - Evaluator          (Value -> cost, result)
    - TreeHash           (content address of the program)

Library functions raise PuzzleError subclasses; the runtime turns them into
RunResult values so callers can branch on ``domain`` without try/except.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Any, Optional

from .assembler import disassemble
from .costs import DEFAULT_COST_MODEL, CostModel
from .errors import ConfigurationError, PuzzleError
from .evaluator import Evaluator
from .predefined import NameLike, PredefinedPrograms, get_predefined_programs
from .program import Program
from .sexp import NIL, SExp, to_sexp

MAX_COST_ENV = "PUZZLEVM_MAX_COST"


def _max_cost_from_env() -> Optional[int]:
    raw = os.getenv(MAX_COST_ENV)
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{MAX_COST_ENV} must be an integer, got {raw!r}")
    if value < 0:
        raise ConfigurationError(f"{MAX_COST_ENV} must not be negative, got {value}")
    return value


# -------------------------------------------------------------------------
# Runtime Result Object
# -------------------------------------------------------------------------

@dataclass
class RunResult:
    """
    Public result returned by PuzzleRuntime.evaluate(...)

    This object contains:
        - domain: value | error
        - value: the result Value (None on error)
        - cost: total cost charged (0 on error)
        - error: optional message
        - code: stable error code, e.g. ERR_PATH
        - tree_hash: tree hash of the program that ran, when it parsed
    """
    domain: str
    value: Optional[SExp]
    cost: int
    error: Optional[str] = None
    code: Optional[str] = None
    tree_hash: Optional[bytes] = None

    @property
    def ok(self) -> bool:
        return self.domain == "value"


# -------------------------------------------------------------------------
# Runtime Core
# -------------------------------------------------------------------------

class PuzzleRuntime:
    """
    The canonical puzzle runtime.

    Responsibilities:
        - assemble text programs
        - resolve predefined programs by name
        - evaluate under a cost model and optional cost limit
        - provide consistent error handling
    """

    def __init__(
        self,
        *,
        registry: Optional[PredefinedPrograms] = None,
        cost_model: CostModel = DEFAULT_COST_MODEL,
        max_cost: Optional[int] = None,
        debug: bool = False,
    ):
        self.registry = registry if registry is not None else get_predefined_programs()
        self.cost_model = cost_model
        self.max_cost = max_cost if max_cost is not None else _max_cost_from_env()
        self.debug = debug
        self._evaluator = Evaluator(cost_model=cost_model)

    def _log(self, msg: str) -> None:
        if self.debug:
            print(f"[puzzlevm] {msg}", file=sys.stderr)

    def _error(self, e: PuzzleError, tree_hash: Optional[bytes]) -> RunResult:
        self._log(f"error {e}")
        return RunResult(domain="error", value=None, cost=0, error=str(e), code=e.code, tree_hash=tree_hash)

    def evaluate(self, program: Any, env: Any = None) -> RunResult:
        """
        Evaluate a program against an environment.

        Args:
            program: Program, Value, or assembler text
            env: solution; Program, Value, assembler text or anything
                 Program.to accepts (NIL when omitted)
        """
        tree_hash = None
        try:
            if isinstance(program, str):
                program = Program.assemble(program)
            else:
                program = Program.to(program)
            tree_hash = program.get_tree_hash()

            if env is None:
                env_sexp = NIL
            elif isinstance(env, str):
                env_sexp = Program.assemble(env).sexp
            else:
                env_sexp = to_sexp(env)

            self._log(f"run {tree_hash.hex()} max_cost={self.max_cost}")
            cost, r = self._evaluator.run(program.sexp, env_sexp, max_cost=self.max_cost)
        except PuzzleError as e:
            return self._error(e, tree_hash)

        self._log(f"cost={cost} result={disassemble(r)}")
        return RunResult(domain="value", value=r, cost=cost, tree_hash=tree_hash)

    def run_named(self, name: NameLike, env: Any = None) -> RunResult:
        """Evaluate a predefined program; an unknown name is an error result."""
        try:
            program = self.registry[name]
        except ConfigurationError as e:
            return self._error(e, None)
        return self.evaluate(program, env)
