"""
puzzlevm - Cost-metered puzzle evaluator and synthetic-key puzzles.

Public API:
- PuzzleRuntime: evaluation entrypoint returning RunResult values
- Program: Value wrapper (serialize, tree hash, run, curry)
- assemble / disassemble: text <-> Value
- run_program: raw evaluator
- puzzle_for_public_key / public_key_to_puzzle_hash: standard puzzles
"""

from .assembler import assemble, disassemble
from .canonical import Int
from .costs import DEFAULT_COST_MODEL, CostModel
from .curry import curry, curry_and_treehash, uncurry
from .errors import (
    ConfigurationError,
    CostExceededError,
    OperatorError,
    ParseError,
    PathError,
    PuzzleError,
    RaiseError,
    RangeError,
    SExpTypeError,
    UnknownOperatorError,
)
from .evaluator import Evaluator, run_program
from .keys import Key
from .operator_lexicon import DEFAULT_OPERATOR_LOOKUP, OperatorLookup
from .predefined import PredefinedPrograms, ProgramName, get_predefined_programs
from .program import Program
from .runtime import PuzzleRuntime, RunResult
from .sexp import NIL, Atom, Pair, SExp, to_sexp
from .synthetic import (
    calculate_synthetic_offset,
    calculate_synthetic_public_key,
    calculate_synthetic_secret_key,
    public_key_to_puzzle_hash,
    puzzle_for_public_key,
)
from .tree_hash import tree_hash

# Derive version from package metadata
try:
    from importlib.metadata import PackageNotFoundError, version
    __version__ = version("puzzlevm")
except PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "PuzzleRuntime",
    "RunResult",
    "Program",
    "SExp",
    "Atom",
    "Pair",
    "NIL",
    "to_sexp",
    "Int",
    "assemble",
    "disassemble",
    "run_program",
    "Evaluator",
    "CostModel",
    "DEFAULT_COST_MODEL",
    "OperatorLookup",
    "DEFAULT_OPERATOR_LOOKUP",
    "tree_hash",
    "curry",
    "uncurry",
    "curry_and_treehash",
    "PredefinedPrograms",
    "ProgramName",
    "get_predefined_programs",
    "Key",
    "calculate_synthetic_offset",
    "calculate_synthetic_public_key",
    "calculate_synthetic_secret_key",
    "puzzle_for_public_key",
    "public_key_to_puzzle_hash",
    "PuzzleError",
    "ParseError",
    "UnknownOperatorError",
    "PathError",
    "SExpTypeError",
    "OperatorError",
    "RaiseError",
    "CostExceededError",
    "RangeError",
    "ConfigurationError",
]
