"""
errors.py

Error taxonomy for puzzlevm
---------------------------

Every failure raised by the assembler, the evaluator, the Int codec and the
program registry derives from PuzzleError and carries a stable ``code``.
PuzzleRuntime turns these into RunResult values; library functions raise.
"""

from __future__ import annotations

from typing import Any, Optional


# -------------------------------------------------------------------------
# Exceptions
# -------------------------------------------------------------------------


class PuzzleError(Exception):
    """Base class for all puzzlevm errors."""

    code = "ERR_PUZZLE"

    def __init__(self, message: str, node: Any = None):
        super().__init__(message)
        self.message = message
        self.node = node

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ParseError(PuzzleError):
    """Raised for malformed assembler text, hex text or serialized bytes."""

    code = "ERR_PARSE"

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.position = position


class UnknownOperatorError(PuzzleError):
    """Raised when a mnemonic or opcode atom is not in the operator table."""

    code = "ERR_UNKNOWN_OPERATOR"


class PathError(PuzzleError):
    """Raised when an environment path walks into an atom."""

    code = "ERR_PATH"


class SExpTypeError(PuzzleError, TypeError):
    """Raised when a Value has the wrong shape, e.g. ``first`` of an atom."""

    code = "ERR_TYPE"


class OperatorError(PuzzleError):
    """
    Raised when a built-in operator receives the wrong arity or operand type.

    ``opcode`` is the mnemonic of the failing operator and ``arg_index`` the
    zero-based position of the offending argument (None for arity errors).
    """

    code = "ERR_OPERATOR"

    def __init__(self, message: str, opcode: Optional[str] = None,
                 arg_index: Optional[int] = None, node: Any = None):
        super().__init__(message, node)
        self.opcode = opcode
        self.arg_index = arg_index

    def __str__(self) -> str:
        where = ""
        if self.opcode is not None:
            where = f" [op={self.opcode}"
            if self.arg_index is not None:
                where += f" arg={self.arg_index}"
            where += "]"
        return f"{self.code}: {self.message}{where}"


class RaiseError(OperatorError):
    """Raised by the ``x`` operator."""

    code = "ERR_RAISE"


class CostExceededError(PuzzleError):
    """Raised when a run exceeds the caller's max_cost."""

    code = "ERR_COST_EXCEEDED"

    def __init__(self, message: str, cost: int, max_cost: int):
        super().__init__(message)
        self.cost = cost
        self.max_cost = max_cost


class RangeError(PuzzleError, ValueError):
    """Raised when an Int or byte buffer does not fit the requested width."""

    code = "ERR_RANGE"


class ConfigurationError(PuzzleError, LookupError):
    """Raised for unknown predefined program names."""

    code = "ERR_CONFIGURATION"
