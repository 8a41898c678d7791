"""
puzzlevm/operators.py - Built-in Operators

Each operator takes the list of its already-evaluated arguments and the
mnemonic it was invoked under, and returns a new Value. Operators never see
the environment; ``q`` and ``a`` are handled by the evaluator itself.
"""

import hashlib
from typing import Callable, Dict, List

from .canonical import int_from_bytes, int_to_bytes
from .errors import OperatorError, RaiseError, RangeError, SExpTypeError
from .keys import aggregate_public_keys, public_key_for_exponent
from .sexp import NIL, ONE, Atom, Pair, SExp, is_nil, sexp_list

OperatorFn = Callable[[List[SExp], str], SExp]

MAX_SHIFT = 65535


# ==========================================
# Argument helpers
# ==========================================

def _arity(args: List[SExp], n: int, op: str) -> None:
    if len(args) != n:
        plural = "argument" if n == 1 else "arguments"
        raise OperatorError(f"{op} takes exactly {n} {plural}, got {len(args)}", opcode=op)


def _min_arity(args: List[SExp], n: int, op: str) -> None:
    if len(args) < n:
        raise OperatorError(f"{op} takes at least {n} arguments, got {len(args)}", opcode=op)


def _atom(args: List[SExp], idx: int, op: str) -> bytes:
    v = args[idx]
    if isinstance(v, Pair):
        raise OperatorError(f"{op} requires an atom argument", opcode=op, arg_index=idx, node=v)
    return v.atom


def _int(args: List[SExp], idx: int, op: str) -> int:
    # NIL decodes as 0
    return int_from_bytes(_atom(args, idx, op))


def _ints(args: List[SExp], op: str) -> List[int]:
    return [_int(args, i, op) for i in range(len(args))]


def _int_atom(v: int) -> SExp:
    return Atom(int_to_bytes(v))


def _bool_atom(flag: bool) -> SExp:
    return ONE if flag else NIL


# ==========================================
# Core
# ==========================================

def op_if(args, op):
    _arity(args, 3, op)
    return args[2] if is_nil(args[0]) else args[1]


def op_cons(args, op):
    _arity(args, 2, op)
    return Pair(args[0], args[1])


def op_first(args, op):
    _arity(args, 1, op)
    v = args[0]
    if not isinstance(v, Pair):
        raise SExpTypeError(f"{op} of non-pair", v)
    return v.left


def op_rest(args, op):
    _arity(args, 1, op)
    v = args[0]
    if not isinstance(v, Pair):
        raise SExpTypeError(f"{op} of non-pair", v)
    return v.right


def op_listp(args, op):
    _arity(args, 1, op)
    return _bool_atom(isinstance(args[0], Pair))


def op_raise(args, op):
    from .assembler import disassemble
    payload = sexp_list(*args)
    raise RaiseError(f"program raised {disassemble(payload)}", opcode=op, node=payload)


def op_eq(args, op):
    _arity(args, 2, op)
    return _bool_atom(_int(args, 0, op) == _int(args, 1, op))


# ==========================================
# Bytes
# ==========================================

def op_gr_bytes(args, op):
    _arity(args, 2, op)
    return _bool_atom(_atom(args, 0, op) > _atom(args, 1, op))


def op_sha256(args, op):
    h = hashlib.sha256()
    for idx in range(len(args)):
        h.update(_atom(args, idx, op))
    return Atom(h.digest())


def op_substr(args, op):
    if len(args) not in (2, 3):
        raise OperatorError(f"{op} takes 2 or 3 arguments, got {len(args)}", opcode=op)
    s = _atom(args, 0, op)
    start = _int(args, 1, op)
    end = _int(args, 2, op) if len(args) == 3 else len(s)
    if not 0 <= start <= end <= len(s):
        raise OperatorError(f"{op} range [{start}:{end}] out of bounds for {len(s)} bytes",
                            opcode=op, arg_index=1)
    return Atom(s[start:end])


def op_strlen(args, op):
    _arity(args, 1, op)
    return _int_atom(len(_atom(args, 0, op)))


def op_concat(args, op):
    return Atom(b"".join(_atom(args, idx, op) for idx in range(len(args))))


# ==========================================
# Arithmetic
# ==========================================

def op_add(args, op):
    return _int_atom(sum(_ints(args, op)))


def op_subtract(args, op):
    if not args:
        return NIL
    values = _ints(args, op)
    total = values[0]
    for v in values[1:]:
        total -= v
    return _int_atom(total)


def op_multiply(args, op):
    total = 1
    for v in _ints(args, op):
        total *= v
    return _int_atom(total)


def op_div(args, op):
    _arity(args, 2, op)
    a, b = _int(args, 0, op), _int(args, 1, op)
    if b == 0:
        raise OperatorError(f"{op} by zero", opcode=op, arg_index=1)
    return _int_atom(a // b)


def op_divmod(args, op):
    _arity(args, 2, op)
    a, b = _int(args, 0, op), _int(args, 1, op)
    if b == 0:
        raise OperatorError(f"{op} by zero", opcode=op, arg_index=1)
    q, r = divmod(a, b)
    return Pair(_int_atom(q), _int_atom(r))


def op_gr(args, op):
    _arity(args, 2, op)
    return _bool_atom(_int(args, 0, op) > _int(args, 1, op))


def _shift_amount(args, op) -> int:
    amount = _int(args, 1, op)
    if abs(amount) > MAX_SHIFT:
        raise OperatorError(f"{op} shift {amount} exceeds {MAX_SHIFT}", opcode=op, arg_index=1)
    return amount


def op_ash(args, op):
    _arity(args, 2, op)
    v = _int(args, 0, op)
    amount = _shift_amount(args, op)
    return _int_atom(v << amount if amount >= 0 else v >> -amount)


def op_lsh(args, op):
    _arity(args, 2, op)
    # logical shift treats the atom as an unsigned magnitude
    v = int.from_bytes(_atom(args, 0, op), "big", signed=False)
    amount = _shift_amount(args, op)
    return _int_atom(v << amount if amount >= 0 else v >> -amount)


# ==========================================
# Bitwise
# ==========================================

def op_logand(args, op):
    total = -1
    for v in _ints(args, op):
        total &= v
    return _int_atom(total)


def op_logior(args, op):
    total = 0
    for v in _ints(args, op):
        total |= v
    return _int_atom(total)


def op_logxor(args, op):
    total = 0
    for v in _ints(args, op):
        total ^= v
    return _int_atom(total)


def op_lognot(args, op):
    _arity(args, 1, op)
    return _int_atom(~_int(args, 0, op))


# ==========================================
# BLS12-381 G1
# ==========================================

def op_point_add(args, op):
    points = [_atom(args, idx, op) for idx in range(len(args))]
    for idx, p in enumerate(points):
        if len(p) != 48:
            raise OperatorError(f"{op} argument is not a 48-byte G1 point", opcode=op, arg_index=idx)
    try:
        return Atom(aggregate_public_keys(points))
    except RangeError as e:
        raise OperatorError(f"{op}: {e.message}", opcode=op)


def op_pubkey_for_exp(args, op):
    _arity(args, 1, op)
    return Atom(public_key_for_exponent(_int(args, 0, op)))


# ==========================================
# Boolean
# ==========================================

def op_not(args, op):
    _arity(args, 1, op)
    return _bool_atom(is_nil(args[0]))


def op_any(args, op):
    return _bool_atom(any(not is_nil(v) for v in args))


def op_all(args, op):
    return _bool_atom(all(not is_nil(v) for v in args))


def op_softfork(args, op):
    _min_arity(args, 1, op)
    if _int(args, 0, op) < 1:
        raise OperatorError(f"{op} cost must be positive", opcode=op, arg_index=0)
    return NIL


OPERATORS: Dict[str, OperatorFn] = {
    "i": op_if,
    "c": op_cons,
    "f": op_first,
    "r": op_rest,
    "l": op_listp,
    "x": op_raise,
    "=": op_eq,
    ">s": op_gr_bytes,
    "sha256": op_sha256,
    "substr": op_substr,
    "strlen": op_strlen,
    "concat": op_concat,
    "+": op_add,
    "-": op_subtract,
    "*": op_multiply,
    "/": op_div,
    "divmod": op_divmod,
    ">": op_gr,
    "ash": op_ash,
    "lsh": op_lsh,
    "logand": op_logand,
    "logior": op_logior,
    "logxor": op_logxor,
    "lognot": op_lognot,
    "point_add": op_point_add,
    "pubkey_for_exp": op_pubkey_for_exp,
    "not": op_not,
    "any": op_any,
    "all": op_all,
    "softfork": op_softfork,
}
