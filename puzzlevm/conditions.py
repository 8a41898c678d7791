"""
puzzlevm/conditions.py - Condition Builders

A puzzle's output is a list of conditions, each the Value ``(opcode arg ...)``.
These helpers build the common ones; the list shape is the wire format.
"""

from enum import Enum

from .canonical import HASH_LEN
from .errors import RangeError
from .sexp import SExp, sexp_list


class ConditionOpcode(bytes, Enum):
    AGG_SIG_UNSAFE = bytes([49])
    AGG_SIG_ME = bytes([50])
    CREATE_COIN = bytes([51])
    RESERVE_FEE = bytes([52])
    CREATE_COIN_ANNOUNCEMENT = bytes([60])
    ASSERT_COIN_ANNOUNCEMENT = bytes([61])
    CREATE_PUZZLE_ANNOUNCEMENT = bytes([62])
    ASSERT_PUZZLE_ANNOUNCEMENT = bytes([63])


def _hash32(blob: bytes, what: str) -> bytes:
    blob = bytes(blob)
    if len(blob) != HASH_LEN:
        raise RangeError(f"{what} must be {HASH_LEN} bytes, got {len(blob)}")
    return blob


def _amount(v: int, what: str) -> int:
    if v < 0:
        raise RangeError(f"{what} must not be negative, got {v}")
    return v


def make_create_coin_condition(puzzle_hash: bytes, amount: int, memo: bytes = b"") -> SExp:
    args = [_hash32(puzzle_hash, "puzzle hash"), _amount(amount, "amount")]
    if memo:
        args.append(bytes(memo))
    return sexp_list(ConditionOpcode.CREATE_COIN.value, *args)


def make_reserve_fee_condition(fee: int) -> SExp:
    return sexp_list(ConditionOpcode.RESERVE_FEE.value, _amount(fee, "fee"))


def make_assert_coin_announcement(announcement_hash: bytes) -> SExp:
    return sexp_list(ConditionOpcode.ASSERT_COIN_ANNOUNCEMENT.value,
                     _hash32(announcement_hash, "announcement hash"))


def make_assert_puzzle_announcement(announcement_hash: bytes) -> SExp:
    return sexp_list(ConditionOpcode.ASSERT_PUZZLE_ANNOUNCEMENT.value,
                     _hash32(announcement_hash, "announcement hash"))


def make_create_coin_announcement(message: bytes) -> SExp:
    return sexp_list(ConditionOpcode.CREATE_COIN_ANNOUNCEMENT.value, bytes(message))


def make_create_puzzle_announcement(message: bytes) -> SExp:
    return sexp_list(ConditionOpcode.CREATE_PUZZLE_ANNOUNCEMENT.value, bytes(message))


def make_agg_sig_me_condition(public_key: bytes, message: bytes) -> SExp:
    return sexp_list(ConditionOpcode.AGG_SIG_ME.value, bytes(public_key), bytes(message))


def make_agg_sig_unsafe_condition(public_key: bytes, message: bytes) -> SExp:
    return sexp_list(ConditionOpcode.AGG_SIG_UNSAFE.value, bytes(public_key), bytes(message))
