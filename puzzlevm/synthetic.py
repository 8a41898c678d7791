"""
synthetic.py

Synthetic Keys
--------------

A wallet key P is blinded with the hash H of a hidden puzzle:

    offset        = sha256(P || H) mod GROUP_ORDER
    synthetic_pk  = P + offset * G
    synthetic_sk  = (sk + offset) mod GROUP_ORDER

The synthetic key is curried into the MOD template; the tree hash of the
result is the puzzle hash (address) of the coin. A spender either signs with
the synthetic key (delegated spend) or reveals P and the hidden puzzle.
"""

import hashlib
from typing import Any, List, Optional

from .canonical import Int
from .keys import GROUP_ORDER, PUB_KEY_LEN, Key, aggregate_public_keys, public_key_for_exponent
from .errors import RangeError
from .predefined import PredefinedPrograms, ProgramName, get_predefined_programs
from .program import Program


def _registry(registry: Optional[PredefinedPrograms]) -> PredefinedPrograms:
    return get_predefined_programs() if registry is None else registry


def _public_key(public_key: bytes) -> bytes:
    public_key = bytes(public_key)
    if len(public_key) != PUB_KEY_LEN:
        raise RangeError(f"public key must be {PUB_KEY_LEN} bytes, got {len(public_key)}")
    return public_key


def default_hidden_puzzle_hash(registry: Optional[PredefinedPrograms] = None) -> bytes:
    return _registry(registry)[ProgramName.DEFAULT_HIDDEN_PUZZLE].get_tree_hash()


# ==========================================
# Key blinding
# ==========================================

def calculate_synthetic_offset(public_key: bytes, hidden_puzzle_hash: bytes) -> Int:
    blob = hashlib.sha256(_public_key(public_key) + bytes(hidden_puzzle_hash)).digest()
    # signed reading, as pubkey_for_exp does inside SYNTHETIC_MOD
    return Int.from_bytes(blob).mod(GROUP_ORDER)


def calculate_synthetic_public_key(public_key: bytes, hidden_puzzle_hash: bytes) -> bytes:
    offset = calculate_synthetic_offset(public_key, hidden_puzzle_hash)
    return aggregate_public_keys([public_key, public_key_for_exponent(offset.value)])


def calculate_synthetic_secret_key(secret_key: Key, hidden_puzzle_hash: bytes) -> Key:
    offset = calculate_synthetic_offset(secret_key.public_key, hidden_puzzle_hash)
    return Key.from_secret_exponent((secret_key.secret_exponent + offset.value) % GROUP_ORDER)


# ==========================================
# Puzzles
# ==========================================

def puzzle_for_synthetic_public_key(synthetic_public_key: bytes,
                                    registry: Optional[PredefinedPrograms] = None) -> Program:
    return _registry(registry)[ProgramName.MOD].curry(_public_key(synthetic_public_key))


def puzzle_for_public_key_and_hidden_puzzle_hash(public_key: bytes, hidden_puzzle_hash: bytes,
                                                 registry: Optional[PredefinedPrograms] = None) -> Program:
    synthetic_public_key = calculate_synthetic_public_key(public_key, hidden_puzzle_hash)
    return puzzle_for_synthetic_public_key(synthetic_public_key, registry)


def puzzle_for_public_key_and_hidden_puzzle(public_key: bytes, hidden_puzzle: Program,
                                            registry: Optional[PredefinedPrograms] = None) -> Program:
    return puzzle_for_public_key_and_hidden_puzzle_hash(
        public_key, Program.to(hidden_puzzle).get_tree_hash(), registry
    )


def puzzle_for_public_key(public_key: bytes, registry: Optional[PredefinedPrograms] = None) -> Program:
    return puzzle_for_public_key_and_hidden_puzzle_hash(
        public_key, default_hidden_puzzle_hash(registry), registry
    )


def public_key_to_puzzle_hash(public_key: bytes, registry: Optional[PredefinedPrograms] = None) -> bytes:
    return puzzle_for_public_key(public_key, registry).get_tree_hash()


# ==========================================
# Solutions
# ==========================================

def puzzle_for_conditions(conditions: List[Any], registry: Optional[PredefinedPrograms] = None) -> Program:
    """A delegated puzzle that returns ``conditions`` verbatim."""
    _, r = _registry(registry)[ProgramName.P2_CONDITIONS].run([conditions])
    return r


def solution_for_delegated_puzzle(delegated_puzzle: Any, solution: Any) -> Program:
    return Program.to([[], delegated_puzzle, solution])


def solution_for_hidden_puzzle(hidden_public_key: bytes, hidden_puzzle: Any, solution_to_hidden_puzzle: Any) -> Program:
    return Program.to([_public_key(hidden_public_key), hidden_puzzle, solution_to_hidden_puzzle])


def solution_for_conditions(conditions: List[Any], registry: Optional[PredefinedPrograms] = None) -> Program:
    delegated_puzzle = puzzle_for_conditions(conditions, registry)
    return solution_for_delegated_puzzle(delegated_puzzle, Program.to(0))
