"""
puzzlevm/tree_hash.py - Content Hash of Value Trees

    tree_hash(atom) = sha256(0x01 || atom)
    tree_hash(pair) = sha256(0x02 || tree_hash(left) || tree_hash(right))

The hash depends only on structure and content. Shared sub-trees are hashed
once per call (memoized by node identity); the result is identical to hashing
an unshared copy.
"""

import hashlib
from typing import Dict, List, Optional

from .sexp import Atom, SExp

ATOM_PREFIX = b"\x01"
PAIR_PREFIX = b"\x02"


def sha256(*chunks: bytes) -> bytes:
    h = hashlib.sha256()
    for chunk in chunks:
        h.update(chunk)
    return h.digest()


def atom_hash(atom: bytes) -> bytes:
    return sha256(ATOM_PREFIX, atom)


def pair_hash(left_hash: bytes, right_hash: bytes) -> bytes:
    return sha256(PAIR_PREFIX, left_hash, right_hash)


def tree_hash(sexp: SExp, precalculated: Optional[Dict[bytes, bytes]] = None) -> bytes:
    """
    Compute the 32-byte tree hash of a Value.

    Args:
        sexp: the Value to hash
        precalculated: optional map of atom -> hash to use verbatim for
            atoms whose hash is already known (e.g. pre-hashed arguments)
    """
    memo: Dict[int, bytes] = {}
    # keeps memoized nodes alive so id() values are not reused mid-walk
    seen: List[SExp] = []
    stack: List[SExp] = [sexp]
    while stack:
        node = stack[-1]
        key = id(node)
        if key in memo:
            stack.pop()
            continue
        if isinstance(node, Atom):
            if precalculated is not None and node.atom in precalculated:
                memo[key] = precalculated[node.atom]
            else:
                memo[key] = atom_hash(node.atom)
            seen.append(node)
            stack.pop()
            continue
        left_h = memo.get(id(node.left))
        right_h = memo.get(id(node.right))
        if left_h is None or right_h is None:
            if right_h is None:
                stack.append(node.right)
            if left_h is None:
                stack.append(node.left)
            continue
        memo[key] = pair_hash(left_h, right_h)
        seen.append(node)
        stack.pop()
    return memo[id(sexp)]
