"""
puzzlevm/curry.py - Currying

    curry(mod, a1, a2)  ->  (a (q . mod) (c (q . a1) (c (q . a2) 1)))

Running the curried program against E behaves like running mod against
(a1 a2 . E). Currying is a pure tree transform: nothing is evaluated, and
``mod`` and the arguments are shared, not copied.
"""

from typing import Any, List, Optional, Tuple

from .operator_lexicon import APPLY_ATOM, CONS_ATOM, QUOTE_ATOM
from .sexp import NIL, ONE, Atom, Pair, SExp, sexp_list, to_sexp
from .tree_hash import atom_hash, pair_hash

_QUOTE = Atom(QUOTE_ATOM)
_APPLY = Atom(APPLY_ATOM)
_CONS = Atom(CONS_ATOM)

Q_KW_TREEHASH = atom_hash(QUOTE_ATOM)
A_KW_TREEHASH = atom_hash(APPLY_ATOM)
C_KW_TREEHASH = atom_hash(CONS_ATOM)
ONE_TREEHASH = atom_hash(ONE.atom)
NULL_TREEHASH = atom_hash(b"")


def curry(mod: Any, *args: Any) -> SExp:
    env: SExp = ONE
    for arg in reversed(args):
        env = sexp_list(_CONS, Pair(_QUOTE, to_sexp(arg)), env)
    return sexp_list(_APPLY, Pair(_QUOTE, to_sexp(mod)), env)


def _match_list(sexp: SExp, n: int) -> Optional[List[SExp]]:
    """Items of sexp if it is a proper list of exactly n elements."""
    if sexp.list_len() != n or not sexp.is_proper_list():
        return None
    return list(sexp.as_iter())


def _unquote(sexp: SExp) -> Optional[SExp]:
    if isinstance(sexp, Pair) and sexp.left == _QUOTE:
        return sexp.right
    return None


def uncurry(sexp: SExp) -> Optional[Tuple[SExp, List[SExp]]]:
    """
    Inverse of curry: (mod, [args]) or None if sexp is not in curried form.
    """
    items = _match_list(sexp, 3)
    if items is None or items[0] != _APPLY:
        return None
    mod = _unquote(items[1])
    if mod is None:
        return None

    args: List[SExp] = []
    env = items[2]
    while env != ONE:
        cons = _match_list(env, 3)
        if cons is None or cons[0] != _CONS:
            return None
        arg = _unquote(cons[1])
        if arg is None:
            return None
        args.append(arg)
        env = cons[2]
    return mod, args


def curry_and_treehash(mod_hash: bytes, *arg_hashes: bytes) -> bytes:
    """
    Tree hash of curry(mod, *args) computed from the tree hashes of mod and
    of each argument, without building the curried program.
    """
    env_hash = ONE_TREEHASH
    for arg_hash in reversed(arg_hashes):
        quoted_arg = pair_hash(Q_KW_TREEHASH, arg_hash)
        env_hash = pair_hash(C_KW_TREEHASH, pair_hash(quoted_arg, pair_hash(env_hash, NULL_TREEHASH)))
    quoted_mod = pair_hash(Q_KW_TREEHASH, mod_hash)
    return pair_hash(A_KW_TREEHASH, pair_hash(quoted_mod, pair_hash(env_hash, NULL_TREEHASH)))
