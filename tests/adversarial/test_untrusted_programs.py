"""
Adversarial tests for puzzles and solutions from untrusted sources.
Deep nesting, malformed serialization, cost exhaustion and shape confusion
must each surface as one typed error, never a partial result or a crash.
"""
import unittest
import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from puzzlevm.errors import CostExceededError, OperatorError, ParseError, PathError, PuzzleError, RaiseError
from puzzlevm.evaluator import run_program
from puzzlevm.runtime import PuzzleRuntime
from puzzlevm.serialize import sexp_from_bytes
from puzzlevm.sexp import NIL, ONE, Atom, Pair, sexp_list


class TestMalformedSerialization(unittest.TestCase):
    """Truncated or oversized blobs are parse errors"""

    def test_truncated_pairs(self):
        for depth in (1, 10, 1000):
            with self.assertRaises(ParseError):
                sexp_from_bytes(b"\xff" * depth)

    def test_length_prefix_past_end(self):
        # claims a 0x3ffffff-byte atom
        with self.assertRaises(ParseError):
            sexp_from_bytes(b"\xf3\xff\xff\xff\x00")

    def test_trailing_garbage(self):
        with self.assertRaises(ParseError):
            sexp_from_bytes(b"\x80\x80")


class TestResourceExhaustion(unittest.TestCase):
    """Programs that loop or blow up are bounded by max_cost"""

    # (a 2 1) run against itself recurses forever
    LOOP = sexp_list(Atom(b"\x02"), Atom(b"\x02"), ONE)

    def test_infinite_recursion_hits_cost_limit(self):
        with self.assertRaises(CostExceededError) as cm:
            run_program(self.LOOP, sexp_list(self.LOOP), max_cost=100000)
        self.assertGreater(cm.exception.cost, 100000)
        self.assertEqual(cm.exception.max_cost, 100000)

    def test_runtime_reports_cost_limit(self):
        res = PuzzleRuntime(max_cost=5000).evaluate(self.LOOP, sexp_list(self.LOOP))
        self.assertEqual(res.code, "ERR_COST_EXCEEDED")
        self.assertIsNone(res.value)

    def test_huge_shift_rejected(self):
        with self.assertRaises(OperatorError):
            run_program(sexp_list(Atom(b"\x16"), Pair(ONE, ONE), Pair(ONE, Atom(b"\x01\x00\x00"))))


class TestShapeConfusion(unittest.TestCase):
    """Atoms where pairs are expected and vice versa"""

    def test_path_through_atom_env(self):
        with self.assertRaises(PathError):
            run_program(Atom(b"\x02"), Atom(b"not a list"))

    def test_long_path_atom(self):
        env = NIL
        for _ in range(64):
            env = Pair(env, NIL)
        path = Atom(b"\x01" + b"\x00" * 8)
        _, r = run_program(path, env)
        self.assertEqual(r, NIL)
        with self.assertRaises(PathError):
            run_program(Atom(b"\x01" + b"\x00" * 9), env)

    def test_operator_on_pair(self):
        program = sexp_list(Atom(b"\x10"), Pair(ONE, sexp_list(1, 2)))
        with self.assertRaises(OperatorError) as cm:
            run_program(program)
        self.assertEqual(cm.exception.opcode, "+")
        self.assertEqual(cm.exception.arg_index, 0)

    def test_raise_with_deep_payload(self):
        depth = 20000
        deep = NIL
        for _ in range(depth):
            deep = Pair(deep, NIL)
        program = sexp_list(Atom(b"\x08"), Pair(ONE, deep))
        with self.assertRaises(RaiseError) as cm:
            run_program(program)
        self.assertEqual(cm.exception.node.first(), deep)
        res = PuzzleRuntime().evaluate(program)
        self.assertEqual(res.code, "ERR_RAISE")

    def test_deep_value_as_python(self):
        deep = NIL
        for _ in range(20000):
            deep = sexp_list(deep)
        v = deep.as_python()
        for _ in range(20000):
            self.assertEqual(len(v), 1)
            v = v[0]
        self.assertEqual(v, b"")

    def test_every_failure_is_a_puzzle_error(self):
        programs = [
            "(a (q . (f 1)) (q . 5))",
            "(c (q . 1))",
            "(substr (q . \"abc\") (q . 2) (q . 1))",
            "(x)",
        ]
        for text in programs:
            res = PuzzleRuntime().evaluate(text)
            self.assertEqual(res.domain, "error", text)
        with self.assertRaises(PuzzleError):
            run_program(sexp_list(Atom(b"\x63"), NIL))


if __name__ == "__main__":
    unittest.main()
