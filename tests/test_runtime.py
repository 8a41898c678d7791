import io
import os
import sys
import unittest
from contextlib import redirect_stderr
from unittest import mock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../')))

from puzzlevm.costs import FREE_COST_MODEL
from puzzlevm.errors import ConfigurationError
from puzzlevm.predefined import PredefinedPrograms, ProgramName
from puzzlevm.program import Program
from puzzlevm.runtime import MAX_COST_ENV, PuzzleRuntime, RunResult
from puzzlevm.sexp import sexp_list


class TestPuzzleRuntime(unittest.TestCase):

    def setUp(self):
        self.runtime = PuzzleRuntime()

    def test_value_result(self):
        res = self.runtime.evaluate("(+ (q . 2) (q . 5))")
        self.assertIsInstance(res, RunResult)
        self.assertTrue(res.ok)
        self.assertEqual(res.domain, "value")
        self.assertEqual(res.value.as_int(), 7)
        self.assertGreater(res.cost, 0)
        self.assertEqual(res.tree_hash, Program.assemble("(+ (q . 2) (q . 5))").get_tree_hash())

    def test_env_forms(self):
        expected = "example"
        for env in ('("example" "data")', Program.to(["example", "data"]), ["example", "data"]):
            res = self.runtime.evaluate("2", env)
            self.assertTrue(res.ok, res.error)
            self.assertEqual(res.value.as_str(), expected)

    def test_program_forms(self):
        for program in (Program.assemble("(q 9)"), sexp_list(1, 9), "(q 9)"):
            res = self.runtime.evaluate(program)
            self.assertEqual(res.value, sexp_list(9))

    def test_error_codes(self):
        cases = {
            "(+ 1": "ERR_PARSE",
            "(frobnicate 1)": "ERR_UNKNOWN_OPERATOR",
            "(f (q . 1))": "ERR_TYPE",
            "(/ (q . 1) ())": "ERR_OPERATOR",
            "(x (q . 1))": "ERR_RAISE",
            "4": "ERR_PATH",
        }
        for text, code in cases.items():
            res = self.runtime.evaluate(text, "(1 2)")
            self.assertFalse(res.ok, text)
            self.assertEqual(res.domain, "error")
            self.assertEqual(res.code, code, text)
            self.assertIsNone(res.value)
            self.assertEqual(res.cost, 0)
            self.assertIn(code, res.error)

    def test_error_keeps_tree_hash(self):
        res = self.runtime.evaluate("(f (q . 1))")
        self.assertEqual(res.tree_hash, Program.assemble("(f (q . 1))").get_tree_hash())
        self.assertIsNone(self.runtime.evaluate("(+ 1").tree_hash)

    def test_max_cost(self):
        cost = self.runtime.evaluate("(+ (q . 2) (q . 5))").cost
        capped = PuzzleRuntime(max_cost=cost - 1)
        res = capped.evaluate("(+ (q . 2) (q . 5))")
        self.assertEqual(res.code, "ERR_COST_EXCEEDED")
        self.assertTrue(PuzzleRuntime(max_cost=cost).evaluate("(+ (q . 2) (q . 5))").ok)

    def test_max_cost_from_env(self):
        with mock.patch.dict(os.environ, {MAX_COST_ENV: "1"}):
            runtime = PuzzleRuntime()
        self.assertEqual(runtime.max_cost, 1)
        self.assertEqual(runtime.evaluate("(+ (q . 2) (q . 5))").code, "ERR_COST_EXCEEDED")

        with mock.patch.dict(os.environ, {MAX_COST_ENV: "lots"}):
            with self.assertRaises(ConfigurationError):
                PuzzleRuntime()

        with mock.patch.dict(os.environ, {MAX_COST_ENV: "1"}):
            self.assertEqual(PuzzleRuntime(max_cost=50).max_cost, 50)

    def test_cost_model(self):
        res = PuzzleRuntime(cost_model=FREE_COST_MODEL).evaluate("(+ (q . 2) (q . 5))")
        self.assertEqual(res.cost, 0)
        self.assertEqual(res.value.as_int(), 7)

    def test_run_named(self):
        pk = b"\x97" + b"\x00" * 47
        res = self.runtime.run_named(ProgramName.P2_CONDITIONS, [[[51, pk, 1]]])
        self.assertTrue(res.ok)
        self.assertEqual(res.value.first().as_int(), 1)

        res = self.runtime.run_named("DEFAULT_HIDDEN_PUZZLE")
        self.assertEqual(res.code, "ERR_OPERATOR")

        res = self.runtime.run_named("NO_SUCH_PROGRAM")
        self.assertEqual(res.code, "ERR_CONFIGURATION")

    def test_injected_registry(self):
        registry = PredefinedPrograms({ProgramName.P2_CONDITIONS: "ff04ffff0101ff0280"})
        runtime = PuzzleRuntime(registry=registry)
        self.assertTrue(runtime.run_named("P2_CONDITIONS", [[]]).ok)
        self.assertEqual(runtime.run_named("MOD").code, "ERR_CONFIGURATION")

    def test_deeply_nested_text_is_an_error_result(self):
        depth = 5000
        text = "(q . " + "(1 " * depth + ")" * depth + ")"
        res = self.runtime.evaluate(text)
        self.assertEqual(res.domain, "error")
        self.assertEqual(res.code, "ERR_PARSE")
        res = self.runtime.evaluate("2", text)
        self.assertEqual(res.code, "ERR_PARSE")

    def test_debug_log_of_deep_result(self):
        depth = 20000
        v = sexp_list()
        for _ in range(depth):
            v = sexp_list(v)
        buf = io.StringIO()
        with redirect_stderr(buf):
            res = PuzzleRuntime(debug=True).evaluate("1", v)
        self.assertTrue(res.ok)
        self.assertIn("result=", buf.getvalue())

    def test_debug_log(self):
        buf = io.StringIO()
        with redirect_stderr(buf):
            PuzzleRuntime(debug=True).evaluate("(+ (q . 2) (q . 5))")
            PuzzleRuntime().evaluate("(+ (q . 2) (q . 5))")
        lines = buf.getvalue().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith("[puzzlevm] run "))
        self.assertIn("result=7", lines[1])


if __name__ == "__main__":
    unittest.main()
