#!/usr/bin/env python3
"""
puzzlevm Latency Benchmark

Measures puzzle evaluation and puzzle-hash derivation time ONLY.

INCLUDED:
  - Program assembly (text -> Value, cached after first call)
  - Evaluation with cost accounting
  - Tree hashing / currying / key blinding

EXCLUDED:
  - I/O (file, network)
  - Key generation and signing
  - Address text encoding
"""

import time
import statistics
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from puzzlevm.keys import Key
from puzzlevm.predefined import ProgramName, get_predefined_programs
from puzzlevm.runtime import PuzzleRuntime
from puzzlevm.synthetic import public_key_to_puzzle_hash, solution_for_conditions


def benchmark(fn, iterations: int = 1000) -> dict:
    """Benchmark a zero-argument callable."""
    times_us = []

    for _ in range(iterations):
        start = time.perf_counter_ns()
        fn()
        end = time.perf_counter_ns()
        times_us.append((end - start) / 1000)  # ns -> µs

    return {
        "iterations": iterations,
        "mean_us": statistics.mean(times_us),
        "median_us": statistics.median(times_us),
        "stdev_us": statistics.stdev(times_us) if len(times_us) > 1 else 0,
        "min_us": min(times_us),
        "max_us": max(times_us),
        "p95_us": sorted(times_us)[int(iterations * 0.95)],
        "p99_us": sorted(times_us)[int(iterations * 0.99)],
    }


def main():
    print("=" * 70)
    print("PUZZLEVM LATENCY BENCHMARK")
    print("=" * 70)
    print()
    print("INCLUDED: Assembly, evaluation, tree hash, key blinding")
    print("EXCLUDED: I/O, key generation, signing, address encoding")
    print()

    runtime = PuzzleRuntime()
    registry = get_predefined_programs()
    key = Key.generate(bytes(range(32)))
    puzzle = registry[ProgramName.MOD].curry(key.public_key)
    solution = solution_for_conditions([[b"\x33", b"\x00" * 32, 1]])

    # Cases with increasing complexity
    cases = [
        {
            "name": "Arithmetic (+ (q . 2) (q . 5))",
            "fn": lambda: runtime.evaluate("(+ (q . 2) (q . 5))"),
        },
        {
            "name": "Conditional with strict branches",
            "fn": lambda: runtime.evaluate("(i (= (q . 50) (q . 50)) (+ (q . 40) (q . 30)) (q . 20))"),
        },
        {
            "name": "Standard puzzle, delegated spend",
            "fn": lambda: runtime.evaluate(puzzle, solution),
        },
        {
            "name": "Public key -> puzzle hash",
            "fn": lambda: public_key_to_puzzle_hash(key.public_key),
        },
    ]

    iterations = 1000
    print(f"Iterations per case: {iterations}")
    print()

    for case in cases:
        stats = benchmark(case["fn"], iterations)
        print(f"  {case['name']}")
        print(f"  Mean:   {stats['mean_us']:>9.1f} µs")
        print(f"  Median: {stats['median_us']:>9.1f} µs")
        print(f"  P95:    {stats['p95_us']:>9.1f} µs")
        print(f"  P99:    {stats['p99_us']:>9.1f} µs")
        print(f"  Max:    {stats['max_us']:>9.1f} µs")
        print()

    print("Note: First call may be slower (parser/cache warmup).")


if __name__ == "__main__":
    main()
