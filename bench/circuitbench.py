#!/usr/bin/env python3
"""
CircuitBench: Cost Report for the Float Adder Circuit

For each float format, compiles the adder and measures:
    circuit size (wires, constraints, public wires)
    compile time
    witness generation and constraint checking time

Usage:
    circuitbench all                [--output DIR] [--iterations N]
    circuitbench size               [--output DIR]
    circuitbench witness --preset binary32 [--iterations N]
"""

from __future__ import annotations
import argparse
import json
import hashlib
import random
import time
import sys
from pathlib import Path
from typing import Any, Dict, List

# Add paths
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from zkfloat import PRESETS, FloatAdder, FloatParams, FloatValue


def random_operand(params: FloatParams, rng: random.Random) -> FloatValue:
    e = rng.randint(1, params.max_exponent)
    m = rng.randint(params.min_mantissa, params.max_mantissa)
    return FloatValue(e, m, params)


class CircuitBench:
    """Benchmark orchestrator."""

    def __init__(self, output_dir: Path, seed: int = 0):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.seed = seed
        self._adders: Dict[str, FloatAdder] = {}

    def _adder(self, name: str) -> FloatAdder:
        if name not in self._adders:
            self._adders[name] = FloatAdder(PRESETS[name])
        return self._adders[name]

    def run_size(self, presets: List[str]) -> Dict[str, Any]:
        """Compile every preset and report circuit size."""
        print("=" * 60)
        print("CIRCUIT SIZE")
        print("=" * 60)

        results = {}
        for name in presets:
            start = time.perf_counter()
            adder = FloatAdder(PRESETS[name])
            compile_ms = (time.perf_counter() - start) * 1000
            self._adders[name] = adder

            results[name] = {
                'k': adder.params.k,
                'p': adder.params.p,
                'wires': adder.num_wires,
                'constraints': adder.num_constraints,
                'public': len(adder.cs.public),
                'compile_ms': compile_ms,
                'digest': adder.digest().hex(),
            }
            print(f"{name:10s} wires={adder.num_wires:6d} "
                  f"constraints={adder.num_constraints:6d} compile={compile_ms:8.2f} ms")

        return results

    def run_witness(self, presets: List[str], iterations: int) -> Dict[str, Any]:
        """Time witness generation and the constraint check separately."""
        print("\n" + "=" * 60)
        print("WITNESS GENERATION")
        print("=" * 60)

        rng = random.Random(self.seed)
        results = {}
        for name in presets:
            adder = self._adder(name)
            pairs = [
                (random_operand(adder.params, rng), random_operand(adder.params, rng))
                for _ in range(iterations)
            ]

            start = time.perf_counter()
            witnesses = [adder.witness(a, b) for a, b in pairs]
            generate_s = time.perf_counter() - start

            start = time.perf_counter()
            satisfied = sum(adder.cs.is_satisfied(w) for w in witnesses)
            check_s = time.perf_counter() - start

            results[name] = {
                'iterations': iterations,
                'generate_us': generate_s / iterations * 1e6,
                'check_us': check_s / iterations * 1e6,
                'satisfied': satisfied,
            }
            print(f"{name:10s} generate={results[name]['generate_us']:10.1f} µs "
                  f"check={results[name]['check_us']:10.1f} µs "
                  f"ok={satisfied}/{iterations}")

        return results

    def run_all(self, presets: List[str], iterations: int) -> Dict[str, Any]:
        start = time.perf_counter()
        results = {
            'size': self.run_size(presets),
            'witness': self.run_witness(presets, iterations),
        }
        total_ms = (time.perf_counter() - start) * 1000
        return self._write_report(results, total_ms)

    def _write_report(self, results: Dict[str, Any], total_duration_ms: float) -> Dict[str, Any]:
        report = {
            'circuitbench_version': '0.1.0',
            'timestamp': time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            'seed': self.seed,
            'total_duration_ms': total_duration_ms,
            'results': results,
        }
        report_json = json.dumps(report, sort_keys=True, indent=2)
        report['report_hash'] = hashlib.sha256(report_json.encode()).hexdigest()

        report_path = self.output_dir / 'report.json'
        with open(report_path, 'w') as f:
            json.dump(report, f, indent=2)

        print("\n" + "=" * 60)
        print("REPORT")
        print("=" * 60)
        print(f"Written to: {report_path}")
        print(f"Total duration: {total_duration_ms:.2f} ms")
        return report


def main():
    parser = argparse.ArgumentParser(
        description='CircuitBench: cost report for the float adder circuit',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    circuitbench all                       # Size and timing for every preset
    circuitbench size                      # Circuit size only
    circuitbench witness --preset toy      # Witness timing for one preset
        """
    )

    parser.add_argument(
        'command',
        choices=['size', 'witness', 'all'],
        help='Benchmark command to run'
    )

    parser.add_argument(
        '--output', '-o',
        type=Path,
        default=Path('./bench_output'),
        help='Output directory for results'
    )

    parser.add_argument(
        '--preset',
        action='append',
        choices=sorted(PRESETS),
        help='Float format to benchmark (repeatable, default: all)'
    )

    parser.add_argument(
        '--iterations', '-n',
        type=int,
        default=20,
        help='Witnesses generated per preset (default: 20)'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=0,
        help='Seed for random operands (default: 0)'
    )

    args = parser.parse_args()
    presets = args.preset or list(PRESETS)

    bench = CircuitBench(args.output, seed=args.seed)

    if args.command == 'size':
        results = {'size': bench.run_size(presets)}
        bench._write_report(results, 0.0)
    elif args.command == 'witness':
        results = {'witness': bench.run_witness(presets, args.iterations)}
        bench._write_report(results, 0.0)
    elif args.command == 'all':
        bench.run_all(presets, args.iterations)


if __name__ == '__main__':
    main()
