"""Main entry point: python -m ecdh_cracker"""

from __future__ import annotations

import argparse
import csv

import numpy as np

from ecdh_cracker import __version__
from ecdh_cracker.analysis.cracker import DiscreteLogCracker
from ecdh_cracker.analysis.metrics import CrackStatistics, run_benchmark
from ecdh_cracker.core.ecdh import KeyExchangeSession
from ecdh_cracker.core.field import PrimeField
from ecdh_cracker.core.prime import smallest_prime_at_least
from ecdh_cracker.utils.constants import DEFAULT_MIN_MODULUS, LARGE_MIN_MODULUS
from ecdh_cracker.utils.errors import CrackBoundExceeded
from ecdh_cracker.utils.timer import UsageTimer
from ecdh_cracker.utils.types import BenchmarkRecord, DemoConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecdh-cracker",
        description="ECDH key agreement over a small prime field, then brute-force the secret",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest="command")

    # exchange
    ex = sub.add_parser("exchange", help="Run one key exchange and crack it")
    ex.add_argument("--min-modulus", type=int, default=DEFAULT_MIN_MODULUS,
                    help=f"Field modulus is the smallest prime >= this (default {DEFAULT_MIN_MODULUS})")
    ex.add_argument("--large", action="store_true",
                    help=f"Search from {LARGE_MIN_MODULUS} instead (the crack takes much longer)")
    ex.add_argument("--seed", type=int, help="Seed for the random source")
    ex.add_argument("--max-iterations", type=int, help="Stop the crack after this many additions")
    ex.add_argument("--timeout", type=float, help="Stop the crack after this many seconds")

    # benchmark
    bench = sub.add_parser("benchmark", help="Repeat exchange + crack and report statistics")
    bench.add_argument("--runs", type=int, default=10, help="Number of sessions (default 10)")
    bench.add_argument("--min-modulus", type=int, default=10_007, help="Smallest modulus candidate")
    bench.add_argument("--seed", type=int, help="Seed for the random source")
    bench.add_argument("--max-iterations", type=int, help="Per-crack iteration bound")
    bench.add_argument("--timeout", type=float, help="Per-crack time limit in seconds")
    bench.add_argument("--csv", type=str, metavar="PATH", help="Export per-run records to CSV")
    bench.add_argument("--plot", action="store_true", help="Save a histogram of crack iterations")
    bench.add_argument("--save-dir", type=str, default="~/Desktop", help="Where to write PNGs")

    # visualize
    viz = sub.add_parser("visualize", help="Plot the points of a small random curve")
    viz.add_argument("--min-modulus", type=int, default=211, help="Smallest modulus candidate")
    viz.add_argument("--seed", type=int, help="Seed for the random source")
    viz.add_argument("--save-dir", type=str, default="~/Desktop", help="Where to write PNGs")

    return parser


def config_from_args(args: argparse.Namespace) -> DemoConfig:
    return DemoConfig(
        min_modulus=LARGE_MIN_MODULUS if getattr(args, "large", False) else args.min_modulus,
        seed=args.seed,
        runs=getattr(args, "runs", 1),
        max_iterations=getattr(args, "max_iterations", None),
        timeout=getattr(args, "timeout", None),
    )


def print_status(session: KeyExchangeSession) -> None:
    print("* Status")
    print(f"\t{'Secret key':>10}\t{'Public key':<20}\t{'Common key'}")
    for name, secret, public, shared in session.status_rows():
        print(f"{name.capitalize()}\t{secret:>10}\t{public:<20}\t{shared}")


def run_exchange(config: DemoConfig) -> int:
    """One session: exchange, print status, then crack alice's secret."""
    rng = np.random.default_rng(config.seed)
    field = PrimeField(smallest_prime_at_least(config.min_modulus))

    print(f"Modulus: {field.modulus}")
    timer = UsageTimer()
    timer.start()
    session = KeyExchangeSession(field, rng)
    session.run()
    timer.stop()
    print(f"Curve: {session.curve}")
    print(f"Base:  {session.base}")
    print_status(session)
    print(timer.format())
    print()

    print("Cracking now ...", end="", flush=True)
    timer.start()
    try:
        result = DiscreteLogCracker.crack_session(
            session, config.max_iterations, config.timeout
        )
    except CrackBoundExceeded as exc:
        timer.stop()
        print(" failed.")
        print(f"- {exc}")
        print(timer.format())
        return 1
    timer.stop()
    print(" done.")
    print(f"+ Alice's secret key\t{result.secret}")
    print(f"+ Common key\t\t{result.shared_key}")
    print(timer.format())
    return 0 if result.matches(session.bob) else 1


def run_bench(
    config: DemoConfig,
    csv_path: str | None = None,
    plot_dir: str | None = None,
) -> int:
    rng = np.random.default_rng(config.seed)
    modulus = smallest_prime_at_least(config.min_modulus)
    print(f"Modulus: {modulus} | Runs: {config.runs}")

    records = run_benchmark(config, rng)
    report = CrackStatistics(records).full_report()
    it = report["iteration_stats"]
    ci = report["confidence_interval"]
    lin = report["linearity"]

    print()
    print("=" * 50)
    print(" RESULTS")
    print("=" * 50)
    print(f"  Success rate:        {report['success_rate']:.2%}")
    print(f"  Mean iterations:     {it['iterations_mean']:.1f} (std {it['iterations_std']:.1f})")
    print(f"  Iteration range:     {it['iterations_min']} .. {it['iterations_max']}")
    print(f"  95% CI (mean):       ({ci[0]:.1f}, {ci[1]:.1f})")
    print(f"  Mean crack time:     {it['crack_seconds_mean']:.5f} s")
    if lin["r_squared"] is not None:
        print(f"  Seconds/iteration:   {lin['slope']:.3e} (r^2 = {lin['r_squared']:.3f})")
    print("=" * 50)

    if csv_path:
        export_csv(records, csv_path)

    if plot_dir:
        from ecdh_cracker.visualization.plots import PlotSuite

        print("\nGenerating plots...")
        plots = PlotSuite(save_dir=plot_dir)
        plots.iteration_histogram(records)
        print(f"Plots saved to {plots.save_dir}/")
    return 0 if report["success_rate"] == 1.0 else 1


def export_csv(records: list[BenchmarkRecord], filepath: str) -> None:
    """Write one row per benchmark run."""
    with open(filepath, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "run", "modulus", "secret", "recovered", "iterations",
            "exchange_seconds", "crack_seconds", "success",
        ])
        for i, r in enumerate(records):
            writer.writerow([
                i, r.modulus, r.secret, "" if r.recovered is None else r.recovered,
                r.iterations, r.exchange_seconds, r.crack_seconds, int(r.success),
            ])

    print(f"Results exported to {filepath}")


def run_visualize(args: argparse.Namespace) -> int:
    from ecdh_cracker.visualization.plots import PlotSuite

    rng = np.random.default_rng(args.seed)
    field = PrimeField(smallest_prime_at_least(args.min_modulus))
    session = KeyExchangeSession(field, rng)
    session.run()
    print(f"Curve: {session.curve}")
    print(f"Base:  {session.base}")

    plots = PlotSuite(save_dir=args.save_dir)
    plots.curve_points(
        session.curve,
        base=session.base,
        highlight=(session.alice.public_key, session.bob.public_key, session.alice.shared_key),
    )
    plots.crack_walk(session.curve, session.base, steps=session.alice.secret_key)
    print(f"Plots saved to {plots.save_dir}/")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "exchange":
        return run_exchange(config_from_args(args))
    elif args.command == "benchmark":
        return run_bench(config_from_args(args), args.csv, args.save_dir if args.plot else None)
    elif args.command == "visualize":
        return run_visualize(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
