"""Statistics over repeated exchange + crack runs."""

from __future__ import annotations

import numpy as np
from scipy import stats

from ecdh_cracker.analysis.cracker import DiscreteLogCracker
from ecdh_cracker.core.ecdh import KeyExchangeSession
from ecdh_cracker.core.field import PrimeField
from ecdh_cracker.core.prime import smallest_prime_at_least
from ecdh_cracker.utils.errors import CrackBoundExceeded
from ecdh_cracker.utils.timer import UsageTimer
from ecdh_cracker.utils.types import BenchmarkRecord, DemoConfig


def run_benchmark(config: DemoConfig, rng: np.random.Generator) -> list[BenchmarkRecord]:
    """Run config.runs independent sessions over one field and crack each.

    A crack that hits its bound is recorded as a failure, not raised.
    """
    field = PrimeField(smallest_prime_at_least(config.min_modulus))
    records = []
    for run in range(config.runs):
        with UsageTimer() as exchange_timer:
            session = KeyExchangeSession(field, rng)
            session.run()

        recovered = None
        success = False
        with UsageTimer() as crack_timer:
            try:
                result = DiscreteLogCracker.crack_session(
                    session, config.max_iterations, config.timeout
                )
            except CrackBoundExceeded as exc:
                iterations = exc.iterations
            else:
                recovered = result.secret
                iterations = result.iterations
                success = result.matches(session.alice) and result.matches(session.bob)

        records.append(
            BenchmarkRecord(
                modulus=field.modulus,
                secret=session.alice.secret_key,
                recovered=recovered,
                iterations=iterations,
                exchange_seconds=exchange_timer.elapsed,
                crack_seconds=crack_timer.elapsed,
                success=success,
                metadata={"run": run, "curve": str(session.curve), "base": str(session.base)},
            )
        )
    return records


class CrackStatistics:
    """Summaries of a list of BenchmarkRecords."""

    def __init__(self, records: list[BenchmarkRecord]) -> None:
        self.records = records

    def success_rate(self) -> float:
        if not self.records:
            return 0.0
        return sum(r.success for r in self.records) / len(self.records)

    def iteration_stats(self) -> dict:
        if not self.records:
            return {
                "count": 0,
                "iterations_mean": 0.0,
                "iterations_std": 0.0,
                "iterations_min": 0,
                "iterations_max": 0,
                "crack_seconds_mean": 0.0,
            }

        iterations = np.array([r.iterations for r in self.records], dtype=np.float64)
        seconds = np.array([r.crack_seconds for r in self.records], dtype=np.float64)
        return {
            "count": len(self.records),
            "iterations_mean": float(np.mean(iterations)),
            "iterations_std": float(np.std(iterations)),
            "iterations_min": int(np.min(iterations)),
            "iterations_max": int(np.max(iterations)),
            "crack_seconds_mean": float(np.mean(seconds)),
        }

    def confidence_interval(self, alpha: float = 0.95) -> tuple[float, float]:
        """Student-t interval on the mean number of iterations."""
        n = len(self.records)
        if n == 0:
            return (0.0, 0.0)
        iterations = np.array([r.iterations for r in self.records], dtype=np.float64)
        mean = float(np.mean(iterations))
        sem = float(stats.sem(iterations)) if n > 1 else 0.0
        if sem == 0.0:
            return (mean, mean)
        lo, hi = stats.t.interval(alpha, n - 1, loc=mean, scale=sem)
        return (float(lo), float(hi))

    def linearity(self) -> dict:
        """Least-squares fit of crack time against iterations.

        Brute force costs one point addition per step, so r_squared close
        to 1 is expected once runs are long enough to time reliably.
        """
        iterations = [r.iterations for r in self.records]
        if len(self.records) < 2 or len(set(iterations)) < 2:
            return {"slope": None, "intercept": None, "r_squared": None}
        fit = stats.linregress(iterations, [r.crack_seconds for r in self.records])
        return {
            "slope": float(fit.slope),
            "intercept": float(fit.intercept),
            "r_squared": float(fit.rvalue**2),
        }

    def full_report(self) -> dict:
        return {
            "success_rate": self.success_rate(),
            "iteration_stats": self.iteration_stats(),
            "confidence_interval": self.confidence_interval(),
            "linearity": self.linearity(),
        }
