"""Dataclass definitions for the ECDH demo."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ecdh_cracker.utils.constants import DEFAULT_MIN_MODULUS

if TYPE_CHECKING:
    from ecdh_cracker.core.curve import Point
    from ecdh_cracker.core.ecdh import KeyExchangeParty


@dataclass
class DemoConfig:
    """Configuration for an exchange or benchmark run."""

    min_modulus: int = DEFAULT_MIN_MODULUS
    seed: int | None = None
    runs: int = 10
    max_iterations: int | None = None
    timeout: float | None = None  # seconds of wall-clock time per crack


@dataclass
class CrackResult:
    """Outcome of a successful brute-force attack."""

    secret: int
    shared_key: Point
    iterations: int
    elapsed: float = 0.0

    def matches(self, party: KeyExchangeParty) -> bool:
        """True if the reconstructed shared key equals the party's own."""
        return party.shared_key == self.shared_key


@dataclass
class BenchmarkRecord:
    """One session + crack from a benchmark run."""

    modulus: int
    secret: int
    recovered: int | None
    iterations: int
    exchange_seconds: float
    crack_seconds: float
    success: bool
    metadata: dict = field(default_factory=dict)  # type: ignore[type-arg]
