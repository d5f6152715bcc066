"""Brute-force discrete logarithm attack on a small-field ECDH exchange."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from ecdh_cracker.core.curve import Affine, EllipticCurve, Point
from ecdh_cracker.utils.constants import TIMEOUT_CHECK_INTERVAL
from ecdh_cracker.utils.errors import CrackBoundExceeded
from ecdh_cracker.utils.types import CrackResult

if TYPE_CHECKING:
    from ecdh_cracker.core.ecdh import KeyExchangeSession


class DiscreteLogCracker:
    """Recover k from k * base by walking base, 2*base, 3*base, ...

    Only public information is used: the curve, the base point and the
    two published points. The walk never goes past the field modulus;
    max_iterations and timeout (wall-clock seconds) can stop it sooner.
    """

    def __init__(
        self,
        curve: EllipticCurve,
        base: Affine,
        max_iterations: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self.curve = curve
        self.base = base
        self.bound = curve.field.modulus
        if max_iterations is not None:
            if max_iterations < 1:
                raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
            self.bound = min(self.bound, max_iterations)
        self.timeout = timeout

    def recover_secret(self, target: Point) -> int:
        """Smallest k >= 1 with k * base == target."""
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        tmp: Point = self.base
        k = 1
        while tmp != target:
            if k >= self.bound:
                raise CrackBoundExceeded(
                    f"No k <= {self.bound} with k*{self.base} == {target}", iterations=k
                )
            if deadline is not None and k % TIMEOUT_CHECK_INTERVAL == 0:
                if time.monotonic() > deadline:
                    raise CrackBoundExceeded(
                        f"Gave up after {self.timeout}s at k = {k}", iterations=k
                    )
            tmp = self.curve.add(tmp, self.base)
            k += 1
        return k

    def crack(self, target_public: Point, partner_public: Point) -> CrackResult:
        """Recover the owner's secret and rebuild the shared point from it."""
        start = time.process_time()
        secret = self.recover_secret(target_public)
        shared = self.curve.mult(partner_public, secret)
        return CrackResult(
            secret=secret,
            shared_key=shared,
            iterations=secret,
            elapsed=time.process_time() - start,
        )

    @classmethod
    def crack_session(
        cls,
        session: KeyExchangeSession,
        max_iterations: int | None = None,
        timeout: float | None = None,
    ) -> CrackResult:
        """Attack alice's public key, using bob's as the partner point."""
        cracker = cls(session.curve, session.base, max_iterations, timeout)
        assert session.alice.public_key is not None and session.bob.public_key is not None
        return cracker.crack(session.alice.public_key, session.bob.public_key)
