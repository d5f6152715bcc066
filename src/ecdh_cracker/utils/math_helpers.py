"""Integer helpers shared by the field and primality code."""

from __future__ import annotations

import numpy as np

from ecdh_cracker.utils.constants import INT64_BOUND


def extended_gcd(a: int, b: int) -> tuple[int, int, int]:
    """Return (g, x, y) with a*x + b*y == g == gcd(a, b).

    Iterative form; works for arbitrarily large Python ints.
    """
    old_r, r = a, b
    old_x, x = 1, 0
    old_y, y = 0, 1
    while r != 0:
        quotient = old_r // r
        old_r, r = r, old_r - quotient * r
        old_x, x = x, old_x - quotient * x
        old_y, y = y, old_y - quotient * y
    return old_r, old_x, old_y


def split_two_power(n: int) -> tuple[int, int]:
    """Write n = 2^e * odd and return (e, odd). n must be positive."""
    if n <= 0:
        raise ValueError(f"n must be positive, got {n}")
    exponent = 0
    while n % 2 == 0:
        n //= 2
        exponent += 1
    return exponent, n


def random_below(rng: np.random.Generator, low: int, high: int) -> int:
    """Uniform integer in [low, high) drawn from rng.

    numpy's Generator.integers is limited to int64; wider ranges are
    built from 32-bit words with rejection so the result stays uniform.
    """
    if high <= low:
        raise ValueError(f"Empty range [{low}, {high})")
    span = high - low
    if span <= INT64_BOUND:
        return low + int(rng.integers(0, span))

    n_words = (span.bit_length() + 31) // 32
    limit = (1 << (32 * n_words)) - ((1 << (32 * n_words)) % span)
    while True:
        words = rng.integers(0, 2**32, size=n_words, dtype=np.uint64)
        value = 0
        for w in words:
            value = (value << 32) | int(w)
        if value < limit:
            return low + value % span
