"""Primality test and smallest-prime search used to pick the field modulus."""

from __future__ import annotations

from ecdh_cracker.utils.constants import WITNESS_STRIDE_DIVISOR
from ecdh_cracker.utils.math_helpers import split_two_power


def _witness_stride(n: int) -> int:
    return max(n // WITNESS_STRIDE_DIVISOR, 1)


def _is_witness(n: int, a: int, d: int, s: int) -> bool:
    """True if a proves n composite (n - 1 == 2^s * d, d odd)."""
    y = pow(a, d, n)
    if y == 1 or y == n - 1:
        return False
    for _ in range(s - 1):
        y = y * y % n
        if y == n - 1:
            return False
    return True


def is_prime(n: int) -> bool:
    """Miller-Rabin test over a fixed, evenly spaced witness sequence.

    Witnesses are 2, 2 + stride, 2 + 2*stride, ... below n with
    stride = max(n // 100, 1), so at most ~100 rounds run and the answer
    for a given n never changes between calls. For n below 200 every
    base is tried and the answer is exact.
    """
    if n <= 1:
        return False
    if n == 2:
        return True
    if n % 2 == 0:
        return False

    s, d = split_two_power(n - 1)
    stride = _witness_stride(n)
    a = 2
    while a < n:
        if _is_witness(n, a, d, s):
            return False
        a += stride
    return True


def smallest_prime_at_least(minimum: int) -> int:
    """Return the smallest prime >= minimum."""
    if minimum <= 2:
        return 2
    candidate = minimum if minimum % 2 == 1 else minimum + 1
    while not is_prime(candidate):
        candidate += 2
    return candidate
