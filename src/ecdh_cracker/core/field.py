"""Arithmetic in the prime field F_q.

The modulus is an ordinary runtime value carried by PrimeField; every
FieldElement keeps a reference to the field it belongs to, and all
arithmetic returns a fresh element reduced into [0, q).
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Union

from ecdh_cracker.core.prime import is_prime as _is_prime
from ecdh_cracker.utils.errors import (
    FieldMismatchError,
    NoInverseError,
    NonPrimeModulusError,
    NotAQuadraticResidueError,
)
from ecdh_cracker.utils.math_helpers import extended_gcd, split_two_power

Operand = Union["FieldElement", int]


@dataclass(frozen=True)
class PrimeField:
    """The integers modulo q.

    q is normally prime; a composite modulus is accepted so that the
    failure modes of inverse() and legendre() stay observable.
    """

    modulus: int

    def __post_init__(self) -> None:
        if self.modulus < 2:
            raise ValueError(f"Modulus must be >= 2, got {self.modulus}")

    @cached_property
    def is_prime(self) -> bool:
        return _is_prime(self.modulus)

    def element(self, value: int) -> FieldElement:
        return FieldElement(int(value) % self.modulus, self)

    def __call__(self, value: int) -> FieldElement:
        return self.element(value)

    @property
    def zero(self) -> FieldElement:
        return FieldElement(0, self)

    @property
    def one(self) -> FieldElement:
        return FieldElement(1 % self.modulus, self)

    # Field-level forms of the element methods.

    def add(self, a: Operand, b: Operand) -> FieldElement:
        return self._lift(a).add(b)

    def sub(self, a: Operand, b: Operand) -> FieldElement:
        return self._lift(a).sub(b)

    def mul(self, a: Operand, b: Operand) -> FieldElement:
        return self._lift(a).mul(b)

    def div(self, a: Operand, b: Operand) -> FieldElement:
        return self._lift(a).div(b)

    def inverse(self, a: Operand) -> FieldElement:
        return self._lift(a).inverse()

    def negate(self, a: Operand) -> FieldElement:
        return self._lift(a).negate()

    def successor(self, a: Operand) -> FieldElement:
        return self._lift(a).successor()

    def pow(self, a: Operand, k: Operand) -> FieldElement:
        return self._lift(a).pow(k)

    def legendre(self, a: Operand) -> int:
        return self._lift(a).legendre()

    def sqrt(self, a: Operand) -> FieldElement:
        return self._lift(a).sqrt()

    def _lift(self, value: Operand) -> FieldElement:
        if isinstance(value, FieldElement):
            if value.field != self:
                raise FieldMismatchError(
                    f"Element of F_{value.field.modulus} used in F_{self.modulus}"
                )
            return value
        return self.element(value)

    def __repr__(self) -> str:
        return f"PrimeField({self.modulus})"


@dataclass(frozen=True)
class FieldElement:
    """An immutable residue in [0, q)."""

    value: int
    field: PrimeField

    def __post_init__(self) -> None:
        if not 0 <= self.value < self.field.modulus:
            raise ValueError(
                f"{self.value} is outside [0, {self.field.modulus}); "
                "build elements with PrimeField.element()"
            )

    @property
    def modulus(self) -> int:
        return self.field.modulus

    def is_zero(self) -> bool:
        return self.value == 0

    def add(self, other: Operand) -> FieldElement:
        return self._new(self.value + self.field._lift(other).value)

    def sub(self, other: Operand) -> FieldElement:
        return self._new(self.value - self.field._lift(other).value)

    def mul(self, other: Operand) -> FieldElement:
        return self._new(self.value * self.field._lift(other).value)

    def div(self, other: Operand) -> FieldElement:
        return self.mul(self.field._lift(other).inverse())

    def negate(self) -> FieldElement:
        return self._new(-self.value)

    def successor(self) -> FieldElement:
        return self._new(self.value + 1)

    def inverse(self) -> FieldElement:
        """Multiplicative inverse via the extended Euclidean algorithm."""
        q = self.modulus
        if self.value == 0:
            raise NoInverseError(f"0 has no inverse modulo {q}")
        g, x, _ = extended_gcd(self.value, q)
        if g != 1:
            raise NoInverseError(
                f"{self.value} has no inverse modulo {q} (gcd = {g})"
            )
        return self._new(x)

    def pow(self, k: Operand) -> FieldElement:
        """Square-and-multiply exponentiation.

        k may be a non-negative int or another FieldElement, in which case
        its integer residue is the exponent.
        """
        exponent = k.value if isinstance(k, FieldElement) else int(k)
        if exponent < 0:
            raise ValueError(f"Exponent must be non-negative, got {exponent}")
        return self._new(pow(self.value, exponent, self.modulus))

    def legendre(self) -> int:
        """+1 for a nonzero square, -1 for a non-square, 0 for zero."""
        if not self.field.is_prime:
            raise NonPrimeModulusError(
                f"Legendre symbol needs a prime modulus, {self.modulus} is composite"
            )
        if self.value == 0:
            return 0
        # Euler: a^((q-1)/2) is 1 or -1 for nonzero a; in F_2 it is always 1
        r = self.pow((self.modulus - 1) // 2).value
        return 1 if r == 1 else -1

    def sqrt(self) -> FieldElement:
        """One square root of this element (Tonelli-Shanks).

        The other root is sqrt().negate(). Raises NotAQuadraticResidueError
        unless legendre() == 1.
        """
        if self.legendre() != 1:
            raise NotAQuadraticResidueError(
                f"{self.value} is not a quadratic residue modulo {self.modulus}"
            )

        q = self.modulus
        if q == 2:
            return self
        alpha, s = split_two_power(q - 1)

        # smallest non-residue
        n = self.field.one
        while n.legendre() != -1:
            n = n.successor()

        b = n.pow(s)
        r = self.pow((s + 1) // 2)

        # Fix one bit of the correction exponent per round: b^correction * r
        # squared over a must land in the subgroup of order 2^(alpha-i-1).
        correction = 0
        b_acc = self.field.one
        bit = 0
        for i in range(alpha - 1):
            if i > 0:
                b_acc = b_acc.mul(b.pow((1 << (i - 1)) * bit))
            candidate = b_acc.mul(r)
            check = candidate.pow(2).div(self).pow(1 << (alpha - i - 2))
            bit = 0 if check == self.field.one else 1
            correction += bit << i
        return b.pow(correction).mul(r)

    def _new(self, value: int) -> FieldElement:
        return FieldElement(value % self.modulus, self.field)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"FieldElement({self.value} mod {self.modulus})"
