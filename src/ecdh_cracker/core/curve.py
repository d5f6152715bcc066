"""Elliptic curve y^2 = x^3 + ax + b over a prime field.

Points are a tagged variant: Affine(x, y) for ordinary points and the
INFINITY singleton for the group identity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

from ecdh_cracker.core.field import FieldElement, PrimeField
from ecdh_cracker.utils.constants import INFINITY_TEXT
from ecdh_cracker.utils.errors import InvalidPointError, SingularCurveError
from ecdh_cracker.utils.math_helpers import random_below


class Infinity:
    """The point at infinity. Use the INFINITY singleton."""

    _instance: Infinity | None = None

    def __new__(cls) -> Infinity:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    is_infinity = True

    def negate(self) -> Infinity:
        return self

    def __str__(self) -> str:
        return INFINITY_TEXT

    def __repr__(self) -> str:
        return "INFINITY"

    def __reduce__(self) -> str:
        return "INFINITY"


INFINITY = Infinity()


@dataclass(frozen=True)
class Affine:
    """A finite point (x, y). Curve membership is checked by the curve."""

    x: FieldElement
    y: FieldElement

    is_infinity = False

    def negate(self) -> Affine:
        return Affine(self.x, self.y.negate())

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


Point = Union[Affine, Infinity]


class EllipticCurve:
    """Short Weierstrass curve y^2 = x^3 + ax + b over F_q.

    Construction rejects singular coefficients (4a^3 + 27b^2 == 0).
    """

    def __init__(self, field: PrimeField, a: int | FieldElement, b: int | FieldElement) -> None:
        self.field = field
        self.a = field._lift(a)
        self.b = field._lift(b)
        if self.discriminant().is_zero():
            raise SingularCurveError(
                f"Curve with a={self.a}, b={self.b} is singular over F_{field.modulus}"
            )

    @staticmethod
    def _discriminant(a: FieldElement, b: FieldElement) -> FieldElement:
        return a.pow(3).mul(4).add(b.pow(2).mul(27))

    def discriminant(self) -> FieldElement:
        """4a^3 + 27b^2; nonzero for every constructed curve."""
        return self._discriminant(self.a, self.b)

    def lhs(self, y: FieldElement) -> FieldElement:
        return y.pow(2)

    def rhs(self, x: FieldElement) -> FieldElement:
        return x.pow(3).add(self.a.mul(x)).add(self.b)

    def is_included(self, P: Point) -> bool:
        if P.is_infinity:
            return True
        if P.x.field != self.field or P.y.field != self.field:
            return False
        return self.lhs(P.y) == self.rhs(P.x)

    def point(self, x: int | FieldElement, y: int | FieldElement) -> Affine:
        """Build an affine point, rejecting coordinates off the curve."""
        P = Affine(self.field._lift(x), self.field._lift(y))
        self._require_included(P)
        return P

    def lift_x(self, x: int | FieldElement) -> Affine:
        """A point with the given x coordinate (the other one is its negation)."""
        x = self.field._lift(x)
        y_squared = self.rhs(x)
        if y_squared.is_zero():
            return Affine(x, y_squared)
        return Affine(x, y_squared.sqrt())

    def points(self) -> list[Point]:
        """Every point of the curve, INFINITY first. Only sensible for small q."""
        pts: list[Point] = [INFINITY]
        for xv in range(self.field.modulus):
            x = self.field.element(xv)
            y_squared = self.rhs(x)
            symbol = y_squared.legendre()
            if symbol == 0:
                pts.append(Affine(x, y_squared))
            elif symbol == 1:
                y = y_squared.sqrt()
                if y == y.negate():
                    pts.append(Affine(x, y))
                else:
                    pts.extend(sorted((Affine(x, y), Affine(x, y.negate())), key=lambda p: p.y.value))
        return pts

    def negate(self, P: Point) -> Point:
        return P.negate()

    def add(self, P: Point, Q: Point) -> Point:
        """Group law. Both points must lie on the curve."""
        self._require_included(P)
        self._require_included(Q)
        if P.is_infinity:
            return Q
        if Q.is_infinity:
            return P
        if P == Q.negate():
            return INFINITY
        if P == Q:
            slope = P.x.pow(2).mul(3).add(self.a).div(P.y.mul(2))
        else:
            slope = Q.y.sub(P.y).div(Q.x.sub(P.x))
        x_r = slope.pow(2).sub(P.x).sub(Q.x)
        y_r = slope.mul(P.x.sub(x_r)).sub(P.y)
        return Affine(x_r, y_r)

    def mult(self, P: Point, n: int) -> Point:
        """n * P by double-and-add, walking the bits of n from the lowest."""
        self._require_included(P)
        n = int(n)
        if n < 0:
            raise ValueError(f"Scalar must be non-negative, got {n}")
        result: Point = INFINITY
        addend = P
        while n and not addend.is_infinity:
            if n & 1:
                result = self.add(result, addend)
            addend = self.add(addend, addend)
            n >>= 1
        return result

    @classmethod
    def random_parameters(
        cls, field: PrimeField, rng: np.random.Generator
    ) -> tuple[Affine, EllipticCurve]:
        """Draw a random non-singular curve together with a point on it.

        x, y and a are uniform in F_q and b is solved for so that (x, y)
        lies on the curve; singular draws are discarded.
        """
        q = field.modulus
        while True:
            x = field.element(random_below(rng, 0, q))
            y = field.element(random_below(rng, 0, q))
            a = field.element(random_below(rng, 0, q))
            b = y.pow(2).sub(x.pow(3).add(a.mul(x)))
            if not cls._discriminant(a, b).is_zero():
                return Affine(x, y), cls(field, a, b)

    def _require_included(self, P: Point) -> None:
        if not self.is_included(P):
            raise InvalidPointError(f"Point {P} is not on {self}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EllipticCurve):
            return NotImplemented
        return (self.field, self.a, self.b) == (other.field, other.a, other.b)

    def __hash__(self) -> int:
        return hash((self.field, self.a, self.b))

    def __str__(self) -> str:
        return f"y^2 = x^3 + {self.a}*x + {self.b} over F_{self.field.modulus}"

    def __repr__(self) -> str:
        return f"EllipticCurve(q={self.field.modulus}, a={self.a}, b={self.b})"
