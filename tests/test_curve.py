"""Tests for curve points and the elliptic-curve group law.

Point arithmetic is cross-checked against the ecdsa package's reference
implementation of short Weierstrass curves.
"""

import pickle

import numpy as np
import pytest
from ecdsa.ellipticcurve import INFINITY as ECDSA_INFINITY
from ecdsa.ellipticcurve import CurveFp, Point as EcdsaPoint

from ecdh_cracker.core.curve import INFINITY, Affine, EllipticCurve, Infinity
from ecdh_cracker.core.field import PrimeField
from ecdh_cracker.utils.errors import (
    InvalidPointError,
    NotAQuadraticResidueError,
    SingularCurveError,
)


@pytest.fixture
def field():
    return PrimeField(101)


@pytest.fixture
def curve(field):
    return EllipticCurve(field, 2, 3)


@pytest.fixture
def base(curve):
    return curve.point(1, 39)


def to_reference(curve, P):
    if P is INFINITY:
        return ECDSA_INFINITY
    ref_curve = CurveFp(curve.field.modulus, curve.a.value, curve.b.value)
    return EcdsaPoint(ref_curve, P.x.value, P.y.value)


def same_point(P, ref):
    if P is INFINITY:
        return ref == ECDSA_INFINITY
    return ref != ECDSA_INFINITY and (P.x.value, P.y.value) == (ref.x(), ref.y())


class TestPoints:
    def test_infinity_singleton(self):
        assert Infinity() is INFINITY
        assert pickle.loads(pickle.dumps(INFINITY)) is INFINITY

    def test_infinity_render(self):
        assert str(INFINITY) == "(inf,inf)"

    def test_affine_render(self, base):
        assert str(base) == "(1,39)"

    def test_negate(self, field, base):
        assert base.negate() == Affine(field(1), field(62))
        assert INFINITY.negate() is INFINITY

    def test_affine_never_equals_infinity(self, base):
        assert base != INFINITY
        assert not base.is_infinity
        assert INFINITY.is_infinity


class TestCurveConstruction:
    def test_non_singular(self, curve):
        # 4*8 + 27*9 = 275 = 73 mod 101
        assert curve.discriminant().value == 73

    def test_singular_rejected(self, field):
        with pytest.raises(SingularCurveError):
            EllipticCurve(field, 0, 0)

    def test_singular_with_nonzero_coefficients(self, field):
        # a = -3, b = 2: 4*(-27) + 27*4 = 0
        with pytest.raises(SingularCurveError):
            EllipticCurve(field, -3, 2)

    def test_str(self, curve):
        assert str(curve) == "y^2 = x^3 + 2*x + 3 over F_101"

    def test_equality(self, field, curve):
        assert curve == EllipticCurve(field, 2, 3)
        assert curve != EllipticCurve(field, 2, 4)


class TestMembership:
    def test_base_included(self, curve, base):
        assert curve.is_included(base)

    def test_infinity_included(self, curve):
        assert curve.is_included(INFINITY)

    def test_off_curve(self, curve, field):
        assert not curve.is_included(Affine(field(1), field(40)))

    def test_point_rejects_off_curve(self, curve):
        with pytest.raises(InvalidPointError):
            curve.point(1, 40)

    def test_foreign_field_point(self, curve):
        other = PrimeField(103)
        assert not curve.is_included(Affine(other(1), other(39)))


class TestLiftAndEnumerate:
    def test_lift_x(self, curve, field):
        P = curve.lift_x(1)
        assert P.y in (field(39), field(62))
        assert curve.is_included(P)

    def test_lift_x_non_residue(self, curve):
        # rhs(0) = 3, a non-residue mod 101
        with pytest.raises(NotAQuadraticResidueError):
            curve.lift_x(0)

    def test_points_all_included(self, curve):
        pts = curve.points()
        assert pts[0] is INFINITY
        assert all(curve.is_included(p) for p in pts)
        assert len(set(pts[1:])) == len(pts) - 1

    def test_points_match_brute_force(self, curve):
        q = curve.field.modulus
        expected = {
            (x, y) for x in range(q) for y in range(q)
            if (y * y - (x**3 + 2 * x + 3)) % q == 0
        }
        got = {(p.x.value, p.y.value) for p in curve.points()[1:]}
        assert got == expected

    def test_points_over_binary_field(self):
        # y = -y in F_2, so each x contributes at most one point
        f2 = PrimeField(2)
        curve = EllipticCurve(f2, 1, 1)
        assert curve.points() == [INFINITY, Affine(f2(0), f2(1)), Affine(f2(1), f2(1))]
        base = curve.point(1, 1)
        assert curve.add(base, base) is INFINITY

    def test_hasse_bound(self, curve):
        q = curve.field.modulus
        assert abs(len(curve.points()) - (q + 1)) <= 2 * q**0.5


class TestAdd:
    def test_identity(self, curve, base):
        assert curve.add(base, INFINITY) == base
        assert curve.add(INFINITY, base) == base
        assert curve.add(INFINITY, INFINITY) is INFINITY

    def test_inverse(self, curve, base):
        assert curve.add(base, base.negate()) is INFINITY

    def test_commutative(self, curve):
        pts = curve.points()[1:20]
        for P in pts:
            for Q in pts:
                assert curve.add(P, Q) == curve.add(Q, P)

    def test_closure(self, curve):
        pts = curve.points()
        for P in pts[:15]:
            for Q in pts[-15:]:
                assert curve.is_included(curve.add(P, Q))

    def test_associative(self, curve):
        pts = curve.points()[1:12]
        for P in pts:
            for Q in pts:
                R = pts[-1]
                assert curve.add(curve.add(P, Q), R) == curve.add(P, curve.add(Q, R))

    def test_doubling_matches_reference(self, curve, base):
        doubled = curve.add(base, base)
        assert same_point(doubled, to_reference(curve, base).double())

    def test_two_torsion_point_doubles_to_infinity(self, curve):
        # x = -1 is a root of x^3 + 2x + 3
        P = curve.point(100, 0)
        assert curve.add(P, P) is INFINITY
        assert curve.mult(P, 3) == P

    def test_matches_reference(self, curve):
        pts = curve.points()[1:]
        for P in pts[:25]:
            for Q in pts[25:50]:
                ref = to_reference(curve, P) + to_reference(curve, Q)
                assert same_point(curve.add(P, Q), ref)

    def test_rejects_off_curve(self, curve, field, base):
        bad = Affine(field(1), field(40))
        with pytest.raises(InvalidPointError):
            curve.add(base, bad)
        with pytest.raises(InvalidPointError):
            curve.add(bad, INFINITY)


class TestMult:
    def test_zero(self, curve, base):
        assert curve.mult(base, 0) is INFINITY

    def test_one(self, curve, base):
        assert curve.mult(base, 1) == base

    def test_two(self, curve, base):
        assert curve.mult(base, 2) == curve.add(base, base)

    def test_infinity(self, curve):
        assert curve.mult(INFINITY, 12345) is INFINITY

    def test_repeated_addition(self, curve, base):
        acc = INFINITY
        for k in range(1, 150):
            acc = curve.add(acc, base)
            assert curve.mult(base, k) == acc

    def test_distributes_over_scalar_addition(self, curve, base):
        for m, n in [(0, 5), (3, 4), (17, 29), (64, 1), (100, 250)]:
            assert curve.mult(base, m + n) == curve.add(curve.mult(base, m), curve.mult(base, n))

    def test_matches_reference(self, curve, base):
        # accumulate with chord additions only; never doubles a 2-torsion point
        step = to_reference(curve, base)
        ref = ECDSA_INFINITY
        for k in range(1, 300):
            ref = ref + step
            assert same_point(curve.mult(base, k), ref)

    def test_group_order_annihilates(self, curve, base):
        order = len(curve.points())
        assert curve.mult(base, order) is INFINITY

    def test_large_scalar(self, curve, base):
        order = len(curve.points())
        k = 2**200 + 3
        assert curve.mult(base, k) == curve.mult(base, k % order)

    def test_negative_rejected(self, curve, base):
        with pytest.raises(ValueError):
            curve.mult(base, -1)

    def test_rejects_off_curve(self, curve, field):
        with pytest.raises(InvalidPointError):
            curve.mult(Affine(field(1), field(40)), 3)


class TestRandomParameters:
    def test_base_on_curve(self):
        rng = np.random.default_rng(42)
        field = PrimeField(10_007)
        for _ in range(20):
            base, curve = EllipticCurve.random_parameters(field, rng)
            assert curve.is_included(base)
            assert not curve.discriminant().is_zero()
            assert curve.field == field

    def test_reproducible(self):
        field = PrimeField(10_007)
        first = EllipticCurve.random_parameters(field, np.random.default_rng(5))
        second = EllipticCurve.random_parameters(field, np.random.default_rng(5))
        assert first == second

    def test_tiny_field_retries_singular(self):
        rng = np.random.default_rng(1)
        field = PrimeField(5)
        for _ in range(30):
            base, curve = EllipticCurve.random_parameters(field, rng)
            assert curve.is_included(base)
            assert not curve.discriminant().is_zero()
