"""Tests for the brute-force discrete-log cracker."""

import numpy as np
import pytest

from ecdh_cracker.analysis.cracker import DiscreteLogCracker
from ecdh_cracker.core.curve import INFINITY, EllipticCurve
from ecdh_cracker.core.ecdh import KeyExchangeSession
from ecdh_cracker.core.field import PrimeField
from ecdh_cracker.utils.errors import CrackBoundExceeded


@pytest.fixture
def field():
    return PrimeField(101)


@pytest.fixture
def curve(field):
    return EllipticCurve(field, 2, 3)


@pytest.fixture
def base(curve):
    return curve.point(1, 39)


class TestRecoverSecret:
    def test_base_itself(self, curve, base):
        assert DiscreteLogCracker(curve, base).recover_secret(base) == 1

    @pytest.mark.parametrize("k", [2, 3, 10, 37, 60])
    def test_small_multiples(self, curve, base, k):
        target = curve.mult(base, k)
        recovered = DiscreteLogCracker(curve, base).recover_secret(target)
        assert curve.mult(base, recovered) == target
        assert recovered <= k

    def test_returns_smallest_exponent(self, curve, base):
        order = len(curve.points())
        target = curve.mult(base, order + 5)
        recovered = DiscreteLogCracker(curve, base).recover_secret(target)
        assert recovered <= 5
        assert curve.mult(base, recovered) == target

    def test_bound_exceeded(self, curve, base):
        # base is affine, so 2*base != base and the smallest exponent is 2
        target = curve.mult(base, 2)
        assert DiscreteLogCracker(curve, base).recover_secret(target) == 2
        cracker = DiscreteLogCracker(curve, base, max_iterations=1)
        with pytest.raises(CrackBoundExceeded) as info:
            cracker.recover_secret(target)
        assert info.value.iterations == 1

    def test_bound_is_field_modulus(self, curve, base, field):
        assert DiscreteLogCracker(curve, base).bound == field.modulus

    def test_max_iterations_tightens_bound(self, curve, base):
        assert DiscreteLogCracker(curve, base, max_iterations=10).bound == 10
        assert DiscreteLogCracker(curve, base, max_iterations=10_000).bound == 101

    def test_invalid_max_iterations(self, curve, base):
        with pytest.raises(ValueError):
            DiscreteLogCracker(curve, base, max_iterations=0)

    def test_zero_timeout_gives_up(self):
        rng = np.random.default_rng(11)
        field = PrimeField(1_000_003)
        base, curve = EllipticCurve.random_parameters(field, rng)
        target = curve.mult(base, 500_000)
        cracker = DiscreteLogCracker(curve, base, timeout=0.0)
        with pytest.raises(CrackBoundExceeded, match="Gave up"):
            cracker.recover_secret(target)


class TestCrack:
    def test_crack_reconstructs_shared_key(self, curve, base):
        pub_a = curve.mult(base, 23)
        pub_b = curve.mult(base, 41)
        result = DiscreteLogCracker(curve, base).crack(pub_a, pub_b)
        assert curve.mult(base, result.secret) == pub_a
        assert result.shared_key == curve.mult(base, 23 * 41)
        assert result.iterations == result.secret
        assert result.elapsed >= 0.0

    def test_crack_session(self):
        rng = np.random.default_rng(7)
        field = PrimeField(1009)
        session = KeyExchangeSession(field, rng)
        session.run()
        result = DiscreteLogCracker.crack_session(session)
        assert session.curve.mult(session.base, result.secret) == session.alice.public_key
        assert result.matches(session.alice)
        assert result.matches(session.bob)

    def test_crack_session_bound(self, curve, base, monkeypatch):
        monkeypatch.setattr("ecdh_cracker.core.ecdh.random_below", lambda rng, low, high: 2)
        session = KeyExchangeSession(curve.field, np.random.default_rng(3), curve=curve, base=base)
        session.run()
        assert session.alice.secret_key == 2
        assert DiscreteLogCracker.crack_session(session).secret == 2
        with pytest.raises(CrackBoundExceeded) as info:
            DiscreteLogCracker.crack_session(session, max_iterations=1)
        assert info.value.iterations == 1

    def test_infinity_shared_key(self, curve, base):
        # partner sitting at infinity gives an infinite shared key
        result = DiscreteLogCracker(curve, base).crack(curve.mult(base, 4), INFINITY)
        assert result.shared_key is INFINITY
