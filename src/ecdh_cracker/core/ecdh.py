"""Two-party elliptic-curve Diffie-Hellman key agreement.

Each party walks a fixed sequence of states; every step runs exactly once
and in order:

    CREATED -> SECRET_ASSIGNED -> CURVE_BOUND -> PUBLIC_KEY_DERIVED
            -> PARTNER_KEY_RECEIVED -> SHARED_KEY_DERIVED
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np

from ecdh_cracker.core.curve import Affine, EllipticCurve, Point
from ecdh_cracker.core.field import PrimeField
from ecdh_cracker.utils.errors import InvalidPointError, ProtocolStateError
from ecdh_cracker.utils.math_helpers import random_below


class PartyState(IntEnum):
    CREATED = 0
    SECRET_ASSIGNED = 1
    CURVE_BOUND = 2
    PUBLIC_KEY_DERIVED = 3
    PARTNER_KEY_RECEIVED = 4
    SHARED_KEY_DERIVED = 5


class KeyExchangeParty:
    """One side of the exchange.

    The secret is drawn uniformly from [1, q - 1] when the party is built.
    q stands in for the order of the base point; the true subgroup order
    is never computed.
    """

    def __init__(self, name: str, field: PrimeField, rng: np.random.Generator) -> None:
        self.name = name
        self.field = field
        self._state = PartyState.CREATED
        self._secret_key = random_below(rng, 1, field.modulus)
        self._state = PartyState.SECRET_ASSIGNED

        self.curve: EllipticCurve | None = None
        self.base: Affine | None = None
        self._public_key: Point | None = None
        self._partner_key: Point | None = None
        self._shared_key: Point | None = None

    @property
    def state(self) -> PartyState:
        return self._state

    @property
    def secret_key(self) -> int:
        """For diagnostic display only."""
        return self._secret_key

    @property
    def public_key(self) -> Point | None:
        return self._public_key

    @property
    def partner_key(self) -> Point | None:
        return self._partner_key

    @property
    def shared_key(self) -> Point | None:
        return self._shared_key

    @property
    def is_complete(self) -> bool:
        return self._state == PartyState.SHARED_KEY_DERIVED

    def bind(self, curve: EllipticCurve, base: Affine) -> None:
        self._require(PartyState.SECRET_ASSIGNED, PartyState.CURVE_BOUND)
        if curve.field != self.field:
            raise ProtocolStateError(
                f"{self.name}: curve is over F_{curve.field.modulus}, "
                f"party expects F_{self.field.modulus}"
            )
        if not curve.is_included(base):
            raise InvalidPointError(f"{self.name}: base point {base} is not on {curve}")
        self.curve = curve
        self.base = base
        self._state = PartyState.CURVE_BOUND

    def derive_public_key(self) -> Point:
        self._require(PartyState.CURVE_BOUND, PartyState.PUBLIC_KEY_DERIVED)
        assert self.curve is not None and self.base is not None
        self._public_key = self.curve.mult(self.base, self._secret_key)
        self._state = PartyState.PUBLIC_KEY_DERIVED
        return self._public_key

    def receive(self, point: Point) -> None:
        """Store the partner's public point (checked for curve membership)."""
        self._require(PartyState.PUBLIC_KEY_DERIVED, PartyState.PARTNER_KEY_RECEIVED)
        assert self.curve is not None
        if not self.curve.is_included(point):
            raise InvalidPointError(f"{self.name}: received point {point} is not on {self.curve}")
        self._partner_key = point
        self._state = PartyState.PARTNER_KEY_RECEIVED

    def send(self, target: KeyExchangeParty) -> None:
        if self._public_key is None:
            raise ProtocolStateError(f"{self.name} has no public key to send")
        target.receive(self._public_key)

    def derive_shared_key(self) -> Point:
        self._require(PartyState.PARTNER_KEY_RECEIVED, PartyState.SHARED_KEY_DERIVED)
        assert self.curve is not None and self._partner_key is not None
        self._shared_key = self.curve.mult(self._partner_key, self._secret_key)
        self._state = PartyState.SHARED_KEY_DERIVED
        return self._shared_key

    def _require(self, expected: PartyState, target: PartyState) -> None:
        if self._state != expected:
            raise ProtocolStateError(
                f"{self.name}: cannot move to {target.name} from {self._state.name} "
                f"(expected {expected.name})"
            )

    def __repr__(self) -> str:
        return f"KeyExchangeParty({self.name!r}, state={self._state.name})"


class KeyExchangeSession:
    """Alice and Bob agreeing on a shared point over one random curve.

    The curve and base point are generated once, here, unless the caller
    supplies both. Both parties bind to them and derive their public keys
    immediately; publish() and agree() finish the protocol.
    """

    def __init__(
        self,
        field: PrimeField,
        rng: np.random.Generator,
        curve: EllipticCurve | None = None,
        base: Affine | None = None,
    ) -> None:
        if (curve is None) != (base is None):
            raise ValueError("curve and base must be given together")
        if curve is None:
            base, curve = EllipticCurve.random_parameters(field, rng)
        assert base is not None

        self.field = field
        self.curve = curve
        self.base = base
        self.alice = KeyExchangeParty("alice", field, rng)
        self.bob = KeyExchangeParty("bob", field, rng)
        for party in self.parties:
            party.bind(curve, base)
            party.derive_public_key()

    @property
    def parties(self) -> tuple[KeyExchangeParty, KeyExchangeParty]:
        return (self.alice, self.bob)

    def publish(self) -> None:
        """Exchange public keys over the (unauthenticated) channel."""
        self.alice.send(self.bob)
        self.bob.send(self.alice)

    def agree(self) -> None:
        self.alice.derive_shared_key()
        self.bob.derive_shared_key()

    def run(self) -> None:
        self.publish()
        self.agree()

    @property
    def is_complete(self) -> bool:
        return all(p.is_complete for p in self.parties)

    def shared_keys_match(self) -> bool:
        return self.is_complete and self.alice.shared_key == self.bob.shared_key

    def status_rows(self) -> list[tuple[str, int, str, str]]:
        """(name, secret, public key, shared key) per party, for reporting."""
        rows = []
        for party in self.parties:
            shared = "-" if party.shared_key is None else str(party.shared_key)
            rows.append((party.name, party.secret_key, str(party.public_key), shared))
        return rows
