"""Exception hierarchy for field, curve and protocol failures.

Every error here is a precondition violation: retrying the same call with
the same inputs fails the same way.
"""

from __future__ import annotations


class EcdhError(Exception):
    """Base class for all errors raised by ecdh_cracker."""


class InvalidPointError(EcdhError, ValueError):
    """A point does not satisfy the curve equation."""


class NoInverseError(EcdhError, ZeroDivisionError):
    """Division by zero or by an element sharing a factor with the modulus."""


class NonPrimeModulusError(EcdhError, ValueError):
    """An operation that needs a prime modulus was called on a composite one."""


class NotAQuadraticResidueError(EcdhError, ValueError):
    """Square root requested for an element with no square root."""


class SingularCurveError(EcdhError, ValueError):
    """Curve coefficients give 4a^3 + 27b^2 == 0."""


class FieldMismatchError(EcdhError, ValueError):
    """Elements from two different fields were combined."""


class ProtocolStateError(EcdhError, RuntimeError):
    """A key-exchange step was run out of order or twice."""


class CrackBoundExceeded(EcdhError, RuntimeError):
    """The brute-force search ran past its iteration bound or deadline."""

    def __init__(self, message: str, iterations: int) -> None:
        super().__init__(message)
        self.iterations = iterations
