"""Numeric defaults for the ECDH demo."""

# -- Modulus search --
DEFAULT_MIN_MODULUS: int = 846_331
LARGE_MIN_MODULUS: int = 84_633_113

# -- Primality test --
WITNESS_STRIDE_DIVISOR: int = 100  # witness stride = n // 100

# -- Rendering --
INFINITY_TEXT: str = "(inf,inf)"

# -- Cracker --
TIMEOUT_CHECK_INTERVAL: int = 1024  # additions between deadline checks

# -- Sampling --
INT64_BOUND: int = 2**63
