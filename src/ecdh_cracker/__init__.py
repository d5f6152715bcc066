"""ECDH key agreement over small prime fields, and a brute-force attack on it."""

__version__ = "0.1.0"
