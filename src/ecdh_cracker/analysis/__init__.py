"""Attacks on the key exchange and statistics over repeated runs."""
