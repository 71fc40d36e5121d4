"""
Short unique identifiers for external-facing keys (e.g. post ids).

Each token encodes 64 bits from the OS random source in base62, giving at most
11 URL-safe characters. There is no shared counter or lock: `os.urandom` is
safe to call from any number of threads, so concurrent callers never block
each other. Uniqueness is probabilistic.
"""

from __future__ import annotations

import os

ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
RANDOM_BYTES = 8
MAX_LENGTH = 11  # ceil(64 / log2(62))


def encode_base62(number: int) -> str:
    """Encode a non-negative integer with the base62 alphabet."""
    if number < 0:
        raise ValueError("number must be non-negative")
    if number == 0:
        return ALPHABET[0]
    digits = []
    while number:
        number, rem = divmod(number, 62)
        digits.append(ALPHABET[rem])
    return "".join(reversed(digits))


def generate_short_id() -> str:
    """Return a short, probabilistically unique base62 token."""
    return encode_base62(int.from_bytes(os.urandom(RANDOM_BYTES), "big"))


__all__ = ["ALPHABET", "MAX_LENGTH", "encode_base62", "generate_short_id"]
