"""Identifier helpers for games and players."""

from __future__ import annotations

import secrets
import time


RANDOM_BITS = 52
_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Generate an opaque id from the current millisecond time plus a random suffix."""
    millis = time.time_ns() // 1_000_000
    return _base36(millis) + _base36(secrets.randbits(RANDOM_BITS))
