from __future__ import annotations

import time
from typing import Optional

import pyotp

from invoicer.core import config

TOTP_DIGITS = 6
TOTP_INTERVAL_SECONDS = 30


def generate_secret() -> str:
    """Fresh base32 secret (32 chars / 160 bits)."""
    return pyotp.random_base32(length=32)


def _totp(secret: str) -> pyotp.TOTP:
    return pyotp.TOTP(secret, digits=TOTP_DIGITS, interval=TOTP_INTERVAL_SECONDS)


def generate_challenge_code(secret: str, *, at: Optional[float] = None) -> str:
    return _totp(secret).at(at if at is not None else time.time())


def verify_challenge_code(
    secret: str,
    code: str,
    *,
    at: Optional[float] = None,
    valid_window: Optional[int] = None,
) -> bool:
    if not secret or not code:
        return False
    window = config.TOTP_VALID_WINDOW if valid_window is None else valid_window
    return _totp(secret).verify(
        code.strip(),
        for_time=at if at is not None else time.time(),
        valid_window=window,
    )
