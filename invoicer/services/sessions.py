"""Session Issuer: stateless signed tokens.

There is no revocation list. A token stays valid until ``exp``; rotating
``JWT_SECRET_KEY`` invalidates every outstanding token at once.

Two kinds of token share the signing key. Session tokens carry no
``purpose`` claim. Challenge tokens carry ``purpose="2fa"``, live for a few
minutes, and only prove that a password login for ``sub`` sent a code.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from invoicer.core import config
from invoicer.core.errors import InvalidChallenge, InvalidToken, Unauthenticated

logger = logging.getLogger(__name__)

CHALLENGE_PURPOSE = "2fa"


def _encode(
    user_id: int,
    *,
    now: Optional[datetime],
    lifetime_minutes: int,
    secret_key: Optional[str],
    extra: Optional[Dict[str, Any]] = None,
) -> str:
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(minutes=lifetime_minutes)

    # "sub" must be a string for python-jose
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "user_id": int(user_id),
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    payload.update(extra or {})
    return jwt.encode(payload, secret_key or config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def _decode(token: str, secret_key: Optional[str]) -> Dict[str, Any]:
    return jwt.decode(token, secret_key or config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def issue_session_token(
    user_id: int,
    *,
    now: Optional[datetime] = None,
    expires_minutes: Optional[int] = None,
    secret_key: Optional[str] = None,
) -> str:
    lifetime = expires_minutes if expires_minutes is not None else config.SESSION_EXPIRE_MINUTES
    return _encode(user_id, now=now, lifetime_minutes=lifetime, secret_key=secret_key)


def issue_challenge_token(
    user_id: int,
    *,
    now: Optional[datetime] = None,
    secret_key: Optional[str] = None,
) -> str:
    return _encode(
        user_id,
        now=now,
        lifetime_minutes=config.CHALLENGE_EXPIRE_MINUTES,
        secret_key=secret_key,
        extra={"purpose": CHALLENGE_PURPOSE},
    )


def _extract_user_id(payload: Dict[str, Any]) -> Optional[int]:
    raw = payload.get("sub", payload.get("user_id"))
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


def verify_session_token(token: Optional[str], *, secret_key: Optional[str] = None) -> int:
    """Return the user id carried by ``token``."""
    if not token:
        raise Unauthenticated()

    try:
        payload = _decode(token, secret_key)
    except ExpiredSignatureError as exc:
        logger.warning("Rejected expired session token")
        raise InvalidToken() from exc
    except JWTError as exc:
        logger.warning("Rejected session token with bad signature or format")
        raise InvalidToken() from exc

    if payload.get("purpose") is not None:
        logger.warning("Rejected %s token used as a session", payload.get("purpose"))
        raise InvalidToken()

    user_id = _extract_user_id(payload)
    if user_id is None:
        logger.warning("Rejected session token without subject")
        raise InvalidToken()
    return user_id


def verify_challenge_token(token: Optional[str], user_id: int, *, secret_key: Optional[str] = None) -> None:
    if not token:
        logger.warning("2FA verification without challenge token user_id=%s", user_id)
        raise InvalidChallenge()

    try:
        payload = _decode(token, secret_key)
    except JWTError as exc:
        # ExpiredSignatureError included
        logger.warning("Rejected challenge token user_id=%s", user_id)
        raise InvalidChallenge() from exc

    if payload.get("purpose") != CHALLENGE_PURPOSE or _extract_user_id(payload) != int(user_id):
        logger.warning("Challenge token does not match user_id=%s", user_id)
        raise InvalidChallenge()
