"""Lockout after repeated wrong 2FA codes.

Eight failures inside ten minutes lock the user out of ``verify-2fa`` for
ten minutes. A correct code clears the streak.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from invoicer.models.second_factor_attempt import SecondFactorAttempt

MAX_FAILED_ATTEMPTS = 8
ATTEMPT_WINDOW = timedelta(minutes=10)
LOCK_DURATION = timedelta(minutes=10)


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_attempt(db: Session, user_id: int) -> Optional[SecondFactorAttempt]:
    return db.query(SecondFactorAttempt).filter(SecondFactorAttempt.user_id == user_id).first()


def is_locked(attempt: SecondFactorAttempt, now: Optional[datetime] = None) -> bool:
    now = now or _now()
    if attempt.locked_until is None:
        return False
    return attempt.locked_until > now


def check_lock(db: Session, user_id: int, *, now: Optional[datetime] = None) -> Optional[datetime]:
    """``locked_until`` while the user is locked out, else None."""
    attempt = get_attempt(db, user_id)
    if attempt is None or not is_locked(attempt, now):
        return None
    return attempt.locked_until


def register_failed_attempt(
    db: Session, user_id: int, *, now: Optional[datetime] = None
) -> Tuple[SecondFactorAttempt, bool]:
    now = now or _now()
    attempt = get_attempt(db, user_id)
    if attempt is None:
        attempt = SecondFactorAttempt(
            user_id=user_id,
            failed_count=1,
            first_failed_at=now,
            last_failed_at=now,
        )
        db.add(attempt)
    else:
        if attempt.first_failed_at is None or (now - attempt.first_failed_at) > ATTEMPT_WINDOW:
            attempt.failed_count = 0
            attempt.first_failed_at = now
            attempt.locked_until = None
        attempt.failed_count += 1
        attempt.last_failed_at = now

    locked = attempt.failed_count >= MAX_FAILED_ATTEMPTS
    if locked:
        attempt.locked_until = now + LOCK_DURATION
    return attempt, locked


def clear_attempts(db: Session, user_id: int) -> None:
    attempt = get_attempt(db, user_id)
    if attempt is not None:
        db.delete(attempt)
