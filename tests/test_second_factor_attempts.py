from datetime import datetime, timedelta

from invoicer.models.second_factor_attempt import SecondFactorAttempt
from invoicer.models.user import User
from invoicer.services.second_factor_attempts import (
    ATTEMPT_WINDOW,
    LOCK_DURATION,
    MAX_FAILED_ATTEMPTS,
    check_lock,
    clear_attempts,
    register_failed_attempt,
)
from tests.api_client import build_session

NOW = datetime(2024, 1, 1, 12, 0, 0)


def _session_with_user():
    db = build_session()
    db.add(User(id=1, email="alice@example.com", password_hash="x", phone_number="+1", name="Alice"))
    db.commit()
    return db


def _fail(db, times, now=NOW):
    locked = False
    for _ in range(times):
        _, locked = register_failed_attempt(db, 1, now=now)
        db.commit()
    return locked


def test_lock_after_max_failed_attempts():
    db = _session_with_user()

    assert _fail(db, MAX_FAILED_ATTEMPTS - 1) is False
    assert check_lock(db, 1, now=NOW) is None

    assert _fail(db, 1) is True
    assert check_lock(db, 1, now=NOW) == NOW + LOCK_DURATION


def test_lock_expires():
    db = _session_with_user()
    _fail(db, MAX_FAILED_ATTEMPTS)

    assert check_lock(db, 1, now=NOW + LOCK_DURATION + timedelta(seconds=1)) is None


def test_failures_outside_window_start_a_new_streak():
    db = _session_with_user()
    _fail(db, MAX_FAILED_ATTEMPTS - 1)

    later = NOW + ATTEMPT_WINDOW + timedelta(minutes=1)
    assert _fail(db, 1, now=later) is False
    assert db.query(SecondFactorAttempt).one().failed_count == 1


def test_clear_attempts_removes_streak():
    db = _session_with_user()
    _fail(db, 3)

    clear_attempts(db, 1)
    db.commit()

    assert db.query(SecondFactorAttempt).count() == 0
    assert check_lock(db, 1, now=NOW) is None
