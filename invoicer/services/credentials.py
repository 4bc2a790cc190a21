"""Credential Service: signup, password check and user lookup."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from invoicer.core.errors import DuplicateEmail, InvalidCredentials, NotFound
from invoicer.models.user import User
from invoicer.services.passwords import hash_password, verify_password as check_password
from invoicer.services.second_factor import generate_secret

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound("User not found")
    return user


def register(db: Session, *, email: str, password: str, phone_number: str, name: str) -> User:
    normalized_email = normalize_email(email)
    if get_user_by_email(db, normalized_email) is not None:
        raise DuplicateEmail()

    # generated for everyone, even while 2FA is switched off
    user = User(
        email=normalized_email,
        password_hash=hash_password(password),
        phone_number=(phone_number or "").strip(),
        name=(name or "").strip(),
        two_factor_secret=generate_secret(),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # lost a race against a concurrent signup with the same email
        db.rollback()
        raise DuplicateEmail() from exc
    db.refresh(user)

    logger.info("User registered id=%s", user.id)
    return user


def verify_password(db: Session, *, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if user is None:
        raise NotFound("User not found")
    if not check_password(password, user.password_hash):
        logger.warning("Failed login: wrong password user_id=%s", user.id)
        raise InvalidCredentials()
    return user
