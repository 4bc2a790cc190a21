"""Login state machine.

Without 2FA: PasswordVerified -> SessionIssued.
With 2FA:    PasswordVerified -> ChallengeSent -> ChallengeVerified -> SessionIssued.
A verified password alone never yields a session while 2FA is enabled; it
yields a short-lived challenge token that verify-2fa requires.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from invoicer.core import config
from invoicer.core.errors import InvalidChallengeCode, SecondFactorDisabled, TooManyChallengeAttempts
from invoicer.services import credentials, second_factor_attempts
from invoicer.services.second_factor import generate_challenge_code, verify_challenge_code
from invoicer.services.sessions import issue_challenge_token, issue_session_token, verify_challenge_token
from invoicer.sms.service import SmsService

logger = logging.getLogger(__name__)

CHALLENGE_SENT_MESSAGE = "2FA code sent to your phone"


@dataclass
class LoginResult:
    user_id: int
    token: Optional[str] = None
    challenge_token: Optional[str] = None

    @property
    def challenge_sent(self) -> bool:
        return self.challenge_token is not None


def login(db: Session, sms: SmsService, *, email: str, password: str) -> LoginResult:
    user = credentials.verify_password(db, email=email, password=password)

    if not config.ENABLE_2FA:
        logger.info("Session issued user_id=%s", user.id)
        return LoginResult(user_id=user.id, token=issue_session_token(user.id))

    code = generate_challenge_code(user.two_factor_secret)
    # raises GatewayFailure; no token is issued on that path
    sms.send_text(to_phone=user.phone_number, text=f"Your 2FA code is: {code}")
    logger.info("2FA challenge sent user_id=%s", user.id)
    return LoginResult(user_id=user.id, challenge_token=issue_challenge_token(user.id))


def verify_second_factor(
    db: Session,
    *,
    user_id: int,
    code: str,
    challenge_token: Optional[str],
    now: Optional[datetime] = None,
) -> str:
    """ChallengeSent -> SessionIssued. Needs the challenge token handed out by ``login``."""
    if not config.ENABLE_2FA:
        raise SecondFactorDisabled()

    verify_challenge_token(challenge_token, user_id)
    user = credentials.get_user(db, user_id)

    locked_until = second_factor_attempts.check_lock(db, user.id, now=now)
    if locked_until is not None:
        logger.warning("2FA locked user_id=%s until=%s", user.id, locked_until.isoformat())
        raise TooManyChallengeAttempts()

    if not verify_challenge_code(user.two_factor_secret, code):
        _, locked = second_factor_attempts.register_failed_attempt(db, user.id, now=now)
        db.commit()
        logger.warning("Failed 2FA verification user_id=%s locked=%s", user.id, locked)
        raise InvalidChallengeCode()

    second_factor_attempts.clear_attempts(db, user.id)
    db.commit()
    logger.info("Session issued after 2FA user_id=%s", user.id)
    return issue_session_token(user.id)
