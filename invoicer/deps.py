# invoicer/deps.py
"""Access control for every customer/invoice route.

NoToken              -> Unauthenticated (403)
Token, bad or expired -> InvalidToken (401)
Token, valid         -> request bound to its user_id
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from invoicer.core.database import get_db
from invoicer.core.errors import InvalidToken, NotFound, Unauthenticated
from invoicer.core.request_context import bind_request_context
from invoicer.models.user import User
from invoicer.services.credentials import get_user
from invoicer.services.sessions import verify_session_token

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token part, "" for a malformed header, None when absent."""
    if authorization is None or not authorization.strip():
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return ""
    return token.strip()


def get_current_user_id(request: Request) -> int:
    token = _extract_bearer_token(request.headers.get("authorization"))
    if token is None:
        logger.info("Request without token on %s %s", request.method, request.url.path)
        raise Unauthenticated()
    if token == "":
        logger.warning("Malformed Authorization header on %s %s", request.method, request.url.path)
        raise InvalidToken()

    user_id = verify_session_token(token)
    request.state.user_id = user_id
    bind_request_context(user_id=str(user_id))
    return user_id


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    try:
        return get_user(db, user_id)
    except NotFound as exc:
        # token outlived its user
        raise InvalidToken() from exc
