"""Per-request identifiers visible to every log line emitted while serving it."""
from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    request_id: Optional[str] = None
    user_id: Optional[str] = None


_EMPTY = RequestContext()
_CURRENT: ContextVar[RequestContext] = ContextVar("request_context", default=_EMPTY)


def current_request_context() -> RequestContext:
    return _CURRENT.get()


def bind_request_context(**fields: Optional[str]) -> Token:
    """Layer non-None ``fields`` over the current context; undo with ``reset_request_context``."""
    changes = {name: value for name, value in fields.items() if value is not None}
    return _CURRENT.set(replace(_CURRENT.get(), **changes))


def reset_request_context(token: Optional[Token] = None) -> None:
    if token is None:
        _CURRENT.set(_EMPTY)
    else:
        _CURRENT.reset(token)
