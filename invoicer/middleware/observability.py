from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from invoicer.core.request_context import bind_request_context, reset_request_context

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id, echoes it back and logs one summary line."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        token = bind_request_context(request_id=request_id)
        started = time.perf_counter()

        response = None
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            # the endpoint runs in another task; its user_id only reaches us via request.state
            user_id = getattr(request.state, "user_id", None)
            logger.info(
                "%s %s -> %s",
                request.method,
                request.url.path,
                response.status_code if response is not None else 500,
                extra={
                    "user_id": str(user_id) if user_id is not None else None,
                    "endpoint": request.url.path,
                    "method": request.method,
                    "status_code": response.status_code if response is not None else 500,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            reset_request_context(token)
