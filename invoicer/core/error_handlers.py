import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from invoicer.core.errors import InvoicerError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Domain errors, validation errors and a catch-all, in that order."""

    @app.exception_handler(InvoicerError)
    async def invoicer_error_handler(request: Request, exc: InvoicerError):
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "%s on %s %s: %s",
            exc.code,
            request.method,
            request.url.path,
            exc.message,
            extra={"status_code": exc.status_code},
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
                "message": error.get("msg", ""),
            }
            for error in exc.errors()
        ]
        logger.info("Validation error on %s: %s", request.url.path, errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid request", "code": "VALIDATION_ERROR", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error", "code": "INTERNAL_ERROR"},
        )
