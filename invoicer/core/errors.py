"""Domain errors raised by the services and translated to HTTP by the API layer."""
from __future__ import annotations

from typing import Any


class InvoicerError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_response(self) -> dict[str, Any]:
        return {"message": self.message, "code": self.code}


class DuplicateEmail(InvoicerError):
    status_code = 400
    code = "DUPLICATE_EMAIL"
    default_message = "Email already exists"


class NotFound(InvoicerError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class InvalidCredentials(InvoicerError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class Unauthenticated(InvoicerError):
    status_code = 403
    code = "UNAUTHENTICATED"
    default_message = "No token provided."


class InvalidToken(InvoicerError):
    status_code = 401
    code = "INVALID_TOKEN"
    default_message = "Failed to authenticate token."


class InvalidCustomer(InvoicerError):
    status_code = 404
    code = "INVALID_CUSTOMER"
    default_message = "Customer not found"


class CustomerInUse(InvoicerError):
    status_code = 409
    code = "CUSTOMER_IN_USE"
    default_message = "Customer still has invoices"


class GatewayFailure(InvoicerError):
    status_code = 502
    code = "GATEWAY_FAILURE"
    default_message = "Error sending 2FA code"


class SecondFactorDisabled(InvoicerError):
    status_code = 400
    code = "SECOND_FACTOR_DISABLED"
    default_message = "2FA is currently disabled"


class InvalidChallengeCode(InvoicerError):
    status_code = 401
    code = "INVALID_2FA_CODE"
    default_message = "Invalid 2FA code"


class InvalidChallenge(InvoicerError):
    status_code = 401
    code = "INVALID_2FA_CHALLENGE"
    default_message = "2FA challenge is missing or expired. Log in again."


class TooManyChallengeAttempts(InvoicerError):
    status_code = 429
    code = "TOO_MANY_2FA_ATTEMPTS"
    default_message = "Too many invalid 2FA codes. Try again later."


class EmptyInvoice(InvoicerError):
    status_code = 400
    code = "EMPTY_INVOICE"
    default_message = "An invoice needs at least one item"
