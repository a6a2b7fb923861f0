"""
core/errors.py -- Service-level error kinds.

Every failure the account workflow reports to a caller is one of the classes
below. Each carries a stable `code` (the kind name returned to clients), a
human-readable message, and the HTTP status the API layer maps it to. The
service layer raises them; api/main.py has a single exception handler that
turns any AccountError into the standard error envelope.

Layer rule: no imports from api/, auth/ or accounts/.
"""

from __future__ import annotations


class AccountError(Exception):
    """Base class for all errors surfaced to API clients."""

    code: str = "AccountError"
    status_code: int = 500

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "detail": self.detail}


class InvalidInput(AccountError):
    """Malformed email, short password, unknown area code, malformed verification code."""

    code = "InvalidInput"
    status_code = 400


class NotFound(AccountError):
    code = "NotFound"
    status_code = 404


class BadCredentials(AccountError):
    """Unknown email OR wrong password. The two cases are deliberately identical."""

    code = "BadCredentials"
    status_code = 401


class Unverified(AccountError):
    code = "Unverified"
    status_code = 401


class InvalidToken(AccountError):
    """Signature mismatch, malformed structure, wrong token kind, or expiry."""

    code = "InvalidToken"
    status_code = 401


class MailDeliveryError(AccountError):
    code = "MailDeliveryError"
    status_code = 502
