from __future__ import annotations

from typing import Any, Dict, Optional


class LedgerError(RuntimeError):
    """Base class for every failure surfaced by the ledger.

    A failure is terminal for the call that raised it and is always raised
    before any state is written.
    """

    code = "ledger_error"
    status_code = 500

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: Dict[str, Any] = {k: v for k, v in detail.items() if v is not None}

    def to_payload(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


class Unauthorized(LedgerError):
    code = "unauthorized"
    status_code = 403


class NotVerifiedDoctor(Unauthorized):
    code = "not_verified_doctor"


class AccessDenied(LedgerError):
    code = "access_denied"
    status_code = 403


class NotFound(LedgerError):
    code = "not_found"
    status_code = 404


class NotRegistered(NotFound):
    code = "not_registered"


class AlreadyExists(LedgerError):
    code = "already_exists"
    status_code = 409


class AlreadyRegistered(AlreadyExists):
    code = "already_registered"


class AlreadyAuthorized(AlreadyExists):
    code = "already_authorized"


class InvalidArgument(LedgerError):
    code = "invalid_argument"
    status_code = 400


class InvalidBirthYear(InvalidArgument):
    code = "invalid_birth_year"


class InvalidPrincipal(InvalidArgument):
    code = "invalid_principal"


class InactiveAccount(LedgerError):
    code = "inactive_account"
    status_code = 409


def error_from_code(code: str, message: Optional[str] = None) -> LedgerError:
    """Rebuild an error from its wire code (used by the HTTP client)."""
    for cls in _ALL_ERRORS:
        if cls.code == code:
            return cls(message or code)
    return LedgerError(message or code)


_ALL_ERRORS = (
    Unauthorized,
    NotVerifiedDoctor,
    AccessDenied,
    NotFound,
    NotRegistered,
    AlreadyExists,
    AlreadyRegistered,
    AlreadyAuthorized,
    InvalidArgument,
    InvalidBirthYear,
    InvalidPrincipal,
    InactiveAccount,
)


__all__ = [
    "LedgerError",
    "Unauthorized",
    "NotVerifiedDoctor",
    "AccessDenied",
    "NotFound",
    "NotRegistered",
    "AlreadyExists",
    "AlreadyRegistered",
    "AlreadyAuthorized",
    "InvalidArgument",
    "InvalidBirthYear",
    "InvalidPrincipal",
    "InactiveAccount",
    "error_from_code",
]
