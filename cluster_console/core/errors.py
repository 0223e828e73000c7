"""
Error taxonomy for the authorization core.

Validation outcomes are returned as ``ValidationResult`` values; exceptions
are reserved for failures that abort a flow (a rejected login, a duplicate
caught by the store constraint).
"""
import enum
from typing import Optional

from pydantic import BaseModel


class ErrorKind(str, enum.Enum):
    USER_NOT_FOUND = "UserNotFound"
    ROLE_NOT_FOUND = "RoleNotFound"
    ILLEGAL_OPERATION = "IllegalOperation"
    DUPLICATE_BINDING = "DuplicateBinding"
    DUPLICATE_ROLE = "DuplicateRole"
    AUTHENTICATION_FAILED = "AuthenticationFailed"
    MISCONFIGURED_AUTO_ROLE = "MisconfiguredAutoRole"


class ValidationResult(BaseModel):
    """Outcome of an authorization check."""
    ok: bool
    message: str
    error: Optional[ErrorKind] = None
    user_id: Optional[int] = None
    role_id: Optional[int] = None

    @classmethod
    def success(cls, message: str, **kwargs) -> "ValidationResult":
        return cls(ok=True, message=message, **kwargs)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> "ValidationResult":
        return cls(ok=False, message=message, error=error)


class ConsoleError(Exception):
    """Base class for errors raised out of the authorization core."""

    kind: ErrorKind

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class AuthenticationFailed(ConsoleError):
    kind = ErrorKind.AUTHENTICATION_FAILED


class DuplicateBinding(ConsoleError):
    kind = ErrorKind.DUPLICATE_BINDING


class DuplicateRole(ConsoleError):
    kind = ErrorKind.DUPLICATE_ROLE
