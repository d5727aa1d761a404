"""
RideHail - Authentication Errors

Token failures are distinguishable by reason so the gate can answer
with a reason-specific 401. Credential failures belong to the
registration/login flow.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import status

from ridehail.errors import AppError, InternalError


class TokenErrorReason(str, Enum):
    MISSING = "missing"
    EXPIRED = "expired"
    INVALID = "invalid"


class TokenError(AppError):
    """Base class for rejected access tokens."""

    status_code = status.HTTP_401_UNAUTHORIZED
    reason: TokenErrorReason = TokenErrorReason.INVALID
    message = "Invalid token"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status_code,
            "auth": False,
            "success": False,
            "failed": True,
            "message": self.message,
        }


class MissingTokenError(TokenError):
    reason = TokenErrorReason.MISSING
    message = "Authentication failed. Token not found"


class ExpiredTokenError(TokenError):
    reason = TokenErrorReason.EXPIRED
    message = "Token expired. Please log in again."


class InvalidTokenError(TokenError):
    """Signature mismatch, malformed token, or unsupported algorithm."""

    reason = TokenErrorReason.INVALID
    message = "Invalid token"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        super().__init__(message)
        # Server-side diagnostic, never sent to the client
        self.detail = detail


class CredentialError(AppError):
    """Registration or login could not proceed with the given credentials."""


class DuplicateAccountError(CredentialError):
    status_code = status.HTTP_409_CONFLICT
    message = "Account already exists"


class InvalidCredentialsError(CredentialError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid email or password"


class AccountNotFoundError(CredentialError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Account not found"


class PasswordHashingError(InternalError):
    """bcrypt could not produce a hash."""


class TokenSigningError(InternalError):
    """A token could not be signed."""
