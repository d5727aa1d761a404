"""
RideHail - Authentication Package

Credential and session-token subsystem:
- bcrypt password hashing
- Signed, time-bounded JWT access tokens
- HttpOnly session cookie policy
- Cookie-gated FastAPI dependency for protected routes
"""

from ridehail.auth.cookies import SessionCookiePolicy
from ridehail.auth.dependencies import get_current_identity
from ridehail.auth.exceptions import (
    ExpiredTokenError,
    InvalidTokenError,
    MissingTokenError,
    TokenError,
)
from ridehail.auth.password import hash_password, verify_password
from ridehail.auth.tokens import DecodedIdentity, TokenConfig, TokenIssuer, TokenVerifier

__all__ = [
    "DecodedIdentity",
    "ExpiredTokenError",
    "InvalidTokenError",
    "MissingTokenError",
    "SessionCookiePolicy",
    "TokenConfig",
    "TokenError",
    "TokenIssuer",
    "TokenVerifier",
    "get_current_identity",
    "hash_password",
    "verify_password",
]
