"""
RideHail - Security Dependencies

FastAPI dependencies that gate protected routes on the session cookie.

Usage:
    @router.get("/profile")
    async def profile(identity: DecodedIdentity = Depends(get_current_identity)):
        ...

Gate outcomes:
- No cookie          -> 401 "Authentication failed. Token not found"
- Expired token      -> 401 "Token expired. Please log in again."
- Any other failure  -> 401 "Invalid token"
- Valid token        -> identity on request.state.identity, handler runs once

Rejections never modify cookies; an expired cookie is left for the
client to drop.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie
from loguru import logger

from ridehail.auth.cookies import COOKIE_NAME, SessionCookiePolicy
from ridehail.auth.exceptions import InvalidTokenError, TokenError
from ridehail.auth.tokens import DecodedIdentity, TokenVerifier


# Cookie scheme for token extraction
cookie_scheme = APIKeyCookie(name=COOKIE_NAME, auto_error=False)


def get_access_verifier(request: Request) -> TokenVerifier:
    """Access-token verifier built at startup."""
    return request.app.state.access_verifier


def get_cookie_policy(request: Request) -> SessionCookiePolicy:
    """Session cookie policy built at startup."""
    return request.app.state.cookie_policy


async def get_current_identity(
    request: Request,
    token: Optional[str] = Depends(cookie_scheme),
    verifier: TokenVerifier = Depends(get_access_verifier),
) -> DecodedIdentity:
    """
    Validate the session cookie and return the caller's identity.

    Raises:
        MissingTokenError, ExpiredTokenError, InvalidTokenError (all 401)
    """
    try:
        identity = await verifier.verify_async(token)
    except InvalidTokenError as e:
        logger.info("Rejected token on {}: {}", request.url.path, e.detail or e.reason.value)
        raise
    except TokenError as e:
        logger.info("Rejected token on {}: {}", request.url.path, e.reason.value)
        raise

    request.state.identity = identity
    return identity
