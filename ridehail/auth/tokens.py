"""
RideHail - JWT Token Management

Creates and validates signed, time-bounded JWTs carrying:
- userId (subject)
- Caller-supplied claims (e.g. email)
- iat / exp as integer epoch seconds

Security:
- Signing configuration is an immutable TokenConfig built once at startup
- Rotating a secret invalidates every token signed with the old one
- Expiry is checked only after the signature verifies, so a tampered
  token is always reported as invalid, never as expired
"""

import base64
import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Union

from jose import jwt, JWTError
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from ridehail.auth.exceptions import (
    ExpiredTokenError,
    InvalidTokenError,
    MissingTokenError,
    TokenSigningError,
)
from ridehail.config import Settings
from ridehail.errors import ConfigurationError


SUBJECT_CLAIM = "userId"
RESERVED_CLAIMS = frozenset({SUBJECT_CLAIM, "iat", "exp"})

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenConfig:
    """
    Signing parameters for one token class.

    Attributes:
        secret: HMAC signing key
        ttl: Lifetime of tokens of this class
        algorithm: JWS algorithm (HMAC-SHA family)
        name: Token class label used in log messages
    """
    secret: str
    ttl: timedelta
    algorithm: str = "HS256"
    name: str = "access"

    def __post_init__(self):
        if not self.secret:
            raise ConfigurationError(f"Signing secret for {self.name} tokens is not set")
        if not self.algorithm.startswith("HS"):
            raise ConfigurationError(f"Unsupported signing algorithm: {self.algorithm}")
        if self.ttl <= timedelta(0):
            raise ConfigurationError(f"Token lifetime for {self.name} tokens must be positive")

    @property
    def ttl_seconds(self) -> int:
        return int(self.ttl.total_seconds())


def access_token_config(settings: Settings) -> TokenConfig:
    """Access tokens: JWT_ACCESS secret, 10 days by default."""
    return TokenConfig(
        secret=settings.JWT_ACCESS,
        ttl=timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
        algorithm=settings.JWT_ALGORITHM,
        name="access",
    )


def refresh_token_config(settings: Settings) -> TokenConfig:
    """Refresh tokens: JWT_REFRESH secret, 30 days by default."""
    return TokenConfig(
        secret=settings.JWT_REFRESH,
        ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        algorithm=settings.JWT_ALGORITHM,
        name="refresh",
    )


class DecodedIdentity(BaseModel):
    """
    Identity extracted from a verified token.

    Attached to request.state.identity for the lifetime of one request.
    """
    subject_id: str = Field(..., description="Account ID (userId claim)")
    email: Optional[str] = Field(default=None, description="Email claim, when present")
    issued_at: datetime = Field(..., description="iat")
    expires_at: datetime = Field(..., description="exp")
    claims: Dict[str, Any] = Field(default_factory=dict, description="Remaining claims")


class TokenIssuer:
    """Signs tokens for one token class."""

    def __init__(self, config: TokenConfig, clock: Clock = utc_now):
        self.config = config
        self._clock = clock

    def issue(
        self,
        subject_id: Union[str, Any],
        claims: Optional[Dict[str, Any]] = None,
        ttl: Optional[timedelta] = None,
    ) -> str:
        """
        Create a signed token for a subject.

        Args:
            subject_id: Account identifier (stringified into userId)
            claims: Extra claims; userId/iat/exp cannot be overridden
            ttl: Lifetime override (defaults to the config TTL)

        Returns:
            Compact JWS string (header.payload.signature)

        Raises:
            TokenSigningError: If the payload cannot be signed
        """
        issued_at = int(self._clock().timestamp())
        lifetime = ttl if ttl is not None else self.config.ttl

        payload = {k: v for k, v in (claims or {}).items() if k not in RESERVED_CLAIMS}
        payload.update({
            SUBJECT_CLAIM: str(subject_id),
            "iat": issued_at,
            "exp": issued_at + int(lifetime.total_seconds()),
        })

        try:
            return jwt.encode(payload, self.config.secret, algorithm=self.config.algorithm)
        except (JWTError, TypeError, ValueError) as e:
            raise TokenSigningError() from e

    async def issue_async(self, subject_id: Any, claims: Optional[Dict[str, Any]] = None,
                          ttl: Optional[timedelta] = None) -> str:
        return await run_in_threadpool(self.issue, subject_id, claims, ttl)


class TokenVerifier:
    """Validates tokens for one token class."""

    def __init__(self, config: TokenConfig, clock: Clock = utc_now):
        self.config = config
        self._clock = clock

    def verify(self, token: Optional[str]) -> DecodedIdentity:
        """
        Verify a token and extract its identity.

        Order of checks: presence, canonical encoding, signature and
        algorithm, required claims, expiry.

        Raises:
            MissingTokenError: No token presented
            InvalidTokenError: Bad signature, malformed, or wrong algorithm
            ExpiredTokenError: Signature valid but exp is in the past
        """
        if not token:
            raise MissingTokenError()

        _check_canonical_segments(token)

        try:
            payload = jwt.decode(
                token,
                self.config.secret,
                algorithms=[self.config.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise InvalidTokenError(detail=str(e)) from e

        subject_id = payload.get(SUBJECT_CLAIM)
        exp = payload.get("exp")
        iat = payload.get("iat")
        if not subject_id or not isinstance(exp, (int, float)) or not isinstance(iat, (int, float)):
            raise InvalidTokenError(detail="missing userId, iat or exp claim")

        if self._clock().timestamp() > exp:
            raise ExpiredTokenError()

        extra = {k: v for k, v in payload.items() if k not in RESERVED_CLAIMS}
        return DecodedIdentity(
            subject_id=str(subject_id),
            email=extra.get("email"),
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
            claims=extra,
        )

    async def verify_async(self, token: Optional[str]) -> DecodedIdentity:
        return await run_in_threadpool(self.verify, token)


def _check_canonical_segments(token: str) -> None:
    """
    Reject tokens whose segments are not canonical base64url.

    The stdlib decoder ignores stray characters and trailing bits, so two
    different strings can decode to the same signature bytes.
    """
    segments = token.split(".")
    if len(segments) != 3:
        raise InvalidTokenError(detail="token must have three segments")
    for segment in segments:
        try:
            raw = base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
        except (ValueError, TypeError) as e:
            raise InvalidTokenError(detail="segment is not base64url") from e
        if base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii") != segment:
            raise InvalidTokenError(detail="segment is not canonical base64url")


def generate_access_token(issuer: TokenIssuer, account_id: Any, email: str) -> str:
    """Access token carrying userId and email."""
    return issuer.issue(account_id, {"email": email})


def generate_refresh_token(issuer: TokenIssuer, account_id: Any) -> str:
    """Refresh token carrying userId only."""
    return issuer.issue(account_id)


# Opaque (non-JWT) tokens, e.g. for password reset links

def generate_opaque_token() -> str:
    """128 hex characters from 64 random bytes."""
    return secrets.token_hex(64)


def hash_opaque_token(token: str) -> str:
    """SHA-256 hex digest; store this, never the token itself."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def is_token_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    """True once ``now`` is strictly past ``expires_at``."""
    current = now or utc_now()
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return current > expires_at
