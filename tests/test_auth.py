"""
RideHail - Authentication Test Suite

Tests for:
- bcrypt password hashing
- Token issuance and verification (expiry, tampering, algorithms)
- Session cookie attach/clear symmetry
- The cookie gate on protected routes

Run with: pytest tests/test_auth.py -v
"""

import base64
import json
from datetime import datetime, timedelta, timezone
from http.cookies import SimpleCookie
from uuid import uuid4

import bcrypt
import pytest
from jose import jwt
from starlette.responses import Response

from ridehail.auth.cookies import SessionCookiePolicy
from ridehail.auth.exceptions import (
    ExpiredTokenError,
    InvalidTokenError,
    MissingTokenError,
    PasswordHashingError,
    TokenErrorReason,
)
from ridehail.auth.password import (
    hash_password,
    hash_password_async,
    needs_rehash,
    verify_password,
    verify_password_async,
)
from ridehail.auth.tokens import (
    TokenConfig,
    TokenIssuer,
    TokenVerifier,
    access_token_config,
    generate_access_token,
    generate_opaque_token,
    generate_refresh_token,
    hash_opaque_token,
    is_token_expired,
    refresh_token_config,
)
from ridehail.errors import ConfigurationError
from tests.conftest import ALICE, TEST_ACCESS_SECRET, FrozenClock, make_settings, register


TEN_DAYS = timedelta(days=10)


def flip_char(token: str, index: int) -> str:
    ch = token[index]
    replacement = "A" if ch != "A" else "B"
    return token[:index] + replacement + token[index + 1:]


# =============================================================================
# PASSWORD HASHING TESTS
# =============================================================================

class TestPasswordHashing:
    """Unit tests for bcrypt password utilities."""

    def test_hash_password_default_cost(self):
        """Default work factor is 10 and the hash embeds it."""
        hashed = hash_password("secret1")

        assert hashed.startswith("$2b$10$")
        assert len(hashed) == 60

    def test_verify_password_correct(self):
        hashed = hash_password("secret1", rounds=4)

        assert verify_password("secret1", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("secret1", rounds=4)

        assert verify_password("secret2", hashed) is False
        assert verify_password("", hashed) is False

    def test_verify_malformed_hash_returns_false(self):
        """A malformed hash is not an error, just a mismatch."""
        assert verify_password("secret1", "not-a-bcrypt-hash") is False
        assert verify_password("secret1", "") is False

    def test_same_password_different_hashes(self):
        """Same password generates different hashes (salted)."""
        hash1 = hash_password("secret1", rounds=4)
        hash2 = hash_password("secret1", rounds=4)

        assert hash1 != hash2
        assert verify_password("secret1", hash1) is True
        assert verify_password("secret1", hash2) is True

    def test_hashing_failure_is_internal_error(self, monkeypatch):
        def broken_hashpw(password, salt):
            raise ValueError("entropy exhausted")

        monkeypatch.setattr(bcrypt, "hashpw", broken_hashpw)

        with pytest.raises(PasswordHashingError) as exc_info:
            hash_password("secret1", rounds=4)
        assert exc_info.value.status_code == 500

    def test_needs_rehash_old_work_factor(self):
        old_hash = bcrypt.hashpw(b"password", bcrypt.gensalt(rounds=4)).decode()

        assert needs_rehash(old_hash, target_work_factor=10) is True
        assert needs_rehash(old_hash, target_work_factor=4) is False

    def test_needs_rehash_garbage(self):
        assert needs_rehash("plaintext") is True

    @pytest.mark.asyncio
    async def test_async_variants(self):
        hashed = await hash_password_async("secret1", rounds=4)

        assert await verify_password_async("secret1", hashed) is True
        assert await verify_password_async("nope", hashed) is False


# =============================================================================
# TOKEN TESTS
# =============================================================================

@pytest.fixture
def config() -> TokenConfig:
    return TokenConfig(secret=TEST_ACCESS_SECRET, ttl=TEN_DAYS)


class TestTokenConfig:

    def test_empty_secret_rejected(self):
        with pytest.raises(ConfigurationError):
            TokenConfig(secret="", ttl=TEN_DAYS)

    def test_asymmetric_algorithm_rejected(self):
        with pytest.raises(ConfigurationError):
            TokenConfig(secret="s", ttl=TEN_DAYS, algorithm="RS256")

    def test_configs_from_settings(self):
        settings = make_settings()

        access = access_token_config(settings)
        refresh = refresh_token_config(settings)

        assert access.ttl == timedelta(days=10)
        assert access.ttl_seconds == 864000
        assert refresh.ttl == timedelta(days=30)
        assert access.secret != refresh.secret

    def test_config_is_immutable(self, config):
        with pytest.raises(AttributeError):
            config.secret = "other"


class TestTokenIssuer:

    def test_token_has_three_segments(self, config, clock):
        token = TokenIssuer(config, clock).issue("abc")

        assert token.count(".") == 2

    def test_payload_contents(self, config, clock):
        token = TokenIssuer(config, clock).issue("abc", {"email": "a@b.co"})
        payload = jwt.get_unverified_claims(token)

        issued_at = int(clock().timestamp())
        assert payload["userId"] == "abc"
        assert payload["email"] == "a@b.co"
        assert payload["iat"] == issued_at
        assert payload["exp"] == issued_at + 864000

    def test_reserved_claims_not_overridable(self, config, clock):
        token = TokenIssuer(config, clock).issue("abc", {"userId": "evil", "exp": 1})
        payload = jwt.get_unverified_claims(token)

        assert payload["userId"] == "abc"
        assert payload["exp"] > 1

    def test_different_instants_different_tokens(self, config, clock):
        issuer = TokenIssuer(config, clock)
        first = issuer.issue("abc")
        clock.advance(timedelta(seconds=1))
        second = issuer.issue("abc")

        assert first != second
        first_claims = jwt.get_unverified_claims(first)
        second_claims = jwt.get_unverified_claims(second)
        assert first_claims.keys() == second_claims.keys()
        assert second_claims["iat"] == first_claims["iat"] + 1

    def test_ttl_override(self, config, clock):
        token = TokenIssuer(config, clock).issue("abc", ttl=timedelta(minutes=5))
        payload = jwt.get_unverified_claims(token)

        assert payload["exp"] - payload["iat"] == 300

    def test_refresh_token_has_no_email(self, clock):
        issuer = TokenIssuer(refresh_token_config(make_settings()), clock)
        payload = jwt.get_unverified_claims(generate_refresh_token(issuer, uuid4()))

        assert "email" not in payload
        assert payload["exp"] - payload["iat"] == 30 * 86400


class TestTokenVerifier:

    def test_round_trip(self, config, clock):
        subject = str(uuid4())
        token = TokenIssuer(config, clock).issue(subject, {"email": "a@b.co"})

        identity = TokenVerifier(config, clock).verify(token)

        assert identity.subject_id == subject
        assert identity.email == "a@b.co"
        assert identity.expires_at - identity.issued_at == TEN_DAYS
        assert identity.claims == {"email": "a@b.co"}

    def test_access_token_helper(self, config, clock):
        account_id = uuid4()
        token = generate_access_token(TokenIssuer(config, clock), account_id, "x@y.io")

        identity = TokenVerifier(config, clock).verify(token)
        assert identity.subject_id == str(account_id)
        assert identity.email == "x@y.io"

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing(self, config, token):
        with pytest.raises(MissingTokenError) as exc_info:
            TokenVerifier(config).verify(token)
        assert exc_info.value.reason is TokenErrorReason.MISSING

    def test_valid_just_before_expiry(self, config, clock):
        token = TokenIssuer(config, clock).issue("abc")
        clock.advance(TEN_DAYS - timedelta(seconds=1))

        assert TokenVerifier(config, clock).verify(token).subject_id == "abc"

    def test_expired_just_after_expiry(self, config, clock):
        token = TokenIssuer(config, clock).issue("abc")
        clock.advance(TEN_DAYS + timedelta(seconds=1))

        with pytest.raises(ExpiredTokenError) as exc_info:
            TokenVerifier(config, clock).verify(token)
        assert exc_info.value.reason is TokenErrorReason.EXPIRED

    def test_tampering_any_character_is_invalid(self, config, clock):
        token = TokenIssuer(config, clock).issue("abc", {"email": "a@b.co"})
        verifier = TokenVerifier(config, clock)

        for index, ch in enumerate(token):
            if ch == ".":
                continue
            with pytest.raises(InvalidTokenError):
                verifier.verify(flip_char(token, index))

    def test_tampered_expired_token_is_invalid_not_expired(self, config, clock):
        token = TokenIssuer(config, clock).issue("abc")
        clock.advance(TEN_DAYS * 2)

        with pytest.raises(InvalidTokenError):
            TokenVerifier(config, clock).verify(flip_char(token, len(token) - 1))

    def test_wrong_secret_is_invalid(self, config, clock):
        token = TokenIssuer(config, clock).issue("abc")
        rotated = TokenConfig(secret="rotated-secret", ttl=TEN_DAYS)

        with pytest.raises(InvalidTokenError):
            TokenVerifier(rotated, clock).verify(token)

    def test_other_algorithm_is_invalid(self, config, clock):
        payload = {"userId": "abc", "iat": 0, "exp": 2**31}
        token = jwt.encode(payload, TEST_ACCESS_SECRET, algorithm="HS512")

        with pytest.raises(InvalidTokenError):
            TokenVerifier(config, clock).verify(token)

    def test_unsigned_token_is_invalid(self, config, clock):
        def segment(data: dict) -> str:
            raw = json.dumps(data).encode()
            return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

        token = segment({"alg": "none", "typ": "JWT"}) + "." + segment({"userId": "abc", "exp": 2**31}) + "."

        with pytest.raises(InvalidTokenError):
            TokenVerifier(config, clock).verify(token)

    @pytest.mark.parametrize("token", ["garbage", "invalid.token.here", "a.b", "é.é.é"])
    def test_malformed_is_invalid(self, config, token):
        with pytest.raises(InvalidTokenError):
            TokenVerifier(config).verify(token)

    @pytest.mark.parametrize("payload", [
        {"exp": 2**31, "iat": 0},
        {"userId": "abc", "iat": 0},
        {"userId": "abc", "exp": 2**31},
        {"userId": "abc", "iat": "yesterday", "exp": 2**31},
    ])
    def test_missing_required_claim_is_invalid(self, config, clock, payload):
        token = jwt.encode(payload, TEST_ACCESS_SECRET, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            TokenVerifier(config, clock).verify(token)

    @pytest.mark.asyncio
    async def test_async_round_trip(self, config, clock):
        token = await TokenIssuer(config, clock).issue_async("abc")

        identity = await TokenVerifier(config, clock).verify_async(token)
        assert identity.subject_id == "abc"


class TestOpaqueTokens:

    def test_generate_opaque_token(self):
        token = generate_opaque_token()

        assert len(token) == 128
        assert token != generate_opaque_token()

    def test_hash_opaque_token(self):
        assert hash_opaque_token("abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_is_token_expired(self, clock):
        now = clock()

        assert is_token_expired(now - timedelta(seconds=1), now) is True
        assert is_token_expired(now + timedelta(seconds=1), now) is False
        assert is_token_expired(now.replace(tzinfo=None) - timedelta(days=1), now) is True


# =============================================================================
# SESSION COOKIE TESTS
# =============================================================================

def set_cookie_headers(response: Response) -> list:
    return response.headers.getlist("set-cookie")


def parse_cookie(header: str):
    cookie = SimpleCookie()
    cookie.load(header)
    return cookie["token"]


class TestSessionCookiePolicy:

    def test_attach_attributes(self):
        response = Response()
        SessionCookiePolicy(secure=False, max_age=864000).attach(response, "abc.def.ghi")

        (header,) = set_cookie_headers(response)
        morsel = parse_cookie(header)
        assert morsel.value == "abc.def.ghi"
        assert morsel["httponly"] is True
        assert morsel["samesite"].lower() == "strict"
        assert morsel["max-age"] == "864000"
        assert morsel["path"] == "/"
        assert not morsel["secure"]

    def test_secure_only_in_production(self):
        dev = SessionCookiePolicy.from_settings(make_settings(), max_age=10)
        prod = SessionCookiePolicy.from_settings(make_settings(ENVIRONMENT="production"), max_age=10)

        assert dev.secure is False
        assert prod.secure is True

        response = Response()
        prod.attach(response, "abc")
        assert "Secure" in set_cookie_headers(response)[0]

    @pytest.mark.parametrize("secure", [False, True])
    def test_clear_mirrors_attach(self, secure):
        policy = SessionCookiePolicy(secure=secure, max_age=864000)
        response = Response()
        policy.attach(response, "abc.def.ghi")
        policy.clear(response)

        attached, cleared = (parse_cookie(h) for h in set_cookie_headers(response))

        assert cleared.value == ""
        assert cleared["expires"] == "Thu, 01 Jan 1970 00:00:00 GMT"
        for attribute in ("path", "samesite", "secure", "httponly"):
            assert cleared[attribute] == attached[attribute]


# =============================================================================
# AUTH GATE TESTS
# =============================================================================

class TestAuthGate:
    """Integration tests for the cookie gate on GET /{kind}/profile."""

    def test_no_cookie(self, client):
        response = client.get("/api/v1/user/profile")

        assert response.status_code == 401
        body = response.json()
        assert body["message"] == "Authentication failed. Token not found"
        assert body["auth"] is False
        assert body["failed"] is True

    def test_invalid_cookie(self, client):
        client.cookies.set("token", "totally.invalid.token")

        response = client.get("/api/v1/user/profile")

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_expired_cookie(self, client, app):
        assert register(client).status_code == 201
        later = FrozenClock(datetime(2100, 1, 1, tzinfo=timezone.utc))
        app.state.access_verifier = TokenVerifier(app.state.access_verifier.config, later)

        response = client.get("/api/v1/user/profile")

        assert response.status_code == 401
        assert response.json()["message"] == "Token expired. Please log in again."

    def test_rejection_leaves_cookies_alone(self, client):
        client.cookies.set("token", "totally.invalid.token")

        response = client.get("/api/v1/user/profile")

        assert "set-cookie" not in response.headers

    def test_accepted_request_reaches_handler(self, client):
        register(client)

        response = client.get("/api/v1/user/profile")

        assert response.status_code == 200
        assert response.json()["result"]["email"] == ALICE["email"]


# =============================================================================
# END-TO-END TOKEN LIFECYCLE
# =============================================================================

class TestTokenLifecycle:

    def test_register_verify_tamper_expire(self, client, app):
        """
        1. Register alice@example.com / secret1 -> token T1
        2. verify(T1) -> accepted with matching subject
        3. verify("") -> missing
        4. verify(T1 with last char flipped) -> invalid
        5. clock past TTL -> verify(T1) expired
        """
        response = register(client)
        assert response.status_code == 201
        result = response.json()["result"]
        t1 = result["token"]

        config = app.state.access_verifier.config
        issued_at = jwt.get_unverified_claims(t1)["iat"]
        clock = FrozenClock(datetime.fromtimestamp(issued_at, tz=timezone.utc))
        verifier = TokenVerifier(config, clock)

        assert verifier.verify(t1).subject_id == result["account"]["id"]

        with pytest.raises(MissingTokenError):
            verifier.verify("")

        with pytest.raises(InvalidTokenError):
            verifier.verify(flip_char(t1, len(t1) - 1))

        clock.advance(config.ttl + timedelta(seconds=1))
        with pytest.raises(ExpiredTokenError):
            verifier.verify(t1)
