"""
RideHail - Password Hashing Utilities

Password hashing using bcrypt.
Work factor is configurable and defaults to 10.

Security:
- Never log or expose plaintext passwords or hashes
- bcrypt includes salt automatically
- Hashes below the configured work factor are upgraded on login
- Request handlers use the *_async variants so bcrypt runs off the event loop
"""

from typing import Optional

import bcrypt
from loguru import logger
from starlette.concurrency import run_in_threadpool

from ridehail.auth.exceptions import PasswordHashingError


# Work factor for bcrypt (2^10 = 1024 iterations)
BCRYPT_WORK_FACTOR = 10


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plaintext password
        rounds: Work factor override (defaults to BCRYPT_WORK_FACTOR)

    Returns:
        bcrypt hash string (includes salt and cost)

    Raises:
        PasswordHashingError: If bcrypt rejects the input or fails

    Example:
        >>> hashed = hash_password("secret1")
        >>> hashed.startswith("$2b$10$")
        True
    """
    try:
        salt = bcrypt.gensalt(rounds=rounds or BCRYPT_WORK_FACTOR)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    except (ValueError, TypeError) as e:
        logger.error("Password hashing failed: {}", type(e).__name__)
        raise PasswordHashingError() from e
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Uses bcrypt's constant-time comparison. A wrong password and a
    malformed hash are indistinguishable: both return False.

    Example:
        >>> hashed = hash_password("secret1")
        >>> verify_password("secret1", hashed)
        True
        >>> verify_password("secret2", hashed)
        False
    """
    try:
        password_bytes = plain_password.encode("utf-8")
        hashed_bytes = hashed_password.encode("utf-8")
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except (ValueError, TypeError, AttributeError):
        # Invalid hash format
        return False


def needs_rehash(hashed_password: str, target_work_factor: int = BCRYPT_WORK_FACTOR) -> bool:
    """
    Check if a password hash is below the target work factor.

    Example:
        # After raising the work factor from 10 to 12:
        >>> needs_rehash(old_hash, target_work_factor=12)
        True
    """
    try:
        # bcrypt hash format: $2b$XX$...
        _, work_factor_str, _ = hashed_password.split("$")[1:4]
        return int(work_factor_str) < target_work_factor
    except (ValueError, IndexError):
        # Not a valid bcrypt hash, definitely needs rehash
        return True


async def hash_password_async(password: str, rounds: Optional[int] = None) -> str:
    """hash_password, run in the thread pool."""
    return await run_in_threadpool(hash_password, password, rounds)


async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    """verify_password, run in the thread pool."""
    return await run_in_threadpool(verify_password, plain_password, hashed_password)
