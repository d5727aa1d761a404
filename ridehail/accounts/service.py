"""
RideHail - Account Service

Registration, login and profile lookup for one account kind.

Flow:
- register: reject duplicate email, hash password, store, issue token
- login: look up by email, verify password, upgrade weak hash, issue token
- profile: resolve the token's userId against the store

Tokens are bearer-only; the profile lookup is what ties a token back to
an existing account.
"""

from typing import Tuple

from loguru import logger

from ridehail.accounts.kinds import AccountKind
from ridehail.accounts.models import AccountBase
from ridehail.accounts.schemas import RegisterRequest
from ridehail.accounts.store import AccountStore
from ridehail.auth.exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    InvalidCredentialsError,
)
from ridehail.auth.password import (
    BCRYPT_WORK_FACTOR,
    hash_password_async,
    needs_rehash,
    verify_password_async,
)
from ridehail.auth.tokens import DecodedIdentity, TokenIssuer


class AccountService:

    def __init__(
        self,
        kind: AccountKind,
        store: AccountStore,
        issuer: TokenIssuer,
        work_factor: int = BCRYPT_WORK_FACTOR,
    ):
        self.kind = kind
        self.store = store
        self.issuer = issuer
        self.work_factor = work_factor

    async def issue_token(self, account: AccountBase) -> str:
        return await self.issuer.issue_async(account.id, {"email": account.email})

    async def register(self, data: RegisterRequest) -> Tuple[AccountBase, str]:
        """
        Create an account and mint its first access token.

        Raises:
            DuplicateAccountError: Email already registered for this kind
            PasswordHashingError: bcrypt failure (500)
        """
        if self.store.find_by_email(data.email):
            logger.info("{} registration rejected: email already registered", self.kind.display_name)
            raise DuplicateAccountError(f"{self.kind.display_name} already exists")

        password_hash = await hash_password_async(data.password, self.work_factor)
        try:
            account = self.store.create({
                "firstname": data.fullname.firstname,
                "lastname": data.fullname.lastname,
                "email": data.email,
                "password_hash": password_hash,
                **data.profile_fields(),
            })
        except DuplicateAccountError as e:
            # Lost a race with a concurrent registration
            raise DuplicateAccountError(f"{self.kind.display_name} already exists") from e

        logger.info("{} registered: {}", self.kind.display_name, account.id)
        return account, await self.issue_token(account)

    async def login(self, email: str, password: str) -> Tuple[AccountBase, str]:
        """
        Authenticate with email and password.

        Unknown email and wrong password produce the same error.

        Raises:
            InvalidCredentialsError
        """
        account = self.store.find_by_email(email)
        if account is None:
            logger.info("{} login failed: unknown email", self.kind.display_name)
            raise InvalidCredentialsError()

        if not await verify_password_async(password, account.password_hash):
            logger.info("{} login failed for {}: bad password", self.kind.display_name, account.id)
            raise InvalidCredentialsError()

        if needs_rehash(account.password_hash, self.work_factor):
            account.password_hash = await hash_password_async(password, self.work_factor)
            account = self.store.save(account)
            logger.info("Upgraded password hash for {} {}", self.kind.name, account.id)

        logger.info("{} logged in: {}", self.kind.display_name, account.id)
        return account, await self.issue_token(account)

    def get_profile(self, identity: DecodedIdentity) -> AccountBase:
        """
        Raises:
            AccountNotFoundError: Token subject has no account of this kind
        """
        account = self.store.find_by_id(identity.subject_id)
        if account is None:
            raise AccountNotFoundError(f"{self.kind.display_name} not found")
        return account
