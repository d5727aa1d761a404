"""
RideHail - Account Store

Record lookup and creation for one account table. This is the only
component that touches the database; the token core never does.
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from ridehail.accounts.models import AccountBase
from ridehail.auth.exceptions import DuplicateAccountError
from ridehail.database import SessionFactory


AccountT = TypeVar("AccountT", bound=AccountBase)


class AccountStore(Generic[AccountT]):
    """SQLModel-backed store for a single account model."""

    def __init__(self, model: Type[AccountT], session_factory: SessionFactory):
        self.model = model
        self._session_factory = session_factory

    def find_by_email(self, email: str) -> Optional[AccountT]:
        with self._session_factory() as db:
            statement = select(self.model).where(self.model.email == email.lower())
            return db.exec(statement).first()

    def find_by_id(self, account_id: Union[str, UUID]) -> Optional[AccountT]:
        try:
            key = account_id if isinstance(account_id, UUID) else UUID(str(account_id))
        except ValueError:
            return None
        with self._session_factory() as db:
            return db.get(self.model, key)

    def create(self, record: Dict[str, Any]) -> AccountT:
        """
        Insert a new account.

        Raises:
            DuplicateAccountError: If the email is already registered
        """
        account = self.model(**record)
        with self._session_factory() as db:
            db.add(account)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise DuplicateAccountError() from e
            db.refresh(account)
            return account

    def save(self, account: AccountT) -> AccountT:
        with self._session_factory() as db:
            db.add(account)
            db.commit()
            db.refresh(account)
            return account
