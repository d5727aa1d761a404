"""
RideHail - Account Kinds

One descriptor per account resource. Service and router are written once
and parameterized by a kind, so riders and captains cannot drift apart.
"""

from dataclasses import dataclass
from typing import Dict, Tuple, Type

from ridehail.accounts.models import AccountBase, Captain, Rider
from ridehail.accounts.schemas import (
    AccountProfile,
    CaptainProfile,
    CaptainRegisterRequest,
    RegisterRequest,
)


@dataclass(frozen=True)
class AccountKind:
    """
    Attributes:
        name: URL segment and tag ("user", "captain")
        display_name: Used in response messages
        model: SQLModel table
        register_schema: Registration body; supplies profile_fields()
        profile_schema: Public representation; supplies from_account()
        register_aliases: Extra paths accepted for registration
    """
    name: str
    display_name: str
    model: Type[AccountBase]
    register_schema: Type[RegisterRequest]
    profile_schema: Type[AccountProfile]
    register_aliases: Tuple[str, ...] = ()


USER = AccountKind(
    name="user",
    display_name="User",
    model=Rider,
    register_schema=RegisterRequest,
    profile_schema=AccountProfile,
)

CAPTAIN = AccountKind(
    name="captain",
    display_name="Captain",
    model=Captain,
    register_schema=CaptainRegisterRequest,
    profile_schema=CaptainProfile,
    register_aliases=("/create",),
)

ACCOUNT_KINDS: Dict[str, AccountKind] = {kind.name: kind for kind in (USER, CAPTAIN)}
