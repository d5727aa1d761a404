"""
RideHail - Accounts Package

Riders and captains share one service and one router factory,
parameterized by AccountKind.
"""

from ridehail.accounts.kinds import ACCOUNT_KINDS, CAPTAIN, USER, AccountKind
from ridehail.accounts.models import Captain, Rider
from ridehail.accounts.service import AccountService
from ridehail.accounts.store import AccountStore

__all__ = [
    "ACCOUNT_KINDS",
    "CAPTAIN",
    "USER",
    "AccountKind",
    "AccountService",
    "AccountStore",
    "Captain",
    "Rider",
]
