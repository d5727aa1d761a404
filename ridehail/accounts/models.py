"""
RideHail - Account Database Models

SQLModel-based models for riders (users) and drivers (captains).
Uses PostgreSQL for production, SQLite for local development.

Security:
- Passwords stored as bcrypt hashes only
- All timestamps in UTC
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import SQLModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class VehicleType(str, Enum):
    CAR = "car"
    MOTORCYCLE = "motorcycle"
    AUTO = "auto"


class AccountBase(SQLModel):
    """
    Columns shared by every account kind.

    Attributes:
        id: Unique identifier (UUIDv4), carried as userId in tokens
        firstname: Required given name
        lastname: Optional family name
        email: Login identifier (unique per kind, indexed)
        password_hash: bcrypt hash (never store plaintext)
        created_at: Account creation timestamp (UTC)
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    firstname: str = Field(max_length=100, nullable=False)
    lastname: Optional[str] = Field(default=None, max_length=100)
    email: str = Field(max_length=255, unique=True, index=True, nullable=False)
    password_hash: str = Field(max_length=255, nullable=False)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)


class Rider(AccountBase, table=True):
    """Rider account, exposed as the "user" resource."""
    __tablename__ = "users"


class Captain(AccountBase, table=True):
    """Driver account with the vehicle it operates."""
    __tablename__ = "captains"

    vehicle_color: str = Field(max_length=50, nullable=False)
    vehicle_plate: str = Field(max_length=20, nullable=False)
    vehicle_capacity: int = Field(ge=1, nullable=False)
    vehicle_type: VehicleType = Field(nullable=False)
