"""
RideHail - Account Request/Response Schemas

Pydantic models for API request validation and response serialization.
Separates API contracts from database models.

Registration schemas expose profile_fields(): the kind-specific columns
a new account row carries beyond the shared ones. Profile schemas build
themselves from a stored account with from_account().
"""

import re
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field, validator

from ridehail.accounts.models import AccountBase, Captain, VehicleType


EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")
PASSWORD_MAX_BYTES = 72


def normalize_email(value: str) -> str:
    """Basic email format validation (allows .local for development)."""
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email format")
    return value.lower()


def check_password_bytes(value: str) -> str:
    """bcrypt only reads the first 72 bytes of a password, not characters."""
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


class FullName(BaseModel):
    firstname: str = Field(..., min_length=3, max_length=100, description="First name")
    lastname: Optional[str] = Field(default=None, min_length=3, max_length=100, description="Last name")


class Vehicle(BaseModel):
    color: str = Field(..., min_length=3, max_length=50)
    plate: str = Field(..., min_length=3, max_length=20)
    capacity: int = Field(..., ge=1)
    vehicleType: VehicleType


class RegisterRequest(BaseModel):
    """Request body for POST /user/register."""
    fullname: FullName
    email: str = Field(..., max_length=255, description="Email address (login identifier)")
    password: str = Field(..., min_length=6, max_length=PASSWORD_MAX_BYTES)

    @validator("email")
    def email_format(cls, v):
        return normalize_email(v)

    @validator("password")
    def password_bytes(cls, v):
        return check_password_bytes(v)

    def profile_fields(self) -> Dict[str, Any]:
        return {}


class CaptainRegisterRequest(RegisterRequest):
    """Request body for POST /captain/register."""
    vehicle: Vehicle

    def profile_fields(self) -> Dict[str, Any]:
        return {
            "vehicle_color": self.vehicle.color,
            "vehicle_plate": self.vehicle.plate,
            "vehicle_capacity": self.vehicle.capacity,
            "vehicle_type": self.vehicle.vehicleType,
        }


class LoginRequest(BaseModel):
    """Request body for POST /{kind}/login."""
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=3, max_length=PASSWORD_MAX_BYTES)

    @validator("email")
    def email_format(cls, v):
        return normalize_email(v)

    @validator("password")
    def password_bytes(cls, v):
        return check_password_bytes(v)


class FullNameOut(BaseModel):
    firstname: str
    lastname: Optional[str] = None


class AccountProfile(BaseModel):
    """Public view of an account. Never includes the password hash."""
    id: UUID
    fullname: FullNameOut
    email: str
    created_at: datetime

    @classmethod
    def base_fields(cls, account: AccountBase) -> Dict[str, Any]:
        return {
            "id": account.id,
            "fullname": FullNameOut(firstname=account.firstname, lastname=account.lastname),
            "email": account.email,
            "created_at": account.created_at,
        }

    @classmethod
    def from_account(cls, account: AccountBase) -> "AccountProfile":
        return cls(**cls.base_fields(account))


class CaptainProfile(AccountProfile):
    vehicle: Vehicle

    @classmethod
    def from_account(cls, account: Captain) -> "CaptainProfile":
        return cls(
            **cls.base_fields(account),
            vehicle=Vehicle(
                color=account.vehicle_color,
                plate=account.vehicle_plate,
                capacity=account.vehicle_capacity,
                vehicleType=account.vehicle_type,
            ),
        )


class ApiResponse(BaseModel):
    """Standard success envelope."""
    status: int
    success: bool = True
    message: str
    result: Optional[Any] = None
