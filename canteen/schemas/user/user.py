from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from canteen.enums.user_role import UserRole
from canteen.schemas.auth.auth import BCRYPT_MAX_PASSWORD_BYTES

# Admins may only hand out these roles.
ASSIGNABLE_ROLES = (UserRole.USER, UserRole.CANTEEN)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    phone_number: Optional[str] = None
    wallet_balance: float
    role: UserRole
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone_number: Optional[str] = None


class UserCreate(BaseModel):
    name: Optional[str] = Field(default=None, validate_default=True)
    email: Optional[str] = Field(default=None, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)
    role: Optional[str] = Field(default=None, validate_default=True)
    phone_number: Optional[str] = None

    @field_validator("name", "email", "password", "role", mode="before")
    @classmethod
    def required(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Name, email, password, and role are required")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError("Password must be at most 72 bytes")
        return v

    @field_validator("role")
    @classmethod
    def assignable_role(cls, v: str) -> str:
        if v not in [role.value for role in ASSIGNABLE_ROLES]:
            raise ValueError("Invalid role")
        return v


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    role: Optional[str] = None
