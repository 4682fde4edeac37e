from typing import Optional
from pydantic import BaseModel, Field, field_validator

from canteen.enums.user_role import UserRole

BCRYPT_MAX_PASSWORD_BYTES = 72


class AuthRequest(BaseModel):
    action: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = Field(default=None, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("email", "password", mode="before")
    @classmethod
    def required(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Email and password are required")
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


class AuthUser(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    wallet_balance: float
    phone_number: Optional[str] = None

    class Config:
        from_attributes = True
