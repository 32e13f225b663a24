# bodyshop/schemas/user.py
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

# bcrypt only looks at the first 72 bytes and rejects anything longer
BCRYPT_MAX_BYTES = 72


class RegisterSchema(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=BCRYPT_MAX_BYTES)
    first_name: str
    last_name: str
    phone: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes long")
        return value


class LoginSchema(BaseModel):
    email: EmailStr
    password: str


class RefreshSchema(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: Optional[str] = None


class RoleUpdate(BaseModel):
    role: Literal["admin", "staff", "client"]


class UserOut(BaseModel):
    id: int
    email: EmailStr
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: str
