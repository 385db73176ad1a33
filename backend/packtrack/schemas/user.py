"""
PackTrack Backend — User & Auth Schemas
========================================

What:  Request bodies for register/login/update and the user projections
       returned by the API. No schema here declares the password hash.
"""

import uuid
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from packtrack.models.user import UserRole
from packtrack.schemas.common import CamelModel


class UserRegister(CamelModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    # bcrypt only reads the first 72 bytes
    password: str = Field(..., min_length=8, max_length=72)

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Full name cannot be blank")
        return v.strip()


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdate(CamelModel):
    """Only the supplied fields change; a new password is rehashed."""

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=72)

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Full name cannot be blank")
        return v.strip() if v else v


class UserResponse(CamelModel):
    id: uuid.UUID
    full_name: str
    email: str
    role: UserRole


class AuthResponse(UserResponse):
    """Returned by register and login: the user plus a signed session token."""

    token: str
