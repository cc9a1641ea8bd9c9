# app/schemas/auth/auth.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

from ...application.ports.user_repo import UserDto
from ..common.common import as_utc


class SignUpRequest(BaseModel):
    email: EmailStr = Field(..., description="Login email address")
    password: str = Field(..., min_length=6, max_length=72, description="Account password")
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    age: Optional[int] = Field(None, ge=1, le=120, description="User's age")

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @validator('name')
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name must not be blank')
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    email: str
    name: str
    age: Optional[int] = None
    status: str
    created_at: datetime

    @field_validator('created_at')
    @classmethod
    def created_at_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @classmethod
    def from_dto(cls, user: UserDto) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            age=user.age,
            status=user.status,
            created_at=user.created_at,
        )


class AuthResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user: UserResponse
    access_token: str


class EmailAvailabilityResponse(BaseModel):
    available: bool
