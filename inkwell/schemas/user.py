"""Pydantic schemas for User."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    password2: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @model_validator(mode="after")
    def passwords_match(self) -> "UserCreate":
        if self.password != self.password2:
            raise ValueError("Passwords do not match")
        return self


class UserPublic(BaseModel):
    id: UUID
    name: str
    avatar: str | None = None
    posts: int = 0
    created_at: datetime

    model_config = {"from_attributes": True}


class UserResponse(UserPublic):
    email: str | None = None  # Only in own profile


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
