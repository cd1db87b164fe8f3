"""Schemas for sign-up / sign-in endpoints (/v1/auth)."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from green_community.schemas.profiles import ProfileOut

# bcrypt only hashes the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


class SignUpRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=6, max_length=MAX_PASSWORD_BYTES)
    eco_name: str = Field(min_length=1, max_length=100)
    full_name: str | None = Field(default=None, max_length=200)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        email = v.strip().lower()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise ValueError("Invalid email address")
        return email

    @field_validator("eco_name")
    @classmethod
    def _strip_eco_name(cls, v: str) -> str:
        name = v.strip()
        if not name:
            raise ValueError("eco_name must not be blank")
        return name

    @field_validator("password")
    @classmethod
    def _check_password_bytes(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class SignInRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class SessionResponse(BaseModel):
    """Issued session token plus the signed-in profile."""

    token: str
    expires_at: datetime
    profile: ProfileOut
