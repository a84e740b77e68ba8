"""
Identity service — Pydantic V2 request/response schemas for the auth domain.

Wire format is camelCase (``accessToken``, ``otpCode``); Python attributes
stay snake_case.  Password policy is enforced here, at the boundary, so the
service layer never sees a weak password.
"""
from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from thesync.auth.constants import OTP_LENGTH, PASSWORD_MIN_LENGTH, PASSWORD_SYMBOLS

_UPPERCASE = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"\d")
_SYMBOL = re.compile(f"[{re.escape(PASSWORD_SYMBOLS)}]")


def _check_password(value: str) -> str:
    if not _UPPERCASE.search(value):
        raise ValueError("Password must contain at least one uppercase letter")
    if not _DIGIT.search(value):
        raise ValueError("Password must contain at least one digit")
    if not _SYMBOL.search(value):
        raise ValueError("Password must contain at least one symbol")
    return value


# ── Shared base ───────────────────────────────────────────────────────────────

class _Base(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ── Login ─────────────────────────────────────────────────────────────────────

class AdminLoginRequest(_Base):
    """Body for POST /auth/admin/login."""

    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=128)

    @field_validator("password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        return _check_password(value)


class UserLoginRequest(_Base):
    """Body for POST /auth/user/login."""

    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=128)

    @field_validator("password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        return _check_password(value)


class RefreshRequest(_Base):
    """Body for POST /auth/{admin,user}/refresh."""

    refresh_token: str = Field(min_length=1)


# ── Password reset / change ───────────────────────────────────────────────────

class PasswordResetRequestSchema(_Base):
    """Body for POST /auth/password-reset/request."""

    email: EmailStr


class PasswordResetVerifySchema(_Base):
    """Body for POST /auth/password-reset/verify."""

    email: EmailStr
    otp_code: str = Field(
        min_length=OTP_LENGTH,
        max_length=OTP_LENGTH,
        description="Code sent to the user's email",
    )


class ChangePasswordRequest(_Base):
    """Body for PUT /auth/change-password."""

    current_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=128)
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=128)

    @field_validator("current_password", "new_password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        return _check_password(value)


# ── Response models ───────────────────────────────────────────────────────────

class LoginResponse(_Base):
    """Returned on successful admin or user login."""

    access_token: str
    refresh_token: str


class RefreshResponse(_Base):
    """Refresh mints a new access token only; the refresh token is not rotated."""

    access_token: str
