from typing import Optional

from email_validator import validate_email, EmailNotValidError
from pydantic import BaseModel, Field, field_validator

from app.schemas.common import CamelModel


def _check_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Invalid email address")
    return value


class SignupRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        return v


class SignupResponse(BaseModel):
    id: int
    email: str


class SigninRequest(CamelModel):
    email: str
    password: str
    device_id: str

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def password_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v

    @field_validator("device_id")
    @classmethod
    def device_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Device is required")
        return v


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str


class NewTokenRequest(CamelModel):
    refresh_token: Optional[str] = None


class AccessTokenResponse(CamelModel):
    access_token: str


class LogoutRequest(CamelModel):
    device_id: Optional[str] = None


class UserInfoResponse(CamelModel):
    user_id: int


class TokenClaims(BaseModel):
    """검증된 access token에서 꺼낸 사용자 정보 (request.state.user)"""
    user_id: int
    device_id: str
    email: str = Field(default="")
