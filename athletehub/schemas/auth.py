import re
from typing import Literal, Optional

from pydantic import EmailStr, Field, field_validator

from athletehub.schemas.common import Payload
from athletehub.security.policy import Role

_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d@$!%*?&]{8,}$")

Language = Literal[
    "english", "hindi", "tamil", "telugu", "bengali",
    "marathi", "gujarati", "kannada", "malayalam", "punjabi",
]


def _email(v: str) -> str:
    return v.lower()


def _password(v: str) -> str:
    if not _PASSWORD_RE.match(v or ""):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )
    return v


class RegisterRequest(Payload):
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8, max_length=30)
    phone: Optional[str] = None
    role: Role = Role.ATHLETE
    preferred_language: Language = "english"

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return _password(v)

    @field_validator("role")
    @classmethod
    def no_self_admin(cls, v: Role) -> Role:
        if v == Role.ADMIN:
            raise ValueError("role admin cannot be self-assigned")
        return v


class LoginRequest(Payload):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _email(v)


class RefreshRequest(Payload):
    refresh_token: Optional[str] = None


class ForgotPasswordRequest(Payload):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _email(v)


class ResetPasswordRequest(Payload):
    token: str
    password: str = Field(min_length=8, max_length=30)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return _password(v)


class ChangePasswordRequest(Payload):
    current_password: str
    new_password: str = Field(min_length=8, max_length=30)

    @field_validator("new_password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return _password(v)


class UpdateMeRequest(Payload):
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    phone: Optional[str] = None
    preferred_language: Optional[Language] = None
