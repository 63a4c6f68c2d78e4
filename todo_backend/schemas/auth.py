"""
Todo Backend — Auth Request/Response Schemas
==============================================

What:  Pydantic models for POST /login.
How:   The password is held as a SecretStr so it never shows up in reprs,
       validation error payloads or log lines; services unwrap it only for the
       hash/verify call.
"""

from pydantic import BaseModel, Field, SecretStr, field_validator


class LoginRequest(BaseModel):
    """Credentials for login-or-register."""

    email: str = Field(min_length=1, max_length=320, description="Account email (case-sensitive)")
    password: SecretStr = Field(description="Plaintext password; never stored or logged")

    @field_validator("email")
    @classmethod
    def email_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("email must not be blank")
        return v

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("password must not be empty")
        return v


class LoginResponse(BaseModel):
    """
    Returned after a successful login or auto-provisioning.

    session_id is the token to send back in the Authorization header.
    """

    session_id: str = Field(description="Opaque session token")
    user_id: int = Field(description="Authenticated user's ID")
    email: str = Field(description="Authenticated user's email")
