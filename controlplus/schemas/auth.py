"""Auth API schemas.

Password rules (length, confirmation) are checked by the account service so
the client receives the same pt-BR messages as the provider errors.
"""

from datetime import date

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Request body for owner sign-up."""

    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1)
    birth_date: date | None = None
    cpf_cnpj: str = Field(default="", max_length=32)
    phone: str = Field(default="", max_length=32)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    """Request body for POST /auth/change-password (re-authenticates first)."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1)


class FirstPasswordRequest(BaseModel):
    """Request body for the forced first-login password change."""

    new_password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Identity Toolkit session returned to the client."""

    uid: str
    email: str
    id_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"
    must_change_password: bool = False
