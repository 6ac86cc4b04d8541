"""Pydantic schemas for registration and login.

Field shapes only. Normalization (trim + lowercase email) and the
password length rule live in AuthService so they apply to every caller,
not just HTTP.
"""

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    email: str
    password: str

    model_config = {"strict": True}


class LoginRequest(BaseModel):
    email: str
    password: str

    model_config = {"strict": True}


class UserRead(BaseModel):
    id: str
    email: str

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    """Returned by register and login: a bearer token plus the account."""
    token: str
    user: UserRead
