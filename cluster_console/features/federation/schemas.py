"""
Pydantic schemas for third-party login.
"""
from typing import Optional
from pydantic import BaseModel, Field


class ExternalProfile(BaseModel):
    """User profile returned by the identity provider."""
    name: str = Field(..., min_length=1)
    access_token: str
    email: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None


class LoginResult(BaseModel):
    """Outcome of a completed login, independent of how it is returned."""
    token: str
    user_name: str
    tenant: str
    session_key: str


class LoginResponse(BaseModel):
    token: str
    username: str
    tenant: str
