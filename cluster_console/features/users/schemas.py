"""
Pydantic schemas for user-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


class UserCreate(BaseModel):
    """Provision a local account without going through federation."""
    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    company: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=255)


class UserUpdate(BaseModel):
    email: str | None = Field(None, max_length=255)
    company: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=255)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str | None = None
    company: str | None = None
    location: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserPublic(BaseModel):
    """Public user information (limited fields)."""
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)
