"""
Pydantic schemas for role binding requests and responses.
"""
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class RoleBindingCreate(BaseModel):
    """Bind ``role_name`` (owned by the request tenant) to ``user_name``."""
    name: str = Field(..., min_length=1, max_length=255, description="Binding name")
    description: Optional[str] = Field(None, max_length=1000)
    user_name: str = Field(..., min_length=1, max_length=255)
    role_name: str = Field(..., min_length=1, max_length=255)


class RoleBindingUpdate(RoleBindingCreate):
    """Update the name and description of an existing binding."""


class RoleBindingDelete(BaseModel):
    user_name: str = Field(..., min_length=1, max_length=255)
    role_name: str = Field(..., min_length=1, max_length=255)


class RoleBindingResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    user_id: int
    role_id: int

    model_config = ConfigDict(from_attributes=True)


class RoleBindingDetail(RoleBindingResponse):
    """Binding enriched with the bound user's and role's names."""
    user_name: str
    role_name: str


class RoleBindingListResponse(BaseModel):
    total: int
    data: list[RoleBindingDetail]


class MessageResponse(BaseModel):
    message: str
