"""
Pydantic schemas for role management.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator

from cluster_console.features.roles.models import ResourceType, ResourceVerbs


class RoleBase(BaseModel):
    """Base role schema."""
    role_name: str = Field(..., min_length=1, max_length=255, description="Role name, unique per tenant")
    description: Optional[str] = Field(None, max_length=1000, description="Role description")
    resource_id: int = Field(..., description="Id of the resource the role is scoped to")
    resource_name: str = Field(..., min_length=1, max_length=255)
    resource_type: ResourceType = ResourceType.TENANTS
    resource_verbs: ResourceVerbs = ResourceVerbs.ADMIN
    flag: int = 0


class RoleCreate(RoleBase):
    """Schema for creating a role in the request tenant."""

    @field_validator('role_name')
    @classmethod
    def name_alphanumeric_underscore(cls, v: str) -> str:
        """Validate role name format."""
        if not v.replace('_', '').replace('-', '').isalnum():
            raise ValueError('Role name must contain only alphanumeric characters, underscores, and hyphens')
        return v


class RoleUpdate(BaseModel):
    """Schema for updating a role."""
    description: Optional[str] = Field(None, max_length=1000)
    resource_verbs: Optional[ResourceVerbs] = None
    flag: Optional[int] = None


class RoleResponse(RoleBase):
    """Schema for role response."""
    id: int
    role_source: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
