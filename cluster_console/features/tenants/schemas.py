"""
Pydantic schemas for tenants.
"""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


class TenantCreate(BaseModel):
    tenant: str = Field(..., min_length=1, max_length=255)
    admin_roles: str | None = Field(None, max_length=1024)
    allowed_clusters: str | None = Field(None, max_length=1024)


class TenantResponse(TenantCreate):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
