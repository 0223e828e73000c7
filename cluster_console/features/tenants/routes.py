"""
Tenant routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.core.database.engine import get_db
from cluster_console.features.tenants.models import Tenant
from cluster_console.features.tenants.repository import TenantStore
from cluster_console.features.tenants.schemas import TenantCreate, TenantResponse
from cluster_console.features.users.dependencies import get_current_user
from cluster_console.features.users.models import User


router = APIRouter(tags=["tenants"])


@router.post("/", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    tenant_data: TenantCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Register a tenant."""
    tenant = Tenant(**tenant_data.model_dump())
    try:
        await TenantStore(db).save(tenant)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Tenant already exists"
        )
    await db.refresh(tenant)
    return tenant


@router.get("/", response_model=list[TenantResponse])
async def list_tenants(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: int = 0,
    limit: int = 100
):
    return await TenantStore(db).list(skip=skip, limit=limit)


@router.delete("/{tenant}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_tenant(
    tenant: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Remove a tenant. Its roles must be deleted first."""
    tenants = TenantStore(db)
    if await tenants.find_by_name(tenant) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tenant not found"
        )
    await tenants.remove(tenant)
