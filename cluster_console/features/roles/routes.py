"""
Role management API routes.

Roles are always read and written in the tenant given by the ``tenant``
header; the same role name may exist in several tenants.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status

from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.core.database.engine import get_db
from cluster_console.core.errors import DuplicateRole
from cluster_console.features.roles.models import Role
from cluster_console.features.roles.repository import RoleStore
from cluster_console.features.roles.schemas import RoleCreate, RoleUpdate, RoleResponse
from cluster_console.features.users.dependencies import get_current_user, get_tenant
from cluster_console.features.users.models import User
from cluster_console.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


async def get_tenant_role(
    role_name: str,
    tenant: str = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> Role:
    role = await RoleStore(db).find_by_name(role_name, tenant)
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="This role is no exist"
        )
    return role


@router.post("/", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    role: RoleCreate,
    tenant: str = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a role owned by the request tenant."""
    db_role = Role(role_source=tenant, **role.model_dump())
    try:
        await RoleStore(db).save(db_role)
    except DuplicateRole as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    log.info(f"User {current_user.name} created role {role.role_name} in {tenant}")
    await db.refresh(db_role)
    return db_role


@router.get("/", response_model=List[RoleResponse])
async def list_roles(
    skip: int = 0,
    limit: int = 100,
    tenant: str = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List the roles owned by the request tenant."""
    return await RoleStore(db).list_by_source(tenant, skip=skip, limit=limit)


@router.get("/{role_name}", response_model=RoleResponse)
async def get_role(
    role: Role = Depends(get_tenant_role),
    current_user: User = Depends(get_current_user)
):
    """Get a role of the request tenant by name."""
    return role


@router.put("/{role_name}", response_model=RoleResponse)
async def update_role(
    role_update: RoleUpdate,
    role: Role = Depends(get_tenant_role),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update a role's description, verbs or flag."""
    for field, value in role_update.model_dump(exclude_unset=True).items():
        setattr(role, field, value)

    await RoleStore(db).update(role)
    await db.refresh(role)
    return role


@router.delete("/{role_name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role: Role = Depends(get_tenant_role),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a role. Bindings to it must be deleted first."""
    await RoleStore(db).delete(role.role_name, role.role_source)
    log.info(f"User {current_user.name} deleted role {role.role_name} in {role.role_source}")
