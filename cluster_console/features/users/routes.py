"""
User feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.core.database.engine import get_db
from cluster_console.features.users.models import User
from cluster_console.features.users.repository import IdentityStore
from cluster_console.features.users.schemas import UserCreate, UserResponse, UserPublic, UserUpdate
from cluster_console.features.users.dependencies import get_current_user


router = APIRouter(tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    user: Annotated[User, Depends(get_current_user)]
):
    """Get current authenticated user's profile."""
    return user


@router.patch("/me", response_model=UserResponse)
async def update_current_user_profile(
    update_data: UserUpdate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update current user's profile. Later logins do not overwrite these fields."""
    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(user, field, value)

    await IdentityStore(db).update(user)
    await db.refresh(user)
    return user


@router.get("/", response_model=list[UserPublic])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
    skip: int = 0,
    limit: int = 50
):
    """List accounts (public info only)."""
    result = await db.execute(select(User).order_by(User.name).offset(skip).limit(limit))
    return result.scalars().all()


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
):
    """Provision a local account so it can be bound to roles before first login."""
    users = IdentityStore(db)
    if await users.find_by_name(user_data.name) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this name already exists"
        )

    user = User(**user_data.model_dump())
    try:
        await users.save(user)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this name already exists"
        )
    await db.refresh(user)
    return user


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    name: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    """Delete an account. Its role bindings must be removed first."""
    users = IdentityStore(db)
    if await users.find_by_name(name) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    if name == user.name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account"
        )

    await users.delete(name)
