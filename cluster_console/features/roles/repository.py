"""
Role store.
"""
from typing import Optional
from sqlalchemy import select, delete, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.core.errors import DuplicateRole
from cluster_console.features.roles.models import Role


class RoleStore:
    """Looks up and persists ``Role`` rows within one database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_name(self, role_name: str, role_source: str) -> Optional[Role]:
        """Find a role by its name within the tenant that owns it."""
        result = await self.db.execute(
            select(Role).where(
                and_(Role.role_name == role_name, Role.role_source == role_source)
            )
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, role_id: int) -> Optional[Role]:
        return await self.db.get(Role, role_id)

    async def list_by_source(self, role_source: str, skip: int = 0, limit: int = 100) -> list[Role]:
        result = await self.db.execute(
            select(Role)
            .where(Role.role_source == role_source)
            .order_by(Role.role_name)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def save(self, role: Role) -> int:
        """
        Insert a role and return its generated id.

        Raises:
            DuplicateRole: a role with the same name already exists in the source
        """
        role_name, role_source = role.role_name, role.role_source
        try:
            async with self.db.begin_nested():
                self.db.add(role)
                await self.db.flush()
        except IntegrityError:
            raise DuplicateRole(f"Role {role_name} already exists in {role_source}")
        return role.id

    async def update(self, role: Role) -> None:
        await self.db.flush()

    async def delete(self, role_name: str, role_source: str) -> None:
        await self.db.execute(
            delete(Role).where(
                and_(Role.role_name == role_name, Role.role_source == role_source)
            )
        )
        await self.db.flush()
