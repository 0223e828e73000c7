"""
Role binding store.
"""
from typing import Optional
from sqlalchemy import select, delete, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.core.errors import DuplicateBinding
from cluster_console.features.role_bindings.models import RoleBinding
from cluster_console.features.role_bindings.schemas import RoleBindingDetail
from cluster_console.features.roles.models import Role
from cluster_console.features.users.models import User


class RoleBindingStore:
    """Looks up and persists ``RoleBinding`` rows within one database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_user_and_role(self, user_id: int, role_id: int) -> Optional[RoleBinding]:
        result = await self.db.execute(
            select(RoleBinding).where(
                and_(RoleBinding.user_id == user_id, RoleBinding.role_id == role_id)
            )
        )
        return result.scalar_one_or_none()

    async def save(self, binding: RoleBinding) -> int:
        """
        Insert a binding and return its id.

        The ``(user_id, role_id)`` unique constraint is authoritative: a
        concurrent insert that slipped past the caller's existence check is
        reported the same way as a duplicate found up front. Only the failed
        insert is rolled back; earlier work in the session is kept.

        Raises:
            DuplicateBinding: the user already holds the role
        """
        try:
            async with self.db.begin_nested():
                self.db.add(binding)
                await self.db.flush()
        except IntegrityError:
            raise DuplicateBinding("Role binding already exist")
        return binding.id

    async def has_binding_in_tenant(self, user_id: int, tenant: str) -> bool:
        """Whether the user is bound to any role owned by ``tenant``."""
        result = await self.db.execute(
            select(RoleBinding.id)
            .join(Role, Role.id == RoleBinding.role_id)
            .where(and_(RoleBinding.user_id == user_id, Role.role_source == tenant))
            .limit(1)
        )
        return result.first() is not None

    async def update(self, binding: RoleBinding) -> None:
        await self.db.flush()

    async def delete(self, role_id: int, user_id: int) -> None:
        await self.db.execute(
            delete(RoleBinding).where(
                and_(RoleBinding.role_id == role_id, RoleBinding.user_id == user_id)
            )
        )
        await self.db.flush()

    async def list_by_tenant(self, tenant: str) -> list[RoleBindingDetail]:
        """List bindings on roles owned by ``tenant`` with user and role names."""
        stmt = (
            select(RoleBinding, User.name, Role.role_name)
            .join(User, User.id == RoleBinding.user_id)
            .join(Role, Role.id == RoleBinding.role_id)
            .where(Role.role_source == tenant)
            .order_by(RoleBinding.id)
        )
        result = await self.db.execute(stmt)
        return [
            RoleBindingDetail(
                id=binding.id,
                name=binding.name,
                description=binding.description,
                user_id=binding.user_id,
                user_name=user_name,
                role_id=binding.role_id,
                role_name=role_name,
            )
            for binding, user_name, role_name in result.all()
        ]
