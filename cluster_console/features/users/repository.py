"""
Identity store: persistence of local user accounts.
"""
from typing import Optional
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.features.users.models import User


class IdentityStore:
    """Looks up and persists ``User`` rows within one database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_name(self, name: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.name == name))
        return result.scalar_one_or_none()

    async def find_by_token(self, token: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.access_token == token))
        return result.scalars().first()

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def save(self, user: User) -> int:
        """Insert a new user and return its generated id."""
        self.db.add(user)
        await self.db.flush()
        return user.id

    async def update(self, user: User) -> None:
        # The instance may come from another session's result; merge it back
        if user not in self.db:
            user = await self.db.merge(user)
        await self.db.flush()

    async def delete(self, name: str) -> None:
        await self.db.execute(delete(User).where(User.name == name))
        await self.db.flush()
