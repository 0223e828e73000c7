"""
Tenant store.
"""
from typing import Optional
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.features.tenants.models import Tenant


class TenantStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_name(self, tenant: str) -> Optional[Tenant]:
        result = await self.db.execute(select(Tenant).where(Tenant.tenant == tenant))
        return result.scalar_one_or_none()

    async def list(self, skip: int = 0, limit: int = 100) -> list[Tenant]:
        result = await self.db.execute(
            select(Tenant).order_by(Tenant.tenant).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def save(self, tenant: Tenant) -> int:
        self.db.add(tenant)
        await self.db.flush()
        return tenant.id

    async def remove(self, tenant: str) -> None:
        await self.db.execute(delete(Tenant).where(Tenant.tenant == tenant))
        await self.db.flush()
