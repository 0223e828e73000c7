"""
Seed script for the "admin" tenant and its default roles.

Creates the roles new GitHub users can be auto-assigned to (see
GITHUB_ASSIGNED_ROLE). Safe to run repeatedly.

Usage:
    uv run python -m scripts.seed_roles
"""
import asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.core import config
from cluster_console.core.database.engine import get_db, init_db
from cluster_console.features.federation.service import AUTO_ASSIGN_ROLE_SOURCE
from cluster_console.features.roles.models import ResourceType, ResourceVerbs, Role
from cluster_console.features.roles.repository import RoleStore
from cluster_console.features.tenants.models import Tenant
from cluster_console.features.tenants.repository import TenantStore
from cluster_console.utils import get_logger


log = get_logger(__name__)


DEFAULT_ROLES = {
    "super_admin": {
        "description": "Full control of the admin tenant",
        "verbs": ResourceVerbs.ADMIN,
    },
    "producer": {
        "description": "Produce to topics of the admin tenant",
        "verbs": ResourceVerbs.PRODUCE,
    },
    "consumer": {
        "description": "Consume from topics of the admin tenant",
        "verbs": ResourceVerbs.CONSUME,
    },
}


async def seed_tenant(db: AsyncSession) -> Tenant:
    """Create the admin tenant if missing."""
    tenants = TenantStore(db)
    tenant = await tenants.find_by_name(AUTO_ASSIGN_ROLE_SOURCE)
    if tenant is not None:
        log.debug(f"Tenant '{AUTO_ASSIGN_ROLE_SOURCE}' already exists, skipping")
        return tenant

    tenant = Tenant(tenant=AUTO_ASSIGN_ROLE_SOURCE)
    await tenants.save(tenant)
    log.info(f"Created tenant: {AUTO_ASSIGN_ROLE_SOURCE}")
    return tenant


async def seed_roles(db: AsyncSession, tenant: Tenant):
    """Create the default roles of the admin tenant."""
    roles = RoleStore(db)
    role_names = dict(DEFAULT_ROLES)
    if config.GITHUB_ASSIGNED_ROLE and config.GITHUB_ASSIGNED_ROLE not in role_names:
        role_names[config.GITHUB_ASSIGNED_ROLE] = {
            "description": "Assigned to users on their first GitHub login",
            "verbs": ResourceVerbs.CONSUME,
        }

    for role_name, role_config in role_names.items():
        if await roles.find_by_name(role_name, tenant.tenant) is not None:
            log.debug(f"Role '{role_name}' already exists, skipping")
            continue

        await roles.save(Role(
            role_name=role_name,
            role_source=tenant.tenant,
            description=role_config["description"],
            resource_id=tenant.id,
            resource_name=tenant.tenant,
            resource_type=ResourceType.TENANTS,
            resource_verbs=role_config["verbs"],
        ))
        log.info(f"Created role '{role_name}' ({role_config['verbs'].value})")


async def main():
    log.info("Starting role seeding...")
    await init_db()

    async for db in get_db():
        try:
            tenant = await seed_tenant(db)
            await seed_roles(db, tenant)
            await db.commit()
            log.info("Role seeding completed successfully!")
        except Exception as e:
            log.error(f"Error seeding roles: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())
