"""
Shared fixtures: per-test databases, seeded records and a fake GitHub.
"""
import asyncio
from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from cluster_console.core.config import FederationSettings
from cluster_console.core.database.engine import enable_sqlite_savepoints, init_db
from cluster_console.features.roles.models import ResourceType, ResourceVerbs, Role
from cluster_console.features.tenants.models import Tenant
from cluster_console.features.users.models import User


TEST_SETTINGS = FederationSettings(
    client_id="test-client-id",
    client_secret="test-client-secret",
    login_host="https://github.test/login/oauth/authorize",
    token_host="https://github.test/login/oauth/access_token",
    api_host="https://api.github.test",
    redirect_host="http://console.test",
    assigned_role="",
)


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh in-memory database."""
    engine = enable_sqlite_savepoints(create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool))
    await init_db(bind=engine)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


async def make_user(db: AsyncSession, name: str, access_token: str | None = None) -> User:
    user = User(name=name, access_token=access_token)
    db.add(user)
    await db.flush()
    return user


async def make_tenant(db: AsyncSession, name: str) -> Tenant:
    tenant = Tenant(tenant=name, admin_roles="test-admin-roles", allowed_clusters="test-allowed-clusters")
    db.add(tenant)
    await db.flush()
    return tenant


async def make_role(db: AsyncSession, role_name: str, tenant: Tenant) -> Role:
    role = Role(
        role_name=role_name,
        role_source=tenant.tenant,
        resource_id=tenant.id,
        resource_name=f"{tenant.tenant}-resource",
        resource_type=ResourceType.TENANTS,
        resource_verbs=ResourceVerbs.ADMIN,
        flag=1,
    )
    db.add(role)
    await db.flush()
    return role


class FakeGithub:
    """In-process stand-in for GitHub's OAuth and user endpoints."""

    def __init__(self):
        self.codes: dict[str, str] = {}
        self.profiles: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []

    def add_user(self, code: str, token: str, login: str, **profile):
        self.codes[code] = token
        self.profiles[token] = {"login": login, **profile}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/login/oauth/access_token":
            form = dict(httpx.QueryParams(request.content.decode()))
            token = self.codes.get(form.get("code", ""))
            if token is None:
                return httpx.Response(200, json={"error": "bad_verification_code"})
            return httpx.Response(200, json={"access_token": token, "token_type": "bearer"})
        if request.url.path == "/user":
            token = request.headers.get("Authorization", "").removeprefix("token ")
            profile = self.profiles.get(token)
            if profile is None:
                return httpx.Response(401, json={"message": "Bad credentials"})
            return httpx.Response(200, json=profile)
        return httpx.Response(404)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def github() -> FakeGithub:
    return FakeGithub()


@pytest.fixture
def file_engine(tmp_path):
    """Engine on a temporary SQLite file, usable from any event loop."""
    engine = enable_sqlite_savepoints(
        create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/console.db", poolclass=NullPool)
    )
    asyncio.run(init_db(bind=engine))
    return engine
