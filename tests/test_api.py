"""
HTTP tests for the login callbacks and the guarded role binding endpoints.
"""
import asyncio
import logging

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from cluster_console.core import config
from cluster_console.core.database.engine import get_db
from cluster_console.core.rate_limit import limiter
from cluster_console.features.federation.dependencies import get_provider, get_settings
from cluster_console.features.federation.provider import GithubProvider
from cluster_console.features.role_bindings.models import RoleBinding
from cluster_console.features.role_bindings.repository import RoleBindingStore
from cluster_console.features.users.repository import IdentityStore
from cluster_console.main import app, warn_on_default_secret

from tests.conftest import TEST_SETTINGS, make_role, make_tenant, make_user


@pytest.fixture
def session_factory(file_engine):
    return async_sessionmaker(file_engine, expire_on_commit=False)


@pytest.fixture
def client(session_factory, github):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    app.dependency_overrides[get_provider] = lambda: GithubProvider(TEST_SETTINGS, client=github.client())
    limiter.enabled = False
    yield TestClient(app)
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def seed(session_factory):
    """Run ``fn(db)`` in its own session and commit."""
    def run(fn):
        async def go():
            async with session_factory() as db:
                value = await fn(db)
                await db.commit()
                return value
        return asyncio.run(go())
    return run


def login(client, github, code, gh_token, name) -> str:
    github.add_user(code, gh_token, name)
    response = client.get(f"/third-party-login/callback/github/json?code={code}")
    assert response.status_code == 200
    return response.json()["token"]


class TestCallbacks:

    def test_redirect_callback_sets_cookies(self, client, github):
        github.add_user("code-1", "gh-token", "alice")

        response = client.get("/third-party-login/callback/github?code=code-1", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        assert response.cookies["username"] == "alice"
        assert response.cookies["tenant"] == "alice"
        assert response.cookies["Admin-Token"]
        assert response.cookies["session_id"]

    def test_json_callback_returns_token(self, client, github):
        token = login(client, github, "code-1", "gh-token", "alice")

        me = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

        assert me.status_code == 200
        assert me.json()["name"] == "alice"

    def test_rejected_code_is_unauthorized(self, client):
        assert client.get("/third-party-login/callback/github?code=nope", follow_redirects=False).status_code == 401
        assert client.get("/third-party-login/callback/github/json?code=nope").status_code == 401

    def test_previous_token_stops_working_after_relogin(self, client, github):
        first = login(client, github, "code-1", "gh-token", "alice")
        login(client, github, "code-2", "gh-token-2", "alice")

        assert client.get("/users/me", headers={"Authorization": f"Bearer {first}"}).status_code == 401

    def test_malformed_session_cookie_is_replaced(self, client, github):
        github.add_user("code-1", "gh-token", "alice")
        client.cookies.set("session_id", "x" * 200)

        response = client.get("/third-party-login/callback/github/json?code=code-1")

        assert response.status_code == 200
        session_key = response.cookies["session_id"]
        assert session_key != "x" * 200
        assert len(session_key) == 26

    def test_login_url_redirect(self, client):
        response = client.get("/third-party-login/github/login", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"].startswith("https://github.test/login/oauth/authorize?")
        assert "client_id=test-client-id" in response.headers["location"]


class TestRoleBindingEndpoints:

    def test_create_then_duplicate(self, client, github, seed):
        token = login(client, github, "code-1", "gh-token", "bob")

        async def setup(db):
            await make_role(db, "ops", await make_tenant(db, "bob"))
        seed(setup)

        headers = {"Authorization": f"Bearer {token}", "tenant": "bob"}
        body = {"name": "bob-ops", "description": "on call", "user_name": "bob", "role_name": "ops"}

        created = client.put("/role-binding", json=body, headers=headers)
        assert created.status_code == 200

        duplicate = client.put("/role-binding", json=body, headers=headers)
        assert duplicate.status_code == 409
        assert duplicate.json()["detail"] == "Role binding already exist"

        listed = client.get("/role-binding", headers=headers).json()
        assert listed["total"] == 1
        assert listed["data"][0]["user_name"] == "bob"
        assert listed["data"][0]["role_name"] == "ops"

    def test_create_reports_missing_user_before_missing_role(self, client, github):
        token = login(client, github, "code-1", "gh-token", "bob")
        headers = {"Authorization": f"Bearer {token}", "tenant": "bob"}

        response = client.put(
            "/role-binding",
            json={"name": "x", "user_name": "ghost", "role_name": "missing"},
            headers=headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "The user is not exist"

    def test_only_holders_may_update_or_delete(self, client, github, seed):
        bob_token = login(client, github, "code-1", "gh-token", "bob")
        carol_token = login(client, github, "code-2", "gh-token-2", "carol")

        async def setup(db):
            await make_role(db, "ops", await make_tenant(db, "bob"))
        seed(setup)

        bob = {"Authorization": f"Bearer {bob_token}", "tenant": "bob"}
        carol = {"Authorization": f"Bearer {carol_token}", "tenant": "bob"}
        client.put("/role-binding", json={"name": "bob-ops", "user_name": "bob", "role_name": "ops"}, headers=bob)

        target = {"name": "renamed", "user_name": "bob", "role_name": "ops"}
        denied = client.post("/role-binding", json=target, headers=carol)
        assert denied.status_code == 403
        assert denied.json()["detail"] == "This operation is illegal for this user"

        assert client.post("/role-binding", json=target, headers=bob).status_code == 200
        assert client.get("/role-binding", headers=bob).json()["data"][0]["name"] == "renamed"

        remove = {"user_name": "bob", "role_name": "ops"}
        assert client.request("DELETE", "/role-binding", json=remove, headers=carol).status_code == 403
        assert client.request("DELETE", "/role-binding", json=remove, headers=bob).status_code == 200
        assert client.get("/role-binding", headers=bob).json()["total"] == 0

    def test_cannot_grant_roles_in_foreign_tenant(self, client, github, seed):
        login(client, github, "code-1", "gh-token", "bob")
        carol_token = login(client, github, "code-2", "gh-token-2", "carol")

        async def setup(db):
            role = await make_role(db, "ops", await make_tenant(db, "tenantA"))
            bob = await IdentityStore(db).find_by_name("bob")
            await RoleBindingStore(db).save(RoleBinding(name="bob-ops", user_id=bob.id, role_id=role.id))
        seed(setup)

        carol = {"Authorization": f"Bearer {carol_token}", "tenant": "tenantA"}
        granted = client.put(
            "/role-binding",
            json={"name": "carol-ops", "user_name": "carol", "role_name": "ops"},
            headers=carol,
        )
        assert granted.status_code == 403
        assert granted.json()["detail"] == "This operation is illegal for this user"

        remove = {"user_name": "bob", "role_name": "ops"}
        assert client.request("DELETE", "/role-binding", json=remove, headers=carol).status_code == 403
        assert client.get("/role-binding", headers=carol).json()["total"] == 1

    def test_holder_may_grant_within_tenant(self, client, github, seed):
        bob_token = login(client, github, "code-1", "gh-token", "bob")
        login(client, github, "code-2", "gh-token-2", "carol")

        async def setup(db):
            tenant = await make_tenant(db, "tenantA")
            ops = await make_role(db, "ops", tenant)
            await make_role(db, "viewer", tenant)
            bob = await IdentityStore(db).find_by_name("bob")
            await RoleBindingStore(db).save(RoleBinding(name="bob-ops", user_id=bob.id, role_id=ops.id))
        seed(setup)

        bob = {"Authorization": f"Bearer {bob_token}", "tenant": "tenantA"}
        granted = client.put(
            "/role-binding",
            json={"name": "carol-viewer", "user_name": "carol", "role_name": "viewer"},
            headers=bob,
        )

        assert granted.status_code == 200
        assert client.get("/role-binding", headers=bob).json()["total"] == 2

    def test_requires_tenant_header_and_valid_token(self, client, seed):
        async def setup(db):
            await make_user(db, "mallory", "not-a-jwt")
        seed(setup)

        assert client.get("/role-binding", headers={"Authorization": "Bearer not-a-jwt", "tenant": "t"}).status_code == 401
        assert client.get("/role-binding").status_code in (400, 401, 403)


class TestTenantAndRoleEndpoints:

    def test_role_lifecycle_within_tenant(self, client, github):
        token = login(client, github, "code-1", "gh-token", "alice")
        auth = {"Authorization": f"Bearer {token}"}

        tenant = client.post("/tenants/", json={"tenant": "tenantA"}, headers=auth)
        assert tenant.status_code == 201
        assert client.post("/tenants/", json={"tenant": "tenantA"}, headers=auth).status_code == 409

        headers = {**auth, "tenant": "tenantA"}
        role = {
            "role_name": "ops",
            "resource_id": tenant.json()["id"],
            "resource_name": "tenantA",
            "resource_type": "TENANTS",
            "resource_verbs": "ADMIN",
        }
        created = client.post("/roles/", json=role, headers=headers)
        assert created.status_code == 201
        assert created.json()["role_source"] == "tenantA"
        assert client.post("/roles/", json=role, headers=headers).status_code == 409

        # Same name is free in another tenant
        assert client.post("/roles/", json=role, headers={**auth, "tenant": "tenantB"}).status_code == 201

        updated = client.put("/roles/ops", json={"resource_verbs": "CONSUME"}, headers=headers)
        assert updated.json()["resource_verbs"] == "CONSUME"

        assert [r["role_name"] for r in client.get("/roles/", headers=headers).json()] == ["ops"]
        assert client.delete("/roles/ops", headers=headers).status_code == 204
        assert client.get("/roles/ops", headers=headers).status_code == 404
        assert client.delete("/tenants/tenantA", headers=auth).status_code == 204

    def test_local_profile_edits_survive_relogin(self, client, github):
        token = login(client, github, "code-1", "gh-token", "alice")
        auth = {"Authorization": f"Bearer {token}"}
        client.patch("/users/me", json={"company": "Local Co"}, headers=auth)

        github.add_user("code-2", "gh-token-2", "alice", company="GitHub Co")
        response = client.get("/third-party-login/callback/github/json?code=code-2")
        me = client.get("/users/me", headers={"Authorization": f"Bearer {response.json()['token']}"})

        assert me.json()["company"] == "Local Co"

    def test_logout_revokes_bearer_token(self, client, github):
        token = login(client, github, "code-1", "gh-token", "alice")
        auth = {"Authorization": f"Bearer {token}"}
        assert client.cookies.get("session_id")
        assert client.get("/users/me", headers=auth).status_code == 200

        response = client.post("/third-party-login/logout")

        assert response.status_code == 204
        assert client.get("/users/me", headers=auth).status_code == 401

    def test_logout_without_session_is_harmless(self, client):
        assert client.post("/third-party-login/logout").status_code == 204


class TestStartupWarnings:

    def test_default_secret_is_reported(self, caplog, monkeypatch):
        monkeypatch.setattr(config, "JWT_SECRET", config.DEFAULT_JWT_SECRET)

        with caplog.at_level(logging.WARNING, logger="cluster_console"):
            warn_on_default_secret()

        assert "JWT_SECRET is not set" in caplog.text

    def test_configured_secret_is_quiet(self, caplog, monkeypatch):
        monkeypatch.setattr(config, "JWT_SECRET", "a-deployment-secret-that-is-long-enough")

        with caplog.at_level(logging.WARNING, logger="cluster_console"):
            warn_on_default_secret()

        assert "JWT_SECRET" not in caplog.text
