"""
Federated login: maps a GitHub identity onto a local console account.
"""
import time
from typing import Optional
from urllib.parse import quote

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.core.config import FederationSettings
from cluster_console.core.errors import AuthenticationFailed, DuplicateBinding, ErrorKind
from cluster_console.features.federation.provider import GithubProvider
from cluster_console.features.federation.schemas import ExternalProfile, LoginResult
from cluster_console.features.role_bindings.models import RoleBinding
from cluster_console.features.role_bindings.repository import RoleBindingStore
from cluster_console.features.roles.repository import RoleStore
from cluster_console.features.sessions.service import TokenService
from cluster_console.features.users.models import User
from cluster_console.features.users.repository import IdentityStore
from cluster_console.utils import get_logger


log = get_logger(__name__)

CALLBACK_PATH = "/third-party-login/callback/github"

# Roles auto-assigned on login are looked up under this source
AUTO_ASSIGN_ROLE_SOURCE = "admin"


class FederationReconciler:
    """
    Runs the GitHub login sequence.

    The sequence is transport independent: it returns a ``LoginResult`` and
    the HTTP adapters decide whether to answer with a redirect and cookies or
    with a JSON body.
    """

    def __init__(
        self,
        settings: FederationSettings,
        users: IdentityStore,
        roles: RoleStore,
        bindings: RoleBindingStore,
        tokens: TokenService,
        provider: GithubProvider,
    ):
        self.settings = settings
        self.users = users
        self.roles = roles
        self.bindings = bindings
        self.tokens = tokens
        self.provider = provider

    @classmethod
    def for_session(
        cls,
        db: AsyncSession,
        settings: FederationSettings,
        provider: Optional[GithubProvider] = None,
    ) -> "FederationReconciler":
        return cls(
            settings,
            IdentityStore(db),
            RoleStore(db),
            RoleBindingStore(db),
            TokenService(db),
            provider or GithubProvider(settings),
        )

    async def sync_user(self, profile: ExternalProfile) -> User:
        """
        Find or create the local account for ``profile``.

        An existing account only gets its access token replaced; its email,
        company and location are left as they are locally.
        """
        user = await self.users.find_by_name(profile.name)
        if user is not None:
            user.access_token = profile.access_token
            await self.users.update(user)
            return user

        user = User(
            name=profile.name,
            access_token=profile.access_token,
            email=profile.email,
            company=profile.company,
            location=profile.location,
        )
        user.id = await self.users.save(user)
        log.info(f"Created local account {user.name} (id={user.id})")
        return user

    async def assign_role(self, user: User) -> Optional[RoleBinding]:
        """
        Bind the configured auto-assign role to ``user`` if not bound yet.

        A missing role is logged and otherwise ignored so that a
        misconfiguration never blocks logins.
        """
        role_name = self.settings.assigned_role
        if not role_name:
            return None

        role = await self.roles.find_by_name(role_name, AUTO_ASSIGN_ROLE_SOURCE)
        if role is None:
            log.error(
                f"{ErrorKind.MISCONFIGURED_AUTO_ROLE.value}: Cannot assign role. "
                f"Role {role_name} does not exist."
            )
            return None

        existing = await self.bindings.find_by_user_and_role(user.id, role.id)
        if existing is not None:
            return existing

        binding = RoleBinding(name=user.name, user_id=user.id, role_id=role.id)
        try:
            await self.bindings.save(binding)
        except DuplicateBinding:
            # Bound by a concurrent login
            return await self.bindings.find_by_user_and_role(user.id, role.id)
        log.info(f"Assigned role {role_name} to {user.name}")
        return binding

    async def login(self, code: str, session_key: str) -> LoginResult:
        """
        Complete a GitHub login for the authorization ``code``.

        Raises:
            AuthenticationFailed: GitHub rejected the code or returned no profile
        """
        try:
            provider_token = await self.provider.exchange_code_for_token(code)
            profile = await self.provider.fetch_profile(provider_token)
        except (httpx.HTTPError, ValueError) as e:
            log.warning(f"GitHub authentication request failed: {e}")
            raise AuthenticationFailed("Authentication failed, please check carefully")

        if profile is None:
            raise AuthenticationFailed("Authentication failed, please check carefully")

        log.info(f"Authentication successful, logging in {profile.name}")
        user = await self.sync_user(profile)
        await self.assign_role(user)

        token = self.tokens.to_token(f"{user.access_token}{int(time.time() * 1000)}")
        user.access_token = token
        await self.users.update(user)
        await self.tokens.set_token(session_key, token)

        return LoginResult(
            token=token,
            user_name=user.name,
            tenant=user.name,
            session_key=session_key,
        )

    async def logout(self, session_key: str) -> None:
        """Revoke the token issued to ``session_key`` and forget the session."""
        token = await self.tokens.get_token(session_key)
        if token is None:
            return
        user = await self.users.find_by_token(token)
        if user is not None:
            user.access_token = None
            await self.users.update(user)
            log.info(f"Logged out {user.name}")
        await self.tokens.remove_token(session_key)

    def login_url(self) -> str:
        """GitHub authorization URL users are sent to."""
        redirect_uri = quote(self.settings.redirect_host + CALLBACK_PATH, safe="")
        return (
            f"{self.settings.login_host}?access_type=online"
            f"&client_id={self.settings.client_id}"
            f"&scope=read:org&redirect_uri={redirect_uri}"
        )
