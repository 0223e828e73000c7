"""
GitHub OAuth collaborator.

Reference: https://docs.github.com/en/apps/oauth-apps/building-oauth-apps/authorizing-oauth-apps
"""
from typing import Optional

import httpx

from cluster_console.core.config import FederationSettings
from cluster_console.features.federation.schemas import ExternalProfile
from cluster_console.utils import get_logger


log = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


class GithubProvider:
    """Exchanges OAuth codes for tokens and fetches the GitHub user profile."""

    def __init__(self, settings: FederationSettings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._client = client

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(method, url, **kwargs)
        async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as client:
            return await client.request(method, url, **kwargs)

    async def exchange_code_for_token(self, code: str) -> Optional[str]:
        """
        Trade the callback ``code`` for a GitHub access token.

        Returns:
            The access token, or None if GitHub rejected the code

        Raises:
            httpx.HTTPError: On transport failures or non-2xx responses
        """
        response = await self._request(
            "POST",
            self.settings.token_host,
            data={
                "client_id": self.settings.client_id,
                "client_secret": self.settings.client_secret,
                "code": code,
            },
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        body = response.json()
        if "error" in body:
            log.warning(f"GitHub rejected authorization code: {body.get('error_description', body['error'])}")
            return None
        return body.get("access_token")

    async def fetch_profile(self, access_token: Optional[str]) -> Optional[ExternalProfile]:
        """
        Fetch the authenticated user's profile.

        Returns:
            The profile, or None if the token is missing or not accepted
        """
        if not access_token:
            return None
        response = await self._request(
            "GET",
            f"{self.settings.api_host.rstrip('/')}/user",
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"token {access_token}",
            },
        )
        if response.status_code == httpx.codes.UNAUTHORIZED:
            return None
        response.raise_for_status()
        body = response.json()
        if not body.get("login"):
            return None
        return ExternalProfile(
            name=body["login"],
            access_token=access_token,
            email=body.get("email"),
            company=body.get("company"),
            location=body.get("location"),
        )
