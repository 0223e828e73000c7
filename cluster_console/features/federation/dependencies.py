"""
Dependencies for the third-party login routes.
"""
from typing import Annotated
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from ulid import ULID

from cluster_console.core.config import FederationSettings, get_federation_settings
from cluster_console.core.database.engine import get_db
from cluster_console.features.federation.provider import GithubProvider
from cluster_console.features.federation.service import FederationReconciler
from cluster_console.utils import get_logger


log = get_logger(__name__)

SESSION_COOKIE = "session_id"


def get_settings() -> FederationSettings:
    return get_federation_settings()


def get_provider(
    settings: Annotated[FederationSettings, Depends(get_settings)]
) -> GithubProvider:
    return GithubProvider(settings)


def get_reconciler(
    settings: Annotated[FederationSettings, Depends(get_settings)],
    provider: Annotated[GithubProvider, Depends(get_provider)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FederationReconciler:
    return FederationReconciler.for_session(db, settings, provider)


def get_session_key(request: Request) -> str:
    """
    Session key from the session cookie, or a new one for first visits.

    Cookies that are not a ULID are replaced with a fresh key.
    """
    cookie = request.cookies.get(SESSION_COOKIE)
    if cookie:
        try:
            return str(ULID.from_str(cookie))
        except ValueError:
            log.info("Replacing malformed session cookie")
    return str(ULID())
