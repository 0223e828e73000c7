"""
FastAPI dependencies for authentication.
"""
from typing import Annotated
import jwt
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.core.database.engine import get_db
from cluster_console.features.sessions.service import TokenService
from cluster_console.features.users.models import User
from cluster_console.features.users.repository import IdentityStore


security = HTTPBearer()


async def get_token(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> str:
    """
    Return the bearer token after checking it was issued by this console.

    Raises:
        HTTPException: 401 if the signature does not verify
    """
    token = credentials.credentials
    try:
        TokenService(db).decode(token)
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


async def get_current_user(
    token: Annotated[str, Depends(get_token)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> User:
    """
    Resolve the bearer token to the account it was last issued to.

    A token that was rotated out by a newer login no longer resolves.

    Usage:
        @router.get("/me")
        async def get_me(user: User = Depends(get_current_user)):
            return user
    """
    user = await IdentityStore(db).find_by_token(token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no exist.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_tenant(tenant: Annotated[str, Header(min_length=1)]) -> str:
    """Tenant the request operates on, from the ``tenant`` header."""
    return tenant


def get_authorization_header(request) -> str:
    """
    Extract authorization header for rate limiting.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    if auth:
        return auth
    return request.client.host if request.client else "anonymous"
