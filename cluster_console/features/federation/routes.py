"""
Third-party (GitHub) login routes.

These endpoints are reached before the user has a token, so none of them
require authentication. Both callbacks run the same login sequence and only
differ in how the result is returned.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from starlette.responses import Response

from cluster_console.core.errors import AuthenticationFailed
from cluster_console.core.rate_limit import limiter, LOGIN_RATE_LIMIT
from cluster_console.features.federation.dependencies import (
    SESSION_COOKIE,
    get_reconciler,
    get_session_key,
)
from cluster_console.features.federation.schemas import LoginResponse, LoginResult
from cluster_console.features.federation.service import FederationReconciler
from cluster_console.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


async def run_login(reconciler: FederationReconciler, code: str, session_key: str) -> LoginResult:
    try:
        return await reconciler.login(code, session_key)
    except AuthenticationFailed as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)


@router.get("/callback/github", status_code=status.HTTP_302_FOUND)
@limiter.limit(LOGIN_RATE_LIMIT)
async def github_callback(
    request: Request,
    code: Annotated[str, Query(min_length=1)],
    reconciler: Annotated[FederationReconciler, Depends(get_reconciler)],
    session_key: Annotated[str, Depends(get_session_key)],
):
    """
    OAuth callback GitHub redirects to after the user authorized the app.

    Redirects to the console root with the session token and user name in
    cookies.
    """
    result = await run_login(reconciler, code, session_key)
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    response.set_cookie("Admin-Token", result.token, path="/")
    response.set_cookie("username", result.user_name, path="/")
    response.set_cookie("tenant", result.tenant, path="/")
    response.set_cookie(SESSION_COOKIE, result.session_key, path="/", httponly=True)
    return response


@router.get("/callback/github/json", response_model=LoginResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
async def github_callback_json(
    request: Request,
    response: Response,
    code: Annotated[str, Query(min_length=1)],
    reconciler: Annotated[FederationReconciler, Depends(get_reconciler)],
    session_key: Annotated[str, Depends(get_session_key)],
):
    """Same as the redirect callback, for clients that want a JSON body."""
    result = await run_login(reconciler, code, session_key)
    response.set_cookie(SESSION_COOKIE, result.session_key, path="/", httponly=True)
    return LoginResponse(token=result.token, username=result.user_name, tenant=result.tenant)


@router.get("/github/login", status_code=status.HTTP_302_FOUND)
async def github_login(
    reconciler: Annotated[FederationReconciler, Depends(get_reconciler)],
):
    """Redirect to GitHub's authorization page."""
    return RedirectResponse(url=reconciler.login_url(), status_code=status.HTTP_302_FOUND)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request,
    reconciler: Annotated[FederationReconciler, Depends(get_reconciler)],
):
    """Revoke the token bound to the caller's session."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    session_key = request.cookies.get(SESSION_COOKIE)
    if session_key:
        await reconciler.logout(session_key)
    for cookie in ("Admin-Token", "username", "tenant", SESSION_COOKIE):
        response.delete_cookie(cookie, path="/")
    return response
