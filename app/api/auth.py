"""
Login endpoints: landing page, OAuth redirect and OAuth callback.

Failures in the OAuth flow are logged and the browser is sent back to the
landing page; nothing is surfaced to the user.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends
from fastapi.responses import HTMLResponse, RedirectResponse

from app.services.forge_client import ForgeClient, UpstreamError
from app.services.oauth_session import OAuthError, OAuthSession
from app.api.dependencies import get_forge_client, get_oauth_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

FLOW_COOKIE = "oauth_flow"
CALLBACK_PATH = "/github_go_taskbot"

HTML_INDEX = """<html><body>
Log in with <a href="/login">GitHub</a>
</body></html>
"""


def _redirect_home() -> RedirectResponse:
    response = RedirectResponse(url="/", status_code=307)
    response.delete_cookie(FLOW_COOKIE)
    return response


@router.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
    """Landing page with the login link."""
    return HTMLResponse(content=HTML_INDEX, status_code=200)


@router.get("/login")
def login(oauth_session: OAuthSession = Depends(get_oauth_session)) -> RedirectResponse:
    """Redirect the browser to GitHub's authorization page."""
    request = oauth_session.begin_authorization()
    response = RedirectResponse(url=request.url, status_code=307)
    response.set_cookie(
        FLOW_COOKIE,
        request.flow_id,
        max_age=oauth_session.states.ttl_seconds,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get(CALLBACK_PATH)
def oauth_callback(
    state: Optional[str] = None,
    code: Optional[str] = None,
    oauth_flow: Optional[str] = Cookie(None),
    oauth_session: OAuthSession = Depends(get_oauth_session),
    forge_client: ForgeClient = Depends(get_forge_client),
) -> RedirectResponse:
    """
    Complete the OAuth flow started by /login.

    Always redirects to the landing page.
    """
    try:
        credential = oauth_session.complete_authorization(state, code, oauth_flow)
    except OAuthError as e:
        logger.error(f"OAuth login failed: {type(e).__name__}: {e}")
        return _redirect_home()

    try:
        user = forge_client.get_current_user(credential)
    except UpstreamError as e:
        logger.error(f"Looking up the logged in user failed: {e}")
        return _redirect_home()

    logger.info(f"Logged in as GitHub user: {user.login}")
    return _redirect_home()
