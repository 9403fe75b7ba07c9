"""
Service providers for the API routers.

Each provider builds its service once per process from application settings.
Tests replace them through `app.dependency_overrides`.
"""

from functools import lru_cache

from fastapi import Depends

from app.config import settings
from app.services.credential_store import environ_credential_store
from app.services.forge_client import ForgeClient
from app.services.oauth_session import OAuthSession
from app.services.state_store import OAuthStateStore
from app.services.webhook_processor import WebhookProcessor


@lru_cache(maxsize=None)
def get_oauth_session() -> OAuthSession:
    """Process-wide OAuth session, restored from OAUTH_TOKEN when set."""
    credential_store = environ_credential_store()
    credential_store.seed_from(settings.oauth_token)
    return OAuthSession(
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        scopes=settings.oauth_scopes,
        credential_store=credential_store,
        state_store=OAuthStateStore(ttl_seconds=settings.oauth_state_ttl_seconds),
        oauth_url=settings.github_oauth_url,
        redirect_url=settings.oauth_redirect_url,
        timeout=settings.forge_timeout_seconds,
    )


@lru_cache(maxsize=None)
def get_forge_client() -> ForgeClient:
    return ForgeClient(
        base_url=settings.github_api_url,
        timeout=settings.forge_timeout_seconds,
    )


def get_webhook_processor(
    oauth_session: OAuthSession = Depends(get_oauth_session),
    forge_client: ForgeClient = Depends(get_forge_client),
) -> WebhookProcessor:
    return WebhookProcessor(
        oauth_session=oauth_session,
        forge_client=forge_client,
        jira_base_url=settings.jira_base_url,
        title_placeholder=settings.pr_title_template,
        reminder=settings.pr_reminder_text,
    )
