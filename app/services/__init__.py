"""Business logic services package."""

from app.services.token_codec import (
    TokenCodecError,
    EncodeFailed,
    DecodeFailed,
)
from app.services.credential_store import CredentialStore
from app.services.state_store import OAuthStateStore
from app.services.oauth_session import (
    OAuthSession,
    AuthorizationRequest,
    OAuthError,
    StateMismatch,
    ExchangeFailed,
    NotAuthenticated,
)
from app.services.forge_client import ForgeClient, UpstreamError
from app.services.webhook_processor import WebhookProcessor, MalformedPayload

__all__ = [
    'TokenCodecError',
    'EncodeFailed',
    'DecodeFailed',
    'CredentialStore',
    'OAuthStateStore',
    'OAuthSession',
    'AuthorizationRequest',
    'OAuthError',
    'StateMismatch',
    'ExchangeFailed',
    'NotAuthenticated',
    'ForgeClient',
    'UpstreamError',
    'WebhookProcessor',
    'MalformedPayload',
]
