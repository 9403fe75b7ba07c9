"""Data models for the PR ticket linker."""

from .api_response import HealthResponse, WebhookResponse
from .credential import Credential, UserHandle
from .webhook_event import (
    EditResult,
    ProcessingResult,
    ProcessingState,
    PullRequestMutation,
    PullRequestPayload,
    RepositoryOwner,
    RepositoryPayload,
    WebhookEvent,
)

__all__ = [
    # Credential models
    "Credential",
    "UserHandle",
    # Webhook event models
    "WebhookEvent",
    "PullRequestPayload",
    "RepositoryPayload",
    "RepositoryOwner",
    "PullRequestMutation",
    "EditResult",
    "ProcessingState",
    "ProcessingResult",
    # API response models
    "WebhookResponse",
    "HealthResponse",
]
