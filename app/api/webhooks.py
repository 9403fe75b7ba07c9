"""
Webhook endpoint for GitHub pull request events.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from app.api.dependencies import get_webhook_processor
from app.models.api_response import WebhookResponse
from app.models.webhook_event import ProcessingState
from app.services.forge_client import UpstreamError
from app.services.oauth_session import NotAuthenticated
from app.services.webhook_processor import MalformedPayload, WebhookProcessor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

PULL_REQUEST_EVENT = "pull_request"


async def raw_body(request: Request) -> bytes:
    """Request body, read on the event loop before the handler thread starts."""
    return await request.body()


@router.post("", response_model=WebhookResponse)
def handle_pull_request_webhook(
    body: bytes = Depends(raw_body),
    x_github_event: Optional[str] = Header(None, alias="X-GitHub-Event"),
    processor: WebhookProcessor = Depends(get_webhook_processor),
) -> WebhookResponse:
    """
    Receive a GitHub webhook delivery and rewrite newly opened pull requests.

    Returns:
        WebhookResponse with status `ignored` or `applied`

    Raises:
        HTTPException: 400 for malformed payloads, 401 when no maintainer
            has logged in, 502 when GitHub rejects the edit
    """
    if x_github_event is not None and x_github_event != PULL_REQUEST_EVENT:
        logger.info(f"Ignoring event type: {x_github_event}")
        return WebhookResponse(
            status=ProcessingState.IGNORED.value,
            message=f"Event type {x_github_event} not processed"
        )

    try:
        event = processor.decode(body)
    except MalformedPayload as e:
        logger.warning(f"Rejecting malformed webhook payload: {e}")
        raise HTTPException(status_code=400, detail=f"Malformed payload: {e}")

    try:
        result = processor.process(event)
    except NotAuthenticated:
        raise HTTPException(status_code=401, detail="Not authenticated: log in via /login first")
    except UpstreamError as e:
        raise HTTPException(
            status_code=502,
            detail=f"GitHub rejected the pull request update (status {e.status_code})",
        )
    except Exception as e:
        logger.error(f"Error handling webhook: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error processing webhook")

    if result.state == ProcessingState.IGNORED:
        message = f"Action {result.action} not processed"
    else:
        message = f"Pull request #{event.number} updated with {len(result.identifiers)} ticket link(s)"

    return WebhookResponse(status=result.state.value, message=message)
