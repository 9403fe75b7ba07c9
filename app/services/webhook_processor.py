"""
Webhook processor.

Turns a GitHub `pull_request` delivery into at most one pull request edit:

    decode -> filter on action -> authenticate -> extract tickets -> mutate

Only `opened` events are acted upon. The title is kept when it references a
ticket and replaced with a placeholder otherwise; the body is always replaced
with the rendered link block.
"""

import json
from typing import List, Optional

from pydantic import ValidationError

from app.models.webhook_event import (
    ProcessingResult,
    ProcessingState,
    PullRequestMutation,
    WebhookEvent,
)
from app.services import ticket_links
from app.services.forge_client import ForgeClient, UpstreamError
from app.services.oauth_session import NotAuthenticated, OAuthSession
from app.utils.logging import get_logger, log_webhook_event

logger = get_logger(__name__)

OPENED_ACTION = "opened"


class MalformedPayload(Exception):
    """Webhook body is not a pull request event."""
    pass


class WebhookProcessor:
    """Decides whether to act on a webhook event and issues the edit."""

    def __init__(
        self,
        oauth_session: OAuthSession,
        forge_client: ForgeClient,
        jira_base_url: str = ticket_links.DEFAULT_BASE_URL,
        title_placeholder: str = ticket_links.DEFAULT_PLACEHOLDER_TITLE,
        reminder: str = ticket_links.DEFAULT_REMINDER,
    ):
        self.oauth_session = oauth_session
        self.forge_client = forge_client
        self.jira_base_url = jira_base_url
        self.title_placeholder = title_placeholder
        self.reminder = reminder

    @staticmethod
    def decode(raw: bytes) -> WebhookEvent:
        """
        Parse a webhook body.

        Raises:
            MalformedPayload: If the body is not JSON or lacks required fields
        """
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedPayload(f"body is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise MalformedPayload("body must be a JSON object")

        try:
            return WebhookEvent.model_validate(payload)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise MalformedPayload(f"invalid pull request event: {fields}") from e

    def build_mutation(self, event: WebhookEvent, identifiers: Optional[List[str]] = None) -> PullRequestMutation:
        """Compute the edit for an event. Recomputing yields the same edit."""
        if identifiers is None:
            identifiers = ticket_links.extract_identifiers(event.pull_request.title)
        return PullRequestMutation(
            owner=event.owner,
            repo=event.repo,
            number=event.number,
            title=ticket_links.build_title(
                event.pull_request.title, identifiers, self.title_placeholder
            ),
            body=ticket_links.render_link_block(identifiers, self.jira_base_url, self.reminder),
            maintainer_can_modify=False,
        )

    def process(self, event: WebhookEvent) -> ProcessingResult:
        """
        Run the decision pipeline for one event.

        Returns:
            ProcessingResult in state IGNORED or APPLIED

        Raises:
            NotAuthenticated: No credential is held; nothing was sent to GitHub
            UpstreamError: GitHub rejected the edit
        """
        repository = f"{event.owner}/{event.repo}"

        if event.action != OPENED_ACTION:
            log_webhook_event(logger, repository, event.number, event.action, ProcessingState.IGNORED.value)
            return ProcessingResult(state=ProcessingState.IGNORED, action=event.action)

        try:
            credential = self.oauth_session.current_credential()
        except NotAuthenticated:
            log_webhook_event(logger, repository, event.number, event.action, ProcessingState.REJECTED.value)
            raise

        identifiers = ticket_links.extract_identifiers(event.pull_request.title)
        mutation = self.build_mutation(event, identifiers)

        try:
            edit = self.forge_client.edit_pull_request(
                credential,
                mutation.owner,
                mutation.repo,
                mutation.number,
                mutation.title,
                mutation.body,
                maintainer_can_modify=mutation.maintainer_can_modify,
            )
        except UpstreamError as e:
            logger.error(
                f"Failed to update pull request {repository}#{event.number}: {e}",
                extra={"repository": repository, "pr_number": event.number, "status_code": e.status_code},
            )
            log_webhook_event(logger, repository, event.number, event.action, ProcessingState.FAILED.value)
            raise

        log_webhook_event(logger, repository, event.number, event.action, ProcessingState.APPLIED.value)
        return ProcessingResult(
            state=ProcessingState.APPLIED,
            action=event.action,
            identifiers=identifiers,
            mutation=mutation,
            edit=edit,
        )

    def handle(self, raw: bytes) -> ProcessingResult:
        """Decode and process a raw webhook body."""
        return self.process(self.decode(raw))
