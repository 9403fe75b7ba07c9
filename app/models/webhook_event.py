"""Pull request webhook event data models."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PullRequestPayload(BaseModel):
    """The `pull_request` object of a GitHub webhook payload."""

    model_config = ConfigDict(extra="ignore")

    title: str
    body: Optional[str] = None
    state: Optional[str] = None
    url: Optional[str] = None


# GitHub account and repository names; used as URL path segments
NAME_PATTERN = r"^[A-Za-z0-9._-]+$"


def _reject_dot_segments(value: str) -> str:
    if value in (".", ".."):
        raise ValueError("must not be a relative path segment")
    return value


class RepositoryOwner(BaseModel):
    """Owner of the repository the event belongs to."""

    model_config = ConfigDict(extra="ignore")

    login: str = Field(pattern=NAME_PATTERN, max_length=100)

    @field_validator("login")
    @classmethod
    def login_is_not_dot_segment(cls, value: str) -> str:
        return _reject_dot_segments(value)


class RepositoryPayload(BaseModel):
    """The `repository` object of a GitHub webhook payload."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(pattern=NAME_PATTERN, max_length=100)
    owner: RepositoryOwner

    @field_validator("name")
    @classmethod
    def name_is_not_dot_segment(cls, value: str) -> str:
        return _reject_dot_segments(value)


class WebhookEvent(BaseModel):
    """Pull request event from a GitHub webhook. Every field is untrusted."""

    model_config = ConfigDict(extra="ignore")

    action: str
    number: int = Field(gt=0)
    pull_request: PullRequestPayload
    repository: RepositoryPayload

    @property
    def owner(self) -> str:
        return self.repository.owner.login

    @property
    def repo(self) -> str:
        return self.repository.name


class PullRequestMutation(BaseModel):
    """Edit issued against a pull request."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    number: int
    title: str
    body: str
    maintainer_can_modify: bool = False

    def to_payload(self) -> Dict[str, Any]:
        """Render the JSON body of the GitHub `update a pull request` call."""
        return {
            "title": self.title,
            "body": self.body,
            "maintainer_can_modify": self.maintainer_can_modify,
        }


class EditResult(BaseModel):
    """Pull request as returned by GitHub after an edit."""

    model_config = ConfigDict(extra="ignore")

    number: int
    title: str
    body: Optional[str] = None
    state: Optional[str] = None
    html_url: Optional[str] = None


class ProcessingState(str, Enum):
    """Terminal state of a single webhook event."""

    IGNORED = "ignored"
    REJECTED = "rejected"
    APPLIED = "applied"
    FAILED = "failed"


class ProcessingResult(BaseModel):
    """Outcome of processing a webhook event."""

    state: ProcessingState
    action: str
    identifiers: List[str] = []
    mutation: Optional[PullRequestMutation] = None
    edit: Optional[EditResult] = None
