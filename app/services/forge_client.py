"""
GitHub REST client.

Thin adapter over the two GitHub API calls the linker needs: looking up the
authenticated user and editing a pull request. Calls are made with the
credential passed in by the caller and are never retried here.
"""

import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from app.models.credential import Credential, UserHandle
from app.models.webhook_event import EditResult, PullRequestMutation
from app.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class UpstreamError(Exception):
    """
    Raised when a GitHub API request fails.

    Attributes:
        message: Human-readable error description
        status_code: HTTP status code, None for transport failures
        response_body: Response body from GitHub
        request_url: The URL that was requested
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


def _segment(value: str) -> str:
    """Escape one URL path segment; relative segments are refused."""
    if value in ("", ".", ".."):
        raise ValueError(f"invalid path segment: {value!r}")
    return quote(value, safe="")


class ForgeClient:
    """Authenticated GitHub API calls."""

    def __init__(
        self,
        base_url: str = "https://api.github.com",
        timeout: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: GitHub API base URL (GitHub Enterprise Server is supported)
            timeout: Per-request timeout in seconds
            http_client: Preconfigured client, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = http_client or httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=self._default_headers(),
        )

    @staticmethod
    def _default_headers() -> Dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": "pr-ticket-linker/0.1.0",
        }

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ForgeClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def get_current_user(self, credential: Credential) -> UserHandle:
        """
        Look up the account the credential belongs to.

        Raises:
            UpstreamError: On any non-2xx response or transport failure
        """
        data = self._request("GET", "/user", credential)
        try:
            return UserHandle.model_validate(data)
        except ValidationError as e:
            raise UpstreamError(f"unexpected /user response: {e}", request_url="/user") from e

    def edit_pull_request(
        self,
        credential: Credential,
        owner: str,
        repo: str,
        number: int,
        title: str,
        body: str,
        maintainer_can_modify: bool = False,
    ) -> EditResult:
        """
        Update the title and body of a pull request.

        Args:
            credential: Credential of an account with write access
            owner: Repository owner login
            repo: Repository name
            number: Pull request number
            title: New title
            body: New body
            maintainer_can_modify: Whether maintainers may push to the head branch

        Returns:
            EditResult describing the updated pull request

        Raises:
            UpstreamError: On any non-2xx response or transport failure
        """
        mutation = PullRequestMutation(
            owner=owner,
            repo=repo,
            number=number,
            title=title,
            body=body,
            maintainer_can_modify=maintainer_can_modify,
        )
        path = f"/repos/{_segment(owner)}/{_segment(repo)}/pulls/{int(number)}"
        data = self._request("PATCH", path, credential, json=mutation.to_payload())
        try:
            return EditResult.model_validate(data)
        except ValidationError as e:
            raise UpstreamError(f"unexpected pull request response: {e}", request_url=path) from e

    def _request(
        self,
        method: str,
        path: str,
        credential: Credential,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {"Authorization": credential.authorization_header()}
        start_time = time.time()
        try:
            response = self._client.request(method, path, headers=headers, json=json)
        except httpx.HTTPError as e:
            log_api_call(logger, "github", path, method, error=str(e))
            raise UpstreamError(f"{method} {path} failed: {e}", request_url=path) from e

        duration_ms = (time.time() - start_time) * 1000

        if not response.is_success:
            log_api_call(
                logger, "github", path, method,
                status_code=response.status_code,
                duration_ms=duration_ms,
                error=f"HTTP {response.status_code}",
            )
            raise UpstreamError(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
                request_url=str(response.request.url),
            )

        log_api_call(
            logger, "github", path, method,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"{method} {path} returned a non-JSON body",
                status_code=response.status_code,
                response_body=response.text,
                request_url=path,
            ) from e
