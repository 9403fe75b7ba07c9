"""
Unit tests for the OAuth session and state store.
"""

from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.models.credential import Credential
from app.services.credential_store import CredentialStore
from app.services.oauth_session import (
    ExchangeFailed,
    NotAuthenticated,
    OAuthSession,
    StateMismatch,
)
from app.services.state_store import OAuthStateStore


class RecordingTokenEndpoint:
    """Stub GitHub token endpoint that records every request."""

    def __init__(self, status_code=200, json_body=None, raise_error=None):
        self.status_code = status_code
        self.json_body = json_body if json_body is not None else {
            "access_token": "gho_new",
            "token_type": "bearer",
            "scope": "repo,workflow",
        }
        self.raise_error = raise_error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        return httpx.Response(self.status_code, json=self.json_body)


def make_session(endpoint, **kwargs):
    return OAuthSession(
        client_id="client-123",
        client_secret="secret-456",
        scopes=["repo", "read:repo_hook", "write:discussion", "workflow"],
        http_client=httpx.Client(transport=httpx.MockTransport(endpoint)),
        **kwargs,
    )


@pytest.fixture
def endpoint():
    return RecordingTokenEndpoint()


@pytest.fixture
def session(endpoint):
    return make_session(endpoint)


def test_begin_authorization_builds_github_url(session):
    """Test the authorize URL carries client id, scopes and the issued state."""
    request = session.begin_authorization()
    url = urlparse(request.url)
    query = parse_qs(url.query)

    assert f"{url.scheme}://{url.netloc}{url.path}" == "https://github.com/login/oauth/authorize"
    assert query["client_id"] == ["client-123"]
    assert query["response_type"] == ["code"]
    assert query["scope"] == ["repo read:repo_hook write:discussion workflow"]
    assert query["state"] == [request.state]
    assert "redirect_uri" not in query


def test_begin_authorization_includes_redirect_url(endpoint):
    """Test a configured callback URL is sent as redirect_uri."""
    session = make_session(endpoint, redirect_url="https://bot.example.com/github_go_taskbot")
    query = parse_qs(urlparse(session.begin_authorization().url).query)

    assert query["redirect_uri"] == ["https://bot.example.com/github_go_taskbot"]


def test_each_flow_gets_fresh_state(session):
    """Test two flows never share a state or flow id."""
    first = session.begin_authorization()
    second = session.begin_authorization()

    assert first.state != second.state
    assert first.flow_id != second.flow_id


def test_complete_authorization_stores_credential(session, endpoint):
    """Test a valid callback exchanges the code and stores the token."""
    request = session.begin_authorization()

    credential = session.complete_authorization(request.state, "code-789", request.flow_id)

    assert credential.access_token == "gho_new"
    assert session.current_credential() == credential
    assert len(endpoint.requests) == 1
    sent = parse_qs(endpoint.requests[0].content.decode())
    assert sent["code"] == ["code-789"]
    assert sent["client_id"] == ["client-123"]
    assert sent["client_secret"] == ["secret-456"]
    assert endpoint.requests[0].headers["Accept"] == "application/json"


def test_state_mismatch_performs_no_exchange(session, endpoint):
    """Test a wrong state raises StateMismatch and never calls the token endpoint."""
    request = session.begin_authorization()

    with pytest.raises(StateMismatch):
        session.complete_authorization("forged-state", "code-789", request.flow_id)

    assert endpoint.requests == []
    with pytest.raises(NotAuthenticated):
        session.current_credential()


def test_unknown_flow_is_state_mismatch(session, endpoint):
    """Test a callback without a known flow id is rejected."""
    request = session.begin_authorization()

    with pytest.raises(StateMismatch):
        session.complete_authorization(request.state, "code-789", None)
    with pytest.raises(StateMismatch):
        session.complete_authorization(request.state, "code-789", "other-flow")

    assert endpoint.requests == []


def test_state_is_single_use(session, endpoint):
    """Test replaying a completed callback is rejected."""
    request = session.begin_authorization()
    session.complete_authorization(request.state, "code-789", request.flow_id)

    with pytest.raises(StateMismatch):
        session.complete_authorization(request.state, "code-789", request.flow_id)

    assert len(endpoint.requests) == 1


def test_expired_state_is_rejected(endpoint):
    """Test a flow older than the TTL is rejected."""
    now = [1000.0]
    session = make_session(
        endpoint,
        state_store=OAuthStateStore(ttl_seconds=60, clock=lambda: now[0]),
    )
    request = session.begin_authorization()
    now[0] += 61

    with pytest.raises(StateMismatch):
        session.complete_authorization(request.state, "code-789", request.flow_id)
    assert endpoint.requests == []


def test_github_error_body_is_exchange_failed():
    """Test GitHub's HTTP 200 error response raises ExchangeFailed."""
    endpoint = RecordingTokenEndpoint(json_body={
        "error": "bad_verification_code",
        "error_description": "The code passed is incorrect or expired.",
    })
    session = make_session(endpoint)
    request = session.begin_authorization()

    with pytest.raises(ExchangeFailed, match="bad_verification_code"):
        session.complete_authorization(request.state, "expired", request.flow_id)

    assert session.is_authenticated() is False


@pytest.mark.parametrize("endpoint", [
    RecordingTokenEndpoint(status_code=500, json_body={"message": "boom"}),
    RecordingTokenEndpoint(json_body={"token_type": "bearer"}),
    RecordingTokenEndpoint(raise_error=httpx.ConnectTimeout("timed out")),
])
def test_exchange_failures(endpoint):
    """Test HTTP errors, missing tokens and timeouts raise ExchangeFailed."""
    session = make_session(endpoint)
    request = session.begin_authorization()

    with pytest.raises(ExchangeFailed):
        session.complete_authorization(request.state, "code-789", request.flow_id)


def test_missing_code_is_exchange_failed(session, endpoint):
    """Test a callback without a code never reaches the token endpoint."""
    request = session.begin_authorization()

    with pytest.raises(ExchangeFailed):
        session.complete_authorization(request.state, None, request.flow_id)
    assert endpoint.requests == []


def test_expires_in_sets_expiry():
    """Test expiring GitHub App user tokens carry an absolute expiry."""
    endpoint = RecordingTokenEndpoint(json_body={
        "access_token": "ghu_abc",
        "refresh_token": "ghr_def",
        "expires_in": 28800,
        "token_type": "bearer",
    })
    session = make_session(endpoint)
    request = session.begin_authorization()

    before = datetime.now(timezone.utc)
    credential = session.complete_authorization(request.state, "code", request.flow_id)

    assert credential.refresh_token == "ghr_def"
    assert (credential.expiry - before).total_seconds() == pytest.approx(28800, abs=5)


def test_new_login_overwrites_credential(endpoint):
    """Test a second login replaces the first credential outright."""
    store = CredentialStore()
    store.set(Credential(access_token="gho_old", refresh_token="ghr_old"))
    session = make_session(endpoint, credential_store=store)
    request = session.begin_authorization()

    session.complete_authorization(request.state, "code", request.flow_id)

    assert session.current_credential().access_token == "gho_new"
    assert session.current_credential().refresh_token is None


def test_current_credential_before_login(session):
    """Test NotAuthenticated before any login completes."""
    with pytest.raises(NotAuthenticated):
        session.current_credential()


def test_state_store_purges_expired_flows():
    """Test abandoned flows are dropped once they expire."""
    now = [0.0]
    store = OAuthStateStore(ttl_seconds=10, clock=lambda: now[0])
    store.issue()
    store.issue()
    now[0] = 11.0
    store.issue()

    assert len(store) == 1
