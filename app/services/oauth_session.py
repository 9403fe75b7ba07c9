"""
OAuth session for the maintainer account.

Drives GitHub's OAuth2 authorization-code flow:
- builds the authorization URL with a per-flow random state
- checks the returned state and exchanges the code for a token
- keeps the resulting Credential in a CredentialStore
"""

import hmac
import time
from datetime import datetime, timedelta, timezone
from typing import List, NamedTuple, Optional
from urllib.parse import urlencode

import httpx

from app.models.credential import Credential
from app.services.credential_store import CredentialStore
from app.services.state_store import OAuthStateStore
from app.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)


class OAuthError(Exception):
    """Base exception for OAuth flow errors."""
    pass


class StateMismatch(OAuthError):
    """Returned state does not match the one issued for the flow."""
    pass


class ExchangeFailed(OAuthError):
    """GitHub rejected the authorization code."""
    pass


class NotAuthenticated(OAuthError):
    """No login has completed in this process."""
    pass


class AuthorizationRequest(NamedTuple):
    """Redirect target for a new login flow."""

    url: str
    flow_id: str
    state: str


class OAuthSession:
    """Owns the authorization-code exchange and the current credential."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        scopes: List[str],
        credential_store: Optional[CredentialStore] = None,
        state_store: Optional[OAuthStateStore] = None,
        oauth_url: str = "https://github.com/login/oauth",
        redirect_url: Optional[str] = None,
        timeout: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the OAuth session.

        Args:
            client_id: OAuth application client id
            client_secret: OAuth application client secret
            scopes: Scopes requested at authorization time
            credential_store: Where the exchanged credential is kept
            state_store: Issues and checks anti-forgery state tokens
            oauth_url: Base URL of the authorize and access_token endpoints
            redirect_url: Callback URL, omitted to use the app's registered one
            timeout: Timeout in seconds for the token exchange
            http_client: Client used for the token exchange
        """
        self.client_id = client_id
        self._client_secret = client_secret
        self.scopes = list(scopes)
        self.credentials = credential_store or CredentialStore()
        self.states = state_store or OAuthStateStore()
        self.oauth_url = oauth_url.rstrip("/")
        self.redirect_url = redirect_url
        self._http = http_client or httpx.Client(timeout=timeout)

    @property
    def authorize_endpoint(self) -> str:
        return f"{self.oauth_url}/authorize"

    @property
    def token_endpoint(self) -> str:
        return f"{self.oauth_url}/access_token"

    def begin_authorization(self) -> AuthorizationRequest:
        """
        Start a login flow.

        Returns:
            AuthorizationRequest with the GitHub authorize URL and the flow id
            the caller must hand back to `complete_authorization`.
        """
        flow_id, state = self.states.issue()
        params = {
            "access_type": "online",
            "client_id": self.client_id,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "state": state,
        }
        if self.redirect_url:
            params["redirect_uri"] = self.redirect_url
        url = f"{self.authorize_endpoint}?{urlencode(params)}"
        return AuthorizationRequest(url=url, flow_id=flow_id, state=state)

    def complete_authorization(
        self,
        received_state: Optional[str],
        code: Optional[str],
        flow_id: Optional[str],
    ) -> Credential:
        """
        Finish a login flow and store the resulting credential.

        Args:
            received_state: `state` query parameter from the callback
            code: `code` query parameter from the callback
            flow_id: Flow id issued by `begin_authorization`

        Returns:
            The new Credential

        Raises:
            StateMismatch: If the state is unknown, expired or different
            ExchangeFailed: If GitHub does not issue a token for the code
        """
        expected_state = self.states.consume(flow_id)
        if expected_state is None or not hmac.compare_digest(
            expected_state.encode(), (received_state or "").encode()
        ):
            raise StateMismatch("invalid oauth state")

        if not code:
            raise ExchangeFailed("callback carried no authorization code")

        credential = self._exchange(code)
        self.credentials.set(credential)
        logger.info("OAuth credential stored")
        return credential

    def current_credential(self) -> Credential:
        """
        Return the held credential.

        Raises:
            NotAuthenticated: If no login has completed yet
        """
        credential = self.credentials.get()
        if credential is None:
            raise NotAuthenticated("no maintainer has logged in")
        return credential

    def is_authenticated(self) -> bool:
        return self.credentials.get() is not None

    def close(self) -> None:
        self._http.close()

    def _exchange(self, code: str) -> Credential:
        form = {
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "code": code,
        }
        if self.redirect_url:
            form["redirect_uri"] = self.redirect_url

        start_time = time.time()
        try:
            response = self._http.post(
                self.token_endpoint,
                data=form,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            log_api_call(logger, "github_oauth", self.token_endpoint, "POST", error=str(e))
            raise ExchangeFailed(f"token exchange request failed: {e}") from e

        duration_ms = (time.time() - start_time) * 1000
        if response.status_code >= 300:
            log_api_call(
                logger, "github_oauth", self.token_endpoint, "POST",
                status_code=response.status_code, duration_ms=duration_ms,
                error=f"HTTP {response.status_code}",
            )
            raise ExchangeFailed(f"token endpoint returned HTTP {response.status_code}")

        log_api_call(
            logger, "github_oauth", self.token_endpoint, "POST",
            status_code=response.status_code, duration_ms=duration_ms,
        )

        try:
            data = response.json()
        except ValueError as e:
            raise ExchangeFailed("token endpoint returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise ExchangeFailed("token endpoint returned an unexpected body")
        # GitHub reports a bad or reused code with HTTP 200 and an error field
        if data.get("error"):
            raise ExchangeFailed(
                f"{data['error']}: {data.get('error_description', 'no description')}"
            )
        if not data.get("access_token"):
            raise ExchangeFailed("token endpoint response has no access_token")

        expiry = None
        expires_in = data.get("expires_in")
        if expires_in:
            try:
                expiry = datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid expires_in: {expires_in!r}")

        return Credential(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type") or "bearer",
            expiry=expiry,
        )
