"""
Process-wide credential holder.

The webhook path reads the credential on every delivery while the OAuth
callback replaces it. Credentials are immutable, so a lock-guarded reference
swap gives readers either the old or the new value, never a mix of both.
"""

import os
import threading
from typing import MutableMapping, Optional

from app.models.credential import Credential
from app.services import token_codec
from app.services.token_codec import DecodeFailed, EncodeFailed
from app.utils.logging import get_logger

logger = get_logger(__name__)

OAUTH_TOKEN_KEY = "OAUTH_TOKEN"


class CredentialStore:
    """
    Holds the single current Credential.

    When `environ` is given, every stored credential is also written there in
    encoded form under OAUTH_TOKEN.
    """

    def __init__(self, environ: Optional[MutableMapping[str, str]] = None):
        self._lock = threading.Lock()
        self._credential: Optional[Credential] = None
        self._environ = environ

    def get(self) -> Optional[Credential]:
        """Return the current credential snapshot, or None."""
        with self._lock:
            return self._credential

    def set(self, credential: Credential) -> None:
        """Replace the current credential unconditionally."""
        encoded = None
        if self._environ is not None:
            try:
                encoded = token_codec.encode(credential)
            except EncodeFailed as e:
                logger.error(f"Credential stored in memory only, encoding failed: {e}")

        with self._lock:
            self._credential = credential
            if encoded is not None:
                self._environ[OAUTH_TOKEN_KEY] = encoded

    def seed_from(self, encoded: Optional[str]) -> bool:
        """
        Restore a credential encoded by a previous run.

        Args:
            encoded: Value of OAUTH_TOKEN, may be empty

        Returns:
            True if a credential was restored
        """
        if not encoded:
            return False
        try:
            credential = token_codec.decode(encoded)
        except DecodeFailed as e:
            logger.warning(f"Ignoring malformed {OAUTH_TOKEN_KEY}: {e}")
            return False

        if credential.is_expired():
            logger.warning(f"Ignoring expired {OAUTH_TOKEN_KEY}")
            return False

        self.set(credential)
        logger.info(f"Restored credential from {OAUTH_TOKEN_KEY}")
        return True


def environ_credential_store() -> CredentialStore:
    """Credential store mirrored into the process environment."""
    return CredentialStore(environ=os.environ)
