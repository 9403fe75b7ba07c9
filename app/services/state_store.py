"""
Short-lived store for OAuth anti-forgery state tokens.
"""

import secrets
import threading
import time
from typing import Callable, Dict, Optional, Tuple


class OAuthStateStore:
    """
    Issues one random state token per login flow.

    Each flow is identified by an opaque id handed to the browser; the state
    can be consumed once and expires after `ttl_seconds`.
    """

    def __init__(self, ttl_seconds: int = 600, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._states: Dict[str, Tuple[str, float]] = {}

    def issue(self) -> Tuple[str, str]:
        """
        Start a flow.

        Returns:
            Tuple of (flow_id, state)
        """
        flow_id = secrets.token_urlsafe(16)
        state = secrets.token_urlsafe(32)
        now = self._clock()
        with self._lock:
            self._purge(now)
            self._states[flow_id] = (state, now + self.ttl_seconds)
        return flow_id, state

    def consume(self, flow_id: Optional[str]) -> Optional[str]:
        """Return and forget the state issued for `flow_id`, None if unknown or expired."""
        if not flow_id:
            return None
        with self._lock:
            entry = self._states.pop(flow_id, None)
        if entry is None:
            return None
        state, expires_at = entry
        if self._clock() >= expires_at:
            return None
        return state

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)

    def _purge(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._states.items() if now >= expires_at]
        for key in expired:
            del self._states[key]
