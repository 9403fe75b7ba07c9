"""
Token codec.

Serializes a Credential to a JSON string and back so it can be kept outside
process memory, e.g. in the `OAUTH_TOKEN` environment variable. The JSON
shape is the one golang.org/x/oauth2 emits for its Token type, so values
produced by the older Go service decode unchanged.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import ValidationError

from app.models.credential import Credential

# Expiry written for tokens that never expire
ZERO_TIME = "0001-01-01T00:00:00Z"


class TokenCodecError(Exception):
    """Base exception for token codec errors."""
    pass


class EncodeFailed(TokenCodecError):
    """Raised when a credential cannot be serialized."""
    pass


class DecodeFailed(TokenCodecError):
    """Raised when a string is not a valid encoded credential."""
    pass


def _format_expiry(expiry: datetime) -> str:
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return expiry.isoformat().replace("+00:00", "Z")


def _parse_expiry(value: Any) -> Any:
    if value in (None, "", ZERO_TIME):
        return None
    if not isinstance(value, str):
        raise DecodeFailed(f"expiry must be a string, got {type(value).__name__}")
    if value.startswith("0001-01-01"):
        return None
    try:
        # Go writes RFC 3339 with a trailing Z and up to nanosecond precision
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise DecodeFailed(f"invalid expiry {value!r}") from e


def encode(credential: Credential) -> str:
    """
    Serialize a credential.

    Args:
        credential: Credential to encode

    Returns:
        JSON string with access_token, token_type, refresh_token and expiry

    Raises:
        EncodeFailed: If the credential cannot be serialized
    """
    try:
        data: Dict[str, Any] = {
            "access_token": credential.access_token,
            "token_type": credential.token_type,
        }
        if credential.refresh_token:
            data["refresh_token"] = credential.refresh_token
        data["expiry"] = (
            _format_expiry(credential.expiry) if credential.expiry is not None else ZERO_TIME
        )
        return json.dumps(data, separators=(",", ":"))
    except (TypeError, ValueError, AttributeError) as e:
        raise EncodeFailed(f"cannot encode credential: {e}") from e


def decode(value: str) -> Credential:
    """
    Deserialize a credential produced by `encode`.

    Raises:
        DecodeFailed: On malformed input
    """
    try:
        data = json.loads(value)
    except (TypeError, ValueError) as e:
        raise DecodeFailed(f"credential is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DecodeFailed("credential must be a JSON object")
    if not data.get("access_token"):
        raise DecodeFailed("credential has no access_token")

    try:
        return Credential(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or None,
            token_type=data.get("token_type") or "bearer",
            expiry=_parse_expiry(data.get("expiry")),
        )
    except ValidationError as e:
        raise DecodeFailed(f"credential fields are invalid: {e}") from e
