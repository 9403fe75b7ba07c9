"""
Unit tests for the token codec.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from app.models.credential import Credential
from app.services import token_codec
from app.services.token_codec import DecodeFailed, ZERO_TIME


@pytest.mark.parametrize("credential", [
    Credential(access_token="gho_abc"),
    Credential(access_token="gho_abc", refresh_token="ghr_def", token_type="bearer"),
    Credential(
        access_token="gho_abc",
        refresh_token="ghr_def",
        token_type="Bearer",
        expiry=datetime(2030, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc),
    ),
    Credential(
        access_token="gho_abc",
        expiry=datetime(2030, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=2))),
    ),
])
def test_round_trip(credential):
    """Test decode(encode(c)) == c."""
    assert token_codec.decode(token_codec.encode(credential)) == credential


def test_encode_is_deterministic():
    """Test encoding the same credential twice gives the same string."""
    credential = Credential(access_token="gho_abc", refresh_token="ghr_def")
    assert token_codec.encode(credential) == token_codec.encode(credential)


def test_encode_uses_oauth2_token_shape():
    """Test encoded JSON uses the golang oauth2 Token field names."""
    encoded = token_codec.encode(Credential(access_token="gho_abc"))
    data = json.loads(encoded)

    assert data["access_token"] == "gho_abc"
    assert data["token_type"] == "bearer"
    assert data["expiry"] == ZERO_TIME
    assert "refresh_token" not in data


def test_decode_go_token():
    """Test a token written by the Go oauth2 library decodes."""
    encoded = (
        '{"access_token":"gho_abc","token_type":"bearer",'
        '"expiry":"0001-01-01T00:00:00Z"}'
    )
    credential = token_codec.decode(encoded)

    assert credential.access_token == "gho_abc"
    assert credential.refresh_token is None
    assert credential.expiry is None


def test_decode_go_nanosecond_expiry():
    """Test RFC 3339 expiry with nanoseconds decodes."""
    credential = token_codec.decode(
        '{"access_token":"a","expiry":"2030-05-01T10:00:00.123456789+02:00"}'
    )

    assert credential.expiry == datetime(2030, 5, 1, 8, 0, 0, 123456, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [
    "",
    "not json",
    "[]",
    '"gho_abc"',
    "{}",
    '{"access_token": ""}',
    '{"access_token": "a", "expiry": "yesterday"}',
    '{"access_token": "a", "expiry": 12}',
])
def test_decode_malformed(value):
    """Test malformed input raises DecodeFailed."""
    with pytest.raises(DecodeFailed):
        token_codec.decode(value)
