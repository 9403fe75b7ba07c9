"""OAuth credential data models."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Credential(BaseModel):
    """OAuth token held for the single authenticated maintainer."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expiry: Optional[datetime] = None  # None means the token never expires

    @field_validator("refresh_token")
    @classmethod
    def empty_refresh_token_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator("token_type")
    @classmethod
    def default_token_type(cls, value: str) -> str:
        return value or "bearer"

    @field_validator("expiry")
    @classmethod
    def expiry_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Return True once the expiry timestamp has passed."""
        if self.expiry is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expiry

    def authorization_header(self) -> str:
        """Render the value of the HTTP Authorization header."""
        token_type = self.token_type or "bearer"
        if token_type.lower() == "bearer":
            token_type = "Bearer"
        return f"{token_type} {self.access_token}"

    def __repr__(self) -> str:
        return f"Credential(token_type={self.token_type!r}, expiry={self.expiry!r})"

    __str__ = __repr__


class UserHandle(BaseModel):
    """Authenticated GitHub account."""

    login: str
    id: Optional[int] = None
    name: Optional[str] = None
