"""Read-only user and API key records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class UserIdentity:
    """A user as resolved from the user store.

    Owned by the user store; authentication only reads it.
    """

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    leetstack_username: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def username(self) -> str:
        """Leetstack username when set, otherwise the email address."""
        if self.leetstack_username and self.leetstack_username.strip():
            return self.leetstack_username
        return self.email


@dataclass(frozen=True)
class ApiKeyRecord:
    """A persisted API key. Only the digest of the key is ever stored."""

    id: int
    user_id: str
    key_hash: str = field(repr=False)
    label: str | None = None
    revoked: bool = False
    created_at: datetime | None = None
    last_used_at: datetime | None = None


@dataclass(frozen=True)
class IssuedApiKey:
    """Result of issuing a key: the raw key is shown to the caller once."""

    raw_key: str = field(repr=False)
    record: ApiKeyRecord
