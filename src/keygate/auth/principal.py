"""Authenticated principal produced by a successful API key login."""

from __future__ import annotations

from dataclasses import dataclass, field

from keygate.models.identity import ApiKeyRecord, UserIdentity

ROLE_USER = "ROLE_USER"


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """User identity paired with the API key used to authenticate.

    Built once per successful authentication and passed along the
    request; never stored.
    """

    user: UserIdentity
    api_key: ApiKeyRecord
    authorities: frozenset[str] = field(default_factory=lambda: frozenset({ROLE_USER}))

    @property
    def username(self) -> str:
        return self.user.username

    @property
    def is_enabled(self) -> bool:
        return not self.api_key.revoked
