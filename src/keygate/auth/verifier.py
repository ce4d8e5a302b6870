"""Resolve a raw API key to an authenticated principal."""

from __future__ import annotations

import structlog

from keygate.auth.hashing import HashingService
from keygate.auth.principal import AuthenticatedPrincipal
from keygate.errors import StoreUnavailableError
from keygate.storage.credential_store import CredentialStore

logger = structlog.get_logger()


class CredentialVerifier:
    """Hash the presented key, find its active record and owning user.

    Returns ``None`` for every kind of bad key (blank, unknown, revoked,
    orphaned) without saying which. Store failures propagate as
    ``StoreUnavailableError`` so callers can tell them apart.
    No retries are made.
    """

    def __init__(self, hasher: HashingService, store: CredentialStore) -> None:
        self._hasher = hasher
        self._store = store

    async def authenticate(self, raw_key: str | None) -> AuthenticatedPrincipal | None:
        """Authenticate a raw API key.

        Args:
            raw_key: Key exactly as presented; surrounding whitespace is ignored.

        Returns:
            The principal on success, otherwise None.

        Raises:
            StoreUnavailableError: if the key or user lookup fails.
        """
        if raw_key is None or not raw_key.strip():
            return None

        key_hash = self._hasher.hash(raw_key.strip())

        record = await self._store.find_active_by_digest(key_hash)
        if record is None or record.revoked:
            return None

        user = await self._store.find_user_by_id(record.user_id)
        if user is None:
            logger.warning(
                "api_key_owner_missing",
                key_id=record.id,
                user_id=record.user_id,
            )
            return None

        await self._touch_last_used(record.id)
        return AuthenticatedPrincipal(user=user, api_key=record)

    async def _touch_last_used(self, key_id: int) -> None:
        # Usage metadata only; a failed write never fails the login.
        try:
            await self._store.touch_last_used(key_id)
        except StoreUnavailableError as exc:
            logger.warning(
                "api_key_touch_failed",
                key_id=key_id,
                error=type(exc.cause).__name__ if exc.cause else str(exc),
            )
