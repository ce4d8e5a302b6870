"""Credential store: API key records and the users that own them.

Authentication depends only on the ``CredentialStore`` contract. The
SQLAlchemy implementation opens a session per operation, so concurrent
requests never share one.
"""

from __future__ import annotations

import abc
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from keygate.auth.hashing import HashingService, generate_api_key
from keygate.errors import StoreUnavailableError, UserNotFoundError
from keygate.models.identity import ApiKeyRecord, IssuedApiKey, UserIdentity
from keygate.storage.orm import User, UserApiKey

logger = structlog.get_logger()


class CredentialStore(abc.ABC):
    """Persistence contract consumed by the credential verifier.

    Every method raises ``StoreUnavailableError`` when the backing store
    cannot be reached or queried.
    """

    @abc.abstractmethod
    async def find_active_by_digest(self, digest: str) -> ApiKeyRecord | None:
        """Return the non-revoked key with this digest, if any."""
        ...

    @abc.abstractmethod
    async def touch_last_used(self, key_id: int) -> None:
        """Set the key's last-used timestamp to now."""
        ...

    @abc.abstractmethod
    async def delete_all_for_user(self, user_id: str) -> int:
        """Delete every key owned by the user. Returns the number deleted."""
        ...

    @abc.abstractmethod
    async def find_user_by_id(self, user_id: str) -> UserIdentity | None:
        ...

    @abc.abstractmethod
    async def create_api_key(
        self, user_id: str, label: str | None = None
    ) -> IssuedApiKey:
        """Issue a new key for an existing user.

        Raises:
            UserNotFoundError: if the user does not exist.
        """
        ...

    @abc.abstractmethod
    async def list_for_user(self, user_id: str) -> list[ApiKeyRecord]:
        ...


def _to_key_record(row: UserApiKey) -> ApiKeyRecord:
    return ApiKeyRecord(
        id=row.id,
        user_id=row.user_id,
        key_hash=row.key_hash,
        label=row.label,
        revoked=row.revoked,
        created_at=row.created_at,
        last_used_at=row.last_used_at,
    )


def _to_user_identity(row: User) -> UserIdentity:
    return UserIdentity(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        leetstack_username=row.leetstack_username,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def normalize_label(label: str | None) -> str | None:
    """Strip a key label; blank labels are stored as NULL."""
    if label is None:
        return None
    label = label.strip()
    return label or None


class SqlCredentialStore(CredentialStore):
    """CredentialStore backed by PostgreSQL through SQLAlchemy async."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hasher: HashingService,
    ) -> None:
        self._session_factory = session_factory
        self._hasher = hasher

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session and map driver failures to StoreUnavailableError."""
        try:
            async with self._session_factory() as session:
                yield session
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailableError(operation, exc) from exc

    async def find_active_by_digest(self, digest: str) -> ApiKeyRecord | None:
        stmt = select(UserApiKey).where(
            UserApiKey.key_hash == digest,
            UserApiKey.revoked.is_(False),
        )
        async with self._session("find_active_by_digest") as session:
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()
        return _to_key_record(row) if row is not None else None

    async def touch_last_used(self, key_id: int) -> None:
        stmt = (
            update(UserApiKey)
            .where(UserApiKey.id == key_id)
            .values(last_used_at=func.now())
        )
        async with self._session("touch_last_used") as session:
            await session.execute(stmt)
            await session.commit()

    async def delete_all_for_user(self, user_id: str) -> int:
        stmt = delete(UserApiKey).where(UserApiKey.user_id == user_id)
        async with self._session("delete_all_for_user") as session:
            result = await session.execute(stmt)
            await session.commit()
        deleted = result.rowcount or 0
        logger.info("api_keys_deleted", user_id=user_id, count=deleted)
        return deleted

    async def find_user_by_id(self, user_id: str) -> UserIdentity | None:
        async with self._session("find_user_by_id") as session:
            row = await session.get(User, user_id)
        return _to_user_identity(row) if row is not None else None

    async def create_api_key(
        self, user_id: str, label: str | None = None
    ) -> IssuedApiKey:
        raw_key, key_hash = generate_api_key(self._hasher)
        async with self._session("create_api_key") as session:
            if await session.get(User, user_id) is None:
                raise UserNotFoundError(user_id)
            row = UserApiKey(
                user_id=user_id,
                key_hash=key_hash,
                label=normalize_label(label),
                revoked=False,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            record = _to_key_record(row)

        logger.info("api_key_created", user_id=user_id, key_id=record.id)
        return IssuedApiKey(raw_key=raw_key, record=record)

    async def list_for_user(self, user_id: str) -> list[ApiKeyRecord]:
        stmt = (
            select(UserApiKey)
            .where(UserApiKey.user_id == user_id)
            .order_by(UserApiKey.created_at)
        )
        async with self._session("list_for_user") as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()
        return [_to_key_record(row) for row in rows]
