"""CLI for user API key management.

Usage::

    uv run python -m scripts.manage_keys <command> [options]

Commands:
    create-key          Generate an API key for a user
    list-keys           List API keys for a user
    revoke-user-keys    Delete every API key of a user

Every command goes through the same CredentialStore the service uses.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import TypeVar

from keygate.auth.hashing import HashingService
from keygate.config import settings
from keygate.errors import UserNotFoundError
from keygate.storage.credential_store import CredentialStore, SqlCredentialStore
from keygate.storage.database import async_session, engine

T = TypeVar("T")


def build_store() -> CredentialStore:
    return SqlCredentialStore(
        async_session, HashingService(settings.api_key_hash_algorithm)
    )


def run_with_store(operation: Callable[[CredentialStore], Awaitable[T]]) -> T:
    """Run one store operation on a fresh event loop, then close the pool."""

    async def _main() -> T:
        try:
            return await operation(build_store())
        finally:
            await engine.dispose()

    return asyncio.run(_main())


def create_key(args: argparse.Namespace) -> None:
    """Generate an API key for a user."""
    try:
        issued = run_with_store(
            lambda store: store.create_api_key(args.user_id, args.label)
        )
    except UserNotFoundError:
        print(f"User not found: {args.user_id}", file=sys.stderr)
        sys.exit(1)

    record = issued.record
    print(f'API key created for "{record.user_id}":')
    print(f"   Key:     {issued.raw_key}")
    print(f"   Id:      {record.id}")
    print(f"   Label:   {record.label or '-'}")
    print()
    print("Save this key now -- it cannot be retrieved later!")


def list_keys(args: argparse.Namespace) -> None:
    """List API keys for a user."""
    keys = run_with_store(lambda store: store.list_for_user(args.user_id))

    if not keys:
        print(f'No keys for "{args.user_id}".')
        return

    print(f'Keys for "{args.user_id}":')
    for i, key in enumerate(keys, 1):
        status = "revoked" if key.revoked else "active"
        last_used = key.last_used_at.isoformat() if key.last_used_at else "never"
        print(f"  {i}. #{key.id} [{key.label or '-'}] {status} last_used={last_used}")


def revoke_user_keys(args: argparse.Namespace) -> None:
    """Delete every API key of a user (rotation starts from a clean slate)."""
    count = run_with_store(lambda store: store.delete_all_for_user(args.user_id))
    print(f"Deleted {count} key{'s' if count != 1 else ''} for {args.user_id}")


def main() -> None:
    """Parse arguments and dispatch to command handler."""
    parser = argparse.ArgumentParser(description="API key management CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    # create-key
    p = sub.add_parser("create-key", help="Generate API key for a user")
    p.add_argument("--user-id", required=True, help="User id")
    p.add_argument("--label", default=None, help="Key label")

    # list-keys
    p = sub.add_parser("list-keys", help="List API keys for a user")
    p.add_argument("--user-id", required=True, help="User id")

    # revoke-user-keys
    p = sub.add_parser("revoke-user-keys", help="Delete all API keys of a user")
    p.add_argument("--user-id", required=True, help="User id")

    args = parser.parse_args()
    commands: dict[str, Callable[[argparse.Namespace], None]] = {
        "create-key": create_key,
        "list-keys": list_keys,
        "revoke-user-keys": revoke_user_keys,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
