"""API key digests and key generation.

Keys are looked up by digest, so the digest has to be deterministic:
no salt, no secret key. Only the digest is ever persisted.
"""

from __future__ import annotations

import hashlib
import secrets

from keygate.errors import ConfigurationFault

DEFAULT_ALGORITHM = "sha256"
# Width of the key_hash column.
DIGEST_HEX_LENGTH = 64
RAW_KEY_BYTES = 32


class HashingService:
    """Deterministic one-way digest of raw API keys.

    Stateless after construction and safe to share across requests.

    Raises:
        ConfigurationFault: if ``hashlib`` cannot provide the algorithm, or
            it does not yield a fixed-length 256-bit digest (md5, sha1,
            sha512, the shake XOFs).
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM) -> None:
        try:
            sample = hashlib.new(algorithm)
        except (ValueError, TypeError) as exc:
            raise ConfigurationFault(
                f"Hash algorithm {algorithm!r} is not available"
            ) from exc
        if sample.digest_size * 2 != DIGEST_HEX_LENGTH:
            raise ConfigurationFault(
                f"Hash algorithm {algorithm!r} must produce a fixed 256-bit digest"
            )
        self._algorithm = algorithm

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def hash(self, raw_key: str) -> str:
        """Return the lowercase hex digest of ``raw_key`` (UTF-8 encoded)."""
        return hashlib.new(self._algorithm, raw_key.encode("utf-8")).hexdigest()


_default_hasher = HashingService()


def hash_api_key(key: str) -> str:
    """Hash an API key for lookup.

    Args:
        key: The full API key string.

    Returns:
        SHA-256 hex digest of the key.
    """
    return _default_hasher.hash(key)


def generate_api_key(hasher: HashingService | None = None) -> tuple[str, str]:
    """Generate API key, return (raw_key, key_hash).

    Raw key is shown only once at creation time.
    Only the hash is stored in DB.
    """
    hasher = hasher or _default_hasher
    raw_key = secrets.token_hex(RAW_KEY_BYTES)
    return raw_key, hasher.hash(raw_key)
