"""Domain records shared between storage and authentication."""

from keygate.models.identity import ApiKeyRecord, IssuedApiKey, UserIdentity

__all__ = ["ApiKeyRecord", "IssuedApiKey", "UserIdentity"]
