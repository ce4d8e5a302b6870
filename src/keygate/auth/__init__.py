"""API key authentication.

Note: the adjudicator and verifier are NOT re-exported here, so importing
``keygate.auth`` never pulls in the storage layer.
Import directly: ``from keygate.auth.adjudicator import ApiKeyAdjudicator``.
"""

from keygate.auth.credentials import PresentedApiKey
from keygate.auth.hashing import HashingService, generate_api_key, hash_api_key
from keygate.auth.outcome import Authenticated, Rejected, RejectionReason
from keygate.auth.principal import AuthenticatedPrincipal

__all__ = [
    "Authenticated",
    "AuthenticatedPrincipal",
    "HashingService",
    "PresentedApiKey",
    "Rejected",
    "RejectionReason",
    "generate_api_key",
    "hash_api_key",
]
