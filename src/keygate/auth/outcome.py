"""Authentication outcome: either an authenticated principal or a rejection.

``Authenticated`` is only produced by ``keygate.auth.adjudicator``. Other
code receives outcomes and inspects them; it does not build the
authenticated variant.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from keygate.auth.principal import AuthenticatedPrincipal

MISSING_CREDENTIAL_DETAIL = "API key credentials are missing"
INVALID_CREDENTIAL_DETAIL = "Invalid API key"


class RejectionReason(StrEnum):
    MISSING_CREDENTIAL = "missing_credential"
    INVALID_CREDENTIAL = "invalid_credential"
    STORE_UNAVAILABLE = "store_unavailable"


@dataclass(frozen=True)
class Authenticated:
    principal: AuthenticatedPrincipal


@dataclass(frozen=True)
class Rejected:
    """Authentication failed.

    ``reason`` is for logs only. ``detail`` is what the caller sees and
    does not tell a revoked key from an unknown one, or from a store outage.
    """

    reason: RejectionReason

    @property
    def detail(self) -> str:
        if self.reason is RejectionReason.MISSING_CREDENTIAL:
            return MISSING_CREDENTIAL_DETAIL
        return INVALID_CREDENTIAL_DETAIL


AuthenticationOutcome = Authenticated | Rejected
