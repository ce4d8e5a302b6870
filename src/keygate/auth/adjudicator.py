"""Transport-neutral authentication of presented credentials.

An adjudicator turns a credential object into an ``AuthenticationOutcome``,
or returns ``None`` when it does not handle that kind of credential, so
several adjudicators can be chained without interfering.

``Authenticated`` outcomes are only built here.
"""

from __future__ import annotations

import abc
from collections.abc import Iterable

import structlog

from keygate.auth.credentials import PresentedApiKey
from keygate.auth.outcome import (
    Authenticated,
    AuthenticationOutcome,
    Rejected,
    RejectionReason,
)
from keygate.auth.principal import AuthenticatedPrincipal
from keygate.auth.verifier import CredentialVerifier
from keygate.errors import StoreUnavailableError

logger = structlog.get_logger()


def _authenticated(principal: AuthenticatedPrincipal) -> Authenticated:
    return Authenticated(principal=principal)


class Adjudicator(abc.ABC):
    """Authenticates one kind of credential."""

    @abc.abstractmethod
    def supports(self, credential: object) -> bool:
        ...

    @abc.abstractmethod
    async def authenticate(self, credential: object) -> AuthenticationOutcome | None:
        """Authenticate the credential.

        Returns:
            The outcome, or None if this adjudicator does not handle
            the credential type.
        """
        ...


class ApiKeyAdjudicator(Adjudicator):
    """Adjudicates ``PresentedApiKey`` credentials via a CredentialVerifier.

    Every failure becomes a ``Rejected`` outcome; nothing is raised.
    The presented secret is erased before returning.
    """

    def __init__(self, verifier: CredentialVerifier) -> None:
        self._verifier = verifier

    def supports(self, credential: object) -> bool:
        return isinstance(credential, PresentedApiKey)

    async def authenticate(self, credential: object) -> AuthenticationOutcome | None:
        if not isinstance(credential, PresentedApiKey):
            return None

        try:
            return await self._adjudicate(credential.secret)
        finally:
            credential.erase_credentials()

    async def _adjudicate(self, secret: object) -> AuthenticationOutcome:
        if not isinstance(secret, str) or not secret.strip():
            return Rejected(RejectionReason.MISSING_CREDENTIAL)

        try:
            principal = await self._verifier.authenticate(secret)
        except StoreUnavailableError as exc:
            logger.error(
                "api_key_store_unavailable",
                operation=exc.operation,
                error=type(exc.cause).__name__ if exc.cause else str(exc),
            )
            return Rejected(RejectionReason.STORE_UNAVAILABLE)
        except Exception:
            logger.exception("api_key_verification_error")
            return Rejected(RejectionReason.INVALID_CREDENTIAL)

        if principal is None:
            return Rejected(RejectionReason.INVALID_CREDENTIAL)
        return _authenticated(principal)


class AdjudicatorChain(Adjudicator):
    """Try adjudicators in order; the first one that applies decides."""

    def __init__(self, adjudicators: Iterable[Adjudicator]) -> None:
        self._adjudicators = tuple(adjudicators)

    def supports(self, credential: object) -> bool:
        return any(a.supports(credential) for a in self._adjudicators)

    async def authenticate(self, credential: object) -> AuthenticationOutcome | None:
        for adjudicator in self._adjudicators:
            if not adjudicator.supports(credential):
                continue
            outcome = await adjudicator.authenticate(credential)
            if outcome is not None:
                return outcome
        return None
