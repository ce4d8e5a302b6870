"""Tests for ApiKeyAdjudicator and AdjudicatorChain."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from keygate.auth.adjudicator import AdjudicatorChain, ApiKeyAdjudicator
from keygate.auth.credentials import PresentedApiKey
from keygate.auth.hashing import HashingService
from keygate.auth.outcome import Authenticated, Rejected, RejectionReason
from keygate.auth.verifier import CredentialVerifier
from keygate.errors import StoreUnavailableError

from auth_factories import RAW_KEY, make_key_record, make_store, make_user


def _adjudicator(store: AsyncMock) -> ApiKeyAdjudicator:
    return ApiKeyAdjudicator(CredentialVerifier(HashingService(), store))


class TestApiKeyAdjudicator:
    async def test_valid_key_is_authenticated(self) -> None:
        store = make_store(record=make_key_record(), user=make_user())

        outcome = await _adjudicator(store).authenticate(
            PresentedApiKey.from_header(RAW_KEY)
        )

        assert isinstance(outcome, Authenticated)
        assert outcome.principal.user.id == "U1"
        assert outcome.principal.api_key.id == 1

    async def test_unknown_key_is_rejected_as_invalid(self) -> None:
        store = make_store(record=None)

        outcome = await _adjudicator(store).authenticate(
            PresentedApiKey.from_header(RAW_KEY)
        )

        assert outcome == Rejected(RejectionReason.INVALID_CREDENTIAL)

    async def test_orphaned_key_is_rejected_as_invalid(self) -> None:
        store = make_store(record=make_key_record(), user=None)

        outcome = await _adjudicator(store).authenticate(
            PresentedApiKey.from_header(RAW_KEY)
        )

        assert outcome == Rejected(RejectionReason.INVALID_CREDENTIAL)

    @pytest.mark.parametrize("secret", [None, "", "   ", 12345, b"abc123"])
    async def test_unusable_secret_is_missing_credential(self, secret: object) -> None:
        store = make_store()

        outcome = await _adjudicator(store).authenticate(PresentedApiKey(secret))

        assert outcome == Rejected(RejectionReason.MISSING_CREDENTIAL)
        store.find_active_by_digest.assert_not_awaited()

    async def test_store_outage_is_distinct_reason_same_detail(self) -> None:
        store = make_store()
        store.find_active_by_digest.side_effect = StoreUnavailableError(
            "find_active_by_digest",
            OperationalError("SELECT 1", {}, ConnectionRefusedError()),
        )

        outcome = await _adjudicator(store).authenticate(
            PresentedApiKey.from_header(RAW_KEY)
        )

        assert outcome == Rejected(RejectionReason.STORE_UNAVAILABLE)
        assert outcome.detail == Rejected(RejectionReason.INVALID_CREDENTIAL).detail

    async def test_unexpected_verifier_error_is_rejected(self) -> None:
        store = make_store()
        store.find_active_by_digest.side_effect = RuntimeError("boom")

        outcome = await _adjudicator(store).authenticate(
            PresentedApiKey.from_header(RAW_KEY)
        )

        assert outcome == Rejected(RejectionReason.INVALID_CREDENTIAL)

    @pytest.mark.parametrize("found", [True, False])
    async def test_credential_erased_after_adjudication(self, found: bool) -> None:
        store = make_store(
            record=make_key_record() if found else None, user=make_user()
        )
        credential = PresentedApiKey.from_header(RAW_KEY)

        await _adjudicator(store).authenticate(credential)

        assert credential.is_erased

    async def test_unrecognised_credential_is_not_applicable(self) -> None:
        store = make_store()
        adjudicator = _adjudicator(store)

        assert adjudicator.supports("raw-string") is False
        assert await adjudicator.authenticate(RAW_KEY) is None
        assert await adjudicator.authenticate(object()) is None
        store.find_active_by_digest.assert_not_awaited()

    def test_supports_presented_api_key(self) -> None:
        adjudicator = _adjudicator(make_store())
        assert adjudicator.supports(PresentedApiKey.from_header(RAW_KEY)) is True


class TestAdjudicatorChain:
    async def test_first_applicable_adjudicator_decides(self) -> None:
        store = make_store(record=make_key_record(), user=make_user())
        other = AsyncMock()
        other.supports = lambda credential: False

        chain = AdjudicatorChain([other, _adjudicator(store)])
        outcome = await chain.authenticate(PresentedApiKey.from_header(RAW_KEY))

        assert isinstance(outcome, Authenticated)
        other.authenticate.assert_not_awaited()

    async def test_no_applicable_adjudicator_returns_none(self) -> None:
        chain = AdjudicatorChain([_adjudicator(make_store())])

        assert chain.supports(object()) is False
        assert await chain.authenticate(object()) is None

    async def test_rejection_is_not_overridden_by_later_adjudicators(self) -> None:
        later = AsyncMock()
        later.supports = lambda credential: True

        chain = AdjudicatorChain([_adjudicator(make_store(record=None)), later])
        outcome = await chain.authenticate(PresentedApiKey.from_header(RAW_KEY))

        assert outcome == Rejected(RejectionReason.INVALID_CREDENTIAL)
        later.authenticate.assert_not_awaited()
