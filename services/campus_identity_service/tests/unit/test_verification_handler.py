"""Unit tests for the verification state machine.

pending -> verified exactly once; pending -> purged once the window elapsed.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from uapmp_common.error_enums import IdentityErrorCode
from uapmp_service_libs.error_handling import UapmpError

from services.campus_identity_service.api.schemas import LoginRequest, ResendVerificationRequest
from services.campus_identity_service.domain_handlers.authentication_handler import (
    AuthenticationHandler,
)
from services.campus_identity_service.domain_handlers.registration_handler import (
    RegistrationHandler,
)
from services.campus_identity_service.domain_handlers.verification_handler import (
    VerificationHandler,
)
from services.campus_identity_service.implementations.account_repository_memory_impl import (
    InMemoryAccountRepo,
)
from services.campus_identity_service.implementations.notifier_mock_impl import (
    MockVerificationNotifier,
)
from services.campus_identity_service.protocols import AccountRecord
from services.campus_identity_service.tests.conftest import (
    STUDENT_EMAIL,
    VALID_PASSWORD,
    age_account,
    make_register_request,
)


@pytest.fixture
async def pending_account(
    registration_handler: RegistrationHandler, account_repo: InMemoryAccountRepo
) -> AccountRecord:
    result = await registration_handler.register_account(make_register_request(), uuid4())
    record = await account_repo.get_account_by_id(result.to_dict()["account"]["id"])
    assert record is not None
    return record


class TestVerifyEmail:
    async def test_verifies_pending_account(
        self,
        verification_handler: VerificationHandler,
        account_repo: InMemoryAccountRepo,
        pending_account: AccountRecord,
    ) -> None:
        result = await verification_handler.verify_email(pending_account.id, uuid4())

        assert result.to_dict()["account"]["is_email_verified"] is True
        stored = await account_repo.get_account_by_id(pending_account.id)
        assert stored is not None and stored.is_email_verified

    async def test_second_verification_is_already_verified(
        self,
        verification_handler: VerificationHandler,
        account_repo: InMemoryAccountRepo,
        pending_account: AccountRecord,
    ) -> None:
        await verification_handler.verify_email(pending_account.id, uuid4())

        with pytest.raises(UapmpError) as exc_info:
            await verification_handler.verify_email(pending_account.id, uuid4())

        assert exc_info.value.error_code == IdentityErrorCode.ALREADY_VERIFIED.value
        stored = await account_repo.get_account_by_id(pending_account.id)
        assert stored is not None and stored.is_email_verified

    @pytest.mark.parametrize("account_id", [str(uuid4()), "not-a-uuid", ""])
    async def test_unknown_id_is_not_found(
        self, verification_handler: VerificationHandler, account_id: str
    ) -> None:
        with pytest.raises(UapmpError) as exc_info:
            await verification_handler.verify_email(account_id, uuid4())

        assert exc_info.value.error_code == IdentityErrorCode.NOT_FOUND.value

    async def test_verified_account_outside_window_stays_verified(
        self,
        verification_handler: VerificationHandler,
        account_repo: InMemoryAccountRepo,
        pending_account: AccountRecord,
    ) -> None:
        await verification_handler.verify_email(pending_account.id, uuid4())
        verified = await account_repo.get_account_by_id(pending_account.id)
        assert verified is not None
        age_account(account_repo, verified, hours=48)

        with pytest.raises(UapmpError) as exc_info:
            await verification_handler.verify_email(pending_account.id, uuid4())

        assert exc_info.value.error_code == IdentityErrorCode.ALREADY_VERIFIED.value
        assert await account_repo.get_account_by_id(pending_account.id) is not None


class TestExpiry:
    async def test_expired_account_is_purged(
        self,
        verification_handler: VerificationHandler,
        account_repo: InMemoryAccountRepo,
        pending_account: AccountRecord,
    ) -> None:
        age_account(account_repo, pending_account, hours=25)

        with pytest.raises(UapmpError) as exc_info:
            await verification_handler.verify_email(pending_account.id, uuid4())

        assert exc_info.value.error_code == IdentityErrorCode.LINK_EXPIRED_ACCOUNT_REMOVED.value
        assert exc_info.value.error_detail.details == {"verification_window_hours": 24}
        assert await account_repo.get_account_by_id(pending_account.id) is None

    async def test_after_purge_verify_is_not_found_and_login_is_invalid(
        self,
        verification_handler: VerificationHandler,
        authentication_handler: AuthenticationHandler,
        account_repo: InMemoryAccountRepo,
        pending_account: AccountRecord,
    ) -> None:
        age_account(account_repo, pending_account, hours=25)
        with pytest.raises(UapmpError):
            await verification_handler.verify_email(pending_account.id, uuid4())

        with pytest.raises(UapmpError) as verify_error:
            await verification_handler.verify_email(pending_account.id, uuid4())
        with pytest.raises(UapmpError) as login_error:
            await authentication_handler.login(
                LoginRequest(email=STUDENT_EMAIL, password=VALID_PASSWORD), uuid4()
            )

        assert verify_error.value.error_code == IdentityErrorCode.NOT_FOUND.value
        assert login_error.value.error_code == IdentityErrorCode.INVALID_CREDENTIALS.value

    async def test_purged_email_can_register_again(
        self,
        verification_handler: VerificationHandler,
        registration_handler: RegistrationHandler,
        account_repo: InMemoryAccountRepo,
        pending_account: AccountRecord,
    ) -> None:
        age_account(account_repo, pending_account, hours=25)
        with pytest.raises(UapmpError):
            await verification_handler.verify_email(pending_account.id, uuid4())

        result = await registration_handler.register_account(make_register_request(), uuid4())

        assert result.to_dict()["account"]["id"] != pending_account.id

    async def test_account_inside_window_is_not_expired(
        self, verification_handler: VerificationHandler, pending_account: AccountRecord
    ) -> None:
        now = datetime.now(UTC)
        inside = pending_account.model_copy(update={"created_at": now - timedelta(hours=23)})
        outside = pending_account.model_copy(
            update={"created_at": now - timedelta(hours=24, seconds=1)}
        )

        assert not verification_handler.is_expired(inside, now)
        assert verification_handler.is_expired(outside, now)

    async def test_exactly_one_window_old_is_not_expired(
        self, verification_handler: VerificationHandler, pending_account: AccountRecord
    ) -> None:
        now = datetime.now(UTC)
        boundary = pending_account.model_copy(update={"created_at": now - timedelta(hours=24)})

        assert not verification_handler.is_expired(boundary, now)


class TestConcurrentVerification:
    async def test_only_one_caller_verifies(
        self, verification_handler: VerificationHandler, pending_account: AccountRecord
    ) -> None:
        results = await asyncio.gather(
            *(verification_handler.verify_email(pending_account.id, uuid4()) for _ in range(5)),
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, Exception)]
        errors = [r for r in results if isinstance(r, UapmpError)]
        assert len(successes) == 1
        assert {e.error_code for e in errors} == {IdentityErrorCode.ALREADY_VERIFIED.value}

    async def test_only_one_caller_purges(
        self,
        verification_handler: VerificationHandler,
        account_repo: InMemoryAccountRepo,
        pending_account: AccountRecord,
    ) -> None:
        age_account(account_repo, pending_account, hours=30)

        results = await asyncio.gather(
            *(verification_handler.verify_email(pending_account.id, uuid4()) for _ in range(4)),
            return_exceptions=True,
        )

        codes = [r.error_code for r in results if isinstance(r, UapmpError)]
        assert len(codes) == 4
        assert codes.count(IdentityErrorCode.LINK_EXPIRED_ACCOUNT_REMOVED.value) == 1
        assert set(codes) <= {
            IdentityErrorCode.LINK_EXPIRED_ACCOUNT_REMOVED.value,
            IdentityErrorCode.NOT_FOUND.value,
        }

    async def test_lost_compare_and_set_rereads_state(
        self,
        verification_handler: VerificationHandler,
        account_repo: InMemoryAccountRepo,
        pending_account: AccountRecord,
    ) -> None:
        # Another request verified between our read and our update
        verified = pending_account.model_copy(update={"is_email_verified": True})
        account_repo.get_account_by_id = AsyncMock(side_effect=[pending_account, verified])
        account_repo.compare_and_set_verified = AsyncMock(return_value=False)

        with pytest.raises(UapmpError) as exc_info:
            await verification_handler.verify_email(pending_account.id, uuid4())

        assert exc_info.value.error_code == IdentityErrorCode.ALREADY_VERIFIED.value


class TestResendVerification:
    async def test_resends_for_pending_account(
        self,
        verification_handler: VerificationHandler,
        notifier: MockVerificationNotifier,
        pending_account: AccountRecord,
    ) -> None:
        result = await verification_handler.resend_verification(
            ResendVerificationRequest(email=STUDENT_EMAIL.upper()), uuid4()
        )

        assert result.to_dict()["dispatched"] is True
        assert len(notifier.sent_messages) == 2
        assert notifier.sent_messages[-1]["account_id"] == pending_account.id

    async def test_verified_account_is_rejected(
        self, verification_handler: VerificationHandler, pending_account: AccountRecord
    ) -> None:
        await verification_handler.verify_email(pending_account.id, uuid4())

        with pytest.raises(UapmpError) as exc_info:
            await verification_handler.resend_verification(
                ResendVerificationRequest(email=STUDENT_EMAIL), uuid4()
            )

        assert exc_info.value.error_code == IdentityErrorCode.ALREADY_VERIFIED.value

    async def test_expired_account_is_purged_instead(
        self,
        verification_handler: VerificationHandler,
        account_repo: InMemoryAccountRepo,
        pending_account: AccountRecord,
    ) -> None:
        age_account(account_repo, pending_account, hours=25)

        with pytest.raises(UapmpError) as exc_info:
            await verification_handler.resend_verification(
                ResendVerificationRequest(email=STUDENT_EMAIL), uuid4()
            )

        assert exc_info.value.error_code == IdentityErrorCode.LINK_EXPIRED_ACCOUNT_REMOVED.value
        assert await account_repo.get_account_by_email(STUDENT_EMAIL) is None

    async def test_unknown_email_and_missing_email(
        self, verification_handler: VerificationHandler
    ) -> None:
        with pytest.raises(UapmpError) as unknown:
            await verification_handler.resend_verification(
                ResendVerificationRequest(email="nobody@sci.cu.edu.eg"), uuid4()
            )
        with pytest.raises(UapmpError) as missing:
            await verification_handler.resend_verification(ResendVerificationRequest(), uuid4())

        assert unknown.value.error_code == IdentityErrorCode.NOT_FOUND.value
        assert missing.value.error_code == IdentityErrorCode.MISSING_FIELDS.value

    async def test_slow_notifier_is_reported_not_raised(
        self,
        verification_handler: VerificationHandler,
        notifier: MockVerificationNotifier,
        pending_account: AccountRecord,
    ) -> None:
        async def slow_send(**_kwargs):
            await asyncio.sleep(5)

        notifier.send_verification_message = slow_send  # type: ignore[method-assign]

        result = await verification_handler.resend_verification(
            ResendVerificationRequest(email=STUDENT_EMAIL), uuid4()
        )

        assert result.to_dict()["dispatched"] is False
