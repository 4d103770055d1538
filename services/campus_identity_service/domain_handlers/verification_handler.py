"""Email verification domain handler for Campus Identity Service.

An account is created `pending`. Within the verification window it can be
verified exactly once; after the window it is purged the first time
verification or resend touches it. The store's conditional update/delete
decides which of several concurrent callers performs the transition.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import NoReturn
from uuid import UUID

from uapmp_service_libs.error_handling import (
    raise_account_not_found_error,
    raise_email_already_verified_error,
    raise_internal_error,
    raise_missing_fields_error,
    raise_verification_link_expired_error,
)
from uapmp_service_libs.logging_utils import create_service_logger

from services.campus_identity_service.api.schemas import (
    AccountView,
    ResendVerificationRequest,
    ResendVerificationResponse,
    VerifyEmailResponse,
)
from services.campus_identity_service.config import Settings
from services.campus_identity_service.domain_handlers.store_calls import SERVICE_NAME, call_store
from services.campus_identity_service.metrics import (
    ACCOUNTS_PURGED,
    EMAIL_VERIFICATIONS,
    VERIFICATION_MESSAGES,
)
from services.campus_identity_service.protocols import (
    AccountRecord,
    AccountRepo,
    VerificationNotifier,
)

logger = create_service_logger("campus_identity_service.domain_handlers.verification")


class VerificationResult:
    """Result model for email verification."""

    def __init__(self, response: VerifyEmailResponse):
        self.response = response

    def to_dict(self) -> dict:
        return self.response.model_dump(mode="json")


class ResendVerificationResult:
    """Result model for re-sending the verification message."""

    def __init__(self, response: ResendVerificationResponse):
        self.response = response

    def to_dict(self) -> dict:
        return self.response.model_dump(mode="json")


class VerificationHandler:
    def __init__(
        self,
        account_repo: AccountRepo,
        notifier: VerificationNotifier,
        settings: Settings,
    ):
        self._account_repo = account_repo
        self._notifier = notifier
        self._settings = settings

    @property
    def verification_window(self) -> timedelta:
        return timedelta(hours=self._settings.VERIFICATION_WINDOW_HOURS)

    def is_expired(self, account: AccountRecord, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        return now - account.created_at > self.verification_window

    async def verify_email(self, account_id: str, correlation_id: UUID) -> VerificationResult:
        """Confirm the email address behind `account_id`.

        Raises:
            UapmpError: NOT_FOUND, ALREADY_VERIFIED, LINK_EXPIRED_ACCOUNT_REMOVED
                or INTERNAL_ERROR
        """
        operation = "verify_email"
        account = await self._store(
            self._account_repo.get_account_by_id(account_id), operation, correlation_id
        )
        if account is None:
            EMAIL_VERIFICATIONS.labels(outcome="not_found").inc()
            raise_account_not_found_error(SERVICE_NAME, operation, correlation_id)
        if account.is_email_verified:
            EMAIL_VERIFICATIONS.labels(outcome="already_verified").inc()
            raise_email_already_verified_error(SERVICE_NAME, operation, correlation_id)

        if self.is_expired(account):
            await self._purge_expired(account, operation, correlation_id)

        flipped = await self._store(
            self._account_repo.compare_and_set_verified(account.id),
            operation,
            correlation_id,
            mutating=True,
        )
        if not flipped:
            await self._answer_lost_race(account.id, operation, correlation_id)

        EMAIL_VERIFICATIONS.labels(outcome="verified").inc()
        logger.info(
            "Email verified",
            extra={
                "account_id": account.id,
                "role": account.role.value,
                "correlation_id": str(correlation_id),
            },
        )
        verified = account.model_copy(update={"is_email_verified": True})
        return VerificationResult(
            VerifyEmailResponse(
                message="Email verified successfully",
                account=AccountView.from_record(verified),
            )
        )

    async def resend_verification(
        self, resend_request: ResendVerificationRequest, correlation_id: UUID
    ) -> ResendVerificationResult:
        """Send the verification message again for a pending account.

        Expiry is applied first, so a stale account is purged rather than
        given a fresh link. Notifier failures are reported, never raised.
        """
        operation = "resend_verification"
        email = (resend_request.email or "").strip().lower()
        if not email:
            raise_missing_fields_error(SERVICE_NAME, operation, ["email"], correlation_id)

        account = await self._store(
            self._account_repo.get_account_by_email(email), operation, correlation_id
        )
        if account is None:
            raise_account_not_found_error(SERVICE_NAME, operation, correlation_id)
        if account.is_email_verified:
            raise_email_already_verified_error(SERVICE_NAME, operation, correlation_id)
        if self.is_expired(account):
            await self._purge_expired(account, operation, correlation_id)

        dispatched = await self.send_verification(account, correlation_id)
        message = (
            "Verification email sent"
            if dispatched
            else "Verification email could not be sent; try again later"
        )
        return ResendVerificationResult(
            ResendVerificationResponse(message=message, dispatched=dispatched)
        )

    async def send_verification(self, account: AccountRecord, correlation_id: UUID) -> bool:
        """Hand the verification message to the notifier; True when it was accepted."""
        try:
            result = await asyncio.wait_for(
                self._notifier.send_verification_message(
                    destination_email=account.email,
                    account_id=account.id,
                    display_name=account.full_name,
                ),
                timeout=self._settings.NOTIFIER_TIMEOUT_SECONDS,
            )
        except Exception as e:
            VERIFICATION_MESSAGES.labels(status="error").inc()
            logger.warning(
                "Failed to send verification email",
                extra={
                    "account_id": account.id,
                    "email": account.email,
                    "correlation_id": str(correlation_id),
                    "error": str(e) or type(e).__name__,
                },
                exc_info=True,
            )
            return False

        if not result.success:
            VERIFICATION_MESSAGES.labels(status="rejected").inc()
            logger.warning(
                "Notifier rejected verification email",
                extra={
                    "account_id": account.id,
                    "email": account.email,
                    "correlation_id": str(correlation_id),
                    "error": result.error_message,
                },
            )
            return False

        VERIFICATION_MESSAGES.labels(status="sent").inc()
        return True

    async def _purge_expired(
        self, account: AccountRecord, operation: str, correlation_id: UUID
    ) -> NoReturn:
        deleted = await self._store(
            self._account_repo.delete_if_unverified(account.id),
            operation,
            correlation_id,
            mutating=True,
        )
        if not deleted:
            await self._answer_lost_race(account.id, operation, correlation_id)

        ACCOUNTS_PURGED.inc()
        EMAIL_VERIFICATIONS.labels(outcome="expired").inc()
        logger.info(
            "Expired unverified account removed",
            extra={
                "account_id": account.id,
                "created_at": account.created_at.isoformat(),
                "correlation_id": str(correlation_id),
            },
        )
        raise_verification_link_expired_error(
            SERVICE_NAME,
            operation,
            self._settings.VERIFICATION_WINDOW_HOURS,
            correlation_id,
        )

    async def _answer_lost_race(
        self, account_id: str, operation: str, correlation_id: UUID
    ) -> NoReturn:
        """Another caller changed the account first; report what it left behind."""
        current = await self._store(
            self._account_repo.get_account_by_id(account_id), operation, correlation_id
        )
        if current is None:
            EMAIL_VERIFICATIONS.labels(outcome="not_found").inc()
            raise_account_not_found_error(SERVICE_NAME, operation, correlation_id)
        if current.is_email_verified:
            EMAIL_VERIFICATIONS.labels(outcome="already_verified").inc()
            raise_email_already_verified_error(SERVICE_NAME, operation, correlation_id)
        raise_internal_error(
            service=SERVICE_NAME,
            operation=operation,
            message="Conditional account update had no effect",
            correlation_id=correlation_id,
            account_id=account_id,
        )

    async def _store(self, awaitable, operation: str, correlation_id: UUID, mutating: bool = False):
        return await call_store(
            awaitable,
            timeout=self._settings.STORE_TIMEOUT_SECONDS,
            operation=operation,
            correlation_id=correlation_id,
            mutating=mutating,
        )
