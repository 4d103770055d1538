"""Registration domain handler for Campus Identity Service.

Validation runs in a fixed order before anything is written:
required fields, password confirmation, password policy, institutional email
resolution, uniqueness. The account is then stored `pending` and the
verification message is dispatched; a failed dispatch never undoes the
registration.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import NoReturn
from uuid import UUID

from uapmp_common.identity_enums import AccountRole
from uapmp_service_libs.error_handling import (
    raise_duplicate_entry_error,
    raise_invalid_email_format_error,
    raise_missing_fields_error,
    raise_password_mismatch_error,
    raise_weak_password_error,
)
from uapmp_service_libs.logging_utils import create_service_logger

from services.campus_identity_service.api.schemas import (
    AccountView,
    RegisterRequest,
    RegisterResponse,
)
from services.campus_identity_service.config import Settings
from services.campus_identity_service.domain.email_resolver import (
    EmailResolutionError,
    InstitutionalEmailResolver,
)
from services.campus_identity_service.domain.password_policy import evaluate_password
from services.campus_identity_service.domain_handlers.store_calls import SERVICE_NAME, call_store
from services.campus_identity_service.domain_handlers.verification_handler import (
    VerificationHandler,
)
from services.campus_identity_service.metrics import ACCOUNTS_PURGED, REGISTRATIONS
from services.campus_identity_service.protocols import (
    AccountRecord,
    AccountRepo,
    DuplicateAccountKeyError,
    NewAccount,
    PasswordHasher,
)

logger = create_service_logger("campus_identity_service.domain_handlers.registration")

INSTRUCTOR_TITLE = "Dr. "
REQUIRED_FIELDS = ("full_name", "email", "password", "confirm_password")
# Passwords are taken verbatim; only these are blank when whitespace-only
TRIMMED_FIELDS = ("full_name", "email")


def format_display_name(full_name: str, role: AccountRole) -> str:
    """Trim the name; instructors carry the `Dr. ` title exactly once."""
    name = full_name.strip()
    if role is AccountRole.INSTRUCTOR and not name.lower().startswith("dr."):
        return f"{INSTRUCTOR_TITLE}{name}"
    return name


class RegistrationResult:
    """Result model for registration operations."""

    def __init__(self, response: RegisterResponse):
        self.response = response

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return self.response.model_dump(mode="json")


class RegistrationHandler:
    """Creates pending student and instructor accounts."""

    def __init__(
        self,
        account_repo: AccountRepo,
        password_hasher: PasswordHasher,
        email_resolver: InstitutionalEmailResolver,
        verification_handler: VerificationHandler,
        settings: Settings,
    ):
        self._account_repo = account_repo
        self._password_hasher = password_hasher
        self._email_resolver = email_resolver
        self._verification_handler = verification_handler
        self._settings = settings

    async def register_account(
        self,
        register_request: RegisterRequest,
        correlation_id: UUID,
    ) -> RegistrationResult:
        """Register a new account from an institutional email.

        Args:
            register_request: full name, email, password and its confirmation
            correlation_id: Request correlation ID for observability

        Returns:
            RegistrationResult with the public projection of the pending account

        Raises:
            UapmpError: MISSING_FIELDS, PASSWORD_MISMATCH, WEAK_PASSWORD,
                INVALID_EMAIL_FORMAT, DUPLICATE_ENTRY or INTERNAL_ERROR
        """
        operation = "register_account"

        missing = [
            field for field in REQUIRED_FIELDS if not self._field_value(register_request, field)
        ]
        if missing:
            REGISTRATIONS.labels(outcome="missing_fields").inc()
            raise_missing_fields_error(SERVICE_NAME, operation, missing, correlation_id)

        # Fields are known present from here on
        full_name = register_request.full_name or ""
        password = register_request.password or ""
        email = (register_request.email or "").strip().lower()

        if password != register_request.confirm_password:
            REGISTRATIONS.labels(outcome="password_mismatch").inc()
            raise_password_mismatch_error(SERVICE_NAME, operation, correlation_id)

        report = evaluate_password(password)
        if not report.meets_policy:
            REGISTRATIONS.labels(outcome="weak_password").inc()
            raise_weak_password_error(SERVICE_NAME, operation, report.to_details(), correlation_id)

        try:
            resolution = self._email_resolver.resolve(email)
        except EmailResolutionError as e:
            REGISTRATIONS.labels(outcome="invalid_email").inc()
            logger.info(
                "Registration rejected: email not resolvable",
                extra={"reason": e.reason.value, "correlation_id": str(correlation_id)},
            )
            raise_invalid_email_format_error(
                SERVICE_NAME, operation, e.reason.value, e.message, correlation_id
            )

        existing = await self._store(
            self._account_repo.get_account_by_email(email), operation, correlation_id
        )
        if existing is not None and await self._blocks_registration(
            existing, operation, correlation_id
        ):
            self._reject_duplicate("email", operation, correlation_id)
        if resolution.student_id is not None:
            existing = await self._store(
                self._account_repo.get_account_by_student_id(resolution.student_id),
                operation,
                correlation_id,
            )
            if existing is not None and await self._blocks_registration(
                existing, operation, correlation_id
            ):
                self._reject_duplicate("student_id", operation, correlation_id)

        new_account = NewAccount(
            full_name=format_display_name(full_name, resolution.role),
            email=email,
            student_id=resolution.student_id,
            password_hash=self._password_hasher.hash(password),
            role=resolution.role,
            university=resolution.university,
            college=resolution.faculty,
            created_at=datetime.now(UTC),
        )
        try:
            account = await self._store(
                self._account_repo.create_account(new_account),
                operation,
                correlation_id,
                mutating=True,
            )
        except DuplicateAccountKeyError as e:
            # Lost a race with a concurrent registration for the same key
            self._reject_duplicate(e.field, operation, correlation_id)

        REGISTRATIONS.labels(outcome="created").inc()
        logger.info(
            "Account registered",
            extra={
                "account_id": account.id,
                "role": account.role.value,
                "university": account.university,
                "college": account.college,
                "correlation_id": str(correlation_id),
            },
        )

        await self._verification_handler.send_verification(account, correlation_id)

        return RegistrationResult(
            RegisterResponse(
                message="Registration successful. Check your email to verify your account.",
                account=AccountView.from_record(account),
            )
        )

    @staticmethod
    def _field_value(register_request: RegisterRequest, field: str) -> str:
        value = getattr(register_request, field) or ""
        return value.strip() if field in TRIMMED_FIELDS else value

    async def _blocks_registration(
        self, existing: AccountRecord, operation: str, correlation_id: UUID
    ) -> bool:
        """True unless `existing` is an expired pending account, which is purged here."""
        if existing.is_email_verified or not self._verification_handler.is_expired(existing):
            return True

        deleted = await self._store(
            self._account_repo.delete_if_unverified(existing.id),
            operation,
            correlation_id,
            mutating=True,
        )
        if not deleted:
            # Verified or removed concurrently
            current = await self._store(
                self._account_repo.get_account_by_id(existing.id), operation, correlation_id
            )
            return current is not None

        ACCOUNTS_PURGED.inc()
        logger.info(
            "Expired unverified account removed before re-registration",
            extra={
                "account_id": existing.id,
                "created_at": existing.created_at.isoformat(),
                "correlation_id": str(correlation_id),
            },
        )
        return False

    def _reject_duplicate(self, field: str, operation: str, correlation_id: UUID) -> NoReturn:
        REGISTRATIONS.labels(outcome="duplicate").inc()
        raise_duplicate_entry_error(SERVICE_NAME, operation, field, correlation_id)

    async def _store(self, awaitable, operation: str, correlation_id: UUID, mutating: bool = False):
        return await call_store(
            awaitable,
            timeout=self._settings.STORE_TIMEOUT_SECONDS,
            operation=operation,
            correlation_id=correlation_id,
            mutating=mutating,
        )
