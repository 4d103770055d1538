"""Shared fixtures for Campus Identity Service tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from argon2 import PasswordHasher as Argon2Hasher
from pydantic import SecretStr
from uapmp_common.config_enums import Environment

from services.campus_identity_service.api.schemas import RegisterRequest
from services.campus_identity_service.config import Settings
from services.campus_identity_service.domain.email_resolver import InstitutionalEmailResolver
from services.campus_identity_service.domain.university_directory import UniversityDirectory
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
from services.campus_identity_service.implementations.password_hasher_impl import (
    Argon2idPasswordHasher,
)
from services.campus_identity_service.implementations.token_issuer_impl import HS256TokenIssuer
from services.campus_identity_service.protocols import AccountRecord

STUDENT_EMAIL = "202312345@std.sci.cu.edu.eg"
INSTRUCTOR_EMAIL = "ahmed.hassan@eng.cu.edu.eg"
VALID_PASSWORD = "abc123!"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        ENVIRONMENT=Environment.TESTING,
        ACCOUNT_STORE="memory",
        NOTIFIER="mock",
        JWT_SECRET=SecretStr("test-secret-with-enough-length-for-hs256"),
        STORE_TIMEOUT_SECONDS=1.0,
        NOTIFIER_TIMEOUT_SECONDS=0.5,
        VERIFICATION_LINK_BASE_URL="http://testserver/v1/auth/verify",
    )


@pytest.fixture
def password_hasher() -> Argon2idPasswordHasher:
    # Cheap parameters keep the suite fast
    return Argon2idPasswordHasher(Argon2Hasher(time_cost=1, memory_cost=8, parallelism=1))


@pytest.fixture
def directory() -> UniversityDirectory:
    return UniversityDirectory.default()


@pytest.fixture
def email_resolver(directory: UniversityDirectory) -> InstitutionalEmailResolver:
    return InstitutionalEmailResolver(directory)


@pytest.fixture
def account_repo() -> InMemoryAccountRepo:
    return InMemoryAccountRepo()


@pytest.fixture
def notifier(test_settings: Settings) -> MockVerificationNotifier:
    return MockVerificationNotifier(test_settings)


@pytest.fixture
def token_issuer(test_settings: Settings) -> HS256TokenIssuer:
    return HS256TokenIssuer(test_settings)


@pytest.fixture
def verification_handler(
    account_repo: InMemoryAccountRepo,
    notifier: MockVerificationNotifier,
    test_settings: Settings,
) -> VerificationHandler:
    return VerificationHandler(account_repo, notifier, test_settings)


@pytest.fixture
def registration_handler(
    account_repo: InMemoryAccountRepo,
    password_hasher: Argon2idPasswordHasher,
    email_resolver: InstitutionalEmailResolver,
    verification_handler: VerificationHandler,
    test_settings: Settings,
) -> RegistrationHandler:
    return RegistrationHandler(
        account_repo=account_repo,
        password_hasher=password_hasher,
        email_resolver=email_resolver,
        verification_handler=verification_handler,
        settings=test_settings,
    )


@pytest.fixture
def authentication_handler(
    account_repo: InMemoryAccountRepo,
    token_issuer: HS256TokenIssuer,
    password_hasher: Argon2idPasswordHasher,
    test_settings: Settings,
) -> AuthenticationHandler:
    return AuthenticationHandler(
        account_repo=account_repo,
        token_issuer=token_issuer,
        password_hasher=password_hasher,
        settings=test_settings,
    )


def make_register_request(
    email: str = STUDENT_EMAIL,
    full_name: str = "Mona Adel",
    password: str = VALID_PASSWORD,
    confirm_password: str | None = None,
) -> RegisterRequest:
    return RegisterRequest(
        full_name=full_name,
        email=email,
        password=password,
        confirm_password=password if confirm_password is None else confirm_password,
    )


def age_account(repo: InMemoryAccountRepo, record: AccountRecord, hours: float) -> AccountRecord:
    """Move created_at back so the account looks `hours` old."""
    aged = record.model_copy(
        update={"created_at": datetime.now(UTC) - timedelta(hours=hours)}
    )
    repo.replace(aged)
    return aged
