"""Dishka DI configuration for Campus Identity Service."""

from __future__ import annotations

from typing import AsyncIterator

from dishka import Provider, Scope, provide
from prometheus_client import REGISTRY, CollectorRegistry
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from uapmp_service_libs.logging_utils import create_service_logger

from services.campus_identity_service.config import Settings, settings
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
from services.campus_identity_service.implementations.account_repository_sqlalchemy_impl import (
    PostgresAccountRepo,
)
from services.campus_identity_service.implementations.notifier_mock_impl import (
    MockVerificationNotifier,
)
from services.campus_identity_service.implementations.notifier_smtp_impl import (
    SmtpVerificationNotifier,
)
from services.campus_identity_service.implementations.password_hasher_impl import (
    Argon2idPasswordHasher,
)
from services.campus_identity_service.implementations.template_renderer_impl import (
    JinjaTemplateRenderer,
)
from services.campus_identity_service.implementations.token_issuer_impl import HS256TokenIssuer
from services.campus_identity_service.protocols import (
    AccountRepo,
    PasswordHasher,
    TokenIssuer,
    VerificationNotifier,
)

logger = create_service_logger("campus_identity_service.di")


class CoreProvider(Provider):
    def __init__(self, service_settings: Settings | None = None) -> None:
        super().__init__()
        self._settings = service_settings or settings

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return self._settings

    @provide(scope=Scope.APP)
    def provide_metrics_registry(self) -> CollectorRegistry:
        return REGISTRY


class DatabaseStoreProvider(Provider):
    """Account store backed by SQLAlchemy (Postgres in production)."""

    @provide(scope=Scope.APP)
    async def provide_database_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        engine = create_async_engine(settings.DATABASE_URL, echo=False, pool_pre_ping=True)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def provide_account_repo(self, engine: AsyncEngine) -> AccountRepo:
        return PostgresAccountRepo(engine)


class InMemoryStoreProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_account_repo(self) -> AccountRepo:
        logger.warning("Using in-memory account store; accounts are lost on restart")
        return InMemoryAccountRepo()


def store_provider_for(service_settings: Settings) -> Provider:
    if service_settings.ACCOUNT_STORE == "memory":
        return InMemoryStoreProvider()
    return DatabaseStoreProvider()


class CampusIdentityImplementationsProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_university_directory(self, settings: Settings) -> UniversityDirectory:
        if settings.UNIVERSITY_DIRECTORY_PATH:
            directory = UniversityDirectory.from_json_file(settings.UNIVERSITY_DIRECTORY_PATH)
            logger.info(
                "University directory loaded from file",
                extra={
                    "path": settings.UNIVERSITY_DIRECTORY_PATH,
                    "universities": len(directory),
                },
            )
            return directory
        return UniversityDirectory.default()

    @provide(scope=Scope.APP)
    def provide_email_resolver(self, directory: UniversityDirectory) -> InstitutionalEmailResolver:
        return InstitutionalEmailResolver(directory)

    @provide(scope=Scope.APP)
    def provide_password_hasher(self) -> PasswordHasher:
        return Argon2idPasswordHasher()

    @provide(scope=Scope.APP)
    def provide_token_issuer(self, settings: Settings) -> TokenIssuer:
        return HS256TokenIssuer(settings)

    @provide(scope=Scope.APP)
    def provide_template_renderer(self) -> JinjaTemplateRenderer:
        return JinjaTemplateRenderer()

    @provide(scope=Scope.APP)
    def provide_verification_notifier(
        self, settings: Settings, renderer: JinjaTemplateRenderer
    ) -> VerificationNotifier:
        if settings.NOTIFIER == "smtp":
            return SmtpVerificationNotifier(settings, renderer)
        return MockVerificationNotifier(settings)


class DomainHandlerProvider(Provider):
    @provide(scope=Scope.REQUEST)
    def provide_verification_handler(
        self,
        account_repo: AccountRepo,
        notifier: VerificationNotifier,
        settings: Settings,
    ) -> VerificationHandler:
        return VerificationHandler(account_repo, notifier, settings)

    @provide(scope=Scope.REQUEST)
    def provide_registration_handler(
        self,
        account_repo: AccountRepo,
        password_hasher: PasswordHasher,
        email_resolver: InstitutionalEmailResolver,
        verification_handler: VerificationHandler,
        settings: Settings,
    ) -> RegistrationHandler:
        return RegistrationHandler(
            account_repo=account_repo,
            password_hasher=password_hasher,
            email_resolver=email_resolver,
            verification_handler=verification_handler,
            settings=settings,
        )

    @provide(scope=Scope.REQUEST)
    def provide_authentication_handler(
        self,
        account_repo: AccountRepo,
        token_issuer: TokenIssuer,
        password_hasher: PasswordHasher,
        settings: Settings,
    ) -> AuthenticationHandler:
        return AuthenticationHandler(
            account_repo=account_repo,
            token_issuer=token_issuer,
            password_hasher=password_hasher,
            settings=settings,
        )
