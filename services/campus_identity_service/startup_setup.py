from __future__ import annotations

from uuid import uuid4

from dishka import make_async_container
from quart_dishka import QuartDishka
from sqlalchemy.ext.asyncio import AsyncEngine
from uapmp_service_libs import UapmpApp
from uapmp_service_libs.error_handling import raise_configuration_error
from uapmp_service_libs.logging_utils import (
    configure_service_logging,
    create_service_logger,
)

from services.campus_identity_service.config import DEV_JWT_SECRET, Settings
from services.campus_identity_service.di import (
    CampusIdentityImplementationsProvider,
    CoreProvider,
    DomainHandlerProvider,
    store_provider_for,
)
from services.campus_identity_service.models_db import Base

logger = create_service_logger("campus_identity_service.startup")


def check_production_settings(settings: Settings) -> None:
    """Refuse to serve production traffic with development-only settings."""
    if not settings.is_production():
        return
    if settings.JWT_SECRET.get_secret_value() == DEV_JWT_SECRET:
        raise_configuration_error(
            service=settings.SERVICE_NAME,
            operation="startup",
            config_key="JWT_SECRET",
            message="JWT_SECRET must be set in production",
            correlation_id=uuid4(),
        )
    if settings.ACCOUNT_STORE == "memory":
        raise_configuration_error(
            service=settings.SERVICE_NAME,
            operation="startup",
            config_key="ACCOUNT_STORE",
            message="The in-memory account store cannot be used in production",
            correlation_id=uuid4(),
        )


async def initialize_services(app: UapmpApp, settings: Settings) -> None:
    configure_service_logging(
        settings.SERVICE_NAME,
        environment=settings.ENVIRONMENT.value,
        log_level=settings.LOG_LEVEL,
    )
    logger.info("Campus Identity Service initializing", extra={"settings": str(settings)})
    check_production_settings(settings)

    # DI container and quart integration
    container = make_async_container(
        CoreProvider(settings),
        store_provider_for(settings),
        CampusIdentityImplementationsProvider(),
        DomainHandlerProvider(),
    )
    QuartDishka(app=app, container=container)
    app.container = container

    if settings.ACCOUNT_STORE == "postgres":
        database_engine = await container.get(AsyncEngine)
        app.database_engine = database_engine

        # Initialize database schema (safety net for fresh databases)
        async with database_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


async def shutdown_services(app: UapmpApp | None = None) -> None:
    if app is not None and getattr(app, "container", None) is not None:
        # Disposes the database engine through its provider finalizer
        await app.container.close()
    logger.info("Campus Identity Service shutdown complete")
