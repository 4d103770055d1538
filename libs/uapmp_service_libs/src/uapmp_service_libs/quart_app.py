"""
Type-safe Quart application class for UAPMP services.

Replaces setattr()/getattr() on the app object with typed attributes for the
cross-cutting infrastructure every service wires at startup.
"""

from __future__ import annotations

from typing import Any, Optional

from dishka import AsyncContainer
from quart import Quart
from sqlalchemy.ext.asyncio import AsyncEngine


class UapmpApp(Quart):
    """Quart application with typed UAPMP infrastructure attributes.

    GUARANTEED INFRASTRUCTURE:
        container: Dishka async container for dependency injection
        extensions: Standard Quart extensions dictionary

    OPTIONAL INFRASTRUCTURE:
        database_engine: SQLAlchemy async engine, None when the service runs
            without a relational store
    """

    container: AsyncContainer
    database_engine: Optional[AsyncEngine]
    extensions: dict[str, Any]

    def __init__(self, import_name: str, *args: Any, **kwargs: Any) -> None:
        super().__init__(import_name, *args, **kwargs)
        self.database_engine = None
