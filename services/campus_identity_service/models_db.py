"""SQLAlchemy models for Campus Identity Service."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, String, UniqueConstraint, Uuid, func, text
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

EMAIL_UNIQUE_CONSTRAINT = "uq_accounts_email"
STUDENT_ID_UNIQUE_CONSTRAINT = "uq_accounts_student_id"


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all SQLAlchemy models in Campus Identity Service."""

    pass


class Account(Base):
    """Student and instructor accounts.

    Uniqueness of email and student_id is enforced here as well as by the
    registration pre-checks; the constraint is the authority under races.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("email", name=EMAIL_UNIQUE_CONSTRAINT),
        UniqueConstraint("student_id", name=STUDENT_ID_UNIQUE_CONSTRAINT),
    )

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    # NULLs never collide in a unique constraint, so instructors may share None
    student_id: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    university: Mapped[str] = mapped_column(String(255), nullable=False)
    college: Mapped[str] = mapped_column(String(255), nullable=False)
    is_email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.current_timestamp()
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            f"<Account id={self.id} email={self.email} role={self.role} "
            f"verified={self.is_email_verified}>"
        )
