from __future__ import annotations

from datetime import UTC
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from uapmp_common.identity_enums import AccountRole

from services.campus_identity_service.models_db import (
    EMAIL_UNIQUE_CONSTRAINT,
    STUDENT_ID_UNIQUE_CONSTRAINT,
    Account,
)
from services.campus_identity_service.protocols import (
    AccountRecord,
    AccountRepo,
    DuplicateAccountKeyError,
    NewAccount,
)


def _parse_account_id(account_id: str) -> UUID | None:
    try:
        return UUID(str(account_id))
    except ValueError:
        return None


def _duplicate_field(error: IntegrityError) -> str | None:
    # Only the first line is trusted; the Postgres DETAIL line echoes the conflicting value
    driver_error = error.orig.__cause__ or error.orig
    constraint = getattr(driver_error, "constraint_name", None)
    first_line = str(error.orig).lower().partition("\n")[0]
    if constraint == STUDENT_ID_UNIQUE_CONSTRAINT or STUDENT_ID_UNIQUE_CONSTRAINT in first_line:
        return "student_id"
    if constraint == EMAIL_UNIQUE_CONSTRAINT or EMAIL_UNIQUE_CONSTRAINT in first_line:
        return "email"
    # SQLite reports columns: "UNIQUE constraint failed: accounts.email"
    if "accounts.student_id" in first_line:
        return "student_id"
    if "accounts.email" in first_line:
        return "email"
    return None


def _to_record(account: Account) -> AccountRecord:
    created_at = account.created_at
    # SQLite drops tzinfo; stored values are always UTC
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return AccountRecord(
        id=str(account.id),
        full_name=account.full_name,
        email=account.email,
        student_id=account.student_id,
        password_hash=account.password_hash,
        role=AccountRole(account.role),
        university=account.university,
        college=account.college,
        is_email_verified=account.is_email_verified,
        created_at=created_at,
    )


class PostgresAccountRepo(AccountRepo):
    """SQLAlchemy account store. Any async dialect works; Postgres in production."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async def create_account(self, account: NewAccount) -> AccountRecord:
        async with self._session_factory() as session:
            row = Account(
                full_name=account.full_name,
                email=account.email.lower(),
                student_id=account.student_id,
                password_hash=account.password_hash,
                role=account.role.value,
                university=account.university,
                college=account.college,
                is_email_verified=False,
                created_at=account.created_at,
            )
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                field = _duplicate_field(e)
                if field is None:
                    raise
                raise DuplicateAccountKeyError(field) from e
            return _to_record(row)

    async def get_account_by_email(self, email: str) -> Optional[AccountRecord]:
        async with self._session_factory() as session:
            stmt = select(Account).where(Account.email == email.lower())
            res = await session.execute(stmt)
            account = res.scalar_one_or_none()
            return _to_record(account) if account else None

    async def get_account_by_id(self, account_id: str) -> Optional[AccountRecord]:
        parsed = _parse_account_id(account_id)
        if parsed is None:
            return None
        async with self._session_factory() as session:
            account = await session.get(Account, parsed)
            return _to_record(account) if account else None

    async def get_account_by_student_id(self, student_id: str) -> Optional[AccountRecord]:
        async with self._session_factory() as session:
            stmt = select(Account).where(Account.student_id == student_id)
            res = await session.execute(stmt)
            account = res.scalar_one_or_none()
            return _to_record(account) if account else None

    async def compare_and_set_verified(self, account_id: str) -> bool:
        parsed = _parse_account_id(account_id)
        if parsed is None:
            return False
        async with self._session_factory() as session:
            stmt = (
                update(Account)
                .where(Account.id == parsed, Account.is_email_verified.is_(False))
                .values(is_email_verified=True)
                .execution_options(synchronize_session=False)
            )
            res = await session.execute(stmt)
            await session.commit()
            return res.rowcount == 1

    async def delete_if_unverified(self, account_id: str) -> bool:
        parsed = _parse_account_id(account_id)
        if parsed is None:
            return False
        async with self._session_factory() as session:
            stmt = (
                delete(Account)
                .where(Account.id == parsed, Account.is_email_verified.is_(False))
                .execution_options(synchronize_session=False)
            )
            res = await session.execute(stmt)
            await session.commit()
            return res.rowcount == 1
