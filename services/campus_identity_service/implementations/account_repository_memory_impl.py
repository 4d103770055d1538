"""In-process account store for local development and tests.

Mirrors the relational store's guarantees: unique email and student_id,
and conditional verify/delete that only one concurrent caller can win.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Optional

from uapmp_service_libs.logging_utils import create_service_logger

from services.campus_identity_service.protocols import (
    AccountRecord,
    AccountRepo,
    DuplicateAccountKeyError,
    NewAccount,
)

logger = create_service_logger("campus_identity_service.account_repository_memory")


class InMemoryAccountRepo(AccountRepo):
    def __init__(self) -> None:
        self._accounts: dict[str, AccountRecord] = {}
        self._lock = asyncio.Lock()

    async def create_account(self, account: NewAccount) -> AccountRecord:
        email = account.email.lower()
        async with self._lock:
            for existing in self._accounts.values():
                if existing.email == email:
                    raise DuplicateAccountKeyError("email")
                if account.student_id is not None and existing.student_id == account.student_id:
                    raise DuplicateAccountKeyError("student_id")

            record = AccountRecord(
                id=str(uuid.uuid4()),
                **account.model_dump(exclude={"email"}),
                email=email,
                is_email_verified=False,
            )
            self._accounts[record.id] = record

        logger.debug("Account stored in memory", extra={"account_id": record.id})
        return record

    async def get_account_by_email(self, email: str) -> Optional[AccountRecord]:
        email = email.lower()
        return next((a for a in self._accounts.values() if a.email == email), None)

    async def get_account_by_id(self, account_id: str) -> Optional[AccountRecord]:
        return self._accounts.get(str(account_id))

    async def get_account_by_student_id(self, student_id: str) -> Optional[AccountRecord]:
        return next((a for a in self._accounts.values() if a.student_id == student_id), None)

    async def compare_and_set_verified(self, account_id: str) -> bool:
        async with self._lock:
            record = self._accounts.get(str(account_id))
            if record is None or record.is_email_verified:
                return False
            self._accounts[record.id] = record.model_copy(update={"is_email_verified": True})
            return True

    async def delete_if_unverified(self, account_id: str) -> bool:
        async with self._lock:
            record = self._accounts.get(str(account_id))
            if record is None or record.is_email_verified:
                return False
            del self._accounts[record.id]
            return True

    def replace(self, record: AccountRecord) -> None:
        """Overwrite a stored record, e.g. to age created_at in local testing."""
        self._accounts[record.id] = record
