from __future__ import annotations

from datetime import datetime
from typing import NamedTuple, Optional, Protocol

from pydantic import BaseModel, ConfigDict
from uapmp_common.identity_enums import AccountRole


class NewAccount(BaseModel):
    """Account data handed to the store at registration."""

    full_name: str
    email: str
    student_id: Optional[str] = None
    password_hash: str
    role: AccountRole
    university: str
    college: str
    created_at: datetime

    model_config = ConfigDict(frozen=True)


class AccountRecord(BaseModel):
    """Persisted account as returned by the store."""

    id: str
    full_name: str
    email: str
    student_id: Optional[str] = None
    password_hash: str
    role: AccountRole
    university: str
    college: str
    is_email_verified: bool = False
    created_at: datetime

    model_config = ConfigDict(frozen=True)


class DuplicateAccountKeyError(Exception):
    """Raised by AccountRepo.create_account when a unique key is already taken."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Duplicate value for unique field '{field}'")
        self.field = field


class TokenClaims(BaseModel):
    sub: str
    role: AccountRole
    email: str


class NotificationResult(NamedTuple):
    """Result of dispatching a verification message."""

    success: bool
    error_message: str | None = None


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, hash: str, password: str) -> bool: ...


class TokenIssuer(Protocol):
    def issue_access_token(self, claims: TokenClaims, ttl_seconds: int) -> str: ...

    def verify(self, token: str) -> TokenClaims:
        """Decode a token; raises jwt.InvalidTokenError when bad or expired."""
        ...


class AccountRepo(Protocol):
    async def create_account(self, account: NewAccount) -> AccountRecord:
        """Insert an account; raises DuplicateAccountKeyError on a unique conflict."""
        ...

    async def get_account_by_email(self, email: str) -> Optional[AccountRecord]: ...
    async def get_account_by_id(self, account_id: str) -> Optional[AccountRecord]: ...
    async def get_account_by_student_id(self, student_id: str) -> Optional[AccountRecord]: ...

    async def compare_and_set_verified(self, account_id: str) -> bool:
        """Set is_email_verified if still false. True iff this call flipped it."""
        ...

    async def delete_if_unverified(self, account_id: str) -> bool:
        """Delete the account if still unverified. True iff this call deleted it."""
        ...


class VerificationNotifier(Protocol):
    async def send_verification_message(
        self, destination_email: str, account_id: str, display_name: str
    ) -> NotificationResult: ...
