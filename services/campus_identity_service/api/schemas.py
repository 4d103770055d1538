from __future__ import annotations

from typing import Optional

from pydantic import BaseModel
from uapmp_common.identity_enums import AccountRole

from services.campus_identity_service.protocols import AccountRecord


class RegisterRequest(BaseModel):
    # Optional so that absent fields surface as MISSING_FIELDS, not a parse error
    full_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ResendVerificationRequest(BaseModel):
    email: Optional[str] = None


class AccountView(BaseModel):
    """Public projection of an account; never carries the password hash."""

    id: str
    full_name: str
    email: str
    student_id: Optional[str] = None
    role: AccountRole
    university: str
    college: str
    is_email_verified: bool

    @classmethod
    def from_record(cls, record: AccountRecord) -> "AccountView":
        return cls(
            id=record.id,
            full_name=record.full_name,
            email=record.email,
            student_id=record.student_id,
            role=record.role,
            university=record.university,
            college=record.college,
            is_email_verified=record.is_email_verified,
        )


class RegisterResponse(BaseModel):
    message: str
    account: AccountView
    email_verification_required: bool = True


class VerifyEmailResponse(BaseModel):
    message: str
    account: AccountView


class ResendVerificationResponse(BaseModel):
    message: str
    dispatched: bool


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    account: AccountView


class MeResponse(BaseModel):
    account: AccountView


class RoleCheckResponse(BaseModel):
    """Answer to a role check made on behalf of another service."""

    account_id: str
    role: AccountRole
