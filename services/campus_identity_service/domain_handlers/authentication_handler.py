"""Authentication domain handler for Campus Identity Service.

Login answers unknown email and wrong password identically so that the
response never reveals whether an address is registered. Only verified
accounts receive a token.
"""

from __future__ import annotations

import secrets
from functools import lru_cache
from uuid import UUID

from jwt import InvalidTokenError
from uapmp_common.identity_enums import AccountRole, LoginFailureReason
from uapmp_service_libs.error_handling import (
    raise_account_not_found_error,
    raise_email_not_verified_error,
    raise_forbidden_error,
    raise_invalid_credentials_error,
    raise_missing_fields_error,
    raise_unauthorized_error,
)
from uapmp_service_libs.logging_utils import create_service_logger

from services.campus_identity_service.api.schemas import (
    AccountView,
    LoginRequest,
    LoginResponse,
    MeResponse,
)
from services.campus_identity_service.config import Settings
from services.campus_identity_service.domain_handlers.store_calls import SERVICE_NAME, call_store
from services.campus_identity_service.metrics import AUTHENTICATION_ATTEMPTS, TOKEN_ISSUANCE
from services.campus_identity_service.protocols import (
    AccountRepo,
    PasswordHasher,
    TokenClaims,
    TokenIssuer,
)

logger = create_service_logger("campus_identity_service.domain_handlers.authentication")


@lru_cache(maxsize=8)
def _dummy_hash_for(password_hasher: PasswordHasher) -> str:
    """Hash of a random secret, verified against when the email is unknown."""
    return password_hasher.hash(secrets.token_urlsafe(16))


class LoginResult:
    """Result model for login operations."""

    def __init__(self, response: LoginResponse):
        self.response = response

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return self.response.model_dump(mode="json")


class MeResult:
    def __init__(self, response: MeResponse):
        self.response = response

    def to_dict(self) -> dict:
        return self.response.model_dump(mode="json")


class AuthenticationHandler:
    def __init__(
        self,
        account_repo: AccountRepo,
        token_issuer: TokenIssuer,
        password_hasher: PasswordHasher,
        settings: Settings,
    ):
        self._account_repo = account_repo
        self._token_issuer = token_issuer
        self._password_hasher = password_hasher
        self._settings = settings
        self._dummy_hash = _dummy_hash_for(password_hasher)

    async def login(self, login_request: LoginRequest, correlation_id: UUID) -> LoginResult:
        """Exchange email and password for a bearer token.

        Raises:
            UapmpError: MISSING_FIELDS, INVALID_CREDENTIALS, EMAIL_NOT_VERIFIED
                or INTERNAL_ERROR
        """
        operation = "login"
        email = (login_request.email or "").strip().lower()
        password = login_request.password or ""
        missing = [name for name, value in (("email", email), ("password", password)) if not value]
        if missing:
            raise_missing_fields_error(SERVICE_NAME, operation, missing, correlation_id)

        account = await call_store(
            self._account_repo.get_account_by_email(email),
            timeout=self._settings.STORE_TIMEOUT_SECONDS,
            operation=operation,
            correlation_id=correlation_id,
        )
        if account is None:
            # Same hashing cost as a wrong password
            self._password_hasher.verify(self._dummy_hash, password)
            self._reject(LoginFailureReason.USER_NOT_FOUND, correlation_id)
            raise_invalid_credentials_error(SERVICE_NAME, operation, correlation_id)

        if not self._password_hasher.verify(account.password_hash, password):
            self._reject(LoginFailureReason.INVALID_PASSWORD, correlation_id, account.id)
            raise_invalid_credentials_error(SERVICE_NAME, operation, correlation_id)

        if not account.is_email_verified:
            self._reject(LoginFailureReason.EMAIL_UNVERIFIED, correlation_id, account.id)
            raise_email_not_verified_error(SERVICE_NAME, operation, correlation_id)

        ttl = self._settings.ACCESS_TOKEN_TTL_SECONDS
        access_token = self._token_issuer.issue_access_token(
            TokenClaims(sub=account.id, role=account.role, email=account.email), ttl
        )

        AUTHENTICATION_ATTEMPTS.labels(status="success", failure_reason="").inc()
        TOKEN_ISSUANCE.labels(token_type="access").inc()
        logger.info(
            "Login successful",
            extra={
                "account_id": account.id,
                "role": account.role.value,
                "correlation_id": str(correlation_id),
            },
        )
        return LoginResult(
            LoginResponse(
                access_token=access_token,
                expires_in=ttl,
                account=AccountView.from_record(account),
            )
        )

    def authenticate_token(self, token: str | None, correlation_id: UUID) -> TokenClaims:
        """Decode a bearer token, mapping every token problem to UNAUTHORIZED."""
        if not token:
            raise_unauthorized_error(
                SERVICE_NAME, "authenticate_token", "Missing bearer token", correlation_id
            )
        try:
            return self._token_issuer.verify(token)
        except InvalidTokenError as e:
            logger.info(
                "Rejected bearer token",
                extra={"reason": str(e), "correlation_id": str(correlation_id)},
            )
            raise_unauthorized_error(
                SERVICE_NAME, "authenticate_token", "Invalid or expired token", correlation_id
            )

    def require_role(
        self, claims: TokenClaims, role: AccountRole, correlation_id: UUID
    ) -> TokenClaims:
        """Admit only tokens issued to `role`; anything else is FORBIDDEN."""
        if claims.role != role:
            logger.info(
                "Role check failed",
                extra={
                    "account_id": claims.sub,
                    "role": claims.role.value,
                    "required_role": role.value,
                    "correlation_id": str(correlation_id),
                },
            )
            raise_forbidden_error(SERVICE_NAME, "require_role", role.value, correlation_id)
        return claims

    async def who_am_i(self, account_id: str, correlation_id: UUID) -> MeResult:
        account = await call_store(
            self._account_repo.get_account_by_id(account_id),
            timeout=self._settings.STORE_TIMEOUT_SECONDS,
            operation="who_am_i",
            correlation_id=correlation_id,
        )
        if account is None:
            raise_account_not_found_error(SERVICE_NAME, "who_am_i", correlation_id)
        return MeResult(MeResponse(account=AccountView.from_record(account)))

    def _reject(
        self,
        reason: LoginFailureReason,
        correlation_id: UUID,
        account_id: str | None = None,
    ) -> None:
        AUTHENTICATION_ATTEMPTS.labels(status="failure", failure_reason=reason.value).inc()
        logger.info(
            "Login rejected",
            extra={
                "reason": reason.value,
                "account_id": account_id,
                "correlation_id": str(correlation_id),
            },
        )
