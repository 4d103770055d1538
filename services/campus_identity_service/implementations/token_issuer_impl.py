from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from jwt import InvalidTokenError
from pydantic import ValidationError

from services.campus_identity_service.config import Settings
from services.campus_identity_service.protocols import TokenClaims, TokenIssuer


class HS256TokenIssuer(TokenIssuer):
    """Signs access tokens with the shared HS256 secret from settings."""

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.JWT_SECRET.get_secret_value()
        self._issuer = settings.JWT_ISSUER
        self._audience = settings.JWT_AUDIENCE

    def issue_access_token(self, claims: TokenClaims, ttl_seconds: int) -> str:
        now = int(time.time())
        payload = {
            "sub": claims.sub,
            "role": claims.role.value,
            "email": claims.email,
            "iat": now,
            "exp": now + ttl_seconds,
            "jti": uuid.uuid4().hex,
            "iss": self._issuer,
            "aud": self._audience,
        }
        return self._encode(payload)

    def verify(self, token: str) -> TokenClaims:
        payload = jwt.decode(
            token,
            self._secret,
            algorithms=["HS256"],
            audience=self._audience,
            issuer=self._issuer,
            options={"require": ["exp", "sub"]},
        )
        try:
            return TokenClaims.model_validate(payload)
        except ValidationError as e:
            raise InvalidTokenError(f"Token claims are incomplete: {e}") from e

    def _encode(self, payload: dict[str, Any]) -> str:
        return jwt.encode(payload, self._secret, algorithm="HS256")
