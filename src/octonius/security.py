"""JWT access/refresh token helpers."""

from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass

from jose import JWTError, jwt

from .config import Settings
from .errors import AuthenticationError
from .schema.enums import TokenType

__all__ = ["IssuedToken", "TokenManager"]


@dataclass(frozen=True)
class IssuedToken:
    token: str
    token_type: TokenType
    expires_at: dt.datetime


class TokenManager:
    """Encode and decode signed tokens with separate access/refresh keys."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _key(self, token_type: TokenType) -> str:
        if token_type is TokenType.ACCESS:
            return self.settings.jwt_access_key
        return self.settings.jwt_refresh_key

    def _ttl(self, token_type: TokenType) -> int:
        if token_type is TokenType.ACCESS:
            return self.settings.access_token_ttl
        return self.settings.refresh_token_ttl

    def issue(self, user_id: uuid.UUID, email: str, token_type: TokenType) -> IssuedToken:
        now = dt.datetime.now(dt.timezone.utc)
        expires_at = now + dt.timedelta(seconds=self._ttl(token_type))
        payload = {
            "sub": str(user_id),
            "user_id": str(user_id),
            "email": email,
            "type": token_type.value,
            # unique per token so two logins within a second never collide
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._key(token_type), algorithm=self.settings.jwt_algorithm)
        return IssuedToken(token=token, token_type=token_type, expires_at=expires_at)

    def decode(self, token: str, token_type: TokenType) -> dict:
        """Decode and validate *token*.

        Raises:
            AuthenticationError: signature, expiry or token type mismatch.
        """
        try:
            payload = jwt.decode(
                token, self._key(token_type), algorithms=[self.settings.jwt_algorithm]
            )
        except JWTError as exc:
            raise AuthenticationError("Invalid or expired token") from exc
        if payload.get("type") != token_type.value:
            raise AuthenticationError("Invalid token type")
        return payload
