"""Login sessions, issued tokens and one-time passwords."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..schema.enums import TokenType, enum_column
from .base import Base, TimestampMixin

__all__ = ["AuthSession", "AuthToken", "OtpCode"]


class AuthSession(TimestampMixin, Base):
    """Per-user login state checked on every authenticated request."""

    __tablename__ = "auth_sessions"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    logged_in: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_login: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
    last_logout: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
    ip_address: Mapped[Optional[str]] = mapped_column(String(64))


class AuthToken(TimestampMixin, Base):
    __tablename__ = "auth_tokens"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    token_type: Mapped[TokenType] = mapped_column(enum_column(TokenType), nullable=False)
    expires_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    blacklisted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class OtpCode(TimestampMixin, Base):
    __tablename__ = "otp_codes"

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(6), nullable=False)
    expires_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # set once the code is checked for an email with no account yet;
    # the row then authorises a single setup-workplace call
    verified_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
