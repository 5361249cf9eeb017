"""Files and notes stored per workplace group."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, BigInteger, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..schema.enums import FileType, enum_column
from .base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:  # pragma: no cover
    from .users import User

__all__ = ["File"]


class File(TimestampMixin, Base):
    """A note (rich-text JSON content) or an uploaded object in S3."""

    __tablename__ = "files"

    type: Mapped[FileType] = mapped_column(enum_column(FileType), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(String(16))
    title: Mapped[Optional[str]] = mapped_column(String(255))
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    workplace_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("workplaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    group_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[Optional[dict]] = mapped_column(JSON)
    size: Mapped[Optional[int]] = mapped_column(BigInteger)
    mime_type: Mapped[Optional[str]] = mapped_column(String(255))
    cdn_url: Mapped[Optional[str]] = mapped_column(Text)
    last_modified: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    owner: Mapped["User"] = relationship()

    @property
    def owner_name(self) -> Optional[str]:
        return self.owner.display_name if self.owner else None

    @property
    def s3_key(self) -> Optional[str]:
        if self.type == FileType.FILE and self.content:
            return self.content.get("s3Key")
        return None
