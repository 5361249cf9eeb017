"""Group activity feed: posts, likes and comments."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:  # pragma: no cover
    from .users import User

__all__ = ["GroupPost", "GroupPostLike", "GroupPostComment"]


class GroupPost(TimestampMixin, Base):
    __tablename__ = "group_posts"

    group_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    author: Mapped["User"] = relationship()
    likes: Mapped[list["GroupPostLike"]] = relationship(
        back_populates="post", cascade="all, delete-orphan"
    )
    comments: Mapped[list["GroupPostComment"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="GroupPostComment.created_at",
    )


class GroupPostLike(TimestampMixin, Base):
    __tablename__ = "group_post_likes"
    __table_args__ = (UniqueConstraint("post_id", "user_id"),)

    post_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("group_posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    post: Mapped[GroupPost] = relationship(back_populates="likes")


class GroupPostComment(TimestampMixin, Base):
    __tablename__ = "group_post_comments"

    post_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("group_posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    post: Mapped[GroupPost] = relationship(back_populates="comments")
    author: Mapped["User"] = relationship()
