"""Group activity feed: posts, likes and comments."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import func, select

from .. import schemas
from ..errors import ForbiddenError, NotFoundError
from ..models import GroupPost, GroupPostComment, GroupPostLike
from .groups import GroupAccess

__all__ = ["ActivityService"]

logger = structlog.get_logger(__name__)


class ActivityService(GroupAccess):
    """Posts in a group's feed; every call requires active group membership."""

    def _get_post(self, group_id: uuid.UUID, post_id: uuid.UUID) -> GroupPost:
        post = self.session.get(GroupPost, post_id)
        if post is None or post.group_id != group_id:
            raise NotFoundError("Post not found")
        return post

    def like_count(self, post_id: uuid.UUID) -> int:
        return self.session.execute(
            select(func.count(GroupPostLike.id)).where(GroupPostLike.post_id == post_id)
        ).scalar_one()

    def comment_count(self, post_id: uuid.UUID) -> int:
        return self.session.execute(
            select(func.count(GroupPostComment.id)).where(GroupPostComment.post_id == post_id)
        ).scalar_one()

    def _liked_by(self, post_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return (
            self.session.execute(
                select(GroupPostLike.id).where(
                    GroupPostLike.post_id == post_id, GroupPostLike.user_id == user_id
                )
            ).first()
            is not None
        )

    def to_response(self, post: GroupPost, user_id: uuid.UUID) -> schemas.PostResponse:
        response = schemas.PostResponse.model_validate(post)
        response.like_count = self.like_count(post.id)
        response.comment_count = self.comment_count(post.id)
        response.liked_by_me = self._liked_by(post.id, user_id)
        return response

    # ========================================================================
    # 게시글
    # ========================================================================

    def list_posts(self, group_id: uuid.UUID, user_id: uuid.UUID) -> list[schemas.PostResponse]:
        self.require_member(group_id, user_id)
        posts = self.session.execute(
            select(GroupPost)
            .where(GroupPost.group_id == group_id)
            .order_by(GroupPost.created_at.desc())
        ).scalars()
        return [self.to_response(post, user_id) for post in posts]

    def get_post(
        self, group_id: uuid.UUID, post_id: uuid.UUID, user_id: uuid.UUID
    ) -> schemas.PostResponse:
        self.require_member(group_id, user_id)
        return self.to_response(self._get_post(group_id, post_id), user_id)

    def create_post(
        self, group_id: uuid.UUID, request: schemas.PostRequest, user_id: uuid.UUID
    ) -> schemas.PostResponse:
        self.require_member(group_id, user_id)
        post = GroupPost(group_id=group_id, user_id=user_id, content=request.content)
        self.session.add(post)
        self._commit()
        logger.info("post.created", group_id=str(group_id), post_id=str(post.id))
        return self.to_response(post, user_id)

    def _own_post(self, group_id: uuid.UUID, post_id: uuid.UUID, user_id: uuid.UUID) -> GroupPost:
        self.require_member(group_id, user_id)
        post = self._get_post(group_id, post_id)
        if post.user_id != user_id:
            raise ForbiddenError("Only the author can change this post")
        return post

    def update_post(
        self,
        group_id: uuid.UUID,
        post_id: uuid.UUID,
        request: schemas.PostRequest,
        user_id: uuid.UUID,
    ) -> schemas.PostResponse:
        post = self._own_post(group_id, post_id, user_id)
        post.content = request.content
        self._commit()
        return self.to_response(post, user_id)

    def delete_post(self, group_id: uuid.UUID, post_id: uuid.UUID, user_id: uuid.UUID) -> None:
        post = self._own_post(group_id, post_id, user_id)
        self.session.delete(post)
        self._commit()
        logger.info("post.deleted", group_id=str(group_id), post_id=str(post_id))

    # ========================================================================
    # 좋아요
    # ========================================================================

    def like(
        self, group_id: uuid.UUID, post_id: uuid.UUID, user_id: uuid.UUID
    ) -> schemas.LikeResponse:
        self.require_member(group_id, user_id)
        post = self._get_post(group_id, post_id)
        if not self._liked_by(post.id, user_id):
            self.session.add(GroupPostLike(post_id=post.id, user_id=user_id))
            self._commit()
        return schemas.LikeResponse(post_id=post.id, liked=True, like_count=self.like_count(post.id))

    def unlike(
        self, group_id: uuid.UUID, post_id: uuid.UUID, user_id: uuid.UUID
    ) -> schemas.LikeResponse:
        self.require_member(group_id, user_id)
        post = self._get_post(group_id, post_id)
        like = self.session.execute(
            select(GroupPostLike).where(
                GroupPostLike.post_id == post.id, GroupPostLike.user_id == user_id
            )
        ).scalar_one_or_none()
        if like is not None:
            self.session.delete(like)
            self._commit()
        return schemas.LikeResponse(post_id=post.id, liked=False, like_count=self.like_count(post.id))

    def get_like_count(self, group_id: uuid.UUID, post_id: uuid.UUID, user_id: uuid.UUID) -> int:
        self.require_member(group_id, user_id)
        return self.like_count(self._get_post(group_id, post_id).id)

    # ========================================================================
    # 댓글
    # ========================================================================

    def list_comments(
        self, group_id: uuid.UUID, post_id: uuid.UUID, user_id: uuid.UUID
    ) -> list[GroupPostComment]:
        self.require_member(group_id, user_id)
        post = self._get_post(group_id, post_id)
        return list(
            self.session.execute(
                select(GroupPostComment)
                .where(GroupPostComment.post_id == post.id)
                .order_by(GroupPostComment.created_at)
            ).scalars()
        )

    def add_comment(
        self,
        group_id: uuid.UUID,
        post_id: uuid.UUID,
        request: schemas.PostCommentRequest,
        user_id: uuid.UUID,
    ) -> GroupPostComment:
        self.require_member(group_id, user_id)
        post = self._get_post(group_id, post_id)
        comment = GroupPostComment(post_id=post.id, user_id=user_id, content=request.content)
        self.session.add(comment)
        self._commit()
        return comment

    def delete_comment(
        self,
        group_id: uuid.UUID,
        post_id: uuid.UUID,
        comment_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> None:
        self.require_member(group_id, user_id)
        post = self._get_post(group_id, post_id)
        comment = self.session.get(GroupPostComment, comment_id)
        if comment is None or comment.post_id != post.id:
            raise NotFoundError("Comment not found")
        if comment.user_id != user_id:
            raise ForbiddenError("Only the author can delete this comment")
        self.session.delete(comment)
        self._commit()

    def get_comment_count(
        self, group_id: uuid.UUID, post_id: uuid.UUID, user_id: uuid.UUID
    ) -> int:
        self.require_member(group_id, user_id)
        return self.comment_count(self._get_post(group_id, post_id).id)
