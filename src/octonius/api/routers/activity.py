"""Group activity feed."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status

from ... import schemas
from ...models import User
from ...services import ActivityService
from ..deps import get_activity_service, ok, require_logged_in

router = APIRouter(prefix="/v1/groups/{group_id}/activity", tags=["activity"])


@router.get("/", response_model=schemas.Envelope[list[schemas.PostResponse]])
def list_posts(
    group_id: uuid.UUID,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    return ok(activity.list_posts(group_id, user.id))


@router.post(
    "/",
    response_model=schemas.Envelope[schemas.PostResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_post(
    group_id: uuid.UUID,
    request: schemas.PostRequest,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    return ok(activity.create_post(group_id, request, user.id), "Post created")


@router.get("/{post_id}", response_model=schemas.Envelope[schemas.PostResponse])
def get_post(
    group_id: uuid.UUID,
    post_id: uuid.UUID,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    return ok(activity.get_post(group_id, post_id, user.id))


@router.put("/{post_id}", response_model=schemas.Envelope[schemas.PostResponse])
def update_post(
    group_id: uuid.UUID,
    post_id: uuid.UUID,
    request: schemas.PostRequest,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    return ok(activity.update_post(group_id, post_id, request, user.id), "Post updated")


@router.delete("/{post_id}", response_model=schemas.Envelope[None])
def delete_post(
    group_id: uuid.UUID,
    post_id: uuid.UUID,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    activity.delete_post(group_id, post_id, user.id)
    return ok(None, "Post deleted")


# ========================================================================
# 좋아요
# ========================================================================


@router.post("/{post_id}/like", response_model=schemas.Envelope[schemas.LikeResponse])
def like(
    group_id: uuid.UUID,
    post_id: uuid.UUID,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    return ok(activity.like(group_id, post_id, user.id), "Post liked")


@router.delete("/{post_id}/like", response_model=schemas.Envelope[schemas.LikeResponse])
def unlike(
    group_id: uuid.UUID,
    post_id: uuid.UUID,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    return ok(activity.unlike(group_id, post_id, user.id), "Post unliked")


@router.get("/{post_id}/like-count", response_model=schemas.Envelope[schemas.CountResponse])
def like_count(
    group_id: uuid.UUID,
    post_id: uuid.UUID,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    return ok(schemas.CountResponse(count=activity.get_like_count(group_id, post_id, user.id)))


# ========================================================================
# 댓글
# ========================================================================


@router.get(
    "/{post_id}/comments",
    response_model=schemas.Envelope[list[schemas.PostCommentResponse]],
)
def list_comments(
    group_id: uuid.UUID,
    post_id: uuid.UUID,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    comments = activity.list_comments(group_id, post_id, user.id)
    return ok([schemas.PostCommentResponse.model_validate(c) for c in comments])


@router.post(
    "/{post_id}/comments",
    response_model=schemas.Envelope[schemas.PostCommentResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    group_id: uuid.UUID,
    post_id: uuid.UUID,
    request: schemas.PostCommentRequest,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    comment = activity.add_comment(group_id, post_id, request, user.id)
    return ok(schemas.PostCommentResponse.model_validate(comment), "Comment added")


@router.delete(
    "/{post_id}/comments/{comment_id}",
    response_model=schemas.Envelope[None],
)
def delete_comment(
    group_id: uuid.UUID,
    post_id: uuid.UUID,
    comment_id: uuid.UUID,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    activity.delete_comment(group_id, post_id, comment_id, user.id)
    return ok(None, "Comment deleted")


@router.get("/{post_id}/comment-count", response_model=schemas.Envelope[schemas.CountResponse])
def comment_count(
    group_id: uuid.UUID,
    post_id: uuid.UUID,
    activity: ActivityService = Depends(get_activity_service),
    user: User = Depends(require_logged_in),
):
    return ok(schemas.CountResponse(count=activity.get_comment_count(group_id, post_id, user.id)))
