"""Transactional email."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ... import schemas
from ...models import User
from ...services import Mailer
from ..deps import get_mailer, ok, require_logged_in

router = APIRouter(prefix="/v1/notifications", tags=["notifications"])


@router.post("/email", response_model=schemas.Envelope[schemas.EmailNotificationResponse])
def send_email(
    request: schemas.EmailNotificationRequest,
    mailer: Mailer = Depends(get_mailer),
    _: User = Depends(require_logged_in),
):
    """템플릿 이메일 발송."""
    result = mailer.send(request.template, str(request.to), request.data)
    return ok(schemas.EmailNotificationResponse(**result), "Email sent")
