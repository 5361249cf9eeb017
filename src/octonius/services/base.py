"""Common plumbing for service classes."""

from __future__ import annotations

from typing import Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings
from ..errors import ConflictError, NotFoundError

__all__ = ["BaseService"]

M = TypeVar("M")


class BaseService:
    """Holds the request session and settings; owns commit/rollback."""

    def __init__(self, session: Session, settings: Settings):
        self.session = session
        self.settings = settings

    def _commit(self, conflict_message: Optional[str] = None) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError(conflict_message or "Resource already exists") from exc
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def _get_or_404(self, model: type[M], ident, label: str) -> M:
        obj = self.session.get(model, ident)
        if obj is None:
            raise NotFoundError(f"{label} not found")
        return obj
