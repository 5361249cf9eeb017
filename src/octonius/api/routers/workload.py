"""Personal workload dashboard."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from ... import schemas
from ...models import User
from ...services import WorkloadService
from ...services.workload import SUMMARY_LIMIT
from ..deps import get_workload_service, ok, require_logged_in, require_workplace

router = APIRouter(prefix="/v1/workload", tags=["workload"])


@router.get("/", response_model=schemas.Envelope[schemas.WorkloadResponse])
def summary(
    workload: WorkloadService = Depends(get_workload_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok(workload.summary(user.id, workplace_id))


@router.get("/sections/{section}", response_model=schemas.Envelope[schemas.WorkloadSectionPage])
def section(
    section: str,
    page: int = Query(1, ge=1),
    limit: int = Query(SUMMARY_LIMIT, ge=1, le=100),
    workload: WorkloadService = Depends(get_workload_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok(workload.section(user.id, workplace_id, section, page=page, limit=limit))
