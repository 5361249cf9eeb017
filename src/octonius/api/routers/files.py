"""Files, notes and S3 uploads."""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ... import schemas
from ...models import User
from ...services import FileService
from ..deps import get_file_service, ok, require_logged_in, require_workplace

router = APIRouter(prefix="/v1/files", tags=["files"])


def _file(file) -> schemas.FileResponse:
    return schemas.FileResponse.model_validate(file)


@router.post(
    "/",
    response_model=schemas.Envelope[schemas.FileResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_file(
    request: schemas.FileCreateRequest,
    files: FileService = Depends(get_file_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok(_file(files.create_file(user, workplace_id, request)), "File created")


@router.get("/", response_model=schemas.Envelope[list[schemas.FileResponse]])
def list_files(
    group_id: Optional[uuid.UUID] = Query(None),
    files: FileService = Depends(get_file_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok([_file(f) for f in files.list_files(user.id, workplace_id, group_id)])


@router.get("/my-space", response_model=schemas.Envelope[list[schemas.FileResponse]])
def my_space(
    files: FileService = Depends(get_file_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok([_file(f) for f in files.my_space(user, workplace_id)])


# ========================================================================
# 노트
# ========================================================================


@router.post(
    "/note",
    response_model=schemas.Envelope[schemas.FileResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_note(
    request: schemas.NoteCreateRequest,
    files: FileService = Depends(get_file_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok(_file(files.create_note(user, workplace_id, request)), "Note created")


@router.get("/note/{file_id}", response_model=schemas.Envelope[schemas.FileResponse])
def get_note(
    file_id: uuid.UUID,
    files: FileService = Depends(get_file_service),
    user: User = Depends(require_logged_in),
    _: uuid.UUID = Depends(require_workplace),
):
    return ok(_file(files.get_note(file_id, user.id)))


@router.put("/note/{file_id}", response_model=schemas.Envelope[schemas.FileResponse])
def update_note(
    file_id: uuid.UUID,
    request: schemas.NoteUpdateRequest,
    files: FileService = Depends(get_file_service),
    user: User = Depends(require_logged_in),
    _: uuid.UUID = Depends(require_workplace),
):
    return ok(_file(files.update_note(file_id, request, user.id)), "Note updated")


# ========================================================================
# S3 업로드
# ========================================================================


@router.post("/upload", response_model=schemas.Envelope[schemas.UploadIntentResponse])
def create_upload_intent(
    request: schemas.UploadIntentRequest,
    files: FileService = Depends(get_file_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok(files.create_upload_intent(user, workplace_id, request), "Upload URL created")


@router.post(
    "/upload/complete",
    response_model=schemas.Envelope[schemas.FileResponse],
    status_code=status.HTTP_201_CREATED,
)
def complete_upload(
    request: schemas.UploadCompleteRequest,
    files: FileService = Depends(get_file_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok(_file(files.complete_upload(user, workplace_id, request)), "Upload recorded")


@router.get("/{file_id}", response_model=schemas.Envelope[schemas.FileResponse])
def get_file(
    file_id: uuid.UUID,
    files: FileService = Depends(get_file_service),
    user: User = Depends(require_logged_in),
    _: uuid.UUID = Depends(require_workplace),
):
    return ok(_file(files.get_file(file_id, user.id)))


@router.get("/{file_id}/download", response_model=schemas.Envelope[schemas.DownloadResponse])
def download(
    file_id: uuid.UUID,
    files: FileService = Depends(get_file_service),
    user: User = Depends(require_logged_in),
    _: uuid.UUID = Depends(require_workplace),
):
    return ok(files.download(file_id, user.id))


@router.delete("/{file_id}", response_model=schemas.Envelope[None])
def delete_file(
    file_id: uuid.UUID,
    files: FileService = Depends(get_file_service),
    user: User = Depends(require_logged_in),
    _: uuid.UUID = Depends(require_workplace),
):
    files.delete_file(file_id, user.id)
    return ok(None, "File deleted")
