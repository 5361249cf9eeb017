"""File, note and upload schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..schema.enums import FileType

__all__ = [
    "FileCreateRequest",
    "NoteCreateRequest",
    "NoteUpdateRequest",
    "FileResponse",
    "UploadIntentRequest",
    "UploadIntentResponse",
    "UploadCompleteRequest",
    "DownloadResponse",
]


class FileCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: FileType = FileType.FILE
    icon: Optional[str] = None
    title: Optional[str] = Field(None, max_length=255)
    group_id: Optional[uuid.UUID] = None
    content: Optional[dict[str, Any]] = None
    size: Optional[int] = Field(None, ge=0)
    mime_type: Optional[str] = None


class NoteCreateRequest(BaseModel):
    name: str = Field("Untitled", min_length=1, max_length=255)
    title: Optional[str] = Field(None, max_length=255)
    group_id: Optional[uuid.UUID] = None
    content: dict[str, Any] = Field(default_factory=dict)


class NoteUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[dict[str, Any]] = None


class FileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: FileType
    name: str
    icon: Optional[str] = None
    title: Optional[str] = None
    user_id: uuid.UUID
    workplace_id: uuid.UUID
    group_id: uuid.UUID
    content: Optional[dict[str, Any]] = None
    size: Optional[int] = None
    mime_type: Optional[str] = None
    cdn_url: Optional[str] = None
    owner_name: Optional[str] = None
    last_modified: dt.datetime
    created_at: dt.datetime


class UploadIntentRequest(BaseModel):
    file_name: str = Field(..., min_length=1, max_length=255)
    file_type: str = Field(..., min_length=1)
    file_size: int = Field(..., ge=0)
    group_id: Optional[uuid.UUID] = None


class UploadIntentResponse(BaseModel):
    upload_url: str
    file_key: str
    bucket: str
    expires_in: int
    metadata: dict[str, Any]


class UploadCompleteRequest(BaseModel):
    file_key: str
    file_name: str = Field(..., min_length=1, max_length=255)
    file_type: str
    file_size: int = Field(..., ge=0)
    group_id: uuid.UUID


class DownloadResponse(BaseModel):
    id: uuid.UUID
    type: FileType
    name: str
    download_url: Optional[str] = None
    cdn_url: Optional[str] = None
    content: Optional[dict[str, Any]] = None
    expires_in: Optional[int] = None
