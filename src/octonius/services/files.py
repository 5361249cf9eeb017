"""Files, notes and S3 uploads scoped to workplace groups."""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import select

from .. import schemas
from ..errors import ForbiddenError, NotFoundError, ServiceUnavailableError
from ..models import File, User, utcnow
from ..schema.enums import FileType
from .groups import GroupAccess, PrivateGroupService
from .storage import S3Storage, StorageError, build_file_key

__all__ = [
    "FileService",
    "FILE_ICONS",
    "file_type_from_name",
    "file_icon",
    "infer_file_category",
]

logger = structlog.get_logger(__name__)

EXTENSION_TYPES: dict[str, str] = {
    "pdf": "pdf",
    "doc": "doc",
    "docx": "docx",
    "xls": "xls",
    "xlsx": "xlsx",
    "ppt": "ppt",
    "pptx": "pptx",
    "jpg": "image",
    "jpeg": "image",
    "png": "image",
    "gif": "image",
    "mp4": "video",
    "avi": "video",
    "mp3": "audio",
    "wav": "audio",
}

FILE_ICONS: dict[str, str] = {
    "note": "\U0001F4DD",
    "pdf": "\U0001F4C4",
    "doc": "\U0001F4C4",
    "docx": "\U0001F4C4",
    "xls": "\U0001F4CA",
    "xlsx": "\U0001F4CA",
    "ppt": "\U0001F4CA",
    "pptx": "\U0001F4CA",
    "image": "\U0001F5BC\ufe0f",
    "video": "\U0001F3A5",
    "audio": "\U0001F3B5",
    "folder": "\U0001F4C1",
    "default": "\U0001F4C4",
}


def file_type_from_name(file_name: str) -> str:
    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    return EXTENSION_TYPES.get(extension, "default")


def file_icon(kind: str) -> str:
    return FILE_ICONS.get(kind, FILE_ICONS["default"])


def infer_file_category(
    file_name: str, mime_type: str, group_id: Optional[uuid.UUID] = None
) -> Optional[str]:
    """Guess the storage category (avatar, logo, document, private) of an upload."""

    lowered = file_name.lower()
    if "avatar" in lowered or "profile" in lowered:
        return "avatar"
    if "logo" in lowered or "brand" in lowered:
        return "logo"
    if (
        mime_type == "application/pdf"
        or any(token in mime_type for token in ("document", "sheet", "presentation"))
        or "document" in lowered
        or "report" in lowered
    ):
        return "document"
    if group_id is None:
        return "private"
    return None


class FileService(GroupAccess):
    """Notes and uploaded files; uploads go straight to S3 via presigned URLs."""

    def __init__(self, session, settings, storage: Optional[S3Storage] = None):
        super().__init__(session, settings)
        self._storage = storage

    @property
    def storage(self) -> S3Storage:
        if self._storage is None:
            if self.settings.storage is None:
                raise ServiceUnavailableError("File storage is not configured")
            self._storage = S3Storage(self.settings.storage)
        return self._storage

    # ========================================================================
    # 그룹 결정 / 조회
    # ========================================================================

    def resolve_group(
        self, user: User, workplace_id: uuid.UUID, group_id: Optional[uuid.UUID] = None
    ) -> uuid.UUID:
        """Return *group_id* after a membership check, or the user's private group."""
        if group_id is not None:
            group = self.get_active_group(group_id)
            if group.workplace_id != workplace_id:
                raise NotFoundError("Group not found")
            if self.get_membership(group_id, user.id) is None:
                raise ForbiddenError("Not a member of this group")
            return group_id
        private = PrivateGroupService(self.session, self.settings).ensure_private_group(
            user, workplace_id
        )
        return private.id

    def _readable(self, file_id: uuid.UUID, user_id: uuid.UUID) -> File:
        file = self._get_or_404(File, file_id, "File")
        if file.user_id != user_id and self.get_membership(file.group_id, user_id) is None:
            raise ForbiddenError("You do not have access to this file")
        return file

    def _owned(self, file_id: uuid.UUID, user_id: uuid.UUID) -> File:
        file = self._get_or_404(File, file_id, "File")
        if file.user_id != user_id:
            raise ForbiddenError("Only the owner can change this file")
        return file

    def get_file(self, file_id: uuid.UUID, user_id: uuid.UUID) -> File:
        return self._readable(file_id, user_id)

    def list_files(
        self,
        user_id: uuid.UUID,
        workplace_id: uuid.UUID,
        group_id: Optional[uuid.UUID] = None,
    ) -> list[File]:
        stmt = select(File).where(File.user_id == user_id, File.workplace_id == workplace_id)
        if group_id is not None:
            stmt = stmt.where(File.group_id == group_id)
        return list(self.session.execute(stmt.order_by(File.last_modified.desc())).scalars())

    def my_space(self, user: User, workplace_id: uuid.UUID) -> list[File]:
        private = PrivateGroupService(self.session, self.settings).ensure_private_group(
            user, workplace_id
        )
        return list(
            self.session.execute(
                select(File)
                .where(File.group_id == private.id, File.user_id == user.id)
                .order_by(File.last_modified.desc())
            ).scalars()
        )

    # ========================================================================
    # 파일 / 노트
    # ========================================================================

    def create_file(
        self, user: User, workplace_id: uuid.UUID, request: schemas.FileCreateRequest
    ) -> File:
        group_id = self.resolve_group(user, workplace_id, request.group_id)
        if request.type is FileType.NOTE:
            icon = request.icon or file_icon("note")
        else:
            icon = request.icon or file_icon(file_type_from_name(request.name))
        file = File(
            type=request.type,
            name=request.name,
            icon=icon,
            title=request.title,
            user_id=user.id,
            workplace_id=workplace_id,
            group_id=group_id,
            content=request.content,
            size=request.size,
            mime_type=request.mime_type,
            last_modified=utcnow(),
        )
        self.session.add(file)
        self._commit()
        logger.info("file.created", file_id=str(file.id), type=file.type.value)
        return file

    def create_note(
        self, user: User, workplace_id: uuid.UUID, request: schemas.NoteCreateRequest
    ) -> File:
        return self.create_file(
            user,
            workplace_id,
            schemas.FileCreateRequest(
                name=request.name,
                type=FileType.NOTE,
                title=request.title or request.name,
                group_id=request.group_id,
                content=request.content,
            ),
        )

    def get_note(self, file_id: uuid.UUID, user_id: uuid.UUID) -> File:
        file = self._readable(file_id, user_id)
        if file.type != FileType.NOTE:
            raise NotFoundError("Note not found")
        return file

    def update_note(
        self, file_id: uuid.UUID, request: schemas.NoteUpdateRequest, user_id: uuid.UUID
    ) -> File:
        file = self._owned(file_id, user_id)
        if file.type != FileType.NOTE:
            raise NotFoundError("Note not found")
        if request.name is not None:
            file.name = request.name
        if request.title is not None:
            file.title = request.title
        if request.content is not None:
            file.content = request.content
        file.last_modified = utcnow()
        self._commit()
        return file

    # ========================================================================
    # S3 업로드 / 다운로드
    # ========================================================================

    def create_upload_intent(
        self, user: User, workplace_id: uuid.UUID, request: schemas.UploadIntentRequest
    ) -> schemas.UploadIntentResponse:
        storage = self.storage
        group_id = request.group_id
        if group_id is not None:
            self.resolve_group(user, workplace_id, group_id)
        category = infer_file_category(request.file_name, request.file_type, group_id)
        key = build_file_key(
            request.file_name,
            request.file_type,
            user.id,
            workplace_id,
            group_id,
            category,
        )
        metadata = storage.upload_metadata(
            request.file_name, user.id, workplace_id, group_id, category
        )
        try:
            url = storage.generate_upload_url(key, request.file_type, metadata)
        except StorageError as exc:
            raise ServiceUnavailableError("Could not create upload URL") from exc
        return schemas.UploadIntentResponse(
            upload_url=url,
            file_key=key,
            bucket=storage.bucket,
            expires_in=storage.config.upload_url_expiry,
            metadata=metadata,
        )

    def complete_upload(
        self, user: User, workplace_id: uuid.UUID, request: schemas.UploadCompleteRequest
    ) -> File:
        storage = self.storage
        group_id = self.resolve_group(user, workplace_id, request.group_id)
        kind = file_type_from_name(request.file_name)
        file = File(
            type=FileType.FILE,
            name=request.file_name,
            icon=file_icon(kind),
            user_id=user.id,
            workplace_id=workplace_id,
            group_id=group_id,
            content={"s3Key": request.file_key, "s3Bucket": storage.bucket, "uploadType": "s3"},
            size=request.file_size,
            mime_type=request.file_type,
            cdn_url=storage.cdn_url(request.file_key),
            last_modified=utcnow(),
        )
        self.session.add(file)
        self._commit()
        logger.info("file.uploaded", file_id=str(file.id), key=request.file_key)
        return file

    def download(self, file_id: uuid.UUID, user_id: uuid.UUID) -> schemas.DownloadResponse:
        file = self._readable(file_id, user_id)
        if file.type == FileType.NOTE:
            return schemas.DownloadResponse(
                id=file.id, type=file.type, name=file.name, content=file.content
            )

        key = file.s3_key
        if not key:
            raise NotFoundError("File has no stored object")
        storage = self.storage
        try:
            url = storage.generate_download_url(key, filename=file.name)
        except StorageError as exc:
            raise ServiceUnavailableError("Could not create download URL") from exc
        return schemas.DownloadResponse(
            id=file.id,
            type=file.type,
            name=file.name,
            download_url=url,
            cdn_url=file.cdn_url or storage.cdn_url(key),
            expires_in=storage.config.download_url_expiry,
        )

    def delete_file(self, file_id: uuid.UUID, user_id: uuid.UUID) -> None:
        file = self._owned(file_id, user_id)
        key = file.s3_key
        if key and (self._storage is not None or self.settings.storage is not None):
            try:
                self.storage.delete_object(key)
            except StorageError as exc:
                logger.warning("file.storage_delete_failed", file_id=str(file.id), error=str(exc))
        self.session.delete(file)
        self._commit()
        logger.info("file.deleted", file_id=str(file_id))
