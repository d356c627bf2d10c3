"""
Upload pipeline: validate the multipart upload, hand the bytes to the injected
storage backend, then create exactly one Video record. Nothing is written
anywhere before validation passes, and no record is created unless the
backend accepted the bytes.
"""
import logging

from fastapi import Depends, UploadFile
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from videohub.config import MAX_UPLOAD_BYTES, Settings, get_settings
from videohub.errors import DatastoreError, UploadTooLargeError, ValidationError
from videohub.models.video import Video
from videohub.repositories import video_repository
from videohub.services.storage import StorageBackend, get_storage_backend

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = (".mp4", ".webm", ".ogg", ".mov", ".mkv", ".avi", ".m4v")
CHUNK_SIZE = 1024 * 1024  # 1 MB


def normalize_content_type(content_type: str | None) -> str:
    return (content_type or "").split(";")[0].strip().lower()


def is_video(content_type: str, filename: str | None) -> bool:
    if content_type.startswith("video/"):
        return True
    return (filename or "").lower().endswith(VIDEO_EXTENSIONS)


async def read_limited(file: UploadFile, max_bytes: int) -> bytes:
    """Read the whole upload, failing as soon as it exceeds max_bytes."""
    buf = bytearray()
    while chunk := await file.read(CHUNK_SIZE):
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise UploadTooLargeError(f"Video is too large. Max size is {max_bytes // (1024 * 1024)}MB.")
    return bytes(buf)


class UploadPipeline:
    def __init__(self, backend: StorageBackend, max_bytes: int = MAX_UPLOAD_BYTES):
        self.backend = backend
        self.max_bytes = max_bytes

    async def handle_upload(self, db: Session, file: UploadFile | None, title: str | None) -> Video:
        """Caller must already hold an authenticated identity."""
        if file is None or not file.filename:
            raise ValidationError("No video file provided")
        data = await read_limited(file, self.max_bytes)
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        content_type = normalize_content_type(file.content_type)
        if not is_video(content_type, file.filename):
            raise ValidationError(
                "File must be a video (e.g. video/mp4). Allowed: " + ", ".join(e.lstrip(".") for e in VIDEO_EXTENSIONS)
            )
        content_type = content_type or "video/mp4"

        # StorageError propagates unchanged; no retry
        stored = await self.backend.store(data, file.filename, content_type)

        try:
            video = await run_in_threadpool(
                video_repository.create_video,
                db,
                title=title,
                filename=stored.stored_name,
                video_url=stored.url,
                content_type=content_type,
                size_bytes=len(data),
                storage=self.backend.name,
            )
        except DatastoreError:
            logger.error("Record insert failed after storing %s; discarding", stored.stored_name)
            await self.backend.discard(stored.stored_name)
            raise
        logger.info("Video %s uploaded (%d bytes, %s)", video.id, len(data), self.backend.name)
        return video


def get_upload_pipeline(
    backend: StorageBackend = Depends(get_storage_backend),
    settings: Settings = Depends(get_settings),
) -> UploadPipeline:
    return UploadPipeline(backend, max_bytes=settings.max_upload_bytes)
