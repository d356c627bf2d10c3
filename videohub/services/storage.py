"""
Storage backends for uploaded videos: local disk (development) and Cloudinary
(serverless/production, where the filesystem is not durable). The backend is
chosen once at startup by build_storage_backend() and injected into the upload
pipeline.
"""
import asyncio
import logging
import re
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import httpx
from fastapi import Request

from videohub.config import Settings
from videohub.errors import (
    ConfigurationError,
    RemoteStorageError,
    StorageError,
    StorageNotConfiguredError,
)

logger = logging.getLogger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/video/upload"
DEFAULT_FILENAME = "video.mp4"
MAX_NAME_LENGTH = 100
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class StoredFile:
    url: str
    stored_name: str


class StorageBackend(ABC):
    name: str = "abstract"

    @abstractmethod
    async def store(self, data: bytes, original_name: str, content_type: str) -> StoredFile:
        """Persist bytes and return where they can be fetched. Raises StorageError."""

    async def discard(self, stored_name: str) -> None:
        """Best-effort removal after a failed record insert. Default: nothing to undo."""
        return None

    def describe(self) -> dict:
        return {"backend": self.name}


def sanitize_filename(original_name: str | None) -> str:
    """Drop directory parts and unsafe characters so the name cannot escape the upload dir."""
    base = re.split(r"[\\/]", original_name or "")[-1]
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    if not cleaned:
        return DEFAULT_FILENAME
    if len(cleaned) > MAX_NAME_LENGTH:
        stem, dot, ext = cleaned.rpartition(".")
        if dot and len(ext) <= 10:
            cleaned = stem[: MAX_NAME_LENGTH - len(ext) - 1] + "." + ext
        else:
            cleaned = cleaned[:MAX_NAME_LENGTH]
    return cleaned


def unique_filename(original_name: str | None) -> str:
    """<ms timestamp>-<random 9 digits>-<sanitized name>"""
    suffix = secrets.randbelow(10**9)
    return f"{int(time.time() * 1000)}-{suffix:09d}-{sanitize_filename(original_name)}"


class LocalDiskStorage(StorageBackend):
    name = "local"

    def __init__(self, upload_dir: Path, url_prefix: str = "/uploads"):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def _write(self, path: Path, data: bytes) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        # "xb": never overwrite an existing upload
        with path.open("xb") as f:
            f.write(data)

    async def store(self, data: bytes, original_name: str, content_type: str) -> StoredFile:
        stored_name = unique_filename(original_name)
        path = self.upload_dir / stored_name
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            logger.error("Local write failed for %s: %s", path, e)
            raise StorageError(f"Upload failed: {e.strerror or e}") from e
        logger.info("Stored %d bytes at %s", len(data), path)
        return StoredFile(url=f"{self.url_prefix}/{stored_name}", stored_name=stored_name)

    async def discard(self, stored_name: str) -> None:
        path = self.upload_dir / stored_name
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove orphaned upload %s: %s", path, e)


class CloudinaryStorage(StorageBackend):
    """Unsigned Cloudinary video upload (upload preset + resource_type=video)."""

    name = "cloudinary"

    def __init__(
        self,
        cloud_name: str,
        upload_preset: str,
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.timeout = timeout
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.upload_preset)

    @property
    def upload_url(self) -> str:
        return CLOUDINARY_UPLOAD_URL.format(cloud_name=self.cloud_name)

    async def _post(self, files: dict, data: dict) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self.upload_url, files=files, data=data, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.upload_url, files=files, data=data)

    async def store(self, data: bytes, original_name: str, content_type: str) -> StoredFile:
        if not self.configured:
            raise StorageNotConfiguredError(
                "Video storage is not configured for production yet. "
                "Set CLOUDINARY_CLOUD_NAME and CLOUDINARY_UPLOAD_PRESET."
            )
        filename = original_name or DEFAULT_FILENAME
        files = {"file": (filename, data, content_type or "application/octet-stream")}
        form = {"upload_preset": self.upload_preset, "resource_type": "video"}
        try:
            resp = await self._post(files, form)
        except httpx.HTTPError as e:
            logger.error("Cloudinary unreachable: %s", e)
            raise RemoteStorageError(f"Cloudinary upload failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        secure_url = body.get("secure_url")
        if not resp.is_success or not secure_url:
            error = body.get("error")
            message = error.get("message") if isinstance(error, dict) else None
            logger.error("Cloudinary upload rejected (status %s): %s", resp.status_code, message)
            raise RemoteStorageError(message or "Cloudinary upload failed")

        logger.info("Uploaded %s to Cloudinary as %s", filename, body.get("public_id"))
        return StoredFile(url=secure_url, stored_name=body.get("public_id") or filename)

    def describe(self) -> dict:
        return {"backend": self.name, "configured": self.configured}


def default_upload_dir() -> Path:
    return Path(__file__).resolve().parent.parent.parent / "uploads"


def build_storage_backend(settings: Settings) -> StorageBackend:
    """Pick the backend once per process from STORAGE_BACKEND and runtime signals."""
    choice = settings.storage_backend.strip().lower()
    if choice == "auto":
        choice = "cloudinary" if settings.is_serverless else "local"
    if choice == "local":
        upload_dir = Path(settings.video_upload_dir) if settings.video_upload_dir else default_upload_dir()
        return LocalDiskStorage(upload_dir)
    if choice == "cloudinary":
        if not settings.cloudinary_configured:
            logger.warning("Cloudinary selected but not configured; uploads will be refused with 501")
        return CloudinaryStorage(
            cloud_name=settings.cloudinary_cloud_name,
            upload_preset=settings.cloudinary_upload_preset,
            timeout=settings.storage_timeout_seconds,
        )
    raise ConfigurationError(f"Unknown storage backend: {settings.storage_backend!r}")


def get_storage_backend(request: Request) -> StorageBackend:
    """The backend selected at startup (app.state). Tests override this dependency."""
    return request.app.state.storage_backend
