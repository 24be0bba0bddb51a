"""Image storage for chore, reward, proof and profile pictures."""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from fastapi import UploadFile

from app.core.errors import ValidationError

logger = logging.getLogger("app.uploads")

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
URL_PREFIX = "/uploads"
IMAGE_EXTENSIONS = {"png", "jpg", "gif", "webp", "heic"}


@dataclass(frozen=True)
class StoredImage:
    StoragePath: str
    Url: str
    FileSizeBytes: int


def GetStorageRoot() -> Path:
    root = os.getenv("UPLOAD_STORAGE_ROOT", "").strip()
    if root:
        return Path(root)
    return Path(__file__).resolve().parents[2] / "storage" / "uploads"


def EnsureStorageRoot() -> Path:
    root = GetStorageRoot()
    root.mkdir(parents=True, exist_ok=True)
    return root


def _DetectExtension(content_type: str | None, filename: str | None, data: bytes) -> str:
    if content_type:
        if "png" in content_type:
            return "png"
        if "gif" in content_type:
            return "gif"
        if "jpeg" in content_type or "jpg" in content_type:
            return "jpg"
        if "webp" in content_type:
            return "webp"
        if "heic" in content_type:
            return "heic"
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].strip().lower()
        if ext == "jpeg":
            return "jpg"
        if ext:
            return ext
    if data.startswith(b"\xff\xd8\xff"):
        return "jpg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if data.startswith(b"GIF87a") or data.startswith(b"GIF89a"):
        return "gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    return "bin"


def _ResolveMaxBytes() -> int:
    raw = os.getenv("UPLOAD_MAX_BYTES", "").strip()
    if not raw:
        return DEFAULT_MAX_BYTES
    try:
        return max(1, int(raw))
    except ValueError:
        return DEFAULT_MAX_BYTES


def SaveImageBytes(
    *, data: bytes, category: str, owner_user_id: int, filename: str | None, content_type: str | None
) -> StoredImage:
    if not data:
        raise ValidationError("Image file is empty", ["file"])
    max_bytes = _ResolveMaxBytes()
    if len(data) > max_bytes:
        raise ValidationError(f"Image exceeds {max_bytes // (1024 * 1024)} MB", ["file"])
    ext = _DetectExtension(content_type, filename, data)
    if ext not in IMAGE_EXTENSIONS:
        raise ValidationError("Only image uploads are allowed", ["file"])

    now = datetime.utcnow()
    relative_dir = Path(category) / str(owner_user_id) / f"{now.year:04d}" / f"{now.month:02d}"
    target_dir = EnsureStorageRoot() / relative_dir
    target_dir.mkdir(parents=True, exist_ok=True)
    file_name = f"{uuid.uuid4().hex}.{ext}"
    (target_dir / file_name).write_bytes(data)

    storage_path = (relative_dir / file_name).as_posix()
    return StoredImage(
        StoragePath=storage_path,
        Url=f"{URL_PREFIX}/{storage_path}",
        FileSizeBytes=len(data),
    )


def SaveUploadImage(file: UploadFile, category: str, owner_user_id: int) -> StoredImage:
    if not file:
        raise ValidationError("Image file is required", ["file"])
    data = file.file.read() or b""
    return SaveImageBytes(
        data=data,
        category=category,
        owner_user_id=owner_user_id,
        filename=file.filename,
        content_type=file.content_type,
    )


def ResolveImagePath(url_or_path: str) -> Path:
    storage_path = url_or_path
    if storage_path.startswith(f"{URL_PREFIX}/"):
        storage_path = storage_path[len(URL_PREFIX) + 1 :]
    root = EnsureStorageRoot()
    candidate = (root / storage_path).resolve()
    try:
        candidate.relative_to(root.resolve())
    except ValueError as exc:
        raise ValidationError("Invalid storage path", ["ImageUrl"]) from exc
    return candidate


def DeleteStoredImage(url: str | None) -> bool:
    """Remove an uploaded image. Links outside the upload area are left alone."""
    if not url or not url.startswith(f"{URL_PREFIX}/"):
        return False
    try:
        path = ResolveImagePath(url)
    except ValidationError:
        logger.warning("refusing to delete image outside storage root url=%s", url)
        return False
    if not path.is_file():
        return False
    path.unlink()
    logger.info("deleted stored image path=%s", path)
    return True
