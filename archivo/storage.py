import logging
import os
import shutil
import uuid
from pathlib import Path

from fastapi import UploadFile

from archivo.config import settings
from archivo.core.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

# Local files are served back under this prefix (see main.py)
UPLOADS_URL_PREFIX = "/uploads/"


# ==========================================================
# SIZE LIMITS
# ==========================================================
def get_file_size(file: UploadFile) -> int:
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return size


def _limit_for(content_type: str | None) -> tuple[str, int] | None:
    if not content_type:
        return None
    if content_type.startswith("image/"):
        return "Image", settings.MAX_IMAGE_SIZE
    if content_type.startswith("video/"):
        return "Video", settings.MAX_VIDEO_SIZE
    return None


def validate_file_size(file: UploadFile):
    """Returns (ok, message). Only images and videos are capped."""
    limit = _limit_for(file.content_type)
    if limit is None:
        return True, None

    kind, max_bytes = limit
    if get_file_size(file) > max_bytes:
        return False, f"{kind} too large (max {max_bytes // (1024 * 1024)}MB)."
    return True, None


def file_metadata(file: UploadFile) -> dict:
    return {
        "original_name": file.filename,
        "size": get_file_size(file),
        "mime_type": file.content_type,
    }


# ==========================================================
# NAMING
# ==========================================================
def media_folder(user_id: int) -> str:
    return f"users/{user_id}/media"


def upload_filename(original: str | None) -> str:
    # Keep the extension only, client file names are not trusted on disk
    ext = os.path.splitext(original or "")[1].lower()
    return f"{uuid.uuid4()}{ext}"


def extract_storage_key(url_or_path: str) -> str:
    """Public supabase URL (or bare key) -> bucket key."""
    if not url_or_path:
        return ""

    marker = f"/storage/v1/object/public/{settings.SUPABASE_BUCKET}/"
    if url_or_path.startswith("http") and marker in url_or_path:
        return url_or_path.split(marker, 1)[1]

    return url_or_path.strip("/")


# ==========================================================
# LOCAL BACKEND
# ==========================================================
def _local_root() -> Path:
    return Path(settings.LOCAL_MEDIA_PATH)


def _save_local(key: str, file: UploadFile) -> str:
    target = _local_root() / key
    target.parent.mkdir(parents=True, exist_ok=True)

    file.file.seek(0)
    with open(target, "wb") as buffer:
        shutil.copyfileobj(file.file, buffer)

    return UPLOADS_URL_PREFIX + key


def _delete_local(url: str):
    if not url.startswith(UPLOADS_URL_PREFIX):
        logger.warning("Not a local upload, leaving it alone: %s", url)
        return

    target = _local_root() / url[len(UPLOADS_URL_PREFIX):]
    try:
        target.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not delete local file %s", target, exc_info=True)


# ==========================================================
# SUPABASE BACKEND
# ==========================================================
def _bucket():
    from archivo.supabase_client import get_supabase

    return get_supabase().storage.from_(settings.SUPABASE_BUCKET)


def _save_supabase(key: str, file: UploadFile) -> str:
    file.file.seek(0)
    contents = file.file.read()
    if not contents:
        raise ValidationError("Uploaded file is empty")

    try:
        _bucket().upload(
            key,
            contents,
            {
                "content-type": file.content_type or "application/octet-stream",
                "upsert": "true",
            },
        )
    except Exception as exc:
        logger.exception("Supabase upload failed: %s", key)
        raise StorageError("Could not store uploaded file") from exc

    logger.info("Supabase upload OK: %s", key)
    return _bucket().get_public_url(key)


def _delete_supabase(url: str):
    key = extract_storage_key(url)
    try:
        _bucket().remove([key])
        logger.info("Supabase delete OK: %s", key)
    except Exception:
        logger.warning("Supabase delete failed: %s", key, exc_info=True)


_BACKENDS = {
    "local": (_save_local, _delete_local),
    "supabase": (_save_supabase, _delete_supabase),
}


def _backend():
    try:
        return _BACKENDS[settings.STORAGE_BACKEND]
    except KeyError:
        raise StorageError(f"Unknown STORAGE_BACKEND {settings.STORAGE_BACKEND!r}") from None


# ==========================================================
# PUBLIC API
# ==========================================================
def save_file(folder: str, file: UploadFile, filename: str | None = None) -> str:
    """
    Store an upload and return the URL to keep on the row: a
    ``/uploads/...`` path locally, a public URL on supabase.
    """
    key = f"{folder.strip('/')}/{filename or upload_filename(file.filename)}"
    save, _ = _backend()
    return save(key, file)


def delete_file(url: str | None):
    """
    Best effort: a file that is already gone must not block deleting
    the row that pointed at it.
    """
    if not url:
        return
    _, delete = _backend()
    delete(url)
