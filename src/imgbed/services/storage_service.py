"""Service layer – validation, naming and storage of uploaded images."""

from __future__ import annotations

import logging
import os
import random
import time
from pathlib import Path
from typing import BinaryIO

from starlette.datastructures import UploadFile

from src.imgbed.exceptions import FileTooLarge, UnsupportedFileType

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
RANDOM_SUFFIX_SCALE = 1_000_000_000
MAX_NAME_ATTEMPTS = 5


def ensure_upload_dir(directory: Path) -> Path:
    """Create *directory* (and parents) if it does not exist yet."""
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def validate_mime_type(content_type: str | None, allowed: set[str]) -> None:
    """Reject anything whose declared MIME type is not exactly a whitelisted one."""
    if not content_type or content_type not in allowed:
        logger.info("Rejected upload with MIME type %r", content_type)
        raise UnsupportedFileType()


def generate_filename(original_filename: str | None) -> str:
    """
    Build a new stored name: ``<epoch ms>_<random int><ext>``.

    The extension (dot included) is copied verbatim from the client's
    filename and may be empty.
    """
    ext = os.path.splitext(original_filename or "")[1]
    timestamp = time.time_ns() // 1_000_000
    suffix = round(random.random() * RANDOM_SUFFIX_SCALE)
    return f"{timestamp}_{suffix}{ext}"


def _open_new_file(directory: Path, original_filename: str | None) -> tuple[Path, BinaryIO]:
    """Exclusively create a freshly named file, drawing a new name on collision."""
    for _ in range(MAX_NAME_ATTEMPTS):
        file_path = directory / generate_filename(original_filename)
        try:
            return file_path, open(file_path, "xb")
        except FileExistsError:
            logger.warning("Generated name %s already exists, drawing another", file_path.name)
    raise FileExistsError(f"Could not allocate a unique filename in {directory}")


async def save_upload(upload: UploadFile, directory: Path, max_size: int) -> str:
    """
    Stream *upload* into *directory* and return the stored filename.

    Raises ``FileTooLarge`` once more than *max_size* bytes arrive; the
    partial file is removed so nothing is persisted.
    """
    max_size_mb = max_size // (1024 * 1024)
    if upload.size is not None and upload.size > max_size:
        raise FileTooLarge(max_size_mb)

    file_path, handle = _open_new_file(directory, upload.filename)
    written = 0
    try:
        with handle:
            while chunk := await upload.read(CHUNK_SIZE):
                written += len(chunk)
                if written > max_size:
                    raise FileTooLarge(max_size_mb)
                handle.write(chunk)
    except BaseException:
        file_path.unlink(missing_ok=True)
        raise

    logger.info("📁 Stored %s (%d bytes)", file_path.name, written)
    return file_path.name
