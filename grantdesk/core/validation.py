import logging
import re

from fastapi import HTTPException


logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MB
RECORD_ID_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')


def validate_upload(filename: str | None, size: int, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
    if size > max_bytes:
        raise HTTPException(status_code=413, detail=f"File too large. Maximum size is {max_bytes // (1024*1024)}MB")

    if size == 0:
        raise HTTPException(status_code=400, detail="Empty file")

    if not filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    if '..' in filename or '/' in filename or '\\' in filename:
        logger.warning(f"Rejected upload with unsafe filename {filename!r}")
        raise HTTPException(status_code=400, detail="Invalid filename")


def validate_record_id(record_id: str) -> None:
    if not record_id or not RECORD_ID_PATTERN.match(record_id):
        raise HTTPException(status_code=400, detail="Invalid record id format")
