import os
import re
from typing import Optional

MAX_FILENAME_LENGTH = 255
MAX_JOB_TITLE_LENGTH = 100
ALLOWED_CONTENT_TYPES = {"application/pdf"}

_JOB_TITLE_PATTERN = re.compile(r"^[A-Za-z0-9\s\-_]+$")


def validate_job_title(job_title: str) -> str:
    title = (job_title or "").strip()
    if not title:
        raise ValueError("job_title cannot be empty")
    if len(title) > MAX_JOB_TITLE_LENGTH:
        raise ValueError(
            f"job_title cannot exceed {MAX_JOB_TITLE_LENGTH} characters")
    if not _JOB_TITLE_PATTERN.match(title):
        raise ValueError("job_title contains invalid characters")
    return title


def validate_upload(filename: Optional[str], size: int, content_type: Optional[str], max_bytes: int) -> None:
    """Reject anything that is not a non-empty PDF within the size limit."""
    if not filename:
        raise ValueError("filename is required")
    if len(filename) > MAX_FILENAME_LENGTH:
        raise ValueError(
            f"filename too long (max {MAX_FILENAME_LENGTH} characters)")
    if os.path.splitext(filename)[1].lower() != ".pdf":
        raise ValueError("only PDF files are allowed")
    if size <= 0:
        raise ValueError("file is empty")
    if size > max_bytes:
        raise ValueError(
            f"file size exceeds {max_bytes // (1024 * 1024)}MB limit")
    # multipart clients sometimes omit the type; only a wrong one is rejected
    if content_type and content_type.split(";")[0].strip().lower() not in ALLOWED_CONTENT_TYPES:
        raise ValueError(f"unsupported content type: {content_type}")
