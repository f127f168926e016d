"""
Utility functions for the application
"""
import uuid
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Union

logger = logging.getLogger(__name__)


def ensure_directory(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, create if not"""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def generate_record_id() -> str:
    """Generate an opaque unique record identifier"""
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision"""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def get_file_extension(filename: str) -> str:
    """Get file extension without dot"""
    return Path(filename).suffix.lstrip(".")


def is_valid_image(filename: str) -> bool:
    """Check if file is a valid image"""
    valid_extensions = {"jpg", "jpeg", "png", "webp"}
    return get_file_extension(filename).lower() in valid_extensions


def safe_filename(filename: str) -> str:
    """Make filename safe for filesystem"""
    unsafe_chars = '<>:"/\\|?*'
    for char in unsafe_chars:
        filename = filename.replace(char, "_")
    return filename
