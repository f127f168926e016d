# Utils package
from .helpers import (
    ensure_directory,
    generate_record_id,
    utc_timestamp,
    get_file_extension,
    is_valid_image,
    safe_filename,
)

__all__ = [
    "ensure_directory",
    "generate_record_id",
    "utc_timestamp",
    "get_file_extension",
    "is_valid_image",
    "safe_filename",
]
