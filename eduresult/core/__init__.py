# Core package
from .constants import (
    Subject,
    SUBJECTS,
    MIN_SCORE,
    MAX_SCORE,
    DEFAULT_EXAM_NAME,
    Grade,
    GradeThresholds,
    StorageKeys,
    Messages,
)
from .exceptions import (
    BaseAPIException,
    NotFoundException,
    UnauthorizedException,
    BadRequestException,
    ServiceUnavailableException,
    ExtractionFailedException,
    PersistenceException,
)
from .logger import daily_log_file, setup_logger, store_logger, extraction_logger

__all__ = [
    # Constants
    "Subject",
    "SUBJECTS",
    "MIN_SCORE",
    "MAX_SCORE",
    "DEFAULT_EXAM_NAME",
    "Grade",
    "GradeThresholds",
    "StorageKeys",
    "Messages",
    # Exceptions
    "BaseAPIException",
    "NotFoundException",
    "UnauthorizedException",
    "BadRequestException",
    "ServiceUnavailableException",
    "ExtractionFailedException",
    "PersistenceException",
    # Logging
    "daily_log_file",
    "setup_logger",
    "store_logger",
    "extraction_logger",
]
