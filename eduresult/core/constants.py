"""
Application constants
"""
from enum import Enum


class Subject(str, Enum):
    """Subjects graded on every answer sheet"""
    MATH = "math"
    SCIENCE = "science"
    ENGLISH = "english"
    HISTORY = "history"
    COMPUTER = "computer"


# Fixed, closed set of marks keys in sheet order
SUBJECTS = tuple(subject.value for subject in Subject)

MIN_SCORE = 0
MAX_SCORE = 100

# Placeholder exam for records entered without an exam folder
DEFAULT_EXAM_NAME = "Standard Exam"


class Grade(str, Enum):
    """Letter grades"""
    A_PLUS = "A+"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class GradeThresholds:
    """Minimum percentage for each letter grade (inclusive)"""
    A_PLUS = 90
    A = 80
    B = 70
    C = 55
    D = 35


class StorageKeys:
    """Session-scoped storage keys"""
    IS_ADMIN = "is_admin"


# API Response Messages
class Messages:
    """API response messages"""

    # Success messages
    LOGIN_SUCCESS = "Signed in"
    LOGOUT_SUCCESS = "Signed out"
    EXAM_CREATED = "Exam folder created"
    EXAM_DELETED = "Exam folder deleted"
    STUDENT_SAVED = "Record saved"
    STUDENT_DELETED = "Record deleted"
    SCAN_COMPLETE = "Answer sheet analysed"

    # Error messages
    INVALID_CREDENTIALS = "Unauthorized Credentials"
    ADMIN_ONLY = "Admin session required"
    RECORD_NOT_FOUND = "Record not found."
    EMPTY_EXAM_NAME = "Exam name is required"
    EMPTY_IMAGE = "Image is empty"
    IMAGE_TOO_LARGE = "Image exceeds the upload limit"
    INVALID_IMAGE = "File must be an image"
    EXTRACTION_RETRY = "AI analysis failed. Please try a clearer photo."
