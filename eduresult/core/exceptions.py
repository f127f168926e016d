"""
Custom exceptions for the EduResult API
"""
from fastapi import HTTPException, status


class BaseAPIException(HTTPException):
    """Base exception for all API errors"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str = None,
        headers: dict = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class NotFoundException(BaseAPIException):
    """Resource not found"""

    def __init__(self, resource: str, identifier: str = None):
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} '{identifier}' not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class UnauthorizedException(BaseAPIException):
    """Unauthorized access"""

    def __init__(self, message: str = "Admin session required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=message,
            error_code="UNAUTHORIZED"
        )


class BadRequestException(BaseAPIException):
    """Bad request - invalid input"""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=message,
            error_code="BAD_REQUEST"
        )


class ServiceUnavailableException(BaseAPIException):
    """External service unavailable"""

    def __init__(self, service: str, reason: str = None):
        detail = f"Service '{service}' is unavailable"
        if reason:
            detail += f": {reason}"
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code="SERVICE_UNAVAILABLE"
        )


class ExtractionFailedException(BaseAPIException):
    """
    Answer sheet extraction failed.

    Covers transport errors, unparseable output and responses that do not
    conform to the answer sheet schema. The operator recovers by retaking
    the photo.
    """

    def __init__(self, reason: str = None):
        detail = "Answer sheet extraction failed"
        if reason:
            detail += f": {reason}"
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            error_code="EXTRACTION_FAILED"
        )
        self.reason = reason


class PersistenceException(BaseAPIException):
    """Snapshot could not be written"""

    def __init__(self, key: str, reason: str = None):
        detail = f"Could not persist '{key}'"
        if reason:
            detail += f": {reason}"
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="PERSISTENCE_ERROR"
        )
