"""
Translation of service exceptions to HTTP errors.
"""

from fastapi import HTTPException, status

from app.core.exceptions import (
    DuplicateSubmissionError,
    ForbiddenError,
    NotFoundError,
    QuizServiceError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (DuplicateSubmissionError, status.HTTP_400_BAD_REQUEST),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
)


def to_http_exception(error: QuizServiceError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )
