"""
Service Exceptions

Error taxonomy shared by the submission path, the session tracker,
the re-scoring sweep and the read-side aggregators.

Services raise these; endpoints translate them to HTTP status codes.
"""


class QuizServiceError(Exception):
    """Base class for all quiz service errors."""
    pass


class ValidationError(QuizServiceError):
    """Malformed or out-of-range input (400)."""
    pass


class ForbiddenError(QuizServiceError):
    """Caller may not act on the target class or resource (403)."""
    pass


class NotFoundError(QuizServiceError):
    """Referenced question, assignment or response is absent (404)."""
    pass


class DuplicateSubmissionError(QuizServiceError):
    """A response already exists for the (student, question, assignment) triple (400)."""
    pass


class DependencyFailure(QuizServiceError):
    """
    A derived write failed after the durable write committed.

    Raised by the session tracker and the re-scoring sweep. Callers log it
    and never surface it as a failure of the request that triggered it.
    """
    pass
