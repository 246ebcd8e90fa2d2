# ABOUTME: Domain errors, error response models and OpenAPI response examples
# ABOUTME: Typed failures raised by the core and the shared JSON error shape

from pydantic import BaseModel


class ClasslogError(Exception):
    """Base class for failures the caller is expected to format."""
    code = "ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotAttached(ClasslogError):
    """No backing document could be resolved."""
    code = "NOT_ATTACHED"
    status_code = 409

    def __init__(self, message: str = "No class log is attached. Run setup (build sheets) first."):
        super().__init__(message)


class LockTimeout(ClasslogError):
    """Exclusive access was not acquired in time. Safe to retry."""
    code = "LOCK_TIMEOUT"
    status_code = 503

    def __init__(self, timeout_ms: int):
        super().__init__(f"The class log is busy. Could not get exclusive access within {timeout_ms} ms; try again.")
        self.timeout_ms = timeout_ms


class LimitReached(ClasslogError):
    """Bathroom trip cap for today has been hit."""
    code = "LIMIT_REACHED"
    status_code = 429

    def __init__(self, student: str, limit: int):
        super().__init__(f"{student} has reached the bathroom limit of {limit} trips today.")
        self.student = student
        self.limit = limit


class NotFound(ClasslogError):
    code = "NOT_FOUND"
    status_code = 404


class NoValidEntries(ClasslogError):
    code = "NO_VALID_ENTRIES"
    status_code = 400

    def __init__(self, message: str = "No valid entries: each entry needs a student and an issue."):
        super().__init__(message)


class NoMatch(ClasslogError):
    code = "NO_MATCH"
    status_code = 400


class Duplicate(ClasslogError):
    code = "DUPLICATE"
    status_code = 409


class ErrorResponse(BaseModel):
    """Standard error response format."""
    code: str
    message: str
    details: dict | None = None


def _error_example(code: str, message: str) -> dict:
    """Builds a single OpenAPI response entry with an error example."""
    return {
        "model": ErrorResponse,
        "content": {"application/json": {"example": {"code": code, "message": message}}},
    }


# Reusable OpenAPI response fragments for route decorators
ATTACHMENT_REQUIRED = {
    409: {
        "description": "No class log is attached",
        **_error_example("NOT_ATTACHED", NotAttached().message),
    }
}

LOCK_CONTENDED = {
    503: {
        "description": "Class log is busy",
        **_error_example("LOCK_TIMEOUT", LockTimeout(5000).message),
    }
}

SCAN_RESPONSES = {
    **ATTACHMENT_REQUIRED,
    **LOCK_CONTENDED,
    404: {
        "description": "Unknown student id",
        **_error_example("NOT_FOUND", "No student with id 1234 in the roster."),
    },
    429: {
        "description": "Bathroom limit reached",
        **_error_example("LIMIT_REACHED", LimitReached("Ada Lovelace", 3).message),
    },
}
