from typing import List, Optional


class CourseError(Exception):
    """Base class for course catalog errors.

    ``status_code`` lets a web layer turn the error into a response without
    this package depending on one.
    """
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CourseValidationError(CourseError):
    """Raised when course input fails validation; ``errors`` holds every message."""
    status_code = 400

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


class CourseNotFoundError(CourseError):
    status_code = 404

    def __init__(self, message: str = "Course not found"):
        super().__init__(message)


class CourseConflictError(CourseError):
    status_code = 409


class CoursePersistenceError(CourseError):
    """Wraps a database failure after the session has been rolled back."""
    status_code = 500

    def __init__(self, message: str, original: Optional[Exception] = None):
        super().__init__(message)
        self.original = original
