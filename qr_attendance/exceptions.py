"""Domain exceptions raised by services and rendered by the API error handler."""


class AttendanceError(Exception):
    """Base exception for attendance domain failures."""

    status_code = 500

    def __init__(self, message: str = None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__

    def to_dict(self) -> dict:
        return {
            'error': True,
            'message': self.message,
            'status_code': self.status_code
        }


class ValidationError(AttendanceError):
    """Invalid or missing input data."""

    status_code = 400

    def __init__(self, message: str = None, errors: list = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.errors:
            result['errors'] = self.errors
        return result


class NotFoundError(AttendanceError):
    """Requested resource was not found."""

    status_code = 404


class ConflictError(AttendanceError):
    """A unique field is already taken."""

    status_code = 409

    def __init__(self, message: str = None, field: str = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        result = super().to_dict()
        result['field'] = self.field
        return result


class DuplicateEventError(AttendanceError):
    """Attendance was already marked for this direction recently."""

    status_code = 400


class SequenceError(AttendanceError):
    """Departure cannot be marked before arrival."""

    status_code = 400


class AuthError(AttendanceError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class ForbiddenError(AttendanceError):
    """Authenticated user lacks the required role."""

    status_code = 403


class StorageError(AttendanceError):
    """Underlying data store failure."""

    status_code = 500
