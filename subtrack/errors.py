from fastapi import status


class HttpError(Exception):
    """Error carrying the HTTP status it should be reported with."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class BadRequest(HttpError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class ValidationError(BadRequest):
    """Client payload failed schema validation."""

    default_message = "Validation failed"


class Unauthorized(HttpError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(HttpError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(HttpError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalError(HttpError):
    pass


class DataIntegrityError(InternalError):
    """A row read back from storage does not match the storage schema."""


class MappingError(InternalError):
    """A stored row cannot be converted to its domain form."""
