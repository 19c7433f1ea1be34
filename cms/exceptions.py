# cms/exceptions.py

class CmsError(Exception):
    """Base exception for all content-layer errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFound(CmsError):
    """No row matches the given id or slug."""

    pass


class ValidationFailure(CmsError):
    """A required field is missing or a value does not fit its shape."""

    pass


class DecodeError(CmsError):
    """
    Stored flexible-field text does not parse or does not match its shape.
    Indicates corrupted data, never absence.
    """

    def __init__(self, field: str, message: str):
        super().__init__(f"Cannot decode field '{field}': {message}", details={"field": field})
        self.field = field


class StorageFailure(CmsError):
    """The underlying storage call failed."""

    pass
