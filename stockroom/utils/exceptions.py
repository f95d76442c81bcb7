"""Custom exception classes for the application."""


class BaseAppException(Exception):
    """Base exception class for all application exceptions."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class EmptyFieldError(BaseAppException):
    """Raised when a required text field is empty."""
    pass


class DuplicateIDError(BaseAppException):
    """Raised when a product ID is already present in the store."""
    pass


class DuplicateUserError(BaseAppException):
    """Raised when a username is already registered."""
    pass


class NotFoundError(BaseAppException):
    """Raised when a product ID is not present in the store."""
    pass


class InvalidValueError(BaseAppException):
    """Raised when a quantity or price is negative or out of range."""
    pass


class WeakPasswordError(BaseAppException):
    """Raised when a password is shorter than the configured minimum."""
    pass


class InvalidCredentialsError(BaseAppException):
    """Raised when login fails, whatever the reason."""
    pass


class NotAuthenticatedError(BaseAppException):
    """Raised when an inventory operation is attempted while logged out."""
    pass


class StorageError(BaseAppException):
    """Raised when a store file cannot be opened, read or written."""
    pass


class TruncatedInputError(StorageError):
    """Raised when a snapshot ends before a declared field is complete."""
    pass


class CorruptSnapshotError(StorageError):
    """Raised when a snapshot field decodes to an invalid value."""
    pass


class ConfigurationError(BaseAppException):
    """Raised when there's a configuration error."""
    pass
