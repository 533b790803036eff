class AppException(Exception):
    """Root of every error raised by the billing engine."""


class NotFoundError(AppException):
    """A plan, feature or subscriber the caller asked about does not exist."""


class StorageError(AppException):
    """A backing store (usage events, subscription records) could not be read."""
