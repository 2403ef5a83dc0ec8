"""Custom exception classes for the application."""


class AppError(Exception):
    """Base application error class."""

    def __init__(self, message, status_code=400):
        """Initialize the error."""
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ValidationError(AppError):
    """Raised when input or a stored record fails validation."""

    def __init__(self, message="Validation failed."):
        """Initialize the error."""
        super().__init__(message, 400)


class NotFoundError(AppError):
    """Raised when a resource is not found."""

    def __init__(self, message="Resource not found."):
        """Initialize the error."""
        super().__init__(message, 404)


class SubmissionError(AppError):
    """Raised when a tournament insert or update is rejected by the backend."""

    def __init__(self, message="Failed to save tournament."):
        """Initialize the error."""
        super().__init__(message, 500)


class DataSourceError(AppError):
    """Raised when the remote data source cannot be queried."""

    def __init__(self, message="The data source is unavailable."):
        """Initialize the error."""
        super().__init__(message, 502)
