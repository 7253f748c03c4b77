class AppError(Exception):
    """Base app error."""


class ValidationError(AppError):
    pass


class NotFoundError(AppError):
    pass


class ConfigError(AppError):
    pass


class ApiError(AppError):
    """The API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, detail: object = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class ApiUnavailableError(AppError):
    """The API could not be reached (network error, timeout)."""
