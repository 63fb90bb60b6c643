"""Application error taxonomy.

Every error the API reports deliberately is an ``AppError`` carrying an HTTP
status and a stable ``error_code``. ``main.py`` turns them into the JSON
envelope ``{status, message, errorCode, timestamp}``.
"""
from datetime import datetime, timezone


class AppError(Exception):
    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, status_code: int | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.timestamp = datetime.now(timezone.utc).isoformat()


class ValidationError(AppError):
    status_code = 400
    error_code = "VALIDATION_ERROR"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Authentication required.", error_code: str | None = None):
        super().__init__(message, error_code=error_code)


class AuthorizationError(AppError):
    status_code = 403
    error_code = "AUTHORIZATION_ERROR"

    def __init__(self, message: str = "Insufficient permissions."):
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404
    error_code = "NOT_FOUND_ERROR"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found.")


class ConflictError(AppError):
    status_code = 409
    error_code = "CONFLICT_ERROR"


class DatabaseError(AppError):
    status_code = 500
    error_code = "DATABASE_ERROR"

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)


class ConfigurationError(AppError):
    status_code = 500
    error_code = "CONFIG_ERROR"

    def __init__(self, message: str = "Server configuration error."):
        super().__init__(message)
