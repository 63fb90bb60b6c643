"""Classification of failed API calls and the user-facing messages for them.

Network failures and server errors always get a fixed message so internals
never reach the user. For the remaining (auth and client) errors the API's own
``message`` wins, with a per-category fallback when the payload carries none.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)

NETWORK_MESSAGE = "Unable to connect to the server. Please check your internet connection and try again."
SERVER_MESSAGE = "The server is currently experiencing issues. Please try again in a few moments."
AUTH_FALLBACK_MESSAGE = "Authentication failed. Please log in to continue."
DEFAULT_CONTEXT = "performing this action"


class ApiError(Exception):
    """A failed request, either with an HTTP error status or with no response at all."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        payload=None,
        url: str | None = None,
        is_network: bool = False,
        context: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload
        self.url = url
        self.is_network = is_network
        self.context = context
        # set on repeated 401s once a logout is already under way
        self.suppressed = False

    @property
    def api_message(self) -> str | None:
        if isinstance(self.payload, dict):
            return self.payload.get("message") or None
        return None


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def _status(error) -> int | None:
    return getattr(error, "status", None)


def is_network_error(error) -> bool:
    return bool(getattr(error, "is_network", False)) and _status(error) is None


def is_auth_error(error) -> bool:
    return _status(error) == 401


def is_server_error(error) -> bool:
    status = _status(error)
    return status is not None and 500 <= status < 600


def is_client_error(error) -> bool:
    status = _status(error)
    return status is not None and 400 <= status < 500 and status != 401


def get_error_message(error, context: str = DEFAULT_CONTEXT) -> str:
    if is_network_error(error):
        return NETWORK_MESSAGE
    if is_server_error(error):
        return SERVER_MESSAGE

    api_message = getattr(error, "api_message", None)
    if api_message:
        return api_message

    if is_auth_error(error):
        return AUTH_FALLBACK_MESSAGE
    if is_client_error(error):
        return f"There was an issue with your request while {context}. Please check your input and try again."
    return f"An unexpected error occurred while {context}. Please try again."


def get_error_severity(error) -> Severity:
    if is_network_error(error) or is_server_error(error):
        return Severity.HIGH
    if is_auth_error(error):
        return Severity.MEDIUM
    if is_client_error(error):
        return Severity.LOW
    return Severity.MEDIUM


@dataclass
class ErrorResult:
    message: str
    severity: Severity = Severity.MEDIUM
    should_logout: bool = False
    is_network_error: bool = False
    is_server_error: bool = False
    is_client_error: bool = False
    suppressed: bool = False
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


_LOG_LEVELS = {
    Severity.LOW: logging.INFO,
    Severity.MEDIUM: logging.WARNING,
    Severity.HIGH: logging.ERROR,
    Severity.CRITICAL: logging.CRITICAL,
}


def handle_api_error(error, context: str = DEFAULT_CONTEXT, logout: Callable[[], None] | None = None) -> ErrorResult:
    """Log a failed call and turn it into what the UI needs to show."""
    severity = get_error_severity(error)
    should_logout = is_auth_error(error)

    logger.log(
        _LOG_LEVELS[severity],
        "[%s] Error %s: %s (status=%s url=%s payload=%s)",
        severity.value.upper(),
        context,
        error,
        _status(error),
        getattr(error, "url", None),
        getattr(error, "payload", None),
    )

    if should_logout and logout:
        logout()

    return ErrorResult(
        message=get_error_message(error, context),
        severity=severity,
        should_logout=should_logout,
        is_network_error=is_network_error(error),
        is_server_error=is_server_error(error),
        is_client_error=is_client_error(error),
        suppressed=bool(getattr(error, "suppressed", False)),
    )
