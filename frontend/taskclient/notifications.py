import itertools
import logging
from dataclasses import dataclass

from taskclient.errors import ErrorResult, Severity

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = "You appear to be offline. Please check your internet connection."
SUCCESS_DURATION = 3.0
INFO_DURATION = 4.0
SEVERITY_DURATIONS = {
    Severity.LOW: 3.0,
    Severity.MEDIUM: 5.0,
    Severity.HIGH: 8.0,
    Severity.CRITICAL: 10.0,
}

_ids = itertools.count(1)


@dataclass
class Toast:
    kind: str  # "success" | "info" | "error"
    message: str
    duration: float
    severity: Severity | None = None
    id: int = 0

    def __post_init__(self):
        if not self.id:
            self.id = next(_ids)


class Notifier:
    """Collects the toasts a UI would display, newest last."""

    def __init__(self, is_online: bool = True):
        self.is_online = is_online
        self.toasts: list[Toast] = []

    def show_error_toast(self, result: ErrorResult) -> Toast:
        duration = SEVERITY_DURATIONS.get(result.severity, SEVERITY_DURATIONS[Severity.MEDIUM])
        message = result.message
        if result.is_network_error and not self.is_online:
            message = OFFLINE_MESSAGE
        return self._push(Toast("error", message, duration, result.severity))

    def show_success(self, message: str, duration: float = SUCCESS_DURATION) -> Toast:
        return self._push(Toast("success", message, duration))

    def show_info(self, message: str, duration: float = INFO_DURATION) -> Toast:
        return self._push(Toast("info", message, duration))

    def errors(self) -> list[Toast]:
        return [t for t in self.toasts if t.kind == "error"]

    def dismiss(self, toast_id: int) -> None:
        self.toasts = [t for t in self.toasts if t.id != toast_id]

    def clear(self) -> None:
        self.toasts.clear()

    def _push(self, toast: Toast) -> Toast:
        logger.debug("%s toast: %s", toast.kind, toast.message)
        self.toasts.append(toast)
        return toast
