import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class AuthSession:
    """Token and user of the signed-in account.

    One instance per client; nothing here is global. Listeners registered with
    ``on_login``/``on_logout`` run synchronously after the state changes.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.token: str | None = None
        self.user: dict | None = None
        self.expires_at: int | None = None
        self._clock = clock
        self._login_listeners: list[Callable[[], None]] = []
        self._logout_listeners: list[Callable[[], None]] = []

    @property
    def is_authenticated(self) -> bool:
        if not self.token:
            return False
        return self.expires_at is None or self._clock() < self.expires_at

    def login(self, token: str, user: dict, expires_at: int | None = None) -> None:
        self.token = token
        self.user = user
        self.expires_at = expires_at
        logger.info("Session started for %s", user.get("username"))
        for listener in list(self._login_listeners):
            listener()

    def logout(self) -> None:
        was_authenticated = self.token is not None
        self.token = None
        self.user = None
        self.expires_at = None
        if was_authenticated:
            logger.info("Session ended")
        for listener in list(self._logout_listeners):
            listener()

    def on_login(self, listener: Callable[[], None]) -> None:
        self._login_listeners.append(listener)

    def on_logout(self, listener: Callable[[], None]) -> None:
        self._logout_listeners.append(listener)
