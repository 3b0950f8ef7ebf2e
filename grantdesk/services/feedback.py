import logging
from dataclasses import dataclass
from typing import List, Protocol


logger = logging.getLogger(__name__)


class FeedbackChannel(Protocol):
    """Fire-and-forget user notifications."""

    def notify_success(self, message: str) -> None: ...

    def notify_error(self, message: str) -> None: ...


class LoggingFeedbackChannel:
    def notify_success(self, message: str) -> None:
        logger.info(f"[feedback] {message}")

    def notify_error(self, message: str) -> None:
        logger.warning(f"[feedback] {message}")


@dataclass(frozen=True)
class Notification:
    level: str
    message: str

    def to_dict(self) -> dict:
        return {"level": self.level, "message": self.message}


class QueueFeedbackChannel(LoggingFeedbackChannel):
    """Buffers notifications until the front end drains them."""

    def __init__(self, max_pending: int = 100):
        self.max_pending = max_pending
        self._pending: List[Notification] = []

    def _push(self, notification: Notification) -> None:
        self._pending.append(notification)
        if len(self._pending) > self.max_pending:
            del self._pending[0]

    def notify_success(self, message: str) -> None:
        super().notify_success(message)
        self._push(Notification("success", message))

    def notify_error(self, message: str) -> None:
        super().notify_error(message)
        self._push(Notification("error", message))

    def drain(self) -> List[Notification]:
        pending, self._pending = self._pending, []
        return pending
