import logging

from ..core.errors import SessionTransitionError
from ..models import EditSession, Record, SessionMode


logger = logging.getLogger(__name__)

_CLOSED = EditSession()


class EditSessionMachine:
    """Create/edit dialog state. Only the transition methods change it."""

    def __init__(self):
        self._session = _CLOSED

    @property
    def session(self) -> EditSession:
        return self._session

    @property
    def mode(self) -> SessionMode:
        return self._session.mode

    def _require(self, action: str, *allowed: SessionMode) -> None:
        if self._session.mode not in allowed:
            raise SessionTransitionError(f"Cannot {action} while session is {self._session.mode.value}")

    def open_create(self) -> EditSession:
        self._require("open create dialog", SessionMode.CLOSED)
        self._session = EditSession(mode=SessionMode.CREATING)
        return self._session

    def open_edit(self, record: Record) -> EditSession:
        self._require("open edit dialog", SessionMode.CLOSED)
        self._session = EditSession(mode=SessionMode.EDITING, target=record.copy())
        return self._session

    def cancel(self) -> EditSession:
        self._require("cancel", SessionMode.CREATING, SessionMode.EDITING)
        self._session = _CLOSED
        return self._session

    def save_succeeded(self) -> EditSession:
        self._require("complete save", SessionMode.CREATING, SessionMode.EDITING)
        self._session = _CLOSED
        return self._session

    def save_failed(self) -> EditSession:
        # Keep the dialog and its target as they were so the user can retry.
        self._require("fail save", SessionMode.CREATING, SessionMode.EDITING)
        return self._session

    def force_close(self) -> EditSession:
        if self._session.is_open:
            logger.debug(f"Force-closing {self._session.mode.value} session")
            self._session = _CLOSED
        return self._session
