import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, Sequence, Union

from ..core.errors import RepositoryError, SessionTransitionError
from ..forms import FormRegistry
from ..models import EditSession, Record, RecordSet, SessionMode, UploadContent, UploadResult
from ..sections import SectionId
from .feedback import FeedbackChannel
from .session import EditSessionMachine
from .store import RecordStore


logger = logging.getLogger(__name__)

ConfirmDelete = Callable[[], Union[bool, Awaitable[bool]]]


class Repository(Protocol):
    async def list(self, section_id: SectionId) -> Sequence[Record]: ...

    async def create(self, section_id: SectionId, fields: Mapping[str, Any]) -> Record: ...

    async def update(self, section_id: SectionId, record_id: str, fields: Mapping[str, Any]) -> Record: ...

    async def remove(self, section_id: SectionId, record_id: str) -> None: ...

    async def upload_file(self, content: UploadContent) -> UploadResult: ...


class Orchestrator:
    """Drives the record store and the edit session for the active section.

    This is the only place repository calls are made. Failed writes become
    error notifications and leave store and session exactly as they were;
    successful writes close the session and reload the whole section.
    """

    def __init__(
        self,
        repository: Repository,
        feedback: FeedbackChannel,
        initial_section: SectionId = SectionId.FUNDING_OPPORTUNITY,
    ):
        self.repository = repository
        self.feedback = feedback
        self.store = RecordStore(repository, initial_section=initial_section)
        self.session_machine = EditSessionMachine()

    @property
    def active_section(self) -> SectionId:
        return self.store.active_section

    @property
    def records(self) -> RecordSet:
        return self.store.state

    @property
    def session(self) -> EditSession:
        return self.session_machine.session

    async def select_section(self, section_id: Union[SectionId, str]) -> RecordSet:
        section_id = SectionId(section_id)
        # A dialog left open would submit into the newly selected section.
        self.session_machine.force_close()
        await self.store.reload(section_id)
        return self.store.state

    async def refresh(self) -> RecordSet:
        await self.store.reload(self.active_section)
        return self.store.state

    async def check_upstream(self) -> int:
        """Read the active section without publishing the result."""
        return len(await self.repository.list(self.active_section))

    def open_create(self) -> EditSession:
        return self.session_machine.open_create()

    def open_edit(self, record: Record) -> EditSession:
        return self.session_machine.open_edit(record)

    def open_edit_by_id(self, record_id: str) -> EditSession:
        record = self.store.find(record_id)
        if record is None:
            raise KeyError(f"Record {record_id} is not loaded in {self.active_section.value}")
        return self.session_machine.open_edit(record)

    def cancel(self) -> EditSession:
        return self.session_machine.cancel()

    def _owns_session(self, session: EditSession) -> bool:
        # Every open transition creates a new EditSession, so identity tells
        # whether the dialog that started a save is still the open one.
        return self.session_machine.session is session

    async def save(self, fields: Mapping[str, Any]) -> bool:
        session = self.session_machine.session
        section_id = self.active_section
        if session.mode is SessionMode.CLOSED:
            raise SessionTransitionError("Cannot save without an open create or edit dialog")

        try:
            if session.mode is SessionMode.CREATING:
                await self.repository.create(section_id, fields)
                message = "Record created successfully"
            else:
                await self.repository.update(section_id, session.target.id, fields)
                message = "Record updated successfully"
        except RepositoryError as e:
            logger.error(f"[{section_id.value}] Error saving record: {e.message}")
            if self._owns_session(session):
                self.session_machine.save_failed()
            self.feedback.notify_error(e.message)
            return False

        self.feedback.notify_success(message)
        if self._owns_session(session):
            self.session_machine.save_succeeded()
        await self.store.reload(self.active_section)
        return True

    async def delete(self, record_id: str, confirm: ConfirmDelete) -> bool:
        section_id = self.active_section
        answer = confirm()
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            logger.debug(f"[{section_id.value}] Delete of {record_id} not confirmed")
            return False

        try:
            await self.repository.remove(section_id, record_id)
        except RepositoryError as e:
            logger.error(f"[{section_id.value}] Error deleting record {record_id}: {e.message}")
            self.feedback.notify_error(e.message)
            return False

        self.feedback.notify_success("Record deleted successfully")
        await self.store.reload(self.active_section)
        return True

    async def upload_attachment(self, content: UploadContent) -> UploadResult:
        try:
            return await self.repository.upload_file(content)
        except RepositoryError as e:
            logger.error(f"Error uploading {content.file_name}: {e.message}")
            self.feedback.notify_error(e.message)
            raise

    def render_form(self, forms: FormRegistry) -> Optional[Any]:
        session = self.session_machine.session
        if not session.is_open:
            return None
        renderer = forms.renderer_for(self.active_section)
        record = session.target.copy() if session.target else None
        return renderer(record, self.save, self.cancel, self.upload_attachment)
