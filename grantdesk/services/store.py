import logging
from dataclasses import replace
from typing import Callable, List, Optional, Protocol, Sequence

from ..core.errors import RepositoryError
from ..models import Record, RecordSet
from ..sections import SectionId


logger = logging.getLogger(__name__)

Listener = Callable[[RecordSet], None]


class RecordLister(Protocol):
    async def list(self, section_id: SectionId) -> Sequence[Record]: ...


class RecordStore:
    """Holds the RecordSet of the active category.

    Records only ever come from a completed ``list`` call. A reload that
    finishes after the active category changed is dropped, so a slow
    response for an abandoned category never overwrites the current one.
    """

    def __init__(self, repository: RecordLister, initial_section: SectionId = SectionId.FUNDING_OPPORTUNITY):
        self._repository = repository
        self._state = RecordSet(section_id=SectionId(initial_section))
        self._listeners: List[Listener] = []

    @property
    def state(self) -> RecordSet:
        return self._state

    @property
    def active_section(self) -> SectionId:
        return self._state.section_id

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def find(self, record_id: str) -> Optional[Record]:
        for record in self._state.records:
            if record.id == record_id:
                return record
        return None

    def _publish(self, state: RecordSet) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    async def reload(self, section_id: SectionId) -> None:
        section_id = SectionId(section_id)
        if section_id is self._state.section_id:
            self._publish(replace(self._state, is_loading=True, last_error=None))
        else:
            self._publish(RecordSet(section_id=section_id, is_loading=True))

        try:
            records = await self._repository.list(section_id)
        except RepositoryError as e:
            if self._is_stale(section_id):
                return
            logger.warning(f"[{section_id.value}] Failed to load records: {e.message}")
            self._publish(RecordSet(section_id=section_id, records=(), is_loading=False, last_error=e))
            return
        except Exception:
            if not self._is_stale(section_id):
                self._publish(replace(self._state, is_loading=False))
            raise

        if self._is_stale(section_id):
            return
        self._publish(RecordSet(section_id=section_id, records=tuple(records), is_loading=False))

    def _is_stale(self, section_id: SectionId) -> bool:
        if section_id is not self._state.section_id:
            logger.debug(f"[{section_id.value}] Discarding stale reload; active section is {self._state.section_id.value}")
            return True
        return False
