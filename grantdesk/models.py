from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .core.errors import MalformedResponseError, RepositoryError
from .sections import SectionId


@dataclass(frozen=True)
class Record:
    """One persisted entity. Field values are opaque to the console.

    Records compare by value but are not hashable: ``fields`` is a plain dict.
    """

    __hash__ = None

    id: str
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "Record":
        if not isinstance(payload, Mapping):
            raise MalformedResponseError(f"Expected a record object, got {type(payload).__name__}")
        record_id = payload.get("id")
        if record_id is None or record_id == "":
            raise MalformedResponseError("Record is missing its id")
        fields = {k: v for k, v in payload.items() if k != "id"}
        return cls(id=str(record_id), fields=fields)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def copy(self) -> "Record":
        return Record(id=self.id, fields=dict(self.fields))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, **self.fields}


@dataclass(frozen=True)
class RecordSet:
    section_id: SectionId
    records: Tuple[Record, ...] = ()
    is_loading: bool = False
    last_error: Optional[RepositoryError] = None


class SessionMode(str, Enum):
    CLOSED = "closed"
    CREATING = "creating"
    EDITING = "editing"


@dataclass(frozen=True)
class EditSession:
    mode: SessionMode = SessionMode.CLOSED
    target: Optional[Record] = None

    def __post_init__(self):
        if (self.mode is SessionMode.EDITING) != (self.target is not None):
            raise ValueError(f"Edit session in mode {self.mode.value} cannot carry target={self.target!r}")

    @property
    def is_open(self) -> bool:
        return self.mode is not SessionMode.CLOSED


@dataclass(frozen=True)
class UploadContent:
    file_name: str
    data: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class UploadResult:
    url: str
    file_name: str

    @classmethod
    def from_payload(cls, payload: Any) -> "UploadResult":
        if not isinstance(payload, Mapping):
            raise MalformedResponseError("Upload response is not an object")
        url = payload.get("url")
        file_name = payload.get("fileName")
        if not isinstance(url, str) or not isinstance(file_name, str):
            raise MalformedResponseError("Upload response is missing url or fileName")
        return cls(url=url, file_name=file_name)

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url, "fileName": self.file_name}
