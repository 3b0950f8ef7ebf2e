import logging
from typing import Any, Dict, List, Mapping, Union

import httpx

from ..core.errors import MalformedResponseError, NetworkError, ServerError
from ..models import Record, UploadContent, UploadResult
from ..sections import SectionId


logger = logging.getLogger(__name__)

LOAD_FAILED = "Failed to load records"
SAVE_FAILED = "Failed to save record"
DELETE_FAILED = "Failed to delete record"
UPLOAD_FAILED = "Failed to upload file"


def _section_path(section_id: Union[SectionId, str]) -> str:
    return f"/{SectionId(section_id).value}"


def _record_path(section_id: Union[SectionId, str], record_id: str) -> str:
    return f"{_section_path(section_id)}/{record_id}"


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error:
            return error
    return fallback


class RepositoryClient:
    """Records API client: one call per operation, no retries.

    Every failure is raised as NetworkError, ServerError or
    MalformedResponseError so callers only deal with RepositoryError.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def _send(self, method: str, path: str, fallback: str, log_context: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"[{log_context}] {method} {path} unreachable: {e}")
            raise NetworkError(f"{fallback}: records service unreachable") from e

        if not response.is_success:
            message = _error_message(response, fallback)
            logger.error(f"[{log_context}] {method} {path} - {response.status_code}: {message}")
            raise ServerError(message, status_code=response.status_code)
        return response

    @staticmethod
    def _json(response: httpx.Response, log_context: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"[{log_context}] Response body is not JSON: {e}")
            raise MalformedResponseError("Response body is not valid JSON") from e

    async def list(self, section_id: SectionId) -> List[Record]:
        section = SectionId(section_id).value
        response = await self._send("GET", _section_path(section_id), LOAD_FAILED, section)
        body = self._json(response, section)
        if not isinstance(body, dict):
            raise MalformedResponseError("Expected an object with a records list")
        payloads = body.get("records")
        if payloads is None:
            return []
        if not isinstance(payloads, list):
            raise MalformedResponseError("records is not a list")
        return [Record.from_payload(p) for p in payloads]

    async def create(self, section_id: SectionId, fields: Mapping[str, Any]) -> Record:
        section = SectionId(section_id).value
        response = await self._send("POST", _section_path(section_id), SAVE_FAILED, section, json=dict(fields))
        record = Record.from_payload(self._json(response, section))
        logger.info(f"[{section}] Created record {record.id}")
        return record

    async def update(self, section_id: SectionId, record_id: str, fields: Mapping[str, Any]) -> Record:
        section = SectionId(section_id).value
        response = await self._send(
            "PUT", _record_path(section_id, record_id), SAVE_FAILED, section, json=dict(fields)
        )
        record = Record.from_payload(self._json(response, section))
        logger.info(f"[{section}] Updated record {record.id}")
        return record

    async def remove(self, section_id: SectionId, record_id: str) -> None:
        section = SectionId(section_id).value
        # Any 2xx body (empty or a confirmation) counts as success.
        await self._send("DELETE", _record_path(section_id, record_id), DELETE_FAILED, section)
        logger.info(f"[{section}] Deleted record {record_id}")

    async def upload_file(self, content: UploadContent) -> UploadResult:
        files: Dict[str, Any] = {"file": (content.file_name, content.data, content.content_type)}
        response = await self._send("POST", "/upload", UPLOAD_FAILED, "upload", files=files)
        result = UploadResult.from_payload(self._json(response, "upload"))
        logger.info(f"[upload] Stored {result.file_name}")
        return result

    async def aclose(self) -> None:
        await self.client.aclose()
