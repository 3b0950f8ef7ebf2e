"""Shared fixtures: a fake records server, a fake repository and a feedback recorder."""
import itertools
import json
import re

import httpx
import pytest

from grantdesk.core.config import Config
from grantdesk.models import Record, UploadResult


API_BASE = "http://records.test/functions/v1/grants"
BASE_PATH = "/functions/v1/grants"


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeRecordsServer:
    """In-memory stand-in for the records edge function, used via httpx.MockTransport."""

    def __init__(self):
        self.records = {}
        self.requests = []
        self.failures = {}
        self._ids = itertools.count(1)

    def fail(self, method, path, status, body=None, content=None):
        self.failures[(method, path)] = (status, body, content)

    def paths(self):
        return [(r.method, r.url.path[len(BASE_PATH):]) for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        assert request.headers["Authorization"] == "Bearer test-key"
        rel = request.url.path[len(BASE_PATH):]

        if (request.method, rel) in self.failures:
            status, body, content = self.failures[(request.method, rel)]
            if body is not None:
                return httpx.Response(status, json=body)
            return httpx.Response(status, content=content or b"")

        parts = rel.strip("/").split("/")
        if parts == ["upload"] and request.method == "POST":
            match = re.search(rb'filename="([^"]+)"', request.content)
            name = match.group(1).decode() if match else "unnamed"
            return httpx.Response(200, json={"url": f"https://files.test/{name}", "fileName": name})

        section = parts[0]
        rows = self.records.setdefault(section, [])
        if len(parts) == 1 and request.method == "GET":
            return httpx.Response(200, json={"records": rows})
        if len(parts) == 1 and request.method == "POST":
            row = {"id": f"{section[0]}{next(self._ids)}", **json.loads(request.content)}
            rows.append(row)
            return httpx.Response(201, json=row)

        record_id = parts[1]
        existing = next((r for r in rows if r["id"] == record_id), None)
        if existing is None:
            return httpx.Response(404, json={"error": "not found"})
        if request.method == "PUT":
            existing.update(json.loads(request.content))
            return httpx.Response(200, json=existing)
        if request.method == "DELETE":
            rows.remove(existing)
            return httpx.Response(200, json={"success": True})
        return httpx.Response(405, json={"error": "method not allowed"})


@pytest.fixture
def records_server():
    return FakeRecordsServer()


@pytest.fixture
def console_config():
    return Config(GRANTS_API_BASE=API_BASE, SUPABASE_ANON_KEY="test-key")


class FakeRepository:
    """Repository double that records calls and can be told to fail."""

    def __init__(self):
        self.calls = []
        self.listings = {}
        self.errors = {}
        self.on_list = None
        self.hold = None
        self._ids = itertools.count(1)

    async def _wait_for_release(self):
        if self.hold is not None:
            await self.hold.wait()

    def _maybe_fail(self, verb):
        if verb in self.errors:
            raise self.errors[verb]

    async def list(self, section_id):
        self.calls.append(("list", section_id))
        if self.on_list is not None:
            self.on_list(section_id)
        self._maybe_fail("list")
        return list(self.listings.get(section_id, []))

    async def create(self, section_id, fields):
        self.calls.append(("create", section_id, dict(fields)))
        await self._wait_for_release()
        self._maybe_fail("create")
        return Record(id=f"new-{next(self._ids)}", fields=dict(fields))

    async def update(self, section_id, record_id, fields):
        self.calls.append(("update", section_id, record_id, dict(fields)))
        await self._wait_for_release()
        self._maybe_fail("update")
        return Record(id=record_id, fields=dict(fields))

    async def remove(self, section_id, record_id):
        self.calls.append(("remove", section_id, record_id))
        self._maybe_fail("remove")

    async def upload_file(self, content):
        self.calls.append(("upload", content.file_name))
        self._maybe_fail("upload")
        return UploadResult(url=f"https://files.test/{content.file_name}", file_name=content.file_name)

    def verbs(self):
        return [c[0] for c in self.calls]


class RecordingFeedback:
    def __init__(self):
        self.successes = []
        self.errors = []

    def notify_success(self, message):
        self.successes.append(message)

    def notify_error(self, message):
        self.errors.append(message)


@pytest.fixture
def fake_repository():
    return FakeRepository()


@pytest.fixture
def feedback():
    return RecordingFeedback()
