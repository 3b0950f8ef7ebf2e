import asyncio

import pytest

from grantdesk.core.errors import NetworkError
from grantdesk.models import Record
from grantdesk.sections import SectionId
from grantdesk.services.store import RecordStore


class GatedLister:
    """Lister whose calls resolve only when the test opens the section's gate."""

    def __init__(self, *sections):
        self.gates = {s: asyncio.Event() for s in sections}
        self.errors = {}

    async def list(self, section_id):
        await self.gates[section_id].wait()
        if section_id in self.errors:
            raise self.errors[section_id]
        return [Record(id=f"{section_id.value}-1")]


@pytest.mark.anyio
async def test_reload_publishes_loading_then_records(fake_repository):
    fake_repository.listings[SectionId.GRANT] = [Record(id="g1", fields={"grantAnalystPOC": "Dana"})]
    store = RecordStore(fake_repository)
    seen = []
    store.subscribe(seen.append)

    await store.reload(SectionId.GRANT)

    assert [s.is_loading for s in seen] == [True, False]
    assert store.state.section_id is SectionId.GRANT
    assert [r.id for r in store.state.records] == ["g1"]
    assert store.state.last_error is None


@pytest.mark.anyio
async def test_empty_listing_is_distinct_from_failure(fake_repository):
    store = RecordStore(fake_repository)

    await store.reload(SectionId.INVOICE)

    assert store.state.records == ()
    assert store.state.is_loading is False
    assert store.state.last_error is None


@pytest.mark.anyio
async def test_failed_reload_clears_records_and_keeps_error(fake_repository):
    fake_repository.listings[SectionId.GRANT] = [Record(id="g1")]
    store = RecordStore(fake_repository)
    await store.reload(SectionId.GRANT)

    error = NetworkError("Failed to load records: records service unreachable")
    fake_repository.errors["list"] = error
    await store.reload(SectionId.GRANT)

    assert store.state.records == ()
    assert store.state.is_loading is False
    assert store.state.last_error is error


@pytest.mark.anyio
async def test_next_reload_clears_previous_error(fake_repository):
    store = RecordStore(fake_repository)
    fake_repository.errors["list"] = NetworkError("down")
    await store.reload(SectionId.GRANT)
    del fake_repository.errors["list"]

    await store.reload(SectionId.GRANT)

    assert store.state.last_error is None


@pytest.mark.anyio
async def test_late_response_for_abandoned_section_is_discarded():
    lister = GatedLister(SectionId.GRANT, SectionId.INVOICE)
    store = RecordStore(lister)

    first = asyncio.create_task(store.reload(SectionId.GRANT))
    await asyncio.sleep(0)
    second = asyncio.create_task(store.reload(SectionId.INVOICE))
    await asyncio.sleep(0)

    lister.gates[SectionId.INVOICE].set()
    await second
    lister.gates[SectionId.GRANT].set()
    await first

    assert store.state.section_id is SectionId.INVOICE
    assert [r.id for r in store.state.records] == ["invoice-1"]
    assert store.state.is_loading is False


@pytest.mark.anyio
async def test_late_failure_for_abandoned_section_is_discarded():
    lister = GatedLister(SectionId.GRANT, SectionId.INVOICE)
    lister.errors[SectionId.GRANT] = NetworkError("down")
    store = RecordStore(lister)

    first = asyncio.create_task(store.reload(SectionId.GRANT))
    await asyncio.sleep(0)
    second = asyncio.create_task(store.reload(SectionId.INVOICE))
    await asyncio.sleep(0)

    lister.gates[SectionId.INVOICE].set()
    await second
    lister.gates[SectionId.GRANT].set()
    await first

    assert store.state.last_error is None
    assert [r.id for r in store.state.records] == ["invoice-1"]


@pytest.mark.anyio
async def test_unsubscribed_listener_stops_receiving(fake_repository):
    store = RecordStore(fake_repository)
    seen = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()

    await store.reload(SectionId.GRANT)

    assert seen == []


@pytest.mark.anyio
async def test_find_looks_up_loaded_records(fake_repository):
    fake_repository.listings[SectionId.CONTRACT] = [Record(id="c1"), Record(id="c2")]
    store = RecordStore(fake_repository)
    await store.reload(SectionId.CONTRACT)

    assert store.find("c2").id == "c2"
    assert store.find("missing") is None


class BrokenLister:
    async def list(self, section_id):
        raise RuntimeError("decoder crashed")


@pytest.mark.anyio
async def test_unexpected_error_still_ends_loading():
    store = RecordStore(BrokenLister())

    with pytest.raises(RuntimeError):
        await store.reload(SectionId.GRANT)

    assert store.state.section_id is SectionId.GRANT
    assert store.state.is_loading is False
