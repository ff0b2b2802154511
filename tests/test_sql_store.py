"""
Tests for the database-backed version store against a temporary SQLite file.
"""

import asyncio

import pytest

from conftest import run
from proceed_dashboard.core.config import Settings
from proceed_dashboard.core.errors import NotFoundError
from proceed_dashboard.db.database import create_engine
from proceed_dashboard.schemas.dashboard import UploadMeta
from proceed_dashboard.store.factory import build_store
from proceed_dashboard.store.sql import SqlVersionStore


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'dashboard.db'}"


def with_store(database_url, scenario, history_limit=10):
    async def _run():
        store = SqlVersionStore(create_engine(database_url), history_limit=history_limit)
        await store.init()
        try:
            return await scenario(store)
        finally:
            await store.close()
    return run(_run())


def test_upload_then_read_back(database_url):
    async def scenario(store):
        assert await store.get_snapshot() is None
        record = await store.record_upload(
            {"title": "Q4", "highlights": [{"project": "A"}]},
            UploadMeta(filename="p.json", size=42, uploaded_by="Dana"),
        )
        state = await store.get_state()
        page = await store.list_versions(1, 0)
        fetched = await store.get_version(record.id)
        return record, state, page, fetched

    record, state, page, fetched = with_store(database_url, scenario)

    assert state.snapshot == {"title": "Q4", "highlights": [{"project": "A"}]}
    assert state.last_updated is not None
    assert page.versions[0].id == record.id
    assert page.total == 1
    assert fetched.filename == "p.json"
    assert fetched.size == 42
    assert fetched.uploaded_by == "Dana"


def test_history_cap_evicts_oldest(database_url):
    async def scenario(store):
        records = []
        for n in range(5):
            records.append(await store.record_upload({"n": n}, UploadMeta(filename=f"{n}.json")))
        page = await store.list_versions(20, 0)
        with pytest.raises(NotFoundError):
            await store.get_version(records[0].id)
        return records, page

    records, page = with_store(database_url, scenario, history_limit=3)

    assert page.total == 3
    assert [v.id for v in page.versions] == [r.id for r in reversed(records[2:])]


def test_pagination_and_total(database_url):
    async def scenario(store):
        records = []
        for n in range(5):
            records.append(await store.record_upload({"n": n}, UploadMeta(filename=f"{n}.json")))
        return records, await store.list_versions(2, 1), await store.list_versions(2, 7)

    records, page, empty = with_store(database_url, scenario)

    newest_first = list(reversed(records))
    assert [v.id for v in page.versions] == [r.id for r in newest_first[1:3]]
    assert page.total == 5
    assert empty.versions == []
    assert empty.total == 5


def test_rollback_restores_data(database_url):
    async def scenario(store):
        first = await store.record_upload({"title": "old"}, UploadMeta(filename="old.json"))
        await store.record_upload({"title": "new"}, UploadMeta(filename="new.json"))
        result = await store.rollback(first.id)
        return first, result, await store.get_snapshot(), await store.list_versions()

    first, result, snapshot, page = with_store(database_url, scenario)

    assert snapshot == {"title": "old"}
    assert result.target.id == first.id
    assert result.version.rollback_of == first.id
    assert page.versions[0].id == result.version.id
    assert page.total == 3


def test_rollback_unknown_version(database_url):
    async def scenario(store):
        await store.record_upload({"title": "kept"}, UploadMeta(filename="k.json"))
        with pytest.raises(NotFoundError):
            await store.rollback("missing")
        return await store.get_snapshot(), await store.list_versions()

    snapshot, page = with_store(database_url, scenario)
    assert snapshot == {"title": "kept"}
    assert page.total == 1


def test_clear(database_url):
    async def scenario(store):
        await store.record_upload({"title": "x"}, UploadMeta(filename="x.json"))
        await store.clear()
        return await store.get_snapshot(), await store.list_versions()

    snapshot, page = with_store(database_url, scenario)
    assert snapshot is None
    assert page.total == 0


def test_build_store_picks_backend(database_url):
    async def scenario():
        memory = await build_store(Settings(DATABASE_URL=""))
        database = await build_store(Settings(DATABASE_URL=database_url, VERSION_HISTORY_LIMIT=4))
        try:
            return memory.kind, database.kind, database.history_limit
        finally:
            await memory.close()
            await database.close()

    assert run(scenario()) == ("memory", "database", 4)


def test_concurrent_writers_keep_history_consistent(database_url):
    async def scenario(store):
        first = await store.record_upload({"title": "Q0"}, UploadMeta(filename="0.json"))
        calls = [
            store.rollback(first.id, uploaded_by=f"ops-{n}") if n % 5 == 0
            else store.record_upload({"title": f"Q{n}"}, UploadMeta(filename=f"{n}.json", size=n))
            for n in range(1, 26)
        ]
        results = await asyncio.gather(*calls, return_exceptions=True)
        state = await store.get_state()
        head_data = await store.get_version_data(state.versions[0].id)
        return results, state, head_data

    results, state, head_data = with_store(database_url, scenario)

    failures = [r for r in results if isinstance(r, Exception)]
    assert all(isinstance(f, NotFoundError) for f in failures)

    ids = [v.id for v in state.versions]
    assert len(ids) == len(set(ids)) == 10
    assert ids == sorted(ids, key=int, reverse=True)
    assert state.snapshot == head_data
