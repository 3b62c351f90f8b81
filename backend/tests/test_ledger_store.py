"""Tests for the remote (spreadsheet proxy) and local ledger stores."""

import json

import httpx
import pytest

from conftest import make_record
from parts_inventory.core.errors import PersistenceError
from parts_inventory.models.local_store import LocalStoreEntry
from parts_inventory.services.ledger.remote import RemoteLedgerStore

BASE_URL = "http://proxy.test/api/inventory"


def _store(handler) -> RemoteLedgerStore:
    return RemoteLedgerStore("sheet-1", base_url=BASE_URL, timeout=5.0, transport=httpx.MockTransport(handler))


class TestRemoteLedgerStore:

    @pytest.mark.asyncio
    async def test_fetch_records_coerces_rows(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["spreadsheetId"] == "sheet-1"
            return httpx.Response(200, json={"records": [
                {"id": "玻-20260105-AB12", "timestamp": "t", "category": "玻璃拉門",
                 "name": "UG3A-L", "specification": "完成", "quantity": "5", "note": ""},
                {"id": "x", "category": "抽屜", "name": "滑軌", "quantity": "n/a"},
                {"id": "inf", "quantity": "Infinity"},
                {"id": "nan", "quantity": "NaN"},
                {"id": "frac", "quantity": "5.7"},
                {"id": "neg", "quantity": -3.2},
                "garbage",
            ]})

        records = await _store(handler).fetch_records()
        assert [r.quantity for r in records] == [5, 0, 0, 0, 5, -3]
        assert records[1].specification == ""

    @pytest.mark.asyncio
    async def test_fetch_records_tolerates_overflowing_number(self):
        def handler(request):
            body = '{"records": [{"id": "big", "quantity": 1e400}, {"id": "ok", "quantity": 2}]}'
            return httpx.Response(200, content=body.encode(), headers={"Content-Type": "application/json"})

        records = await _store(handler).fetch_records()
        assert [(r.id, r.quantity) for r in records] == [("big", 0), ("ok", 2)]

    @pytest.mark.asyncio
    async def test_fetch_records_error_uses_proxy_message(self):
        def handler(request):
            return httpx.Response(500, json={"message": "Sheet not found"})

        with pytest.raises(PersistenceError) as exc_info:
            await _store(handler).fetch_records()
        assert exc_info.value.message == "Sheet not found"
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_append_record_posts_payload(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"ok": True})

        record = make_record("完成", "UG3A-L", 2)
        await _store(handler).append_record(record)
        assert seen["method"] == "POST"
        assert seen["body"] == {"spreadsheetId": "sheet-1", "record": record.to_wire()}

    @pytest.mark.asyncio
    async def test_append_failure_without_message(self):
        def handler(request):
            return httpx.Response(503, text="unavailable")

        with pytest.raises(PersistenceError) as exc_info:
            await _store(handler).append_record(make_record("完成", "UG3A-L", 2))
        assert exc_info.value.message == "同步失敗 (HTTP 503)"

    @pytest.mark.asyncio
    async def test_network_error_becomes_persistence_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(PersistenceError):
            await _store(handler).append_record(make_record("完成", "UG3A-L", 2))

    @pytest.mark.asyncio
    async def test_append_batch_stops_at_first_failure(self):
        calls = []

        def handler(request):
            calls.append(json.loads(request.content)["record"]["id"])
            return httpx.Response(500 if len(calls) == 2 else 200, json={})

        batch = [make_record("完成", "UG3A-L", n, record_id=f"r{n}") for n in (1, 2, 3)]
        with pytest.raises(PersistenceError):
            await _store(handler).append_batch(batch)
        assert calls == ["r1", "r2"]

    @pytest.mark.asyncio
    async def test_tasks_round_trip(self):
        saved = {}

        def handler(request):
            assert request.url.params["type"] == "tasks"
            if request.method == "POST":
                saved.update(json.loads(request.content))
                return httpx.Response(200, json={})
            return httpx.Response(200, json={"tasks": ["UG3A-L*5"]})

        store = _store(handler)
        assert await store.fetch_tasks() == ["UG3A-L*5"]
        await store.replace_tasks(["UG3A-R*2"])
        assert saved == {"spreadsheetId": "sheet-1", "tasks": ["UG3A-R*2"]}

    @pytest.mark.asyncio
    async def test_task_fetch_failure_degrades_to_empty(self):
        def handler(request):
            return httpx.Response(404, json={"message": "no tasks sheet"})

        assert await _store(handler).fetch_tasks() == []

    @pytest.mark.asyncio
    async def test_task_replace_failure_raises(self):
        def handler(request):
            return httpx.Response(500, json={"message": "boom"})

        with pytest.raises(PersistenceError):
            await _store(handler).replace_tasks([])

    @pytest.mark.asyncio
    async def test_initialize_tolerates_network_error(self):
        def handler(request):
            assert request.url.params["action"] == "initialize"
            raise httpx.ConnectError("connection refused", request=request)

        await _store(handler).initialize()


class TestLocalLedgerStore:

    @pytest.mark.asyncio
    async def test_empty_store(self, local_store):
        assert await local_store.fetch_records() == []
        assert await local_store.fetch_tasks() == []

    @pytest.mark.asyncio
    async def test_read_failure_becomes_persistence_error(self, local_store, db_engine):
        LocalStoreEntry.__table__.drop(bind=db_engine)
        with pytest.raises(PersistenceError):
            await local_store.fetch_records()
        with pytest.raises(PersistenceError):
            await local_store.fetch_tasks()

    @pytest.mark.asyncio
    async def test_records_persist_in_order(self, local_store):
        batch = [make_record("完成", "UG3A-L", n, record_id=f"r{n}") for n in (1, 2, 3)]
        await local_store.append_batch(batch)
        assert await local_store.fetch_records() == batch

    @pytest.mark.asyncio
    async def test_replace_tasks(self, local_store):
        await local_store.replace_tasks(["a*1", "b*2"])
        await local_store.replace_tasks(["b*2"])
        assert await local_store.fetch_tasks() == ["b*2"]
