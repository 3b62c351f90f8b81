"""Spreadsheet proxy ledger store.

Proxy contract:
    GET  {base}?spreadsheetId=ID             -> {"records": [...]}
    GET  {base}?spreadsheetId=ID&type=tasks  -> {"tasks": ["name*qty", ...]}
    POST {base}              {spreadsheetId, record}  -> append one record
    POST {base}?type=tasks   {spreadsheetId, tasks}   -> replace task list
Errors come back as non-2xx with {"message": ...}.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from parts_inventory.core.config import settings
from parts_inventory.core.errors import PersistenceError
from parts_inventory.schemas.inventory import PartRecord
from parts_inventory.services.ledger.base import LedgerStore

logger = logging.getLogger(__name__)


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = {}
    message = data.get("message") if isinstance(data, dict) else None
    return message or f"同步失敗 (HTTP {resp.status_code})"


def _json_body(resp: httpx.Response) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        raise PersistenceError("Ledger proxy returned an invalid response body", status_code=resp.status_code)
    return data if isinstance(data, dict) else {}


class RemoteLedgerStore(LedgerStore):
    """Ledger kept in a spreadsheet behind an HTTP proxy."""

    store_name = "remote"

    def __init__(
        self,
        spreadsheet_id: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.base_url = base_url or settings.ledger_proxy_url
        self._timeout = timeout if timeout is not None else settings.ledger_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    async def initialize(self) -> None:
        try:
            async with self._client() as client:
                await client.post(
                    self.base_url,
                    params={"action": "initialize"},
                    headers=self._headers(),
                    json={"spreadsheetId": self.spreadsheet_id},
                )
        except httpx.HTTPError as e:
            logger.warning(f"Cloud sync unavailable during initialize: {e}")

    async def fetch_records(self) -> List[PartRecord]:
        try:
            async with self._client() as client:
                resp = await client.get(self.base_url, params={"spreadsheetId": self.spreadsheet_id})
        except httpx.HTTPError as e:
            raise PersistenceError(f"無法從雲端獲取資料: {e}")
        if not resp.is_success:
            raise PersistenceError(_error_message(resp), status_code=resp.status_code)

        rows: List[Any] = _json_body(resp).get("records") or []
        return [PartRecord.from_wire(row) for row in rows if isinstance(row, dict)]

    async def append_record(self, record: PartRecord) -> None:
        try:
            async with self._client() as client:
                resp = await client.post(
                    self.base_url,
                    headers=self._headers(),
                    json={"spreadsheetId": self.spreadsheet_id, "record": record.to_wire()},
                )
        except httpx.HTTPError as e:
            raise PersistenceError(f"同步失敗: {e}")
        if not resp.is_success:
            raise PersistenceError(_error_message(resp), status_code=resp.status_code)

    async def fetch_tasks(self) -> List[str]:
        try:
            async with self._client() as client:
                resp = await client.get(
                    self.base_url,
                    params={"spreadsheetId": self.spreadsheet_id, "type": "tasks"},
                )
        except httpx.HTTPError as e:
            raise PersistenceError(f"無法從雲端獲取任務: {e}")
        if not resp.is_success:
            logger.warning(f"Task fetch failed (HTTP {resp.status_code}), using empty queue")
            return []
        return [str(t) for t in _json_body(resp).get("tasks") or []]

    async def replace_tasks(self, tasks: Sequence[str]) -> None:
        try:
            async with self._client() as client:
                resp = await client.post(
                    self.base_url,
                    params={"type": "tasks"},
                    headers=self._headers(),
                    json={"spreadsheetId": self.spreadsheet_id, "tasks": list(tasks)},
                )
        except httpx.HTTPError as e:
            raise PersistenceError(f"任務同步失敗: {e}")
        if not resp.is_success:
            raise PersistenceError(_error_message(resp), status_code=resp.status_code)
