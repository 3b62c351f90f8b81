"""Local ledger store: JSON lists under fixed keys in the app database."""

import logging
from typing import Any, List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from parts_inventory.core.errors import PersistenceError
from parts_inventory.models.local_store import LocalStoreEntry
from parts_inventory.schemas.inventory import PartRecord
from parts_inventory.services.ledger.base import LedgerStore

logger = logging.getLogger(__name__)

LOCAL_RECORDS_KEY = "local_inventory_records"
LOCAL_TASKS_KEY = "local_inventory_tasks"


class LocalLedgerStore(LedgerStore):
    """Used when no spreadsheet is configured.

    Methods are async for the store interface but make blocking session
    calls; one request drives its session at a time.
    """

    store_name = "local"

    def __init__(self, db: Session):
        self.db = db

    def _get(self, key: str) -> List[Any]:
        try:
            entry = self.db.query(LocalStoreEntry).filter(LocalStoreEntry.key == key).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Local store read failed for '{key}': {e}", exc_info=True)
            raise PersistenceError(f"Local store read failed: {e}")
        if not entry or not isinstance(entry.value, list):
            return []
        return list(entry.value)

    def _set(self, key: str, value: List[Any]) -> None:
        try:
            entry = self.db.query(LocalStoreEntry).filter(LocalStoreEntry.key == key).first()
            if entry:
                # Assign a new list so the JSON column is flagged dirty
                entry.value = value
            else:
                self.db.add(LocalStoreEntry(key=key, value=value))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Local store write failed for '{key}': {e}", exc_info=True)
            raise PersistenceError(f"Local store write failed: {e}")

    async def fetch_records(self) -> List[PartRecord]:
        return [PartRecord.from_wire(row) for row in self._get(LOCAL_RECORDS_KEY) if isinstance(row, dict)]

    async def append_record(self, record: PartRecord) -> None:
        rows = self._get(LOCAL_RECORDS_KEY)
        rows.append(record.to_wire())
        self._set(LOCAL_RECORDS_KEY, rows)

    async def fetch_tasks(self) -> List[str]:
        return [str(t) for t in self._get(LOCAL_TASKS_KEY)]

    async def replace_tasks(self, tasks: Sequence[str]) -> None:
        self._set(LOCAL_TASKS_KEY, list(tasks))
