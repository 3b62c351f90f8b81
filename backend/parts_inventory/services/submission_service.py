"""Submission pipeline - optimistic apply, ordered append, rollback.

States: IDLE -> SUBMITTING -> COMMITTED | ROLLED_BACK

1. Snapshot the in-memory record list
2. Optimistically append the whole batch in memory
3. Append each record to the ledger store, in order (store.append_batch)
4. On any failure restore the snapshot, discarding the whole batch

Known limitation: if record k of N fails, records 1..k-1 are already in
the remote store while local state is rolled back. There is no server-side
transaction to undo them; the next fetch will show them.
"""

import logging
from enum import Enum
from typing import List, Optional, Sequence

from parts_inventory.core.errors import PersistenceError
from parts_inventory.schemas.inventory import PartRecord
from parts_inventory.services.ledger.base import LedgerStore

logger = logging.getLogger(__name__)


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class InventoryState:
    """Records and task queue owned by one request.

    Both lists are replaced wholesale, never patched in place.
    """

    def __init__(self, records: Optional[Sequence[PartRecord]] = None, tasks: Optional[Sequence[str]] = None):
        self.records: List[PartRecord] = list(records or [])
        self.tasks: List[str] = list(tasks or [])

    @classmethod
    async def load(cls, store: LedgerStore) -> "InventoryState":
        records = await store.fetch_records()
        tasks = await store.fetch_tasks()
        return cls(records, tasks)


class SubmissionPipeline:
    """Persists one batch against an ``InventoryState``."""

    def __init__(self, store: LedgerStore, state: InventoryState):
        self.store = store
        self.state = state
        self.status = SubmissionState.IDLE
        self.error: Optional[str] = None

    async def submit(self, batch: Sequence[PartRecord]) -> List[PartRecord]:
        """Append ``batch``; any store failure rolls back and re-raises."""
        batch = list(batch)
        old_records = self.state.records
        self.state.records = old_records + batch
        self.status = SubmissionState.SUBMITTING

        try:
            await self.store.append_batch(batch)
        except Exception as e:
            self.state.records = old_records
            self.status = SubmissionState.ROLLED_BACK
            self.error = e.message if isinstance(e, PersistenceError) else str(e)
            logger.error(
                f"Batch of {len(batch)} record(s) failed on {self.store.store_name} store, "
                f"rolled back: {self.error}",
                exc_info=not isinstance(e, PersistenceError),
            )
            raise

        self.status = SubmissionState.COMMITTED
        logger.info(f"Committed {len(batch)} record(s) to {self.store.store_name} store")
        return batch
