"""Abstract base class for ledger stores."""

from abc import ABC, abstractmethod
from typing import List, Sequence

from parts_inventory.schemas.inventory import PartRecord


class LedgerStore(ABC):
    """Append-only record log plus the persisted task queue.

    Implementations raise ``PersistenceError`` on any failure of the
    record path.
    """

    @property
    @abstractmethod
    def store_name(self) -> str:
        """Return the store name (e.g., 'remote', 'local')."""

    async def initialize(self) -> None:
        """Prepare the backing store. Optional."""

    @abstractmethod
    async def fetch_records(self) -> List[PartRecord]:
        """Fetch the full record log in append order."""

    @abstractmethod
    async def append_record(self, record: PartRecord) -> None:
        """Append one record."""

    async def append_batch(self, records: Sequence[PartRecord]) -> None:
        """Append records one by one, in order.

        Stops at the first failure; records before it stay appended.
        Override to change the ordering policy.
        """
        for record in records:
            await self.append_record(record)

    @abstractmethod
    async def fetch_tasks(self) -> List[str]:
        """Fetch the task queue tokens."""

    @abstractmethod
    async def replace_tasks(self, tasks: Sequence[str]) -> None:
        """Replace the whole task queue."""
