"""Route dependencies."""

from typing import Annotated

from fastapi import Depends

from parts_inventory.db.session import DbSession
from parts_inventory.services.advisory_service import AdvisoryService
from parts_inventory.services.inventory_service import InventoryService
from parts_inventory.services.ledger import get_ledger_store


def get_inventory_service(db: DbSession) -> InventoryService:
    """Fresh service (and state) per request."""
    return InventoryService(get_ledger_store(db))


def get_advisory_service() -> AdvisoryService:
    return AdvisoryService()


Inventory = Annotated[InventoryService, Depends(get_inventory_service)]
Advisory = Annotated[AdvisoryService, Depends(get_advisory_service)]
