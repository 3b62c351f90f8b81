"""Ledger store adapters. The store is chosen once, at construction."""

from sqlalchemy.orm import Session

from parts_inventory.core.config import settings
from parts_inventory.services.ledger.base import LedgerStore
from parts_inventory.services.ledger.local import LocalLedgerStore
from parts_inventory.services.ledger.remote import RemoteLedgerStore


def get_ledger_store(db: Session) -> LedgerStore:
    """Remote spreadsheet store when configured, local database otherwise."""
    if settings.is_local_mode:
        return LocalLedgerStore(db)
    return RemoteLedgerStore(settings.spreadsheet_id)


__all__ = ["LedgerStore", "LocalLedgerStore", "RemoteLedgerStore", "get_ledger_store"]
