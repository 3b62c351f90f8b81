"""SQLAlchemy models."""

from parts_inventory.models.local_store import LocalStoreEntry
