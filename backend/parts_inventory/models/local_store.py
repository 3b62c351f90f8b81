"""Key-value rows backing the local ledger fallback."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from parts_inventory.db.base import Base, TimestampMixin


class LocalStoreEntry(TimestampMixin, Base):
    """One JSON value stored under a fixed key."""

    __tablename__ = "local_store_entries"
    __table_args__ = (
        UniqueConstraint("key", name="uq_local_store_key"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    key: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    value: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
