"""Inventory schemas: ledger records, production tasks, API payloads."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from parts_inventory.core.catalog import PartCategory
from parts_inventory.core.errors import InventoryValidationError

logger = logging.getLogger(__name__)

# stage -> model -> quantity
StockSnapshot = Dict[str, Dict[str, int]]

TASK_TOKEN_DELIMITER = "*"


class PartRecord(BaseModel):
    """One immutable ledger entry. Stock is the sum of these."""

    id: str
    timestamp: str
    category: str
    name: str
    specification: str
    quantity: int
    note: str = ""

    model_config = {"frozen": True}

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "PartRecord":
        """Build a record from a store row, coercing missing/bad fields."""
        return cls(
            id=str(data.get("id") or ""),
            timestamp=str(data.get("timestamp") or ""),
            category=str(data.get("category") or ""),
            name=str(data.get("name") or ""),
            specification=str(data.get("specification") or ""),
            quantity=_coerce_quantity(data.get("quantity")),
            note=str(data.get("note") or ""),
        )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump()


def _coerce_quantity(value: Any) -> int:
    # Spreadsheet cells come back as strings; anything unparsable or
    # non-finite counts as 0. Fractions are truncated toward zero.
    try:
        number = float(value)
        quantity = int(number)
    except (TypeError, ValueError, OverflowError):
        if value not in (None, ""):
            logger.warning(f"Ledger quantity {value!r} is not a finite number, counted as 0")
        return 0
    if quantity != number:
        logger.warning(f"Ledger quantity {value!r} is fractional, counted as {quantity}")
    return quantity


class ProductionTask(BaseModel):
    """A queued production task, serialized as ``"{name}*{remaining}"``."""

    name: str
    remaining_quantity: int

    model_config = {"frozen": True}

    @classmethod
    def parse(cls, token: str) -> "ProductionTask":
        name, sep, qty = token.rpartition(TASK_TOKEN_DELIMITER)
        if not sep or not name:
            raise InventoryValidationError(f"Malformed task '{token}': missing '{TASK_TOKEN_DELIMITER}'")
        try:
            remaining = int(qty)
        except ValueError:
            raise InventoryValidationError(f"Malformed task '{token}': quantity is not a number")
        if remaining <= 0:
            raise InventoryValidationError(f"Malformed task '{token}': quantity must be positive")
        return cls(name=name, remaining_quantity=remaining)

    def to_token(self) -> str:
        return f"{self.name}{TASK_TOKEN_DELIMITER}{self.remaining_quantity}"


# ==================== REQUESTS ====================

class RecordSubmitRequest(BaseModel):
    """Manual production report or stock adjustment."""

    category: PartCategory
    name: str
    specification: Optional[str] = None
    # Kept loose so the service can report bad input as a validation error
    quantity: Union[int, str]
    note: str = ""
    adjustment: bool = False


class TaskCreateRequest(BaseModel):
    base_model: str
    quantity: int


class TaskCompleteRequest(BaseModel):
    done_quantity: int
    active_stage: Optional[str] = None


class StockAdjustmentRequest(BaseModel):
    """Edited absolute stock values, stage -> model -> quantity."""

    edited: StockSnapshot


# ==================== RESPONSES ====================

class SubmissionResponse(BaseModel):
    status: str
    records: List[PartRecord]


class TaskQueueResponse(BaseModel):
    tasks: List[str]


class TaskCompletionResponse(BaseModel):
    status: str
    records: List[PartRecord]
    tasks: List[str]


class StockLevelResponse(BaseModel):
    stage: str
    model: str
    quantity: int


class StockSummaryResponse(BaseModel):
    stages: StockSnapshot


class CategoryTotal(BaseModel):
    name: str
    value: int


class DashboardStats(BaseModel):
    total_items: int
    total_quantity: int
    category_distribution: List[CategoryTotal]
    recent_activity: List[PartRecord] = Field(default_factory=list)


class AdvisoryResponse(BaseModel):
    text: str
