"""Batch adjustment: turn an edited stock table into delta records.

The user edits absolute glass door stock values; only the difference to the
projected baseline is persisted, one record per changed cell. Reconciling a
snapshot against itself yields an empty batch.
"""

import logging
from datetime import datetime
from typing import List, Optional

from parts_inventory.core.catalog import (
    MANUAL_NOTE_PREFIX,
    STOCK_COUNT_NOTE,
    GlassDoorStage,
    PartCategory,
    available_models,
)
from parts_inventory.core.errors import InventoryValidationError
from parts_inventory.schemas.inventory import PartRecord, StockSnapshot
from parts_inventory.services.records import new_record

logger = logging.getLogger(__name__)


def adjustment_note(baseline: int, edited: int) -> str:
    return f"{MANUAL_NOTE_PREFIX} {STOCK_COUNT_NOTE} {baseline} -> {edited}"


def reconcile(
    edited: StockSnapshot,
    baseline: StockSnapshot,
    now: Optional[datetime] = None,
) -> List[PartRecord]:
    """One record of ``edited - baseline`` per changed (stage, model) cell.

    Cells missing from ``baseline`` count as 0. Unknown stages or models
    are rejected before anything is emitted.
    """
    stages = {s.value for s in GlassDoorStage}
    for stage, models in edited.items():
        if stage not in stages:
            raise InventoryValidationError(f"Unknown stage '{stage}'")
        allowed = set(available_models(stage))
        unknown = [m for m in models if m not in allowed]
        if unknown:
            raise InventoryValidationError(f"Unknown models for stage '{stage}': {unknown}")

    batch: List[PartRecord] = []
    for stage in GlassDoorStage:
        for model, value in edited.get(stage.value, {}).items():
            before = baseline.get(stage.value, {}).get(model, 0)
            if value == before:
                continue
            batch.append(new_record(
                category=PartCategory.GLASS_SLIDING_DOOR,
                name=model,
                specification=stage,
                quantity=value - before,
                note=adjustment_note(before, value),
                now=now,
            ))

    logger.info(f"Stock adjustment produced {len(batch)} correction record(s)")
    return batch
