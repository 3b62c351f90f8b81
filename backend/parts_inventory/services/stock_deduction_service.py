"""Stock Deduction Service - Consumes upstream stages when work is reported.

When a quantity is reported at a linked glass door stage, the stages it was
built from are drawn down with compensating negative records.

Flow:
1. Primary record reported (manual form or task board)
2. Skip if not a glass door, not positive, or flagged as manual adjustment
3. For each deduction chain containing the stage:
   a. Finished stage: walk every upstream stage in chain order
   b. Intermediate stage: only the immediately upstream stage
   c. At each stage: consume = min(available, remaining need)
      - available is projected from the ledger BEFORE this batch
      - emit -consume at that stage when consume > 0
4. Stop when the need is met; any shortfall is left uncompensated

The primary record is never modified and is always first in the batch.

Example (frame chain), finished +10 with frame-sprayed=4, frame-produced=20:
    [+10 finished, -4 frame-sprayed, -6 frame-produced]
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from parts_inventory.core.catalog import (
    AUTO_DEDUCTION_NOTE,
    MANUAL_NOTE_PREFIX,
    TERMINAL_STAGE,
    GlassDoorStage,
    PartCategory,
    deduction_chains,
    normalize_model,
)
from parts_inventory.core.config import settings
from parts_inventory.schemas.inventory import PartRecord
from parts_inventory.services.records import new_record
from parts_inventory.services.stock_projection_service import project

logger = logging.getLogger(__name__)


class DeductionConfig:
    """Configuration for automatic deductions."""

    def __init__(self, track_glass_consumption: bool = False):
        self.track_glass_consumption = track_glass_consumption

    @classmethod
    def from_settings(cls) -> "DeductionConfig":
        return cls(track_glass_consumption=settings.track_glass_consumption)


@dataclass(frozen=True)
class Deduction:
    """One planned draw-down of an upstream stage."""

    stage: GlassDoorStage
    name: str
    available: int
    quantity: int


def is_manual_adjustment(record: PartRecord) -> bool:
    """Manual adjustments never trigger deductions."""
    return record.note.startswith(MANUAL_NOTE_PREFIX)


def deduction_note(source: str, stage: GlassDoorStage) -> str:
    return f"{AUTO_DEDUCTION_NOTE} ({source} → {stage.value})"


class StockDeductionService:
    """Expands a reported record into a batch with upstream deductions.

    ``records`` is the ledger as it stood before the batch; stock is read
    from it only, so deductions inside one batch never double count.
    """

    def __init__(self, records: Sequence[PartRecord], config: Optional[DeductionConfig] = None):
        self.records = list(records)
        self.config = config or DeductionConfig.from_settings()

    def plan(self, stage: str, model: str, quantity: int) -> List[Deduction]:
        """Upstream draw-downs for ``quantity`` units reported at ``stage``."""
        deductions: List[Deduction] = []
        if quantity <= 0:
            return deductions

        walked = set()
        for chain in deduction_chains(self.config.track_glass_consumption):
            position = next((i for i, s in enumerate(chain) if s.value == stage), None)
            if position is None:
                continue

            upstream = chain[position + 1:]
            if chain[position] != TERMINAL_STAGE:
                upstream = upstream[:1]
            # A stage shared by two chains must not draw the same source twice
            if not upstream or upstream in walked:
                continue
            walked.add(upstream)

            remaining = quantity
            for source in upstream:
                name = normalize_model(source, model)
                available = project(self.records, source, name)
                consume = min(available, remaining)
                if consume > 0:
                    deductions.append(Deduction(
                        stage=source, name=name, available=available, quantity=consume,
                    ))
                    remaining -= consume
                if remaining <= 0:
                    break

            if remaining > 0:
                logger.info(
                    f"Deduction shortfall for {model} at {stage}: "
                    f"{remaining} of {quantity} not covered by {[s.value for s in upstream]}"
                )

        return deductions

    def expand(self, primary: PartRecord, now: Optional[datetime] = None) -> List[PartRecord]:
        """Return ``[primary, *compensating records]``."""
        batch = [primary]
        if primary.category != PartCategory.GLASS_SLIDING_DOOR.value:
            return batch
        if is_manual_adjustment(primary):
            logger.debug(f"Skipping deductions for manual adjustment {primary.id}")
            return batch

        for d in self.plan(primary.specification, primary.name, primary.quantity):
            batch.append(new_record(
                category=primary.category,
                name=d.name,
                specification=d.stage,
                quantity=-d.quantity,
                note=deduction_note(primary.specification, d.stage),
                now=now,
            ))

        if len(batch) > 1:
            logger.info(
                f"Expanded {primary.specification} {primary.name} x{primary.quantity} "
                f"into {len(batch) - 1} deduction(s)"
            )
        return batch
