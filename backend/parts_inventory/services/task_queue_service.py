"""Task queue service - the glass door dispatch board.

The queue is an ordered list of ``"{model}*{remaining}"`` tokens, persisted
as-is. Tokens are parsed into ``ProductionTask`` for arithmetic and written
back as tokens; every operation returns a new list.

Completing a task reports finished doors (expanded through the deduction
service) and either rewrites the remaining quantity in place or drops the
task once nothing is left.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from parts_inventory.core.catalog import (
    DISPATCHER_MODELS,
    SIDES,
    TASK_COMPLETION_NOTE,
    TERMINAL_STAGE,
    PartCategory,
)
from parts_inventory.core.config import settings
from parts_inventory.core.errors import InventoryValidationError
from parts_inventory.schemas.inventory import PartRecord, ProductionTask
from parts_inventory.services.records import new_record
from parts_inventory.services.stock_deduction_service import DeductionConfig, StockDeductionService

logger = logging.getLogger(__name__)

OVERCOMPLETION_ALLOW = "allow"
OVERCOMPLETION_CAP = "cap"
OVERCOMPLETION_REJECT = "reject"


class TaskPolicy:
    """Rules applied when completing tasks."""

    def __init__(
        self,
        require_terminal_stage: bool = False,
        overcompletion: str = OVERCOMPLETION_ALLOW,
    ):
        if overcompletion not in (OVERCOMPLETION_ALLOW, OVERCOMPLETION_CAP, OVERCOMPLETION_REJECT):
            raise ValueError(f"Unknown over-completion policy: {overcompletion}")
        self.require_terminal_stage = require_terminal_stage
        self.overcompletion = overcompletion

    @classmethod
    def from_settings(cls) -> "TaskPolicy":
        return cls(
            require_terminal_stage=settings.require_terminal_stage_for_task_completion,
            overcompletion=settings.task_overcompletion_policy,
        )


@dataclass
class TaskCompletion:
    records: List[PartRecord]
    tasks: List[str]
    remaining: int


def _check_index(tasks: Sequence[str], index: int) -> None:
    if not 0 <= index < len(tasks):
        raise InventoryValidationError(f"Task index {index} out of range (queue has {len(tasks)})")


def add_task_pair(tasks: Sequence[str], base_model: str, quantity: int) -> List[str]:
    """Queue mirrored left and right doors for ``base_model``."""
    if base_model not in DISPATCHER_MODELS:
        raise InventoryValidationError(f"Unknown model '{base_model}'")
    if quantity <= 0:
        raise InventoryValidationError("Task quantity must be a positive integer")

    pair = [
        ProductionTask(name=f"{base_model}-{side}", remaining_quantity=quantity).to_token()
        for side in SIDES
    ]
    return list(tasks) + pair


def delete_task(tasks: Sequence[str], index: int) -> List[str]:
    _check_index(tasks, index)
    return [t for i, t in enumerate(tasks) if i != index]


def prioritize_task(tasks: Sequence[str], index: int) -> List[str]:
    """Move a task to the front. No-op when it is already first."""
    _check_index(tasks, index)
    if index == 0:
        return list(tasks)
    return [tasks[index]] + [t for i, t in enumerate(tasks) if i != index]


class TaskQueueService:
    """Completes queued tasks against the current ledger."""

    def __init__(
        self,
        records: Sequence[PartRecord],
        policy: Optional[TaskPolicy] = None,
        deduction_config: Optional[DeductionConfig] = None,
    ):
        self.records = list(records)
        self.policy = policy or TaskPolicy.from_settings()
        self.deductions = StockDeductionService(self.records, deduction_config)

    def complete_task(
        self,
        tasks: Sequence[str],
        index: int,
        done_quantity: int,
        active_stage: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TaskCompletion:
        """Report ``done_quantity`` finished doors for the task at ``index``."""
        _check_index(tasks, index)
        if self.policy.require_terminal_stage and active_stage != TERMINAL_STAGE.value:
            raise InventoryValidationError(
                f"Tasks can only be completed at stage '{TERMINAL_STAGE.value}' "
                f"(current: '{active_stage}')"
            )

        task = ProductionTask.parse(tasks[index])
        if done_quantity <= 0:
            raise InventoryValidationError("Completed quantity must be a positive integer")

        reported = done_quantity
        if done_quantity > task.remaining_quantity:
            if self.policy.overcompletion == OVERCOMPLETION_REJECT:
                raise InventoryValidationError(
                    f"Completed quantity {done_quantity} exceeds remaining "
                    f"{task.remaining_quantity} for {task.name}"
                )
            if self.policy.overcompletion == OVERCOMPLETION_CAP:
                reported = task.remaining_quantity
            logger.warning(
                f"Over-completion on {task.name}: {done_quantity} done, "
                f"{task.remaining_quantity} remaining, reporting {reported}"
            )

        primary = new_record(
            category=PartCategory.GLASS_SLIDING_DOOR,
            name=task.name,
            specification=TERMINAL_STAGE,
            quantity=reported,
            note=TASK_COMPLETION_NOTE,
            now=now,
        )
        batch = self.deductions.expand(primary, now=now)

        remaining = task.remaining_quantity - done_quantity
        updated = list(tasks)
        if remaining > 0:
            updated[index] = ProductionTask(name=task.name, remaining_quantity=remaining).to_token()
        else:
            del updated[index]

        return TaskCompletion(records=batch, tasks=updated, remaining=max(remaining, 0))
