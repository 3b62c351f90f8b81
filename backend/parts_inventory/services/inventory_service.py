"""Inventory service - orchestrates one user action end to end.

Each instance owns a request-scoped ``InventoryState`` loaded from the
ledger store. Batches are built synchronously from that state, then handed
to the submission pipeline; the task queue is rewritten only after its
ledger batch has committed.
"""

import logging
from typing import List, Optional, Sequence, Union

from parts_inventory.core.catalog import (
    DEFAULT_SPECIFICATION,
    MANUAL_NOTE_PREFIX,
    TERMINAL_STAGE,
    PartCategory,
    available_models,
    parse_stage,
)
from parts_inventory.core.errors import InventoryValidationError, PersistenceError
from parts_inventory.schemas.inventory import (
    CategoryTotal,
    DashboardStats,
    PartRecord,
    RecordSubmitRequest,
    StockSnapshot,
)
from parts_inventory.services import task_queue_service
from parts_inventory.services.batch_adjustment_service import reconcile
from parts_inventory.services.ledger.base import LedgerStore
from parts_inventory.services.records import new_record
from parts_inventory.services.stock_deduction_service import DeductionConfig, StockDeductionService
from parts_inventory.services.stock_projection_service import category_totals, project, stock_summary
from parts_inventory.services.submission_service import InventoryState, SubmissionPipeline
from parts_inventory.services.task_queue_service import TaskCompletion, TaskPolicy, TaskQueueService

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5


def parse_quantity(value: Union[int, str]) -> int:
    """Parse a submitted quantity. Must be a non-zero integer."""
    try:
        number = float(str(value).strip())
    except ValueError:
        raise InventoryValidationError(f"Quantity '{value}' is not a number")
    if not number.is_integer():
        raise InventoryValidationError(f"Quantity '{value}' must be a whole number")
    if number == 0:
        raise InventoryValidationError("Quantity must not be zero")
    return int(number)


class InventoryService:
    """Entry point used by the API routes."""

    def __init__(
        self,
        store: LedgerStore,
        task_policy: Optional[TaskPolicy] = None,
        deduction_config: Optional[DeductionConfig] = None,
    ):
        self.store = store
        self.task_policy = task_policy or TaskPolicy.from_settings()
        self.deduction_config = deduction_config or DeductionConfig.from_settings()
        self._state: Optional[InventoryState] = None

    async def load_state(self) -> InventoryState:
        if self._state is None:
            self._state = await InventoryState.load(self.store)
        return self._state

    async def _submit(self, batch: Sequence[PartRecord]) -> List[PartRecord]:
        state = await self.load_state()
        return await SubmissionPipeline(self.store, state).submit(batch)

    async def _save_tasks(self, tasks: List[str]) -> List[str]:
        state = await self.load_state()
        await self.store.replace_tasks(tasks)
        state.tasks = tasks
        return tasks

    # ===== RECORDS =====

    def build_manual_record(self, request: RecordSubmitRequest) -> PartRecord:
        """Validate a form submission and build its primary record."""
        quantity = parse_quantity(request.quantity)
        name = request.name.strip()
        if not name:
            raise InventoryValidationError("Part name is required")

        if request.category == PartCategory.GLASS_SLIDING_DOOR:
            try:
                stage = parse_stage(request.specification or TERMINAL_STAGE.value)
            except ValueError:
                raise InventoryValidationError(f"Unknown stage '{request.specification}'")
            if name not in available_models(stage):
                raise InventoryValidationError(f"Model '{name}' is not valid at stage '{stage.value}'")
            specification = stage.value
        else:
            specification = (request.specification or "").strip() or DEFAULT_SPECIFICATION

        note = f"{MANUAL_NOTE_PREFIX} {request.note}" if request.adjustment else request.note
        return new_record(
            category=request.category,
            name=name,
            specification=specification,
            quantity=quantity,
            note=note,
        )

    async def submit_manual(self, request: RecordSubmitRequest) -> List[PartRecord]:
        """Submit a form entry, with automatic deductions where linked."""
        primary = self.build_manual_record(request)
        state = await self.load_state()
        batch = StockDeductionService(state.records, self.deduction_config).expand(primary)
        return await self._submit(batch)

    async def list_records(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[PartRecord]:
        state = await self.load_state()
        records = state.records
        if category:
            records = [r for r in records if r.category == category]
        if search:
            needle = search.lower()
            records = [
                r for r in records
                if needle in r.name.lower() or needle in r.category.lower()
            ]
        return records

    # ===== STOCK =====

    async def current_stock(self, stage: str, model: str) -> int:
        state = await self.load_state()
        return project(state.records, stage, model)

    async def stock_summary(self) -> StockSnapshot:
        state = await self.load_state()
        return stock_summary(state.records)

    async def apply_stock_adjustments(self, edited: StockSnapshot) -> List[PartRecord]:
        """Persist the difference between an edited table and current stock."""
        state = await self.load_state()
        batch = reconcile(edited, stock_summary(state.records))
        if not batch:
            return []
        return await self._submit(batch)

    async def dashboard_stats(self) -> DashboardStats:
        state = await self.load_state()
        records = state.records
        return DashboardStats(
            total_items=len(records),
            total_quantity=sum(r.quantity for r in records),
            category_distribution=[
                CategoryTotal(name=name, value=value) for name, value in category_totals(records)
            ],
            recent_activity=list(reversed(records[-RECENT_ACTIVITY_LIMIT:])),
        )

    # ===== TASKS =====

    async def list_tasks(self) -> List[str]:
        state = await self.load_state()
        return list(state.tasks)

    async def add_task_pair(self, base_model: str, quantity: int) -> List[str]:
        state = await self.load_state()
        tasks = task_queue_service.add_task_pair(state.tasks, base_model, quantity)
        return await self._save_tasks(tasks)

    async def delete_task(self, index: int) -> List[str]:
        state = await self.load_state()
        tasks = task_queue_service.delete_task(state.tasks, index)
        return await self._save_tasks(tasks)

    async def prioritize_task(self, index: int) -> List[str]:
        state = await self.load_state()
        if index == 0 and state.tasks:
            return list(state.tasks)
        tasks = task_queue_service.prioritize_task(state.tasks, index)
        return await self._save_tasks(tasks)

    async def complete_task(
        self,
        index: int,
        done_quantity: int,
        active_stage: Optional[str] = None,
    ) -> TaskCompletion:
        """Report progress on a queued task.

        The ledger batch commits before the queue is rewritten. If the queue
        write then fails the records stay committed and the task keeps its
        old quantity, so a blind retry reports the same doors twice.
        """
        state = await self.load_state()
        service = TaskQueueService(state.records, self.task_policy, self.deduction_config)
        completion = service.complete_task(state.tasks, index, done_quantity, active_stage)

        await self._submit(completion.records)
        try:
            await self._save_tasks(completion.tasks)
        except PersistenceError as e:
            logger.error(
                f"Task {index} records committed ({[r.id for r in completion.records]}) "
                f"but queue update failed; queue is stale: {e.message}"
            )
            raise
        logger.info(
            f"Task {index} completed x{done_quantity}, "
            f"{completion.remaining} remaining, queue size {len(completion.tasks)}"
        )
        return completion