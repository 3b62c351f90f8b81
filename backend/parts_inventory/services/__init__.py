# Services module

from parts_inventory.services.stock_projection_service import project, stock_summary
from parts_inventory.services.stock_deduction_service import (
    DeductionConfig,
    StockDeductionService,
)
from parts_inventory.services.task_queue_service import (
    TaskPolicy,
    TaskQueueService,
    add_task_pair,
    delete_task,
    prioritize_task,
)
from parts_inventory.services.batch_adjustment_service import reconcile
from parts_inventory.services.submission_service import (
    InventoryState,
    SubmissionPipeline,
    SubmissionState,
)
from parts_inventory.services.inventory_service import InventoryService
from parts_inventory.services.advisory_service import AdvisoryService
