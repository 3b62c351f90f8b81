"""Task routes - glass door dispatch board."""

import logging

from fastapi import APIRouter, Request

from parts_inventory.api.deps import Inventory
from parts_inventory.core.rate_limit import limiter
from parts_inventory.schemas.inventory import (
    TaskCompleteRequest,
    TaskCompletionResponse,
    TaskCreateRequest,
    TaskQueueResponse,
)
from parts_inventory.services.submission_service import SubmissionState

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=TaskQueueResponse)
async def list_tasks(service: Inventory):
    return TaskQueueResponse(tasks=await service.list_tasks())


@router.post("", response_model=TaskQueueResponse)
@limiter.limit("60/minute")
async def add_task_pair(request: Request, payload: TaskCreateRequest, service: Inventory):
    """Queue a left/right pair for a base model."""
    tasks = await service.add_task_pair(payload.base_model, payload.quantity)
    return TaskQueueResponse(tasks=tasks)


@router.post("/{index}/complete", response_model=TaskCompletionResponse)
@limiter.limit("60/minute")
async def complete_task(request: Request, index: int, payload: TaskCompleteRequest, service: Inventory):
    """Report finished doors against a queued task."""
    completion = await service.complete_task(index, payload.done_quantity, payload.active_stage)
    return TaskCompletionResponse(
        status=SubmissionState.COMMITTED.value,
        records=completion.records,
        tasks=completion.tasks,
    )


@router.post("/{index}/prioritize", response_model=TaskQueueResponse)
async def prioritize_task(index: int, service: Inventory):
    """Move a task to the front of the queue."""
    return TaskQueueResponse(tasks=await service.prioritize_task(index))


@router.delete("/{index}", response_model=TaskQueueResponse)
async def delete_task(index: int, service: Inventory):
    return TaskQueueResponse(tasks=await service.delete_task(index))
