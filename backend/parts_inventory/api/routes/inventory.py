"""Inventory routes - ledger records, stock levels, adjustments, dashboard.

Flows:
- Submit: form entry -> primary record -> automatic deductions -> ordered append
- Stock: always projected from the full ledger on each request
- Adjustments: edited stock table -> one delta record per changed cell
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request

from parts_inventory.api.deps import Inventory
from parts_inventory.core.catalog import (
    CATEGORIES,
    DISPATCHER_MODELS,
    STAGE_ORDER,
    UNITS,
    available_models,
)
from parts_inventory.core.rate_limit import limiter
from parts_inventory.core.responses import list_response
from parts_inventory.schemas.inventory import (
    DashboardStats,
    RecordSubmitRequest,
    StockAdjustmentRequest,
    StockLevelResponse,
    StockSummaryResponse,
    SubmissionResponse,
)
from parts_inventory.services.submission_service import SubmissionState

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/catalog")
def get_catalog():
    """Categories, stages and the models valid at each stage."""
    return {
        "categories": [c.value for c in CATEGORIES],
        "units": UNITS,
        "stages": [s.value for s in STAGE_ORDER],
        "models": {s.value: available_models(s) for s in STAGE_ORDER},
        "dispatcher_models": DISPATCHER_MODELS,
    }


@router.get("/records")
async def list_records(
    service: Inventory,
    search: Optional[str] = None,
    category: Optional[str] = None,
):
    """List ledger records, optionally filtered by name/category text."""
    records = await service.list_records(search=search, category=category)
    return list_response([r.model_dump() for r in records])


@router.post("/records", response_model=SubmissionResponse)
@limiter.limit("60/minute")
async def submit_record(request: Request, payload: RecordSubmitRequest, service: Inventory):
    """Submit a production report or manual adjustment."""
    records = await service.submit_manual(payload)
    return SubmissionResponse(status=SubmissionState.COMMITTED.value, records=records)


@router.get("/stock", response_model=StockLevelResponse)
async def get_stock_level(
    service: Inventory,
    stage: str = Query(...),
    model: str = Query(...),
):
    """Current glass door stock for one stage/model."""
    quantity = await service.current_stock(stage, model)
    return StockLevelResponse(stage=stage, model=model, quantity=quantity)


@router.get("/stock/summary", response_model=StockSummaryResponse)
async def get_stock_summary(service: Inventory):
    """Glass door stock for every stage and model."""
    return StockSummaryResponse(stages=await service.stock_summary())


@router.post("/stock/adjustments", response_model=SubmissionResponse)
@limiter.limit("30/minute")
async def adjust_stock(request: Request, payload: StockAdjustmentRequest, service: Inventory):
    """Set absolute stock values; persisted as deltas against current stock."""
    records = await service.apply_stock_adjustments(payload.edited)
    return SubmissionResponse(status=SubmissionState.COMMITTED.value, records=records)


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(service: Inventory):
    """Totals, per-category distribution and recent activity."""
    return await service.dashboard_stats()
