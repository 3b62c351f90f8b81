"""AI advisory routes. Always answer 200; failures degrade to placeholder text."""

import logging

from fastapi import APIRouter, Query, Request

from parts_inventory.api.deps import Advisory, Inventory
from parts_inventory.core.catalog import PartCategory
from parts_inventory.core.rate_limit import limiter
from parts_inventory.schemas.inventory import AdvisoryResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/insights", response_model=AdvisoryResponse)
@limiter.limit("10/minute")
async def get_inventory_insights(request: Request, service: Inventory, advisory: Advisory):
    """Risk and optimization notes over the current ledger."""
    records = await service.list_records()
    if not records:
        return AdvisoryResponse(text="")
    return AdvisoryResponse(text=await advisory.analyze_inventory(records))


@router.get("/suggestions", response_model=AdvisoryResponse)
@limiter.limit("20/minute")
async def get_part_suggestion(
    request: Request,
    advisory: Advisory,
    category: PartCategory = Query(...),
    name: str = Query(..., min_length=1),
):
    """Suggested specification wording and check points for a part."""
    return AdvisoryResponse(text=await advisory.suggest_part_description(category.value, name))
