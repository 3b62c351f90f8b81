"""Stock projection - derives stock levels from the transaction ledger.

Stock is never stored. Every read folds the full record list:

    stock(category, stage, model) = sum(quantity of matching records)

For side-less stages (glass strip, glass) model names are normalized
before matching, so ``UG3A-L``, ``UG3A-R`` and ``AK3B-L`` all land in the
``UG3A/AK3B`` bucket. Record order never matters.
"""

import logging
from typing import Dict, Iterable, List, Tuple

from parts_inventory.core.catalog import (
    CATEGORIES,
    STAGE_ORDER,
    PartCategory,
    available_models,
    normalize_model,
    ledger_value,
)
from parts_inventory.schemas.inventory import PartRecord, StockSnapshot

logger = logging.getLogger(__name__)


def project(
    records: Iterable[PartRecord],
    stage: str,
    model: str,
    category: str = PartCategory.GLASS_SLIDING_DOOR,
) -> int:
    """Current stock of ``model`` at ``stage``; 0 when nothing matches."""
    stage = ledger_value(stage)
    category = ledger_value(category)
    wanted = normalize_model(stage, model)
    return sum(
        r.quantity
        for r in records
        if r.category == category
        and r.specification == stage
        and normalize_model(stage, r.name) == wanted
    )


def stock_summary(records: Iterable[PartRecord]) -> StockSnapshot:
    """Glass door stock for every (stage, model) cell, in display order.

    Folds the ledger once; cells without records are reported as 0.
    """
    glass = ledger_value(PartCategory.GLASS_SLIDING_DOOR)
    totals: Dict[Tuple[str, str], int] = {}
    for r in records:
        if r.category != glass:
            continue
        key = (r.specification, normalize_model(r.specification, r.name))
        totals[key] = totals.get(key, 0) + r.quantity

    summary: StockSnapshot = {}
    for stage in STAGE_ORDER:
        summary[stage.value] = {
            model: totals.get((stage.value, model), 0)
            for model in available_models(stage)
        }
    return summary


def category_totals(records: Iterable[PartRecord]) -> List[Tuple[str, int]]:
    """Net quantity per category, in catalog order."""
    totals = {c.value: 0 for c in CATEGORIES}
    for r in records:
        if r.category in totals:
            totals[r.category] += r.quantity
    return list(totals.items())
