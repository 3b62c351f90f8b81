"""Production catalog: categories, glass door stages, models and chains.

Enum values are the strings stored in the ledger spreadsheet, so they must
not change. Name normalization and deduction chains are plain data here;
services only interpret them.
"""

import re
from enum import Enum
from typing import Callable, Dict, List, Tuple


class PartCategory(str, Enum):
    """Part categories tracked by the shop."""

    GLASS_SLIDING_DOOR = "玻璃拉門"
    IRON_SLIDING_DOOR = "鐵拉門"
    DRAWER = "抽屜"
    CABINET_BODY = "桶身"
    PAINT = "噴漆"


CATEGORIES: List[PartCategory] = list(PartCategory)

UNITS = ["組", "個", "件", "米", "才", "公升"]

# Specification used by non-glass categories when none is given
DEFAULT_SPECIFICATION = "一般"


class GlassDoorStage(str, Enum):
    """Glass door production stages, downstream first.

    Order is both display order and deduction priority.
    """

    FINISHED = "完成"
    FRAME_SPRAYED = "框_噴完"
    FRAME_PRODUCED = "框_製作完成"
    FRAME_PENDING = "框_待辦"
    GLASS_STRIP = "玻璃條"
    GLASS = "玻璃"


STAGE_ORDER: List[GlassDoorStage] = list(GlassDoorStage)

TERMINAL_STAGE = GlassDoorStage.FINISHED

# Base models handed out on the dispatch board; each becomes an L/R pair.
DISPATCHER_MODELS = [
    "樹德4尺", "樹德3尺", "UG3A", "UG2A", "AK3U", "AK2U",
    "AK3B", "AK2B", "4尺88", "3尺88", "4尺106", "4尺74",
]

SIDES = ("L", "R")

GLASS_DOOR_MODELS = [f"{base}-{side}" for base in DISPATCHER_MODELS for side in SIDES]

# Glass is cut per base model; these pairs share the same glass.
MODEL_MERGE_TABLE: Dict[str, str] = {
    "UG3A": "UG3A/AK3B",
    "AK3B": "UG3A/AK3B",
    "UG2A": "UG2A/AK2B",
    "AK2B": "UG2A/AK2B",
}

_SIDE_SUFFIX = re.compile(r"-[LR]$")


def strip_side(name: str) -> str:
    """Drop a trailing ``-L`` / ``-R``."""
    return _SIDE_SUFFIX.sub("", name)


def merge_side_less(name: str) -> str:
    """Normalize a model name for stages that do not track sides."""
    base = strip_side(name)
    return MODEL_MERGE_TABLE.get(base, base)


def _identity(name: str) -> str:
    return name


NameNormalizer = Callable[[str], str]

# Stage value -> normalizer. Stages not listed keep the name as-is.
STAGE_NAME_NORMALIZERS: Dict[str, NameNormalizer] = {
    GlassDoorStage.GLASS_STRIP.value: merge_side_less,
    GlassDoorStage.GLASS.value: merge_side_less,
}


def ledger_value(value: str) -> str:
    """Ledger string for a catalog enum member or plain string."""
    return value.value if isinstance(value, Enum) else value


def is_side_less(stage: str) -> bool:
    return ledger_value(stage) in STAGE_NAME_NORMALIZERS


def normalize_model(stage: str, name: str) -> str:
    """Map a model name to the stock bucket it belongs to at ``stage``."""
    normalizer = STAGE_NAME_NORMALIZERS.get(ledger_value(stage), _identity)
    return normalizer(name)


def available_models(stage: str) -> List[str]:
    """Models that can be booked at ``stage``, in catalog order."""
    if not is_side_less(stage):
        return list(GLASS_DOOR_MODELS)
    seen: Dict[str, None] = {}
    for model in GLASS_DOOR_MODELS:
        seen.setdefault(normalize_model(stage, model), None)
    return list(seen)


def parse_stage(value: str) -> GlassDoorStage:
    """Look up a stage by its ledger value. Raises ValueError if unknown."""
    return GlassDoorStage(value)


# ---------------------------------------------------------------------------
# Deduction chains: the head stage consumes the stages that follow it.
# ---------------------------------------------------------------------------

FRAME_CHAIN: Tuple[GlassDoorStage, ...] = (
    GlassDoorStage.FINISHED,
    GlassDoorStage.FRAME_SPRAYED,
    GlassDoorStage.FRAME_PRODUCED,
    GlassDoorStage.FRAME_PENDING,
)

GLASS_CHAIN: Tuple[GlassDoorStage, ...] = (
    GlassDoorStage.GLASS_STRIP,
    GlassDoorStage.GLASS,
)


def deduction_chains(track_glass_consumption: bool = False) -> List[Tuple[GlassDoorStage, ...]]:
    """Active deduction chains.

    With glass tracking on, a finished door also consumes glass strips
    and then glass.
    """
    chains = [FRAME_CHAIN, GLASS_CHAIN]
    if track_glass_consumption:
        chains.append((GlassDoorStage.FINISHED,) + GLASS_CHAIN)
    return chains


# ---------------------------------------------------------------------------
# Note markers written into the ledger
# ---------------------------------------------------------------------------

MANUAL_NOTE_PREFIX = "[手動]"
AUTO_DEDUCTION_NOTE = "自動扣料"
TASK_COMPLETION_NOTE = "[調度看板完工]"
STOCK_COUNT_NOTE = "盤點修正"
