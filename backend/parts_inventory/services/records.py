"""Ledger record construction: readable ids and display timestamps."""

import random
import string
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from parts_inventory.core.catalog import ledger_value
from parts_inventory.core.config import settings
from parts_inventory.schemas.inventory import PartRecord

_ID_ALPHABET = string.ascii_uppercase + string.digits


def local_now() -> datetime:
    return datetime.now(ZoneInfo(settings.timezone))


def generate_record_id(category: str, now: Optional[datetime] = None) -> str:
    """``{categoryInitial}-{yyyymmdd}-{RAND4}``.

    Uniqueness is best-effort only; the suffix is random.
    """
    now = now or local_now()
    suffix = "".join(random.choices(_ID_ALPHABET, k=4))
    return f"{ledger_value(category)[:1]}-{now:%Y%m%d}-{suffix}"


def format_timestamp(now: datetime) -> str:
    """zh-TW style display timestamp, e.g. ``2026/1/5 下午3:04:05``.

    Display only; never parsed back.
    """
    meridiem = "上午" if now.hour < 12 else "下午"
    hour = now.hour % 12 or 12
    return f"{now.year}/{now.month}/{now.day} {meridiem}{hour}:{now:%M:%S}"


def new_record(
    category: str,
    name: str,
    specification: str,
    quantity: int,
    note: str = "",
    now: Optional[datetime] = None,
) -> PartRecord:
    now = now or local_now()
    return PartRecord(
        id=generate_record_id(category, now),
        timestamp=format_timestamp(now),
        category=ledger_value(category),
        name=name,
        specification=ledger_value(specification),
        quantity=quantity,
        note=note,
    )
