"""Advisory service - language model suggestions and inventory analysis.

Purely advisory. Every failure (no API key, network, provider error) is
logged and replaced with a placeholder string; nothing here can fail a
ledger operation.
"""

import logging
from typing import Any, Iterable, Optional

from parts_inventory.core.config import settings
from parts_inventory.core.errors import AdvisoryError
from parts_inventory.schemas.inventory import PartRecord

logger = logging.getLogger(__name__)

SUGGESTION_FALLBACK = "暫時無法取得 AI 建議。"
ANALYSIS_FALLBACK = "分析資料時發生錯誤。"

# Keep prompts bounded on large ledgers
MAX_SUMMARY_RECORDS = 500


def suggestion_prompt(category: str, name: str) -> str:
    return (
        f"身為零件管理專家，針對分類「{category}」中的零件「{name}」，"
        "提供一段專業的技術規格描述建議（30字以內），以及兩個常見的檢核重點。"
    )


def analysis_prompt(records: Iterable[PartRecord]) -> str:
    summary = ", ".join(
        f"{r.category}: {r.name} {r.specification} ({r.quantity})"
        for r in list(records)[-MAX_SUMMARY_RECORDS:]
    )
    return f"以下是目前的零件庫存摘要：{summary}。請針對庫存多樣性、可能的缺損風險或管理優化提出三點建議。"


class AdvisoryService:
    """OpenAI chat completions behind a fail-safe interface."""

    def __init__(self, api_key: Optional[str] = None, client: Any = None):
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self):
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(
                api_key=self._api_key,
                timeout=settings.advisory_timeout_seconds,
            )
        return self._client

    async def _complete(self, model: str, prompt: str) -> str:
        if not self.is_configured:
            raise AdvisoryError("Advisory service not configured (OPENAI_API_KEY missing)")
        try:
            response = await self._get_client().chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            raise AdvisoryError(f"Advisory request failed: {e}")
        text = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not text:
            raise AdvisoryError("Advisory response was empty")
        return text

    async def suggest_part_description(self, category: str, name: str) -> str:
        try:
            return await self._complete(settings.advisory_suggestion_model, suggestion_prompt(category, name))
        except AdvisoryError as e:
            logger.error(f"Part suggestion failed for {category}/{name}: {e.message}")
            return SUGGESTION_FALLBACK

    async def analyze_inventory(self, records: Iterable[PartRecord]) -> str:
        records = list(records)
        try:
            return await self._complete(settings.advisory_analysis_model, analysis_prompt(records))
        except AdvisoryError as e:
            logger.error(f"Inventory analysis failed over {len(records)} records: {e.message}")
            return ANALYSIS_FALLBACK
