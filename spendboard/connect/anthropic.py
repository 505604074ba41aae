"""
Anthropic Adapter - Admin API cost report.
"""

from datetime import datetime
from typing import Any

import httpx

from spendboard.connect.base import (
    BaseAdapter,
    Collected,
    ProviderCategory,
    ProviderCosts,
    normalize_currency,
    start_of_month,
)
from spendboard.connect.coerce import extract_amount, sum_amounts
from spendboard.connect.errors import ErrorHint

ANTHROPIC_VERSION = "2023-06-01"


def _bucket_amount(bucket: Any) -> float:
    """Cost of one report bucket: its results, or a flat ``amount``."""
    if not isinstance(bucket, dict):
        return 0.0
    results = bucket.get("results")
    if isinstance(results, list):
        return sum_amounts(results, "amount")
    return extract_amount(bucket.get("amount"))


def _bucket_currency(bucket: Any):
    if not isinstance(bucket, dict):
        return None
    results = bucket.get("results")
    if not isinstance(results, list):
        results = []
    for result in results:
        if isinstance(result, dict) and result.get("currency"):
            return result["currency"]
    return bucket.get("currency")


class AnthropicAdapter(BaseAdapter):
    """Month-to-date spend from ``/v1/organizations/cost_report``."""

    provider_id = "anthropic"
    name = "Anthropic"
    category = ProviderCategory.AI
    env_key = "ANTHROPIC_API_KEY"
    error_hints = (
        ErrorHint(401, None, "cost reports require an Admin API key (sk-ant-admin...)"),
        ErrorHint(403, "permission", "cost reports require an Admin API key with organization access"),
    )

    BASE_URL = "https://api.anthropic.com/v1"
    MAX_PAGES = 10

    def headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
        }

    async def collect(self, client: httpx.AsyncClient, now: datetime) -> Collected:
        params = {"starting_at": start_of_month(now).strftime("%Y-%m-%dT%H:%M:%SZ")}

        current = 0.0
        currency = None

        for _ in range(self.MAX_PAGES):
            data = await self.request_json(
                client,
                "GET",
                f"{self.BASE_URL}/organizations/cost_report",
                params=params,
            )
            if not isinstance(data, dict):
                break

            buckets = data.get("data")
            if isinstance(buckets, list):
                for bucket in buckets:
                    current += _bucket_amount(bucket)
                    currency = currency or _bucket_currency(bucket)

            next_page = data.get("next_page")
            if not data.get("has_more") or not next_page:
                break
            params = {**params, "page": next_page}

        return Collected(
            costs=ProviderCosts(
                current_month=current,
                last_month=None,
                projected=current * self.settings.projection_factor(self.provider_id),
                currency=normalize_currency(currency),
            ),
        )
