"""
OpenAI Adapter - Organization costs API.
"""

from datetime import datetime

import httpx

from spendboard.connect.base import (
    BaseAdapter,
    Collected,
    ProviderCategory,
    ProviderCosts,
    normalize_currency,
    start_of_month,
)
from spendboard.connect.coerce import sum_amounts
from spendboard.connect.errors import ErrorHint


class OpenAIAdapter(BaseAdapter):
    """Month-to-date spend from ``/v1/organization/costs``."""

    provider_id = "openai"
    name = "OpenAI"
    category = ProviderCategory.AI
    env_key = "OPENAI_API_KEY"
    error_hints = (
        ErrorHint(
            403,
            "scope",
            "key is missing required scope (api.usage.read); use an organization admin key",
        ),
        ErrorHint(401, None, "organization costs require an admin API key (sk-admin-...)"),
    )

    BASE_URL = "https://api.openai.com/v1"
    # Daily buckets, enough for a full calendar month
    BUCKET_LIMIT = 31

    async def collect(self, client: httpx.AsyncClient, now: datetime) -> Collected:
        data = await self.request_json(
            client,
            "GET",
            f"{self.BASE_URL}/organization/costs",
            params={
                "start_time": int(start_of_month(now).timestamp()),
                "bucket_width": "1d",
                "limit": self.BUCKET_LIMIT,
            },
        )

        buckets = data.get("data") if isinstance(data, dict) else None
        if not isinstance(buckets, list):
            buckets = []

        current = 0.0
        currency = None
        for bucket in buckets:
            if not isinstance(bucket, dict):
                continue
            results = bucket.get("results")
            current += sum_amounts(results, "amount")
            if currency is None and isinstance(results, list):
                currency = next(
                    (
                        r["amount"].get("currency")
                        for r in results
                        if isinstance(r, dict) and isinstance(r.get("amount"), dict)
                    ),
                    None,
                )

        return Collected(
            costs=ProviderCosts(
                current_month=current,
                last_month=None,
                projected=current * self.settings.projection_factor(self.provider_id),
                currency=normalize_currency(currency),
            ),
        )
