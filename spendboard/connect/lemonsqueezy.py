"""
LemonSqueezy Adapter - Store orders.
"""

from datetime import datetime
from typing import Any, Optional

import httpx

from spendboard.connect.base import (
    BaseAdapter,
    Collected,
    ProviderCategory,
    ProviderCosts,
    start_of_month,
)
from spendboard.connect.coerce import minor_to_major


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else None


class LemonSqueezyAdapter(BaseAdapter):
    """Month-to-date order totals."""

    provider_id = "lemonsqueezy"
    name = "LemonSqueezy"
    category = ProviderCategory.PAYMENTS
    env_key = "LEMONSQUEEZY_API_KEY"

    BASE_URL = "https://api.lemonsqueezy.com/v1"
    PAGE_SIZE = 100

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/vnd.api+json",
        }

    async def collect(self, client: httpx.AsyncClient, now: datetime) -> Collected:
        data = await self.request_json(
            client,
            "GET",
            f"{self.BASE_URL}/orders",
            params={"page[size]": self.PAGE_SIZE},
        )

        orders = data.get("data") if isinstance(data, dict) else None
        month_start = start_of_month(now)

        total = 0.0
        currency = None
        if not isinstance(orders, list):
            orders = []

        for order in orders:
            if not isinstance(order, dict):
                continue
            attributes = order.get("attributes")
            if not isinstance(attributes, dict):
                continue

            # Orders without a usable timestamp are counted
            created_at = _parse_timestamp(attributes.get("created_at"))
            if created_at is not None and created_at < month_start:
                continue

            total += minor_to_major(attributes.get("total"))
            currency = currency or attributes.get("currency")

        return Collected(
            costs=ProviderCosts(
                current_month=total,
                last_month=None,
                projected=total,
                currency=currency,
            ),
        )
