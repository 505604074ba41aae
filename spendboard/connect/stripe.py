"""
Stripe Adapter - Recent invoices.
"""

from datetime import datetime

import httpx

from spendboard.connect.base import (
    BaseAdapter,
    Collected,
    ProviderCategory,
    ProviderCosts,
)
from spendboard.connect.coerce import minor_to_major
from spendboard.connect.errors import ErrorHint


class StripeAdapter(BaseAdapter):
    """Latest paid invoice as this month, the one before as last month."""

    provider_id = "stripe"
    name = "Stripe"
    category = ProviderCategory.PAYMENTS
    env_key = "STRIPE_SECRET_KEY"
    error_hints = (
        ErrorHint(403, "permission", "restricted key is missing required scope (invoices: read)"),
    )

    BASE_URL = "https://api.stripe.com/v1"
    INVOICE_LIMIT = 3

    async def collect(self, client: httpx.AsyncClient, now: datetime) -> Collected:
        data = await self.request_json(
            client,
            "GET",
            f"{self.BASE_URL}/invoices",
            params={"limit": self.INVOICE_LIMIT},
        )

        invoices = data.get("data") if isinstance(data, dict) else None
        if not isinstance(invoices, list):
            invoices = []
        invoices = [i for i in invoices if isinstance(i, dict)]

        latest = invoices[0] if invoices else {}
        previous = invoices[1] if len(invoices) > 1 else None

        current = minor_to_major(latest.get("amount_paid"))
        last_month = minor_to_major(previous.get("amount_paid")) if previous else None

        return Collected(
            costs=ProviderCosts(
                current_month=current,
                last_month=last_month,
                projected=current,
                currency=latest.get("currency"),
            ),
        )
