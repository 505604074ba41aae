"""
ElevenLabs Adapter - Subscription quota and open invoice.
"""

from datetime import datetime

import httpx

from spendboard.connect.base import (
    BaseAdapter,
    Collected,
    ProviderCategory,
    ProviderCosts,
    ProviderUsage,
)
from spendboard.connect.coerce import extract_amount, minor_to_major
from spendboard.connect.errors import ErrorHint


class ElevenLabsAdapter(BaseAdapter):
    """Character usage against the plan limit."""

    provider_id = "elevenlabs"
    name = "ElevenLabs"
    category = ProviderCategory.AI
    env_key = "ELEVENLABS_API_KEY"
    error_hints = (
        ErrorHint(401, "permission", "key is missing required scope (user_read)"),
    )

    BASE_URL = "https://api.elevenlabs.io/v1"

    def headers(self) -> dict[str, str]:
        return {"xi-api-key": self.api_key or ""}

    async def collect(self, client: httpx.AsyncClient, now: datetime) -> Collected:
        data = await self.request_json(client, "GET", f"{self.BASE_URL}/user/subscription")
        if not isinstance(data, dict):
            data = {}

        current = extract_amount(data.get("character_count"))
        limit = extract_amount(data.get("character_limit"))

        invoices = data.get("open_invoices")
        first_invoice = invoices[0] if isinstance(invoices, list) and invoices else {}
        amount_due = (
            minor_to_major(first_invoice.get("amount_due_cents"))
            if isinstance(first_invoice, dict)
            else 0.0
        )

        return Collected(
            costs=ProviderCosts(
                current_month=amount_due,
                last_month=None,
                projected=amount_due,
                currency=data.get("currency"),
            ),
            usage=ProviderUsage(
                unit="characters",
                current=current,
                limit=limit if limit > 0 else None,
            ),
        )
