"""
Supabase Adapter - Project billing add-ons.
"""

from datetime import datetime
from typing import Any

import httpx

from spendboard.connect.base import (
    BaseAdapter,
    Collected,
    ProviderCategory,
    ProviderCosts,
)
from spendboard.connect.coerce import extract_amount


def _addon_price(addon: Any) -> float:
    """Price of an add-on, flat or nested under ``variant.price``."""
    if not isinstance(addon, dict):
        return 0.0

    price = addon.get("price")
    if price is None and isinstance(addon.get("variant"), dict):
        price = addon["variant"].get("price")
    if isinstance(price, dict) and "amount" in price:
        price = price["amount"]

    return extract_amount(price)


class SupabaseAdapter(BaseAdapter):
    """Monthly cost of the project's enabled add-ons."""

    provider_id = "supabase"
    name = "Supabase"
    category = ProviderCategory.INFRASTRUCTURE
    env_key = "SUPABASE_ACCESS_TOKEN"
    extra_keys = ("SUPABASE_PROJECT_REF",)

    BASE_URL = "https://api.supabase.com/v1"

    @property
    def project_ref(self) -> str:
        return self.settings.credential("SUPABASE_PROJECT_REF") or ""

    async def collect(self, client: httpx.AsyncClient, now: datetime) -> Collected:
        data = await self.request_json(
            client,
            "GET",
            f"{self.BASE_URL}/projects/{self.project_ref}/billing/addons",
        )

        addons = []
        if isinstance(data, dict):
            addons = data.get("addons") or data.get("selected_addons") or []

        cost = sum(_addon_price(addon) for addon in addons) if isinstance(addons, list) else 0.0

        return Collected(
            costs=ProviderCosts(
                current_month=cost,
                last_month=None,
                projected=cost,
                currency="USD",
            ),
        )
