"""
DeepSeek Adapter - Prepaid account balance.
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
from spendboard.connect.coerce import extract_amount


class DeepSeekAdapter(BaseAdapter):
    """DeepSeek reports a balance, not spend; cost stays at zero."""

    provider_id = "deepseek"
    name = "DeepSeek"
    category = ProviderCategory.AI
    env_key = "DEEPSEEK_API_KEY"

    BASE_URL = "https://api.deepseek.com"

    async def collect(self, client: httpx.AsyncClient, now: datetime) -> Collected:
        data = await self.request_json(client, "GET", f"{self.BASE_URL}/user/balance")

        infos = data.get("balance_infos") if isinstance(data, dict) else None
        info = infos[0] if isinstance(infos, list) and infos and isinstance(infos[0], dict) else {}

        return Collected(
            costs=ProviderCosts(
                current_month=0.0,
                last_month=None,
                projected=0.0,
                currency=info.get("currency"),
            ),
            usage=ProviderUsage(
                unit="balance",
                current=extract_amount(info.get("total_balance")),
                limit=None,
            ),
        )
