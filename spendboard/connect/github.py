"""
GitHub Adapter - Enhanced billing usage report for an organization.
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
from spendboard.connect.coerce import sum_amounts
from spendboard.connect.errors import ErrorHint

ACTIONS_PRODUCT = "actions"


class GitHubAdapter(BaseAdapter):
    """GitHub Actions spend and minutes for the current month."""

    provider_id = "github"
    name = "GitHub"
    category = ProviderCategory.PLATFORM
    env_key = "GITHUB_TOKEN"
    extra_keys = ("GITHUB_ORG",)
    error_hints = (
        ErrorHint(404, None, "organization not found or token lacks the 'Administration: read' billing permission"),
        ErrorHint(403, "scope", "token is missing required scope (read:org / admin:org)"),
    )

    BASE_URL = "https://api.github.com"
    API_VERSION = "2022-11-28"

    @property
    def org(self) -> str:
        return self.settings.credential("GITHUB_ORG") or ""

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "X-GitHub-Api-Version": self.API_VERSION,
            "Accept": "application/vnd.github+json",
        }

    async def collect(self, client: httpx.AsyncClient, now: datetime) -> Collected:
        data = await self.request_json(
            client,
            "GET",
            f"{self.BASE_URL}/organizations/{self.org}/settings/billing/usage",
            params={"year": now.year, "month": now.month},
        )

        items = data.get("usageItems") if isinstance(data, dict) else None
        if not isinstance(items, list):
            items = []
        actions = [
            item for item in items
            if isinstance(item, dict)
            and str(item.get("product", "")).lower() == ACTIONS_PRODUCT
        ]
        minutes = [
            item for item in actions
            if str(item.get("unitType", "")).lower() == "minutes"
        ]

        cost = sum_amounts(actions, "net_amount", either_case=True)

        return Collected(
            costs=ProviderCosts(
                current_month=cost,
                last_month=None,
                projected=cost,
                currency="USD",
            ),
            usage=ProviderUsage(
                unit="minutes",
                current=sum_amounts(minutes, "quantity"),
                limit=None,
            ),
        )
