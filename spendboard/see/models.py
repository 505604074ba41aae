"""
Data models for cycle-level rollups.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from spendboard.connect.base import ProviderRecord
from spendboard.connect.health import HealthStatus

# Month-over-month change, in percent, beyond which spend is trending
TREND_THRESHOLD = 5.0


@dataclass
class CurrencyTotals:
    """Cost totals for one currency."""
    currency: str
    current_month: float = 0.0
    last_month: float = 0.0
    projected: float = 0.0
    provider_count: int = 0
    # Current month of only the providers that also report last month
    comparable_current: float = 0.0

    @property
    def month_over_month(self) -> Optional[float]:
        """Percent change against last month, over the same providers."""
        if self.last_month > 0:
            return (self.comparable_current - self.last_month) / self.last_month * 100
        return None

    @property
    def trend(self) -> str:
        change = self.month_over_month
        if change is None or abs(change) <= TREND_THRESHOLD:
            return "stable"
        return "increasing" if change > 0 else "decreasing"


@dataclass
class FleetSummary:
    """Rollup of one aggregation cycle."""
    generated_at: datetime
    provider_count: int
    by_currency: list[CurrencyTotals] = field(default_factory=list)
    by_status: dict[str, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)
    with_costs: int = 0
    with_billing_api: int = 0

    @classmethod
    def from_records(cls, records: list[ProviderRecord]) -> "FleetSummary":
        totals: dict[str, CurrencyTotals] = defaultdict(lambda: CurrencyTotals(currency=""))

        for record in records:
            if record.costs is None:
                continue
            bucket = totals[record.costs.currency]
            bucket.currency = record.costs.currency
            bucket.current_month += record.costs.current_month
            bucket.projected += record.costs.projected
            if record.costs.last_month is not None:
                bucket.last_month += record.costs.last_month
                bucket.comparable_current += record.costs.current_month
            bucket.provider_count += 1

        status_counts = Counter(r.status for r in records)

        return cls(
            generated_at=datetime.now(timezone.utc),
            provider_count=len(records),
            by_currency=sorted(totals.values(), key=lambda t: t.currency),
            by_status={s.value: status_counts.get(s.value, 0) for s in HealthStatus},
            by_category=dict(Counter(r.category.value for r in records)),
            with_costs=sum(1 for r in records if r.costs is not None),
            with_billing_api=sum(1 for r in records if r.has_billing_api),
        )

    @property
    def error_count(self) -> int:
        return self.by_status.get(HealthStatus.ERROR.value, 0)

    @property
    def healthy_count(self) -> int:
        return self.by_status.get(HealthStatus.HEALTHY.value, 0)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "generatedAt": self.generated_at.isoformat(),
            "providers": self.provider_count,
            "withCosts": self.with_costs,
            "withBillingApi": self.with_billing_api,
            "byStatus": self.by_status,
            "byCategory": self.by_category,
            "byCurrency": [
                {
                    "currency": t.currency,
                    "currentMonth": round(t.current_month, 2),
                    "lastMonth": round(t.last_month, 2),
                    "projected": round(t.projected, 2),
                    "providers": t.provider_count,
                    "monthOverMonth": (
                        round(t.month_over_month, 1)
                        if t.month_over_month is not None else None
                    ),
                    "trend": t.trend,
                }
                for t in self.by_currency
            ],
        }
