"""
Tests for the concurrent aggregator and the cycle summary.
"""

import asyncio
import time
from datetime import datetime, timezone

import pytest

from spendboard.connect.base import ProviderCategory, ProviderCosts, ProviderRecord
from spendboard.connect.health import error_health, healthy_health, unknown_health
from spendboard.connect.registry import ProviderRegistry, ProviderRegistryEntry, build_registry
from spendboard.see import CurrencyTotals, FleetSummary, ProviderAggregator, fetch_all

from conftest import make_settings


def make_record(provider_id, health=None, costs=None, category=ProviderCategory.AI):
    now = datetime.now(timezone.utc)
    return ProviderRecord(
        id=provider_id,
        name=provider_id.title(),
        category=category,
        health=health or healthy_health(now),
        last_updated=now,
        has_billing_api=True,
        costs=costs,
    )


def make_entry(provider_id, fetch, category=ProviderCategory.AI):
    return ProviderRegistryEntry(
        id=provider_id,
        name=provider_id.title(),
        category=category,
        has_billing_api=True,
        env_key=f"{provider_id.upper()}_API_KEY",
        fetch=fetch,
    )


def returning(provider_id, delay=0.0, finished=None, **kwargs):
    async def fetch():
        if delay:
            await asyncio.sleep(delay)
        if finished is not None:
            finished.append(provider_id)
        return make_record(provider_id, **kwargs)
    return fetch


def raising(exc):
    async def fetch():
        raise exc
    return fetch


class TestFetchAll:
    """Tests for ProviderAggregator.fetch_all."""

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self):
        registry = ProviderRegistry([
            make_entry("a", returning("a")),
            make_entry("b", raising(RuntimeError("boom"))),
            make_entry("c", returning("c")),
        ])

        records = await ProviderAggregator(registry).fetch_all()

        assert [r.id for r in records] == ["a", "b", "c"]
        assert [r.status for r in records] == ["healthy", "error", "healthy"]
        assert records[1].health.error_message == "boom"
        assert records[1].name == "B"
        assert records[1].costs is None
        assert records[1].usage is None

    @pytest.mark.asyncio
    async def test_empty_message_falls_back(self):
        registry = ProviderRegistry([make_entry("a", raising(RuntimeError()))])

        records = await ProviderAggregator(registry).fetch_all()

        assert records[0].status == "error"
        assert records[0].health.error_message == "Unknown error"

    @pytest.mark.asyncio
    async def test_statuses_pass_through(self):
        registry = ProviderRegistry([
            make_entry("a", returning("a", health=error_health("403 Forbidden"))),
            make_entry("b", returning("b", health=unknown_health())),
            make_entry("c", returning("c")),
        ])

        records = await ProviderAggregator(registry).fetch_all()

        assert [r.status for r in records] == ["error", "unknown", "healthy"]
        assert records[0].health.error_message == "403 Forbidden"

    @pytest.mark.asyncio
    async def test_order_is_registry_order_not_completion_order(self):
        finished = []
        registry = ProviderRegistry([
            make_entry("slow", returning("slow", delay=0.5, finished=finished)),
            make_entry("fast", returning("fast", delay=0.01, finished=finished)),
        ])

        started = time.monotonic()
        records = await ProviderAggregator(registry).fetch_all()
        elapsed = time.monotonic() - started

        assert finished == ["fast", "slow"]
        assert [r.id for r in records] == ["slow", "fast"]
        assert elapsed < 1.0

    @pytest.mark.asyncio
    async def test_adapters_run_concurrently(self):
        registry = ProviderRegistry([
            make_entry(name, returning(name, delay=0.3)) for name in ("a", "b", "c")
        ])

        started = time.monotonic()
        records = await ProviderAggregator(registry).fetch_all()
        elapsed = time.monotonic() - started

        assert len(records) == 3
        assert elapsed < 0.8

    @pytest.mark.asyncio
    async def test_timeout_becomes_error_record(self):
        registry = ProviderRegistry([
            make_entry("hang", returning("hang", delay=5)),
            make_entry("ok", returning("ok")),
        ])

        started = time.monotonic()
        records = await ProviderAggregator(registry, adapter_timeout=0.05).fetch_all()

        assert time.monotonic() - started < 2
        assert records[0].status == "error"
        assert records[0].health.error_message == "Hang timed out after 0.05s"
        assert records[1].status == "healthy"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("adapter_timeout", [None, 0, 5.0])
    async def test_adapter_raised_timeout_is_not_a_deadline(self, adapter_timeout):
        registry = ProviderRegistry([
            make_entry("a", raising(TimeoutError("socket read timed out"))),
            make_entry("b", returning("b")),
        ])

        records = await ProviderAggregator(registry, adapter_timeout=adapter_timeout).fetch_all()

        assert [r.id for r in records] == ["a", "b"]
        assert records[0].status == "error"
        assert records[0].health.error_message == "socket read timed out"
        assert records[1].status == "healthy"

    @pytest.mark.asyncio
    async def test_empty_registry(self):
        assert await ProviderAggregator(ProviderRegistry([])).fetch_all() == []

    @pytest.mark.asyncio
    async def test_accepts_plain_list(self):
        records = await fetch_all([make_entry("a", returning("a"))])
        assert [r.id for r in records] == ["a"]

    @pytest.mark.asyncio
    async def test_unconfigured_registry_needs_no_network(self, failing_transport):
        registry = build_registry(make_settings(), failing_transport)

        records = await ProviderAggregator(registry).fetch_all()

        assert [r.id for r in records] == registry.ids
        assert all(r.status == "unknown" for r in records)
        assert failing_transport.requests == []

    @pytest.mark.asyncio
    async def test_each_cycle_fetches_again(self):
        calls = []

        async def fetch():
            calls.append(1)
            return make_record("a")

        aggregator = ProviderAggregator(ProviderRegistry([make_entry("a", fetch)]))
        await aggregator.fetch_all()
        await aggregator.fetch_all()

        assert len(calls) == 2


class TestFetchOne:
    """Tests for ProviderAggregator.fetch_one."""

    @pytest.mark.asyncio
    async def test_single_provider(self):
        registry = ProviderRegistry([
            make_entry("a", raising(RuntimeError("never called"))),
            make_entry("b", returning("b")),
        ])

        record = await ProviderAggregator(registry).fetch_one("b")

        assert record.id == "b"
        assert record.status == "healthy"

    @pytest.mark.asyncio
    async def test_failure_is_settled(self):
        registry = ProviderRegistry([make_entry("a", raising(ValueError("bad payload")))])

        record = await ProviderAggregator(registry).fetch_one("a")

        assert record.status == "error"
        assert record.health.error_message == "bad payload"

    @pytest.mark.asyncio
    async def test_unknown_id(self):
        with pytest.raises(KeyError):
            await ProviderAggregator(ProviderRegistry([])).fetch_one("nope")


class TestFleetSummary:
    """Tests for FleetSummary."""

    def test_totals_by_currency(self):
        records = [
            make_record("a", costs=ProviderCosts(current_month=10, projected=12, last_month=8)),
            make_record("b", costs=ProviderCosts(current_month=5, projected=5)),
            make_record("c", costs=ProviderCosts(current_month=100, projected=100, currency="eur")),
            make_record("d", health=error_health("boom"), category=ProviderCategory.PAYMENTS),
            make_record("e", health=unknown_health(), category=ProviderCategory.SEARCH),
        ]

        summary = FleetSummary.from_records(records)

        assert summary.provider_count == 5
        assert summary.with_costs == 3
        assert summary.with_billing_api == 5
        assert summary.error_count == 1
        assert summary.healthy_count == 3
        assert summary.by_status == {"healthy": 3, "degraded": 0, "error": 1, "unknown": 1}
        assert summary.by_category == {"ai": 3, "payments": 1, "search": 1}

        eur, usd = summary.by_currency
        assert eur.currency == "EUR"
        assert eur.current_month == 100
        assert usd.current_month == 15
        assert usd.projected == 17
        assert usd.last_month == 8
        assert usd.provider_count == 2
        assert usd.comparable_current == 10
        assert usd.month_over_month == pytest.approx(25.0)
        assert usd.trend == "increasing"
        assert eur.month_over_month is None
        assert eur.trend == "stable"

    def test_to_dict(self):
        records = [make_record("a", costs=ProviderCosts(current_month=1.005, projected=2))]

        data = FleetSummary.from_records(records).to_dict()

        assert data["providers"] == 1
        assert data["byCurrency"][0]["currency"] == "USD"
        assert data["byCurrency"][0]["projected"] == 2
        assert data["byCurrency"][0]["monthOverMonth"] is None
        assert "generatedAt" in data

    def test_month_over_month_compares_same_providers(self):
        records = [
            make_record("a", costs=ProviderCosts(current_month=10, projected=10, last_month=10)),
            make_record("b", costs=ProviderCosts(current_month=500, projected=500)),
        ]

        usd = FleetSummary.from_records(records).by_currency[0]

        assert usd.current_month == 510
        assert usd.month_over_month == 0
        assert usd.trend == "stable"

    @pytest.mark.parametrize(
        "current, last, trend",
        [
            (104, 100, "stable"),
            (96, 100, "stable"),
            (106, 100, "increasing"),
            (90, 100, "decreasing"),
            (50, 0, "stable"),
        ],
    )
    def test_trend(self, current, last, trend):
        totals = CurrencyTotals(
            currency="USD",
            current_month=current,
            last_month=last,
            comparable_current=current,
        )
        assert totals.trend == trend

    def test_trend_serialized(self):
        records = [make_record("a", costs=ProviderCosts(current_month=12, projected=12, last_month=10))]

        data = FleetSummary.from_records(records).to_dict()

        assert data["byCurrency"][0]["monthOverMonth"] == 20.0
        assert data["byCurrency"][0]["trend"] == "increasing"

    def test_empty(self):
        summary = FleetSummary.from_records([])
        assert summary.provider_count == 0
        assert summary.by_currency == []
        assert summary.error_count == 0

    @pytest.mark.asyncio
    async def test_get_summary(self):
        registry = ProviderRegistry([
            make_entry("a", returning("a", costs=ProviderCosts(current_month=3, projected=4))),
            make_entry("b", raising(RuntimeError("down"))),
        ])

        summary = await ProviderAggregator(registry).get_summary()

        assert summary.provider_count == 2
        assert summary.error_count == 1
        assert summary.by_currency[0].current_month == 3
