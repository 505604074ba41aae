"""
Provider Aggregator - Concurrent fan-out / fan-in across all providers.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from spendboard.connect.base import ProviderRecord
from spendboard.connect.health import UNKNOWN_ERROR, error_health
from spendboard.connect.registry import ProviderRegistry, ProviderRegistryEntry
from spendboard.see.models import FleetSummary

logger = logging.getLogger(__name__)


@dataclass
class Settled:
    """Result slot for one adapter: a record or the exception it raised."""
    entry: ProviderRegistryEntry
    record: Optional[ProviderRecord] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


def error_record(entry: ProviderRegistryEntry, message: Optional[str]) -> ProviderRecord:
    """Error record built only from the entry's static fields."""
    now = datetime.now(timezone.utc)
    return ProviderRecord(
        id=entry.id,
        name=entry.name,
        category=entry.category,
        health=error_health(message or UNKNOWN_ERROR, at=now),
        last_updated=now,
        has_billing_api=entry.has_billing_api,
    )


class ProviderAggregator:
    """Runs every registered adapter concurrently and collects the results."""

    def __init__(
        self,
        registry: Union[ProviderRegistry, list[ProviderRegistryEntry]],
        adapter_timeout: Optional[float] = None,
    ):
        self.registry = registry
        self.adapter_timeout = adapter_timeout

    @property
    def entries(self) -> list[ProviderRegistryEntry]:
        if isinstance(self.registry, ProviderRegistry):
            return self.registry.all_entries()
        return list(self.registry)

    async def _settle(self, entry: ProviderRegistryEntry) -> Settled:
        """Run one adapter, capturing any exception instead of raising."""
        # A deadline of None never expires
        deadline = asyncio.timeout(self.adapter_timeout or None)
        try:
            async with deadline:
                record = await entry.fetch()
        except TimeoutError as e:
            if not deadline.expired():
                # Raised by the adapter itself, not by our deadline
                logger.exception("Adapter %s raised unexpectedly", entry.id)
                return Settled(entry, error=e)
            message = f"{entry.name} timed out after {self.adapter_timeout:g}s"
            logger.warning("%s: %s", entry.id, message)
            return Settled(entry, error=TimeoutError(message))
        except Exception as e:
            logger.exception("Adapter %s raised unexpectedly", entry.id)
            return Settled(entry, error=e)

        return Settled(entry, record=record)

    def _resolve(self, settled: Settled) -> ProviderRecord:
        if settled.ok:
            return settled.record

        message = str(settled.error) if settled.error is not None else ""
        return error_record(settled.entry, message or UNKNOWN_ERROR)

    async def fetch_all(self) -> list[ProviderRecord]:
        """One aggregation cycle: a record per entry, in registry order."""
        entries = self.entries

        # Slot i belongs to entry i, whatever order the tasks finish in
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(self._settle(entry)) for entry in entries]

        records = [self._resolve(task.result()) for task in tasks]

        failed = sum(1 for r in records if r.status == "error")
        logger.info("Fetched %d providers (%d with errors)", len(records), failed)
        return records

    async def fetch_one(self, provider_id: str) -> ProviderRecord:
        """Fetch a single provider; ``KeyError`` when the id is unknown."""
        for entry in self.entries:
            if entry.id == provider_id:
                return self._resolve(await self._settle(entry))
        raise KeyError(provider_id)

    async def get_summary(self) -> FleetSummary:
        """Fetch all providers and roll them up."""
        return FleetSummary.from_records(await self.fetch_all())


async def fetch_all(
    registry: Union[ProviderRegistry, list[ProviderRegistryEntry]],
    adapter_timeout: Optional[float] = None,
) -> list[ProviderRecord]:
    """Convenience wrapper around ``ProviderAggregator.fetch_all``."""
    return await ProviderAggregator(registry, adapter_timeout).fetch_all()
