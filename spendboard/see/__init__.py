"""
See Module - Unified Provider Aggregation

Fetch every registered provider concurrently into one ordered snapshot.
"""

from spendboard.see.aggregator import ProviderAggregator, Settled, fetch_all
from spendboard.see.models import CurrencyTotals, FleetSummary

__all__ = [
    "ProviderAggregator",
    "Settled",
    "fetch_all",
    "CurrencyTotals",
    "FleetSummary",
]
