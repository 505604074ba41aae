"""
Spendboard - SaaS Cost Console

One pane of glass for cost and usage across infrastructure, AI and
payment providers.
"""

__version__ = "0.1.0"

from spendboard.config import Settings
from spendboard.connect import ProviderRecord, ProviderRegistry, build_registry, get_registry
from spendboard.see import FleetSummary, ProviderAggregator, fetch_all

__all__ = [
    "Settings",
    "ProviderRecord",
    "ProviderRegistry",
    "build_registry",
    "get_registry",
    "ProviderAggregator",
    "FleetSummary",
    "fetch_all",
]
