"""
Provider registry - the static table of providers and their adapters.
"""

import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

import httpx

from spendboard.config import Settings
from spendboard.connect.anthropic import AnthropicAdapter
from spendboard.connect.base import BaseAdapter, ProviderCategory, ProviderRecord
from spendboard.connect.deepseek import DeepSeekAdapter
from spendboard.connect.elevenlabs import ElevenLabsAdapter
from spendboard.connect.github import GitHubAdapter
from spendboard.connect.lemonsqueezy import LemonSqueezyAdapter
from spendboard.connect.openai import OpenAIAdapter
from spendboard.connect.placeholders import placeholder
from spendboard.connect.railway import RailwayAdapter
from spendboard.connect.stripe import StripeAdapter
from spendboard.connect.supabase import SupabaseAdapter

logger = logging.getLogger(__name__)

FetchFn = Callable[[], Awaitable[ProviderRecord]]


@dataclass(frozen=True)
class ProviderRegistryEntry:
    """Static description of one provider plus its fetch operation."""
    id: str
    name: str
    category: ProviderCategory
    has_billing_api: bool
    env_key: str
    fetch: FetchFn = field(repr=False, compare=False)

    @classmethod
    def from_adapter(cls, adapter: BaseAdapter) -> "ProviderRegistryEntry":
        return cls(
            id=adapter.provider_id,
            name=adapter.name,
            category=adapter.category,
            has_billing_api=adapter.has_billing_api,
            env_key=adapter.env_key,
            fetch=adapter.fetch,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "hasBillingApi": self.has_billing_api,
            "envKey": self.env_key,
        }


class ProviderRegistry:
    """Ordered, read-only collection of registry entries."""

    def __init__(self, entries):
        self._entries = tuple(entries)

        seen = set()
        for entry in self._entries:
            if entry.id in seen:
                raise ValueError(f"Duplicate provider id: {entry.id}")
            seen.add(entry.id)

    def all_entries(self) -> list[ProviderRegistryEntry]:
        """All entries in declaration order."""
        return list(self._entries)

    def find_by_id(self, provider_id: str) -> Optional[ProviderRegistryEntry]:
        for entry in self._entries:
            if entry.id == provider_id:
                return entry
        return None

    @property
    def ids(self) -> list[str]:
        return [entry.id for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ProviderRegistryEntry]:
        return iter(self._entries)

    def __contains__(self, provider_id: object) -> bool:
        return any(entry.id == provider_id for entry in self._entries)


def build_adapters(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[BaseAdapter]:
    """Instantiate every adapter in display order."""
    return [
        RailwayAdapter(settings, transport),
        OpenAIAdapter(settings, transport),
        AnthropicAdapter(settings, transport),
        StripeAdapter(settings, transport),
        LemonSqueezyAdapter(settings, transport),
        ElevenLabsAdapter(settings, transport),
        GitHubAdapter(settings, transport),
        placeholder("groq", settings),
        DeepSeekAdapter(settings, transport),
        SupabaseAdapter(settings, transport),
        placeholder("huggingface", settings),
        placeholder("google-gemini", settings),
        placeholder("brave-search", settings),
    ]


def build_registry(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ProviderRegistry:
    """Build the provider registry for the given settings."""
    settings = settings or Settings()
    registry = ProviderRegistry(
        ProviderRegistryEntry.from_adapter(adapter)
        for adapter in build_adapters(settings, transport)
    )
    logger.debug("Registered %d providers: %s", len(registry), ", ".join(registry.ids))
    return registry


@lru_cache()
def get_registry() -> ProviderRegistry:
    """Process-wide registry built from the environment."""
    return build_registry(Settings.from_env())
