"""
Connect Module - Provider Integrations

Adapters for infrastructure, AI and payment providers, each normalizing
its billing API into a ``ProviderRecord``.
"""

from spendboard.connect.anthropic import AnthropicAdapter
from spendboard.connect.base import (
    BaseAdapter,
    PlaceholderAdapter,
    ProviderCategory,
    ProviderCosts,
    ProviderRecord,
    ProviderUsage,
)
from spendboard.connect.deepseek import DeepSeekAdapter
from spendboard.connect.elevenlabs import ElevenLabsAdapter
from spendboard.connect.github import GitHubAdapter
from spendboard.connect.health import HealthStatus, ProviderHealth
from spendboard.connect.lemonsqueezy import LemonSqueezyAdapter
from spendboard.connect.openai import OpenAIAdapter
from spendboard.connect.railway import RailwayAdapter
from spendboard.connect.registry import (
    ProviderRegistry,
    ProviderRegistryEntry,
    build_registry,
    get_registry,
)
from spendboard.connect.stripe import StripeAdapter
from spendboard.connect.supabase import SupabaseAdapter

__all__ = [
    "BaseAdapter",
    "PlaceholderAdapter",
    "ProviderCategory",
    "ProviderCosts",
    "ProviderUsage",
    "ProviderRecord",
    "HealthStatus",
    "ProviderHealth",
    "ProviderRegistry",
    "ProviderRegistryEntry",
    "build_registry",
    "get_registry",
    "RailwayAdapter",
    "OpenAIAdapter",
    "AnthropicAdapter",
    "StripeAdapter",
    "LemonSqueezyAdapter",
    "ElevenLabsAdapter",
    "GitHubAdapter",
    "DeepSeekAdapter",
    "SupabaseAdapter",
]
