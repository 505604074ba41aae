"""
Providers without a billing API.

These are listed so the console shows them, but they always report
``unknown`` health with no costs or usage.
"""

from typing import Optional

from spendboard.config import Settings
from spendboard.connect.base import PlaceholderAdapter, ProviderCategory

# id -> (name, category, env key)
PLACEHOLDER_PROVIDERS = {
    "groq": ("Groq", ProviderCategory.AI, "GROQ_API_KEY"),
    "huggingface": ("Hugging Face", ProviderCategory.AI, "HF_TOKEN"),
    # Billing export needs a BigQuery setup
    "google-gemini": ("Google/Gemini", ProviderCategory.AI, "GOOGLE_APPLICATION_CREDENTIALS"),
    "brave-search": ("Brave Search", ProviderCategory.SEARCH, "BRAVE_SEARCH_API_KEY"),
}


def placeholder(provider_id: str, settings: Optional[Settings] = None) -> PlaceholderAdapter:
    """Build the placeholder adapter for ``provider_id``."""
    name, category, env_key = PLACEHOLDER_PROVIDERS[provider_id]
    return PlaceholderAdapter(
        provider_id=provider_id,
        name=name,
        category=category,
        env_key=env_key,
        settings=settings,
    )
