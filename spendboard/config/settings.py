"""
Runtime settings.

Adapters receive a ``Settings`` instance at construction instead of reading
the process environment, so tests can build one from a plain dict.
"""

import os
from collections.abc import Mapping
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from spendboard.config.estimates import PROJECTION_FACTORS, get_projection_factor

# Every environment variable an adapter may need
CREDENTIAL_KEYS = (
    "RAILWAY_API_TOKEN",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "STRIPE_SECRET_KEY",
    "LEMONSQUEEZY_API_KEY",
    "ELEVENLABS_API_KEY",
    "GITHUB_TOKEN",
    "GITHUB_ORG",
    "GROQ_API_KEY",
    "DEEPSEEK_API_KEY",
    "SUPABASE_ACCESS_TOKEN",
    "SUPABASE_PROJECT_REF",
    "HF_TOKEN",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "BRAVE_SEARCH_API_KEY",
)

# Settings field -> environment variable
TUNABLE_KEYS = {
    "http_timeout": "SPENDBOARD_HTTP_TIMEOUT",
    "adapter_timeout": "SPENDBOARD_ADAPTER_TIMEOUT",
    "poll_interval": "SPENDBOARD_POLL_INTERVAL",
    "log_level": "SPENDBOARD_LOG_LEVEL",
}


class Settings(BaseModel):
    """Credentials and tunables for one process."""

    model_config = ConfigDict(frozen=True)

    credentials: dict[str, str] = Field(default_factory=dict)
    http_timeout: float = Field(30.0, gt=0, description="Per-request HTTP timeout in seconds")
    adapter_timeout: Optional[float] = Field(
        45.0,
        description="Upper bound for one adapter call in seconds; None disables it",
    )
    poll_interval: float = Field(900.0, gt=0, description="Client refresh interval in seconds")
    projection_factors: dict[str, float] = Field(default_factory=lambda: dict(PROJECTION_FACTORS))
    log_level: str = "INFO"

    @field_validator("adapter_timeout")
    @classmethod
    def _non_positive_disables(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[str] = None,
    ) -> "Settings":
        """Build settings from an environment mapping.

        With no ``env``, a ``.env`` file is loaded first and the real
        process environment is used.
        """
        if env is None:
            load_dotenv(dotenv_path)
            env = os.environ

        credentials = {
            key: env[key].strip()
            for key in CREDENTIAL_KEYS
            if env.get(key, "").strip()
        }

        tunables = {
            field: env[key]
            for field, key in TUNABLE_KEYS.items()
            if env.get(key, "").strip()
        }

        return cls(credentials=credentials, **tunables)

    def credential(self, key: str) -> Optional[str]:
        """Configured value for an environment key, or None."""
        return self.credentials.get(key) or None

    def has_credentials(self, *keys: str) -> bool:
        return all(self.credential(key) for key in keys)

    def projection_factor(self, provider_id: str) -> float:
        return get_projection_factor(provider_id, self.projection_factors)
