"""
Base classes for provider adapters.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

import httpx

from spendboard.config import Settings
from spendboard.connect.coerce import extract_amount, usage_percentage
from spendboard.connect.errors import (
    ErrorHint,
    UpstreamError,
    describe_http_error,
    describe_transport_error,
)
from spendboard.connect.health import Outcome, ProviderHealth, classify_health

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


class ProviderCategory(str, Enum):
    """Closed set of provider categories."""
    AI = "ai"
    INFRASTRUCTURE = "infrastructure"
    PAYMENTS = "payments"
    SEARCH = "search"
    PLATFORM = "platform"


def normalize_currency(code: Any) -> str:
    """Upper-case ISO-4217 code, defaulting to USD."""
    if isinstance(code, str) and code.strip():
        return code.strip().upper()
    return DEFAULT_CURRENCY


def start_of_month(now: datetime) -> datetime:
    """First instant of ``now``'s calendar month in UTC."""
    now = now.astimezone(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


@dataclass
class ProviderCosts:
    """Money figures in major currency units."""
    current_month: float
    projected: float
    last_month: Optional[float] = None
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        self.current_month = extract_amount(self.current_month)
        self.projected = extract_amount(self.projected)
        if self.last_month is not None:
            self.last_month = extract_amount(self.last_month)
        self.currency = normalize_currency(self.currency)

    def to_dict(self) -> dict:
        return {
            "currentMonth": self.current_month,
            "lastMonth": self.last_month,
            "projected": self.projected,
            "currency": self.currency,
        }


@dataclass
class ProviderUsage:
    """Consumption against an optional limit."""
    unit: str
    current: float
    limit: Optional[float] = None
    percentage: Optional[float] = None

    def __post_init__(self):
        self.current = extract_amount(self.current)
        if self.limit is not None:
            self.limit = extract_amount(self.limit)
        if self.percentage is None:
            self.percentage = usage_percentage(self.current, self.limit)
        else:
            self.percentage = min(max(extract_amount(self.percentage), 0.0), 100.0)

    def to_dict(self) -> dict:
        return {
            "unit": self.unit,
            "current": self.current,
            "limit": self.limit,
            "percentage": self.percentage,
        }


@dataclass
class ProviderRecord:
    """Normalized snapshot of one provider for one aggregation cycle."""
    id: str
    name: str
    category: ProviderCategory
    health: ProviderHealth
    last_updated: datetime
    has_billing_api: bool
    costs: Optional[ProviderCosts] = None
    usage: Optional[ProviderUsage] = None

    @property
    def status(self) -> str:
        return self.health.status.value

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "costs": self.costs.to_dict() if self.costs else None,
            "usage": self.usage.to_dict() if self.usage else None,
            "health": self.health.to_dict(),
            "lastUpdated": self.last_updated.isoformat(),
            "hasBillingApi": self.has_billing_api,
        }


@dataclass
class Collected:
    """What an adapter extracted from its provider."""
    costs: Optional[ProviderCosts] = None
    usage: Optional[ProviderUsage] = None
    extras: dict = field(default_factory=dict)


class BaseAdapter(ABC):
    """Base class for all provider adapters.

    Subclasses declare their identity as class attributes and implement
    ``collect``. ``fetch`` wraps it with the configuration check, the
    HTTP client lifecycle and error conversion, so it never raises.
    """

    provider_id: str = "base"
    name: str = "Base"
    category: ProviderCategory = ProviderCategory.PLATFORM
    has_billing_api: bool = True
    env_key: str = ""
    # Extra configuration the adapter cannot run without
    extra_keys: tuple[str, ...] = ()
    error_hints: tuple[ErrorHint, ...] = ()

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or Settings()
        self.transport = transport

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.credential(self.env_key)

    @property
    def is_configured(self) -> bool:
        return self.settings.has_credentials(self.env_key, *self.extra_keys)

    def record(
        self,
        health: ProviderHealth,
        now: datetime,
        costs: Optional[ProviderCosts] = None,
        usage: Optional[ProviderUsage] = None,
    ) -> ProviderRecord:
        return ProviderRecord(
            id=self.provider_id,
            name=self.name,
            category=self.category,
            health=health,
            last_updated=now,
            has_billing_api=self.has_billing_api,
            costs=costs,
            usage=usage,
        )

    def headers(self) -> dict[str, str]:
        """Authentication headers; bearer token by default."""
        return {"Authorization": f"Bearer {self.api_key}"}

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.http_timeout,
            headers=self.headers(),
            transport=self.transport,
        )

    async def request_json(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        **kwargs,
    ) -> Any:
        """Send a request and return its decoded JSON body.

        Raises ``UpstreamError`` for non-2xx responses and bodies that
        are not valid JSON.
        """
        response = await client.request(method, url, **kwargs)

        if not response.is_success:
            raise UpstreamError(
                describe_http_error(self.name, response, self.error_hints),
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            raise UpstreamError(
                f"{self.name} API error: malformed response body (expected JSON)",
                status_code=response.status_code,
            )

    async def fetch(self) -> ProviderRecord:
        """Fetch this provider's record for the current cycle."""
        now = datetime.now(timezone.utc)

        if not self.has_billing_api:
            return self.record(classify_health(Outcome.UNSUPPORTED), now)

        if not self.is_configured:
            logger.debug("%s not configured; skipping", self.provider_id)
            return self.record(classify_health(Outcome.UNCONFIGURED), now)

        try:
            async with self.client() as client:
                collected = await self.collect(client, now)
        except UpstreamError as e:
            logger.warning("%s: %s", self.provider_id, e)
            return self.record(classify_health(Outcome.FAILED, message=str(e), at=now), now)
        except httpx.HTTPError as e:
            message = describe_transport_error(self.name, e)
            logger.warning("%s: %s", self.provider_id, message)
            return self.record(classify_health(Outcome.FAILED, message=message, at=now), now)
        except Exception as e:
            logger.exception("%s: unexpected failure while collecting", self.provider_id)
            message = f"{self.name} adapter failed: {str(e) or e.__class__.__name__}"
            return self.record(classify_health(Outcome.FAILED, message=message, at=now), now)

        return self.record(
            classify_health(Outcome.SUCCEEDED, at=now),
            now,
            costs=collected.costs,
            usage=collected.usage,
        )

    @abstractmethod
    async def collect(self, client: httpx.AsyncClient, now: datetime) -> Collected:
        """Call the provider and map its billing data."""
        pass


class PlaceholderAdapter(BaseAdapter):
    """Provider known to have no billing API; always a static record."""

    has_billing_api = False

    def __init__(
        self,
        provider_id: str,
        name: str,
        category: ProviderCategory,
        env_key: str,
        settings: Optional[Settings] = None,
    ):
        super().__init__(settings)
        self.provider_id = provider_id
        self.name = name
        self.category = category
        self.env_key = env_key

    async def collect(self, client: httpx.AsyncClient, now: datetime) -> Collected:
        return Collected()
