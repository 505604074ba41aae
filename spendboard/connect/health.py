"""
Health classification for provider outcomes.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

UNKNOWN_ERROR = "Unknown error"


class HealthStatus(str, Enum):
    """Coarse serviceability of a provider for one aggregation cycle."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    ERROR = "error"
    UNKNOWN = "unknown"


class Outcome(str, Enum):
    """What happened when an adapter ran."""
    UNCONFIGURED = "unconfigured"  # no credential
    UNSUPPORTED = "unsupported"  # provider has no billing API
    SUCCEEDED = "succeeded"
    PARTIAL = "partial"  # succeeded with partial or stale data
    FAILED = "failed"


@dataclass(frozen=True)
class ProviderHealth:
    """Health block of a provider record."""
    status: HealthStatus
    last_sync: Optional[datetime] = None
    error_message: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.status in (HealthStatus.HEALTHY, HealthStatus.DEGRADED)

    def to_dict(self) -> dict:
        data = {
            "status": self.status.value,
            "lastSync": self.last_sync.isoformat() if self.last_sync else None,
        }
        if self.error_message is not None:
            data["errorMessage"] = self.error_message
        return data


def _now() -> datetime:
    return datetime.now(timezone.utc)


def unknown_health() -> ProviderHealth:
    return ProviderHealth(status=HealthStatus.UNKNOWN)


def healthy_health(at: Optional[datetime] = None) -> ProviderHealth:
    return ProviderHealth(status=HealthStatus.HEALTHY, last_sync=at or _now())


def degraded_health(
    at: Optional[datetime] = None,
    message: Optional[str] = None,
) -> ProviderHealth:
    return ProviderHealth(
        status=HealthStatus.DEGRADED,
        last_sync=at or _now(),
        error_message=message,
    )


def error_health(
    message: Optional[str],
    at: Optional[datetime] = None,
) -> ProviderHealth:
    return ProviderHealth(
        status=HealthStatus.ERROR,
        last_sync=at or _now(),
        error_message=message or UNKNOWN_ERROR,
    )


def classify_health(
    outcome: Outcome,
    *,
    message: Optional[str] = None,
    at: Optional[datetime] = None,
) -> ProviderHealth:
    """Map an adapter outcome to exactly one health status."""
    if outcome in (Outcome.UNCONFIGURED, Outcome.UNSUPPORTED):
        return unknown_health()
    if outcome == Outcome.SUCCEEDED:
        return healthy_health(at)
    if outcome == Outcome.PARTIAL:
        return degraded_health(at, message)
    return error_health(message, at)
