"""
Estimation constants.

Several providers expose no forecast, so "projected" and "last month" costs
are rough multiples of the month-to-date figure. These are heuristics, not
billing semantics.
"""

# Projected month-end cost as a multiple of month-to-date cost
PROJECTION_FACTORS = {
    "railway": 1.15,
    "openai": 1.2,
    "anthropic": 1.15,
}

DEFAULT_PROJECTION_FACTOR = 1.0

# Railway usage estimate: credits grow with the number of projects
RAILWAY_BASE_CREDITS = 500
RAILWAY_CREDITS_PER_PROJECT = 500
RAILWAY_CREDIT_TO_USD = 0.01
RAILWAY_LAST_MONTH_FACTOR = 0.9


def get_projection_factor(provider_id: str, overrides=None) -> float:
    """Projection multiplier for a provider, honoring overrides."""
    if overrides and provider_id in overrides:
        return overrides[provider_id]
    return PROJECTION_FACTORS.get(provider_id, DEFAULT_PROJECTION_FACTOR)


def estimate_railway_credits(project_count: int) -> float:
    """Estimated monthly credits for a Railway account."""
    return float(max(project_count, 0) * RAILWAY_CREDITS_PER_PROJECT + RAILWAY_BASE_CREDITS)
