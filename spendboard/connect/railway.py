"""
Railway Adapter - Project-based usage estimate via the Railway GraphQL API.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from spendboard.config.estimates import (
    RAILWAY_CREDIT_TO_USD,
    RAILWAY_LAST_MONTH_FACTOR,
    estimate_railway_credits,
)
from spendboard.connect.base import (
    BaseAdapter,
    Collected,
    ProviderCategory,
    ProviderCosts,
    ProviderUsage,
)
from spendboard.connect.coerce import extract_amount
from spendboard.connect.errors import ErrorHint, UpstreamError

logger = logging.getLogger(__name__)

RAILWAY_API_URL = "https://backboard.railway.app/graphql/v2"

PROJECTS_QUERY = """
query {
    projects {
        edges {
            node {
                id
                name
                description
                createdAt
                updatedAt
                services {
                    edges {
                        node {
                            id
                            name
                        }
                    }
                }
            }
        }
    }
}
"""

ESTIMATED_USAGE_QUERY = """
query {
    estimatedUsage {
        estimatedUsage
        projectedCost
    }
}
"""

PROJECT_SERVICE_METRICS_QUERY = """
query($projectId: String!) {
    project(id: $projectId) {
        id
        name
        services {
            edges {
                node {
                    id
                    name
                    status
                    metrics {
                        cpu
                        memory
                        networkEgress
                    }
                }
            }
        }
    }
}
"""


def _edges(connection: Any) -> list[dict]:
    """Unwrap a GraphQL ``{edges: [{node}]}`` connection."""
    if not isinstance(connection, dict):
        return []
    edges = connection.get("edges")
    if not isinstance(edges, list):
        return []
    return [
        edge["node"]
        for edge in edges
        if isinstance(edge, dict) and isinstance(edge.get("node"), dict)
    ]


class RailwayAdapter(BaseAdapter):
    """Railway account usage, estimated from the project count."""

    provider_id = "railway"
    name = "Railway"
    category = ProviderCategory.INFRASTRUCTURE
    env_key = "RAILWAY_API_TOKEN"
    error_hints = (
        ErrorHint(401, None, "use an account or team token from railway.app/account/tokens"),
    )

    async def graphql(
        self,
        client: httpx.AsyncClient,
        query: str,
        variables: Optional[dict] = None,
    ) -> dict:
        """Run a GraphQL query and return its ``data`` block."""
        payload = await self.request_json(
            client,
            "POST",
            RAILWAY_API_URL,
            json={"query": query, "variables": variables or {}},
        )

        if not isinstance(payload, dict):
            raise UpstreamError("Railway API error: malformed response body")

        errors = payload.get("errors") or []
        if not isinstance(errors, list):
            errors = [errors]
        if errors:
            messages = ", ".join(
                str(e.get("message", e)) if isinstance(e, dict) else str(e)
                for e in errors
            )
            raise UpstreamError(f"GraphQL error: {messages}")

        data = payload.get("data")
        if not isinstance(data, dict):
            raise UpstreamError("No data returned from Railway API")

        return data

    async def get_projects(self, client: httpx.AsyncClient) -> list[dict]:
        data = await self.graphql(client, PROJECTS_QUERY)
        return _edges(data.get("projects"))

    async def get_estimated_usage(self, client: httpx.AsyncClient) -> dict:
        """Estimated usage and projected cost; zeros when unavailable."""
        try:
            data = await self.graphql(client, ESTIMATED_USAGE_QUERY)
        except (UpstreamError, httpx.HTTPError) as e:
            logger.debug("Railway estimated usage unavailable: %s", e)
            return {"estimatedUsage": 0.0, "projectedCost": 0.0}

        usage = data.get("estimatedUsage")
        if not isinstance(usage, dict):
            usage = {}
        return {
            "estimatedUsage": extract_amount(usage.get("estimatedUsage")),
            "projectedCost": extract_amount(usage.get("projectedCost")),
        }

    async def get_project_service_metrics(
        self,
        client: httpx.AsyncClient,
        project_id: str,
    ) -> Optional[dict]:
        """Per-service metrics for one project; None when unavailable."""
        try:
            data = await self.graphql(
                client,
                PROJECT_SERVICE_METRICS_QUERY,
                {"projectId": project_id},
            )
        except (UpstreamError, httpx.HTTPError) as e:
            logger.debug("Railway metrics unavailable for %s: %s", project_id, e)
            return None

        project = data.get("project")
        if not isinstance(project, dict):
            return None

        return {
            "id": project.get("id"),
            "name": project.get("name"),
            "services": [
                {
                    "id": node.get("id"),
                    "name": node.get("name"),
                    "status": node.get("status"),
                    "metrics": node.get("metrics"),
                }
                for node in _edges(project.get("services"))
            ],
        }

    async def get_all_railway_data(self) -> dict:
        """Projects, estimated usage and per-project metrics.

        Unlike ``fetch`` this raises ``UpstreamError`` or ``httpx.HTTPError``
        so the caller can surface the failure.
        """
        if not self.is_configured:
            raise UpstreamError("Missing RAILWAY_API_TOKEN configuration")

        async with self.client() as client:
            projects = await self.get_projects(client)
            estimated_usage = await self.get_estimated_usage(client)
            project_metrics = await asyncio.gather(
                *(self.get_project_service_metrics(client, p.get("id", "")) for p in projects)
            )

        return {
            "projects": projects,
            "projectMetrics": [m for m in project_metrics if m],
            "estimatedUsage": estimated_usage,
            "projectCount": len(projects),
            "fetchedAt": datetime.now(timezone.utc).isoformat(),
        }

    async def collect(self, client: httpx.AsyncClient, now: datetime) -> Collected:
        projects = await self.get_projects(client)

        credits = estimate_railway_credits(len(projects))
        current = credits * RAILWAY_CREDIT_TO_USD

        return Collected(
            costs=ProviderCosts(
                current_month=current,
                last_month=current * RAILWAY_LAST_MONTH_FACTOR,
                projected=current * self.settings.projection_factor(self.provider_id),
                currency="USD",
            ),
            usage=ProviderUsage(unit="credits", current=credits, limit=None),
            extras={"project_count": len(projects)},
        )
