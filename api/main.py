"""
Spendboard REST API - FastAPI application consumed by the console UI.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from spendboard import __version__
from spendboard.config import Settings
from spendboard.connect.errors import UpstreamError
from spendboard.connect.railway import RailwayAdapter
from spendboard.connect.registry import build_registry
from spendboard.see import FleetSummary, ProviderAggregator

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the API around one registry for the process lifetime."""
    settings = settings or Settings.from_env()
    registry = build_registry(settings, transport)
    aggregator = ProviderAggregator(registry, settings.adapter_timeout)

    app = FastAPI(
        title="Spendboard API",
        description="SaaS Cost Console - cost and usage across all your providers",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        """API root - service info."""
        return {
            "name": "Spendboard API",
            "version": __version__,
            "description": "SaaS Cost Console",
            "pollIntervalSeconds": settings.poll_interval,
            "endpoints": {
                "providers": "/providers",
                "provider": "/providers/{id}",
                "summary": "/summary",
                "railway": "/railway",
            },
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/providers")
    async def list_providers():
        """Every provider's record for one aggregation cycle."""
        records = await aggregator.fetch_all()
        return {"providers": [r.to_dict() for r in records]}

    @app.get("/providers/{provider_id}")
    async def get_provider(
        provider_id: str,
        live: bool = Query(False, description="Also fetch the provider's current record"),
    ):
        """Static registry entry for one provider."""
        entry = registry.find_by_id(provider_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Unknown provider: {provider_id}")

        result = {
            **entry.to_dict(),
            "configured": settings.credential(entry.env_key) is not None,
        }
        if live:
            record = await aggregator.fetch_one(provider_id)
            result["record"] = record.to_dict()
        return result

    @app.get("/summary")
    async def get_summary():
        """Totals and health counts for one aggregation cycle."""
        records = await aggregator.fetch_all()
        return FleetSummary.from_records(records).to_dict()

    @app.get("/railway")
    async def get_railway():
        """Railway projects, per-service metrics and estimated usage."""
        adapter = RailwayAdapter(settings, transport)
        if not adapter.is_configured:
            raise HTTPException(status_code=503, detail="RAILWAY_API_TOKEN is not configured")

        try:
            data = await adapter.get_all_railway_data()
        except (UpstreamError, httpx.HTTPError) as e:
            logger.error("Failed to fetch Railway data: %s", e)
            raise HTTPException(status_code=502, detail=str(e) or "Railway request failed")

        return {"success": True, "data": data}

    return app


app = create_app()


# Run with: uvicorn api.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
