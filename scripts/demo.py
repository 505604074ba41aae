#!/usr/bin/env python3
"""
Demo script for Spendboard - SaaS Cost Console.

Runs a full aggregation cycle against canned provider responses, so no
credentials or network access are needed.
"""

import asyncio
from datetime import datetime, timezone

import httpx
from rich.console import Console
from rich.panel import Panel

from spendboard.cli import render_records, render_summary
from spendboard.config import Settings
from spendboard.connect.registry import build_registry
from spendboard.see import FleetSummary, ProviderAggregator


console = Console()

DEMO_CREDENTIALS = {
    "RAILWAY_API_TOKEN": "demo",
    "OPENAI_API_KEY": "demo",
    "ANTHROPIC_API_KEY": "demo",
    "STRIPE_SECRET_KEY": "demo",
    "LEMONSQUEEZY_API_KEY": "demo",
    "ELEVENLABS_API_KEY": "demo",
    "GITHUB_TOKEN": "demo",
    "GITHUB_ORG": "demo-org",
    "DEEPSEEK_API_KEY": "demo",
    "SUPABASE_ACCESS_TOKEN": "demo",
    "SUPABASE_PROJECT_REF": "demo-ref",
}


def demo_response(request: httpx.Request) -> httpx.Response:
    """Canned upstream answers, keyed by host."""
    host = request.url.host
    today = datetime.now(timezone.utc).isoformat()

    if host == "backboard.railway.app":
        return httpx.Response(200, json={"data": {"projects": {"edges": [
            {"node": {"id": "p1", "name": "api"}},
            {"node": {"id": "p2", "name": "worker"}},
            {"node": {"id": "p3", "name": "site"}},
        ]}}})
    if host == "api.openai.com":
        return httpx.Response(200, json={"data": [
            {"results": [{"amount": {"value": 41.37, "currency": "usd"}}]},
            {"results": [{"amount": {"value": 12.08, "currency": "usd"}}]},
        ]})
    if host == "api.anthropic.com":
        return httpx.Response(200, json={"data": [
            {"results": [{"amount": "63.40", "currency": "USD"}]},
        ], "has_more": False})
    if host == "api.stripe.com":
        return httpx.Response(200, json={"data": [
            {"amount_paid": 4900, "currency": "usd"},
            {"amount_paid": 4900, "currency": "usd"},
        ]})
    if host == "api.lemonsqueezy.com":
        return httpx.Response(200, json={"data": [
            {"attributes": {"total": 2900, "currency": "USD", "created_at": today}},
        ]})
    if host == "api.elevenlabs.io":
        return httpx.Response(200, json={
            "character_count": 61200,
            "character_limit": 100000,
            "currency": "usd",
            "open_invoices": [{"amount_due_cents": 2200}],
        })
    if host == "api.github.com":
        # Simulate a token without billing access
        return httpx.Response(404, json={"message": "Not Found"})
    if host == "api.deepseek.com":
        return httpx.Response(200, json={"balance_infos": [
            {"currency": "USD", "total_balance": "18.75"},
        ]})
    if host == "api.supabase.com":
        return httpx.Response(200, json={"selected_addons": [
            {"variant": {"price": {"amount": 10}}},
        ]})

    return httpx.Response(404, text="unknown demo host")


def main():
    console.print(Panel.fit(
        "[bold blue]Spendboard[/bold blue]\n"
        "SaaS Cost Console\n"
        "[dim]Demo Mode - Using simulated provider responses[/dim]",
        border_style="blue",
    ))
    console.print()

    settings = Settings(credentials=DEMO_CREDENTIALS)
    registry = build_registry(settings, httpx.MockTransport(demo_response))
    aggregator = ProviderAggregator(registry, settings.adapter_timeout)

    console.print(f"[bold]Fetching {len(registry)} providers...[/bold]\n")
    records = asyncio.run(aggregator.fetch_all())

    render_records(records)
    console.print()
    render_summary(FleetSummary.from_records(records))


if __name__ == "__main__":
    main()
