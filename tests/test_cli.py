"""
Tests for the command line interface.
"""

import pytest
from rich.console import Console
from typer.testing import CliRunner

from spendboard import cli
from spendboard.config import CREDENTIAL_KEYS
from spendboard.connect.registry import build_registry
from spendboard.see import ProviderAggregator

from conftest import make_settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run every command without credentials or a .env file."""
    for key in CREDENTIAL_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    # Wide enough that table cells never wrap
    monkeypatch.setattr(cli, "console", Console(width=200))


class TestCli:
    """Tests for the spendboard commands."""

    def test_version(self):
        result = runner.invoke(cli.app, ["version"])
        assert result.exit_code == 0
        assert "Spendboard v" in result.output

    def test_providers(self):
        result = runner.invoke(cli.app, ["providers"])
        assert result.exit_code == 0
        assert "railway" in result.output
        assert "brave-search" in result.output

    def test_show_placeholder(self):
        result = runner.invoke(cli.app, ["show", "groq"])
        assert result.exit_code == 0
        assert "Groq" in result.output
        assert "unknown" in result.output

    def test_show_json(self):
        result = runner.invoke(cli.app, ["show", "groq", "--json"])
        assert result.exit_code == 0
        assert '"envKey": "GROQ_API_KEY"' in result.output

    def test_show_unknown_provider(self):
        result = runner.invoke(cli.app, ["show", "nope"])
        assert result.exit_code == 1
        assert "Unknown provider" in result.output

    def test_status(self, monkeypatch, failing_transport):
        def offline_aggregator(settings):
            return ProviderAggregator(build_registry(make_settings(), failing_transport))

        monkeypatch.setattr(cli, "create_aggregator", offline_aggregator)

        result = runner.invoke(cli.app, ["status", "--category", "payments"])

        assert result.exit_code == 0
        assert "Stripe" in result.output
        assert "LemonSqueezy" in result.output
        assert "OpenAI" not in result.output
        assert failing_transport.requests == []

    def test_railway_not_configured(self):
        result = runner.invoke(cli.app, ["railway"])
        assert result.exit_code == 1
        assert "RAILWAY_API_TOKEN" in result.output
