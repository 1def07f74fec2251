"""
Tests for the demo entry point's scenario scripting.
"""

import pytest

import main
from locfix_core.proto import LocationSource
from tests.conftest import PROJECT_ROOT


class TestScenarioScripting:
    """Tests for script_sources and the scaled config."""

    def test_scaled_config_shrinks_timeouts(self):
        """Test timeouts are scaled and stay ordered."""
        config = main._scaled_config()

        assert config.gps_timeout_ms == 300
        assert config.network_timeout_ms == 150

    def test_gps_scenario_answers_everywhere(self):
        """Test the default scenario scripts all three sources."""
        gps, network, fused = main.script_sources("gps")

        assert gps.sample.source is LocationSource.GPS
        assert network.sample.source is LocationSource.NETWORK
        assert fused.sample.source is LocationSource.FUSED

    @pytest.mark.parametrize("scenario", ["fused", "stale", "none"])
    def test_gps_and_network_silent(self, scenario):
        """Test fallback scenarios silence GPS and Network."""
        gps, network, _ = main.script_sources(scenario)

        assert not gps.respond
        assert not network.respond

    def test_gps_disabled_scenario(self):
        """Test the disable scenario switches GPS off mid-flight."""
        gps, _, _ = main.script_sources("gps-disabled")

        assert not gps.respond
        assert gps.disable_after_ms is not None

    @pytest.mark.asyncio
    async def test_run_scenario_network(self):
        """Test a short network-fallback run succeeds."""
        fixes = await main.run_scenario("network", runs=2)

        assert len(fixes) == 2
        assert all(f.source is LocationSource.NETWORK for f in fixes)


class TestPackaging:
    """Tests for project metadata."""

    def test_long_description_is_not_a_requirements_document(self):
        """Test pyproject does not publish SPEC_FULL.md as the package readme."""
        pyproject = (PROJECT_ROOT / "pyproject.toml").read_text()

        assert "SPEC_FULL.md" not in pyproject
