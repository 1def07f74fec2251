"""
Unit tests for AcquisitionOrchestrator (cascading-timeout race).

Tests cover:
- GPS wins and cancels Network and Fused, even when they are faster
- Network fallback cancels Fused
- Fused fallback, and None when nothing answers
- GPS disabled mid-flight aborts the race despite an available fix
- Overall deadline cancels everything still pending
- No subscription left behind after any race
"""

import asyncio
import time

import pytest

from locfix_core.config import AcquisitionConfig
from locfix_core.domain import AcquisitionOrchestrator
from locfix_core.errors import ProviderDisabledError
from locfix_core.io import SimulatedSource
from locfix_core.metrics import get_metrics
from locfix_core.proto import LocationSource


async def settle(seconds: float = 0.02):
    """Give cancelled tasks a chance to run their cleanup."""
    await asyncio.sleep(seconds)


class TestPriorityOrder:
    """Tests for strict GPS > Network > Fused selection."""

    @pytest.mark.asyncio
    async def test_gps_fix_wins_and_cancels_others(self, fast_config, make_platform, make_sample):
        """Test a healthy GPS wins and the slower sources are cancelled."""
        platform = make_platform(
            gps=(20, make_sample()),
            network=(150, make_sample(source=LocationSource.NETWORK)),
            fused=(300, make_sample(source=LocationSource.FUSED)),
        )
        orchestrator = AcquisitionOrchestrator.from_platform(platform, fast_config)

        fix = await orchestrator.acquire()
        await settle()

        assert fix.source is LocationSource.GPS
        report = orchestrator.last_race
        assert report.winner is LocationSource.GPS
        assert set(report.cancelled) == {LocationSource.NETWORK, LocationSource.FUSED}
        assert not report.deadline_expired
        assert platform.active_registrations() == 0
        assert get_metrics().get_counter('winner_gps') == 1

    @pytest.mark.asyncio
    async def test_gps_preferred_over_faster_sources(self, fast_config, make_platform, make_sample):
        """Test earlier Network/Fused answers are held, not returned, while GPS is pending."""
        platform = make_platform(
            gps=(80, make_sample(accuracy_m=5.0)),
            network=(5, make_sample(accuracy_m=40.0)),
            fused=(0, make_sample(accuracy_m=60.0)),
        )
        orchestrator = AcquisitionOrchestrator.from_platform(platform, fast_config)

        fix = await orchestrator.acquire()

        assert fix.source is LocationSource.GPS
        assert fix.accuracy_m == 5.0
        assert get_metrics().get_counter('network_fixes_received') == 1

    @pytest.mark.asyncio
    async def test_network_fallback_cancels_fused(self, fast_config, make_platform, make_sample):
        """Test GPS timing out falls back to Network and cancels a pending Fused."""
        platform = make_platform(
            gps=None,
            network=(30, make_sample(accuracy_m=40.0)),
            fused=(5000, make_sample()),
        )
        orchestrator = AcquisitionOrchestrator.from_platform(platform, fast_config)

        fix = await orchestrator.acquire()
        await settle()

        assert fix.source is LocationSource.NETWORK
        assert orchestrator.last_race.cancelled == [LocationSource.FUSED]
        assert platform.active_registrations() == 0

    @pytest.mark.asyncio
    async def test_network_fallback_is_not_a_deadline_expiry(
        self, fast_config, make_platform, make_sample
    ):
        """Test a silent GPS is reported as timed out, not cancelled, when Network wins."""
        platform = make_platform(gps=None, network=(5, make_sample()))
        orchestrator = AcquisitionOrchestrator.from_platform(platform, fast_config)

        fix = await orchestrator.acquire()
        await settle()

        report = orchestrator.last_race
        assert fix.source is LocationSource.NETWORK
        assert not report.deadline_expired
        assert LocationSource.GPS not in report.cancelled
        assert get_metrics().get_counter('races_deadline_expired') == 0
        assert platform.active_registrations() == 0

    @pytest.mark.asyncio
    async def test_held_network_fix_used_when_gps_empty(self, fast_config, make_platform, make_sample):
        """Test an empty GPS answer falls through to a held Network fix without waiting."""
        platform = make_platform(
            gps=(20, make_sample()),
            network=(5, make_sample(source=LocationSource.NETWORK)),
            gps_enabled=False,
        )
        orchestrator = AcquisitionOrchestrator.from_platform(platform, fast_config)

        started = time.monotonic()
        fix = await orchestrator.acquire()

        assert fix.source is LocationSource.NETWORK
        assert time.monotonic() - started < fast_config.gps_timeout_s

    @pytest.mark.asyncio
    async def test_fused_fallback(self, fast_config, make_platform, make_sample):
        """Test Fused is used when GPS and Network both time out."""
        platform = make_platform(gps=None, network=None, fused=(10, make_sample()))
        orchestrator = AcquisitionOrchestrator.from_platform(platform, fast_config)

        fix = await orchestrator.acquire()

        assert fix.source is LocationSource.FUSED
        assert get_metrics().get_counter('winner_fused') == 1

    @pytest.mark.asyncio
    async def test_no_fix_anywhere(self, fast_config, make_platform):
        """Test None when every source comes back empty."""
        platform = make_platform(gps=None, network=None)
        orchestrator = AcquisitionOrchestrator.from_platform(platform, fast_config)

        assert await orchestrator.acquire() is None
        assert orchestrator.last_race.winner is None
        assert platform.active_registrations() == 0


class TestAbortAndDeadline:
    """Tests for terminal conditions."""

    @pytest.mark.asyncio
    async def test_gps_disabled_mid_flight_aborts(self, fast_config, make_platform, make_sample):
        """Test GPS disable propagates even though a Network fix is available."""
        platform = make_platform(
            gps=SimulatedSource(respond=False, disable_after_ms=40),
            network=(5, make_sample()),
            fused=(5000, make_sample()),
        )
        orchestrator = AcquisitionOrchestrator.from_platform(platform, fast_config)

        with pytest.raises(ProviderDisabledError):
            await orchestrator.acquire()
        await settle()

        assert orchestrator.last_race.winner is None
        assert orchestrator.last_race.error
        assert LocationSource.FUSED in orchestrator.last_race.cancelled
        assert platform.active_registrations() == 0

    @pytest.mark.asyncio
    async def test_deadline_cancels_everything(self, make_platform, make_sample):
        """Test the overall deadline returns None and cancels pending requests."""
        config = AcquisitionConfig(gps_timeout_ms=100, network_timeout_ms=100)
        platform = make_platform(
            gps=None,
            network=(1000, make_sample()),
            fused=(1000, make_sample()),
        )
        orchestrator = AcquisitionOrchestrator.from_platform(platform, config)

        started = time.monotonic()
        fix = await orchestrator.acquire()
        elapsed = time.monotonic() - started
        await settle()

        assert fix is None
        assert elapsed < 0.5
        report = orchestrator.last_race
        assert report.deadline_expired
        assert {LocationSource.NETWORK, LocationSource.FUSED} <= set(report.timed_out)
        assert report.cancelled == []
        assert platform.active_registrations() == 0
        assert get_metrics().get_counter('races_deadline_expired') == 1

    @pytest.mark.asyncio
    async def test_network_budget_longer_than_deadline(self, make_platform, make_sample):
        """Test a network answer after the overall deadline is never used."""
        config = AcquisitionConfig(gps_timeout_ms=100, network_timeout_ms=1000)
        platform = make_platform(gps=None, network=(300, make_sample()))
        orchestrator = AcquisitionOrchestrator.from_platform(platform, config)

        assert await orchestrator.acquire() is None
        await settle()
        assert LocationSource.NETWORK in orchestrator.last_race.timed_out
        assert orchestrator.last_race.deadline_expired

    @pytest.mark.asyncio
    async def test_outer_cancellation_cleans_up(self, fast_config, make_platform):
        """Test cancelling the race itself cancels all provider requests."""
        platform = make_platform(gps=None, network=None, fused=SimulatedSource(respond=False))
        orchestrator = AcquisitionOrchestrator.from_platform(platform, fast_config)

        task = asyncio.ensure_future(orchestrator.acquire())
        await settle()
        assert platform.active_registrations() == 3

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await settle()

        assert platform.active_registrations() == 0

    @pytest.mark.asyncio
    async def test_report_serializes(self, fast_config, make_platform, make_sample):
        """Test the race report converts to a plain dict."""
        platform = make_platform(gps=(5, make_sample()))
        orchestrator = AcquisitionOrchestrator.from_platform(platform, fast_config)
        await orchestrator.acquire()

        data = orchestrator.last_race.to_dict()
        assert data['winner'] == 'GPS'
        assert data['elapsed_ms'] >= 0
