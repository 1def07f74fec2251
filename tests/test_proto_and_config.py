"""
Unit tests for the data model and configuration.

Tests cover:
- LocationSample validation, age and serialization
- ValidationOutcome reason requirement
- AcquisitionResult variants
- AcquisitionConfig defaults and from_dict
"""

import logging

import pytest

from locfix_core.config import AcquisitionConfig, StaleReferencePolicy
from locfix_core.proto import (
    AcquisitionFailure,
    AcquisitionSuccess,
    CircleVerificationResult,
    ErrorKind,
    LocationSample,
    LocationSource,
    RecommendedAction,
    ValidationOutcome,
)
from tests.conftest import NOW_MS


class TestLocationSample:
    """Tests for LocationSample."""

    def test_valid_sample(self, make_sample):
        """Test that a normal fix is accepted and immutable."""
        sample = make_sample()

        assert sample.source is LocationSource.GPS
        with pytest.raises(AttributeError):
            sample.latitude = 0.0

    @pytest.mark.parametrize("lat,lon,acc", [
        (91.0, 0.0, 5.0),
        (0.0, -181.0, 5.0),
        (0.0, 0.0, -1.0),
        (0.0, 0.0, float("nan")),
    ])
    def test_rejects_invalid_values(self, lat, lon, acc):
        """Test that out-of-range coordinates and negative or NaN accuracy raise."""
        with pytest.raises(ValueError):
            LocationSample(lat, lon, acc, NOW_MS, LocationSource.GPS)

    def test_age(self, make_sample):
        """Test age calculation against a given now."""
        sample = make_sample(age_ms=1500)
        assert sample.age_ms(NOW_MS) == 1500

    def test_with_source(self, make_sample):
        """Test re-attribution keeps everything but the source."""
        sample = make_sample()
        network = sample.with_source(LocationSource.NETWORK)

        assert network.source is LocationSource.NETWORK
        assert network.latitude == sample.latitude
        assert network.captured_at_ms == sample.captured_at_ms

    def test_to_dict(self, make_sample):
        """Test serialization uses the source name."""
        data = make_sample(source=LocationSource.FUSED).to_dict()
        assert data['source'] == 'FUSED'
        assert data['captured_at_ms'] == NOW_MS

    def test_priority_order(self):
        """Test GPS outranks Network, which outranks Fused."""
        ranks = [s.priority for s in (LocationSource.GPS, LocationSource.NETWORK, LocationSource.FUSED)]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 3


class TestResults:
    """Tests for ValidationOutcome and AcquisitionResult."""

    def test_outcome_requires_reason(self):
        """Test that an empty reason is rejected, even on success."""
        with pytest.raises(ValueError):
            ValidationOutcome(is_valid=True, reason="")

    def test_success_and_failure_flags(self, make_sample):
        """Test the success discriminator on both variants."""
        ok = ValidationOutcome.passed("fine")
        success = AcquisitionSuccess(make_sample(), ok, ok)
        failure = AcquisitionFailure(ErrorKind.NO_VALID_LOCATION, "nothing",
                                     RecommendedAction.CALIBRATE_DEVICE)

        assert success.success is True
        assert failure.success is False
        assert failure.to_dict()['recommended_action'] == 'CALIBRATE_DEVICE'
        assert success.to_dict()['location']['source'] == 'GPS'

    def test_failure_without_action(self):
        """Test that a failure may carry no recommended action."""
        failure = AcquisitionFailure(ErrorKind.VALIDATION_FAILED, "too old")
        assert failure.to_dict()['recommended_action'] is None

    def test_circle_verification_result(self):
        """Test circle verification data round-trips to a dict."""
        result = CircleVerificationResult(success=True, api_response='{"ok":true}',
                                          timestamp_ms=NOW_MS)
        assert result.to_dict() == {
            'success': True,
            'api_response': '{"ok":true}',
            'timestamp_ms': NOW_MS,
        }


class TestAcquisitionConfig:
    """Tests for AcquisitionConfig."""

    def test_defaults(self, default_config):
        """Test documented defaults."""
        assert default_config.max_distance_km == 10.0
        assert default_config.accuracy_threshold_m == 100.0
        assert default_config.gps_timeout_ms == 30000
        assert default_config.network_timeout_ms == 15000
        assert default_config.recency_threshold_ms == 30000
        assert default_config.last_known_location_age_ms == 600000
        assert default_config.proximity_threshold_m == 1000.0
        assert default_config.stale_reference_policy is StaleReferencePolicy.FAIL

    def test_from_dict(self):
        """Test building from a plain mapping with a string policy."""
        config = AcquisitionConfig.from_dict({
            'gps_timeout_ms': 2000,
            'stale_reference_policy': 'SKIP',
        })

        assert config.gps_timeout_ms == 2000
        assert config.gps_timeout_s == pytest.approx(2.0)
        assert config.network_timeout_ms == 15000
        assert config.stale_reference_policy is StaleReferencePolicy.SKIP

    def test_from_dict_rejects_unknown_keys(self):
        """Test that typos in config keys are not silently ignored."""
        with pytest.raises(ValueError):
            AcquisitionConfig.from_dict({'gps_timeout': 10})

    def test_repo_config_module_loads(self):
        """Test the demo config dict is a valid AcquisitionConfig."""
        import config

        loaded = AcquisitionConfig.from_dict(config.ACQUISITION_CONFIG)
        assert loaded.to_dict()['stale_reference_policy'] == 'fail'

    def test_inverted_timeouts_warn(self, caplog):
        """Test that network budget above GPS budget logs a warning but is allowed."""
        with caplog.at_level(logging.WARNING, logger='locfix_core.config'):
            config = AcquisitionConfig(gps_timeout_ms=1000, network_timeout_ms=2000)

        assert config.network_timeout_ms == 2000
        assert 'network_timeout_ms' in caplog.text
