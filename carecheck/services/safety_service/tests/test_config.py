"""Tests for environment-driven configuration."""
import pytest
from unittest.mock import patch

from carecheck.services.safety_service.config import DetectorConfig, EmergencyConfig


class TestDetectorConfig:
    """Tests for DetectorConfig."""

    def test_defaults(self):
        config = DetectorConfig()

        assert config.crisis_threshold == 0.8
        assert config.pattern_threshold == 0.6
        assert config.degraded_threshold == 0.5
        assert config.max_text_length == 5000
        assert config.ml_service_url is None

    def test_threshold_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            DetectorConfig(crisis_threshold=1.2)

    def test_from_env(self):
        with patch.dict("os.environ", {
            "CRISIS_DETECTION_THRESHOLD": "0.7",
            "ML_SERVICE_URL": "http://ml.local:8001",
            "HUGGINGFACE_API_KEY": "hf_test",
            "ML_TIMEOUT_SECONDS": "2.5",
        }, clear=True):
            config = DetectorConfig.from_env()

        assert config.crisis_threshold == 0.7
        assert config.ml_service_url == "http://ml.local:8001"
        assert config.huggingface_api_key == "hf_test"
        assert config.ml_timeout_seconds == 2.5
        assert config.huggingface_timeout_seconds == 10.0

    def test_from_env_empty(self):
        with patch.dict("os.environ", {}, clear=True):
            config = DetectorConfig.from_env()

        assert config == DetectorConfig()

    @pytest.mark.parametrize("raw", ["abc", "1.5", "-0.2"])
    def test_invalid_threshold_falls_back(self, raw):
        with patch.dict("os.environ", {"CRISIS_DETECTION_THRESHOLD": raw}, clear=True):
            config = DetectorConfig.from_env()

        assert config.crisis_threshold == 0.8


class TestEmergencyConfig:
    """Tests for EmergencyConfig."""

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = EmergencyConfig.from_env()

        assert config.suicide_line == "988"
        assert config.crisis_text_line == "741741"

    def test_from_env(self):
        with patch.dict("os.environ", {
            "EMERGENCY_CONTACT_NUMBER": "112",
            "CRISIS_TEXT_LINE": "85258",
        }, clear=True):
            config = EmergencyConfig.from_env()

        assert config.suicide_line == "112"
        assert config.crisis_text_line == "85258"
