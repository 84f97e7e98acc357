"""Unit tests for configuration module.

Tests cover required values, defaults, range validation, environment
variable loading and the fail-fast wrapper.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from tsdb_loadgen.core.config import Scheme, Settings, get_settings, load_settings
from tsdb_loadgen.core.exceptions import ConfigurationError, ErrorKind

REQUIRED = {"write_hostname": "w.local", "read_hostname": "r.local"}


class TestSchemeEnum:
    """Tests for Scheme enumeration."""

    def test_scheme_values(self):
        """Scheme enum has http and https."""
        assert Scheme.HTTP.value == "http"
        assert Scheme.HTTPS.value == "https"

    def test_scheme_from_string(self):
        """Scheme can be constructed from string values."""
        assert Scheme("https") == Scheme.HTTPS


class TestSettings:
    """Tests for Settings configuration class."""

    def test_default_settings(self, settings):
        """Settings initializes with the documented defaults."""
        assert settings.scheme == Scheme.HTTP
        assert settings.username == ""
        assert settings.write_token == ""
        assert settings.read_token == ""
        assert settings.tenant_id == ""

        assert settings.write_request_rate == 1
        assert settings.write_series_per_request == 1000
        assert settings.read_series_per_request == 1000
        assert settings.read_request_rate == 1
        assert settings.ha_replicas == 1
        assert settings.scrape_interval_seconds == 15

        assert settings.duration_min == 720
        assert settings.ramp_up_min == 0
        assert settings.ramp_down_min == 0

        assert settings.metric_names == ["windows_system_system_up_time"]
        assert settings.remote_write_client is None
        assert settings.write_timeout_s == 32.0
        assert settings.read_timeout_s == 1200.0
        assert settings.query_lookback_s == 60

        assert settings.metrics_port is None
        assert settings.log_level == "INFO"
        assert settings.log_format == "json"

    def test_hostnames_are_required(self):
        """Settings without hostnames fails validation."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

        missing = {e["loc"] for e in exc_info.value.errors() if e["type"] == "missing"}
        assert ("write_hostname",) in missing
        assert ("read_hostname",) in missing

    def test_empty_hostname_rejected(self, make_settings):
        """An empty hostname is as bad as a missing one."""
        with pytest.raises(ValidationError):
            make_settings(write_hostname="")

    def test_total_series(self, make_settings):
        """total_series is write rate times series per request."""
        settings = make_settings(write_request_rate=4, write_series_per_request=250)
        assert settings.total_series == 1000

    def test_write_request_rate_must_be_positive(self, make_settings):
        """Write request rate rejects zero."""
        with pytest.raises(ValidationError):
            make_settings(write_request_rate=0)

    def test_ha_replicas_must_be_positive(self, make_settings):
        """HA replicas rejects zero."""
        with pytest.raises(ValidationError):
            make_settings(ha_replicas=0)

    def test_read_request_rate_may_be_zero(self, make_settings):
        """A zero read rate disables the read path."""
        settings = make_settings(read_request_rate=0)
        assert settings.read_request_rate == 0

    def test_ramps_must_fit_duration(self, make_settings):
        """Ramp up plus ramp down cannot exceed the duration."""
        with pytest.raises(ValidationError):
            make_settings(duration_min=10, ramp_up_min=6, ramp_down_min=5)

        settings = make_settings(duration_min=10, ramp_up_min=5, ramp_down_min=5)
        assert settings.ramp_up_min == 5

    def test_metrics_port_validation(self, make_settings):
        """Metrics port validates the TCP port range."""
        with pytest.raises(ValidationError):
            make_settings(metrics_port=0)
        with pytest.raises(ValidationError):
            make_settings(metrics_port=65536)

        assert make_settings(metrics_port=9100).metrics_port == 9100

    def test_log_level_uppercase_validation(self, make_settings):
        """Log level is converted to uppercase."""
        assert make_settings(log_level="debug").log_level == "DEBUG"
        assert make_settings(log_level="WaRnInG").log_level == "WARNING"

    def test_scheme_literal_validation(self, make_settings):
        """Scheme only accepts http or https."""
        assert make_settings(scheme="https").scheme == Scheme.HTTPS
        with pytest.raises(ValidationError):
            make_settings(scheme="ftp")

    def test_auth_properties(self, make_settings):
        """Basic auth is enabled by a username or a token."""
        anonymous = make_settings()
        assert anonymous.has_read_auth is False
        assert anonymous.has_write_auth is False

        read_only = make_settings(read_token="secret")
        assert read_only.has_read_auth is True
        assert read_only.has_write_auth is False

        user = make_settings(username="loadtest")
        assert user.has_read_auth is True
        assert user.has_write_auth is True

    def test_settings_from_environment_variables(self):
        """Settings loads LOADGEN_ prefixed environment variables."""
        env_vars = {
            "LOADGEN_WRITE_HOSTNAME": "distributor:8080",
            "LOADGEN_READ_HOSTNAME": "query-frontend:8080",
            "LOADGEN_SCHEME": "https",
            "LOADGEN_WRITE_REQUEST_RATE": "10",
            "LOADGEN_WRITE_SERIES_PER_REQUEST": "500",
            "LOADGEN_HA_REPLICAS": "2",
            "LOADGEN_TENANT_ID": "team-a",
            "LOADGEN_LOG_LEVEL": "debug",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.write_hostname == "distributor:8080"
        assert settings.read_hostname == "query-frontend:8080"
        assert settings.scheme == Scheme.HTTPS
        assert settings.write_request_rate == 10
        assert settings.write_series_per_request == 500
        assert settings.ha_replicas == 2
        assert settings.tenant_id == "team-a"
        assert settings.log_level == "DEBUG"

    def test_metric_names_from_comma_separated_env(self):
        """Metric names accept a comma separated list."""
        env_vars = {
            "LOADGEN_WRITE_HOSTNAME": "w",
            "LOADGEN_READ_HOSTNAME": "r",
            "LOADGEN_METRIC_NAMES": "node_load1, node_load5",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.metric_names == ["node_load1", "node_load5"]

    def test_metric_names_from_json_env(self):
        """Metric names accept a JSON list."""
        env_vars = {
            "LOADGEN_WRITE_HOSTNAME": "w",
            "LOADGEN_READ_HOSTNAME": "r",
            "LOADGEN_METRIC_NAMES": '["up", "node_load1"]',
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.metric_names == ["up", "node_load1"]

    def test_metric_names_cannot_be_empty(self, make_settings):
        """At least one metric name is required."""
        with pytest.raises(ValidationError):
            make_settings(metric_names=[])


class TestLoadSettings:
    """Tests for the fail-fast load_settings wrapper."""

    def test_load_settings_returns_settings(self):
        """load_settings returns validated settings."""
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings(_env_file=None, **REQUIRED)

        assert isinstance(settings, Settings)

    def test_missing_hostname_names_environment_variable(self):
        """Missing values are reported with their environment variable."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                load_settings(_env_file=None)

        message = exc_info.value.message
        assert "LOADGEN_WRITE_HOSTNAME environment variable missing" in message
        assert "distributor hostname" in message
        assert "LOADGEN_READ_HOSTNAME environment variable missing" in message
        assert exc_info.value.kind == ErrorKind.CONFIGURATION

    def test_invalid_value_is_reported(self):
        """Invalid values are reported with their environment variable."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                load_settings(_env_file=None, ha_replicas=0, **REQUIRED)

        assert "LOADGEN_HA_REPLICAS" in exc_info.value.message
        assert exc_info.value.details[0]["loc"] == ["ha_replicas"]

    def test_configuration_error_chains_validation_error(self):
        """The pydantic error is kept as the cause."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                load_settings(_env_file=None)

        assert isinstance(exc_info.value.__cause__, ValidationError)


class TestGetSettings:
    """Tests for get_settings cached factory function."""

    def test_get_settings_caches_result(self):
        """get_settings returns the same instance on multiple calls."""
        get_settings.cache_clear()
        with patch.dict(os.environ, {"LOADGEN_WRITE_HOSTNAME": "w", "LOADGEN_READ_HOSTNAME": "r"}):
            settings1 = get_settings()
            settings2 = get_settings()

        assert settings1 is settings2
        get_settings.cache_clear()

    def test_get_settings_fails_fast_without_hostnames(self):
        """get_settings raises ConfigurationError when hostnames are missing."""
        get_settings.cache_clear()
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError):
                get_settings()
        get_settings.cache_clear()
