"""Tests for configuration management."""

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_environment,
    get_environment_info,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("FORMRENDER_RULE_ENGINE_DELAY_MS", raising=False)
        result = get_environment(EnvVar.FORMRENDER_RULE_ENGINE_DELAY_MS)
        assert result == 0

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("FORMRENDER_RULE_ENGINE_DELAY_MS", "9999")
        result = get_environment(EnvVar.FORMRENDER_RULE_ENGINE_DELAY_MS, override=5)
        assert result == 5

    @pytest.mark.unit
    def test_int_type_conversion(self, monkeypatch):
        """Integer type conversion from string."""
        monkeypatch.setenv("FORMRENDER_RULE_ENGINE_DELAY_MS", "120")
        result = get_environment(EnvVar.FORMRENDER_RULE_ENGINE_DELAY_MS)
        assert result == 120
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Invalid integer value returns default."""
        monkeypatch.setenv("FORMRENDER_RULE_ENGINE_DELAY_MS", "soon")
        assert get_environment(EnvVar.FORMRENDER_RULE_ENGINE_DELAY_MS) == 0

    @pytest.mark.unit
    def test_float_type_conversion(self, monkeypatch):
        """Float type conversion from string."""
        monkeypatch.setenv("FORMRENDER_FETCH_TIMEOUT", "2.5")
        assert get_environment(EnvVar.FORMRENDER_FETCH_TIMEOUT) == 2.5

    @pytest.mark.unit
    def test_bool_type_conversion(self, monkeypatch):
        """Boolean type conversion for true and false values."""
        for value in ("true", "1", "yes", "TRUE"):
            monkeypatch.setenv("FORMRENDER_AUTHORING_MODE", value)
            assert get_environment(EnvVar.FORMRENDER_AUTHORING_MODE) is True
        for value in ("false", "0", "No"):
            monkeypatch.setenv("FORMRENDER_AUTHORING_MODE", value)
            assert get_environment(EnvVar.FORMRENDER_AUTHORING_MODE) is False

    @pytest.mark.unit
    def test_unrecognized_bool_returns_default(self, monkeypatch):
        """Unrecognized boolean strings fall back to the default."""
        monkeypatch.setenv("FORMRENDER_AUTHORING_MODE", "maybe")
        assert get_environment(EnvVar.FORMRENDER_AUTHORING_MODE) is False

    @pytest.mark.unit
    def test_none_default_for_rule_engine_module(self, monkeypatch):
        """Rule engine module defaults to None when not set."""
        monkeypatch.delenv("FORMRENDER_RULE_ENGINE_MODULE", raising=False)
        assert get_environment(EnvVar.FORMRENDER_RULE_ENGINE_MODULE) is None


class TestGetEnvironmentInfo:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Returns EnvConfig dataclass."""
        info = get_environment_info(EnvVar.FORMRENDER_FETCH_TIMEOUT)
        assert isinstance(info, EnvConfig)
        assert info.name == "FORMRENDER_FETCH_TIMEOUT"
        assert info.var_type is float
        assert info.category == "source"


class TestListEnvironmentVariables:
    """Tests for listing environment variables."""

    @pytest.mark.unit
    def test_returns_all_variables(self):
        """Returns all EnvVar members when no category."""
        result = list_environment_variables()
        assert len(result) == len(EnvVar)

    @pytest.mark.unit
    def test_filter_by_category(self):
        """Filters by category correctly."""
        render_vars = list_environment_variables("render")
        assert EnvVar.FORMRENDER_RULE_ENGINE_DELAY_MS in render_vars
        assert EnvVar.FORMRENDER_AUTHORING_MODE in render_vars
        assert EnvVar.FORMRENDER_FETCH_TIMEOUT not in render_vars
