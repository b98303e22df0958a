"""Tests for configuration management."""

import logging

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    _convert_value,
    get_default_adapter_name,
    get_environment,
    get_environment_info,
    get_fluentlm_base_url,
    get_log_level,
    get_product_name,
    get_strict_validation,
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
        monkeypatch.delenv("PAGECORE_ADAPTER", raising=False)
        assert get_environment(EnvVar.PAGECORE_ADAPTER) == "fluentlm"

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("PAGECORE_ADAPTER", "fluentlm")
        assert get_environment(EnvVar.PAGECORE_ADAPTER, override="none") == "none"

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("PAGECORE_PRODUCT_NAME", "Acme")
        assert get_environment(EnvVar.PAGECORE_PRODUCT_NAME) == "Acme"

    @pytest.mark.unit
    def test_bool_type_conversion_true(self, monkeypatch):
        """Boolean type conversion for true values."""
        for value in ("true", "1", "yes", "TRUE", "Yes"):
            monkeypatch.setenv("PAGECORE_STRICT_VALIDATION", value)
            assert get_environment(EnvVar.PAGECORE_STRICT_VALIDATION) is True

    @pytest.mark.unit
    def test_bool_type_conversion_false(self, monkeypatch):
        """Boolean type conversion for false values."""
        for value in ("false", "0", "no", "FALSE", "No"):
            monkeypatch.setenv("PAGECORE_STRICT_VALIDATION", value)
            assert get_environment(EnvVar.PAGECORE_STRICT_VALIDATION) is False

    @pytest.mark.unit
    def test_unparseable_bool_uses_default(self, monkeypatch):
        """Unrecognized boolean text falls back to the default."""
        monkeypatch.setenv("PAGECORE_STRICT_VALIDATION", "maybe")
        assert get_environment(EnvVar.PAGECORE_STRICT_VALIDATION) is False

    @pytest.mark.unit
    def test_false_override_is_respected(self, monkeypatch):
        """A False override is not mistaken for a missing one."""
        monkeypatch.setenv("PAGECORE_STRICT_VALIDATION", "true")
        assert get_environment(EnvVar.PAGECORE_STRICT_VALIDATION, override=False) is False


class TestConvertValue:
    """Tests for raw value conversion."""

    @pytest.mark.unit
    def test_int_conversion(self):
        """Integers parse, garbage falls back."""
        assert _convert_value("42", int, 0) == 42
        assert _convert_value("forty", int, 7) == 7

    @pytest.mark.unit
    def test_none_uses_default(self):
        """Missing values use the default."""
        assert _convert_value(None, str, "x") == "x"


# =============================================================================
# Tests for convenience functions
# =============================================================================


class TestConvenience:
    """Tests for convenience accessors."""

    @pytest.mark.unit
    def test_default_adapter_name(self, monkeypatch):
        """Adapter name comes from PAGECORE_ADAPTER."""
        monkeypatch.setenv("PAGECORE_ADAPTER", "none")
        assert get_default_adapter_name() == "none"
        assert get_default_adapter_name("fluentlm") == "fluentlm"

    @pytest.mark.unit
    def test_base_url_strips_trailing_slash(self, monkeypatch):
        """Trailing slashes are dropped from the asset base URL."""
        monkeypatch.setenv("PAGECORE_FLUENTLM_BASE_URL", "https://cdn.example.com/flm/")
        assert get_fluentlm_base_url() == "https://cdn.example.com/flm"

    @pytest.mark.unit
    def test_strict_validation_default(self, monkeypatch):
        """Strict validation is off unless enabled."""
        monkeypatch.delenv("PAGECORE_STRICT_VALIDATION", raising=False)
        assert get_strict_validation() is False
        assert get_strict_validation(True) is True

    @pytest.mark.unit
    def test_log_level(self, monkeypatch):
        """Log level names resolve to numeric levels."""
        monkeypatch.setenv("PAGECORE_LOG_LEVEL", "debug")
        assert get_log_level() == logging.DEBUG
        assert get_log_level("nonsense") == logging.INFO

    @pytest.mark.unit
    def test_product_name(self, monkeypatch):
        """Product name defaults to PageCore."""
        monkeypatch.delenv("PAGECORE_PRODUCT_NAME", raising=False)
        assert get_product_name() == "PageCore"
        assert get_product_name("Acme") == "Acme"


# =============================================================================
# Tests for introspection
# =============================================================================


class TestIntrospection:
    """Tests for metadata access."""

    @pytest.mark.unit
    def test_info_is_env_config(self):
        """Every member carries an EnvConfig named after itself."""
        for var in EnvVar:
            info = get_environment_info(var)
            assert isinstance(info, EnvConfig)
            assert info.name == var.name
            assert info.description

    @pytest.mark.unit
    def test_list_by_category(self):
        """Filtering by category returns only that category."""
        compiler_vars = list_environment_variables("compiler")
        assert EnvVar.PAGECORE_ADAPTER in compiler_vars
        assert EnvVar.PAGECORE_STRICT_VALIDATION not in compiler_vars
        assert len(list_environment_variables()) == len(EnvVar)
