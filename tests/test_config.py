"""
Unit tests for configuration module.

Tests run WITHOUT .env file and WITHOUT an FCC app token.
"""
import pytest

from hotrod.core.config import Settings, get_settings, reset_settings


@pytest.mark.unit
def test_config_starts_without_token(clean_env):
    """No setting is required for app startup."""
    settings = Settings(_env_file=None)
    assert settings.fcc_app_token is None
    assert settings.get_fcc_app_token() is None


@pytest.mark.unit
def test_config_defaults(clean_env):
    """Test default values for optional settings."""
    settings = Settings(_env_file=None)

    assert settings.bdc_process_uuid == "ae8c39d5-170d-4178-8147-5ac7dcaca06a"
    assert settings.form477_dataset == "4kuc-phrr"
    assert settings.bdc_data_date == "June 2025"
    assert settings.form477_data_date == "June 2020"
    assert settings.probe_timeout == 6.0
    assert settings.bdc_timeout == 10.0
    assert settings.socrata_timeout == 12.0
    assert settings.tile_timeout == 15.0
    assert settings.provider_search_ttl == 3600.0
    assert settings.technology_ttl == 3600.0
    assert settings.coverage_ttl == 1800.0
    assert settings.hex_zoom == 6
    assert settings.dedupe_precision == 4
    assert settings.coverage_granularity == "state"
    assert settings.log_level == "INFO"
    assert settings.run_integration_tests is False


@pytest.mark.unit
def test_config_custom_values(clean_env, monkeypatch):
    """Test setting custom configuration values."""
    monkeypatch.setenv("FCC_APP_TOKEN", "token-123")
    monkeypatch.setenv("MAX_CONCURRENCY", "8")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("COVERAGE_GRANULARITY", "County")
    monkeypatch.setenv("RUN_INTEGRATION_TESTS", "true")

    settings = Settings(_env_file=None)

    assert settings.get_fcc_app_token() == "token-123"
    assert settings.max_concurrency == 8
    assert settings.log_level == "DEBUG"
    assert settings.coverage_granularity == "county"
    assert settings.run_integration_tests is True


@pytest.mark.unit
def test_config_log_level_validation(clean_env, monkeypatch):
    """Test log level validation."""
    monkeypatch.setenv("LOG_LEVEL", "INVALID")

    with pytest.raises(ValueError) as exc_info:
        Settings(_env_file=None)

    assert "log_level must be one of" in str(exc_info.value)


@pytest.mark.unit
def test_config_granularity_validation(clean_env, monkeypatch):
    monkeypatch.setenv("COVERAGE_GRANULARITY", "tract")

    with pytest.raises(ValueError) as exc_info:
        Settings(_env_file=None)

    assert "coverage_granularity" in str(exc_info.value)


@pytest.mark.unit
def test_config_concurrency_bounds(clean_env, monkeypatch):
    """Test concurrency value bounds."""
    monkeypatch.setenv("MAX_CONCURRENCY", "0")
    with pytest.raises(Exception):  # Pydantic validation error
        Settings(_env_file=None)

    monkeypatch.setenv("MAX_CONCURRENCY", "1000")
    with pytest.raises(Exception):
        Settings(_env_file=None)


@pytest.mark.unit
def test_settings_singleton(clean_env):
    """get_settings returns one instance until reset."""
    first = get_settings()
    assert get_settings() is first

    reset_settings()
    assert get_settings() is not first
