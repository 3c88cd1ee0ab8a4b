from pathlib import Path

import pytest

from reqflow.infrastructure.config import settings
from reqflow.infrastructure.config.orchestrator_config import OrchestratorConfig


@pytest.fixture
def yaml_config(tmp_path: Path) -> Path:
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "api:\n"
        "  base_url: http://school.test\n"
        "cache:\n"
        "  max_entries: 10\n"
        "  ttl:\n"
        "    /api/teachers: 30\n"
        "throttle:\n"
        "  intervals:\n"
        "    - [/api/auth/, 5]\n"
        "orchestrator.max_concurrent: 4\n"
    )
    return config_file


def test_env_var_name():
    assert settings.env_var_name("cache.max_entries") == "REQFLOW_CACHE_MAX_ENTRIES"


def test_nested_and_flat_yaml_keys(yaml_config: Path):
    settings.load_configuration(config_file=yaml_config)

    assert settings.get_base_url() == "http://school.test"
    assert settings.get_config("cache.max_entries") == 10
    assert settings.get_config("orchestrator.max_concurrent") == 4
    assert settings.get_config("cache.missing", "fallback") == "fallback"


def test_priority_test_over_env_over_yaml(yaml_config: Path, monkeypatch):
    settings.load_configuration(config_file=yaml_config)
    monkeypatch.setenv("REQFLOW_CACHE_MAX_ENTRIES", "25")
    assert settings.get_config("cache.max_entries") == 25

    settings.set_config_for_testing({"cache.max_entries": 3})
    assert settings.get_config("cache.max_entries") == 3


def test_env_values_are_coerced(monkeypatch):
    monkeypatch.setenv("REQFLOW_RETRY_BASE_DELAY", "0.5")
    monkeypatch.setenv("REQFLOW_FEATURE_ON", "TRUE")
    monkeypatch.setenv("REQFLOW_API_BASE_URL", "http://x.test")

    assert settings.get_config("retry.base_delay") == 0.5
    assert settings.get_config("feature.on") is True
    assert settings.get_base_url() == "http://x.test"


def test_dotenv_does_not_override_environment(tmp_path: Path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("REQFLOW_API_TIMEOUT=3\nREQFLOW_LOGGING_LEVEL=debug\n")
    monkeypatch.setenv("REQFLOW_API_TIMEOUT", "7")
    monkeypatch.setenv("REQFLOW_LOGGING_LEVEL", "unset")
    monkeypatch.delenv("REQFLOW_LOGGING_LEVEL")

    settings.load_configuration(env_file=env_file)

    assert settings.get_timeout() == 7.0
    assert settings.get_config("logging.level") == "debug"


def test_malformed_yaml_is_logged_not_raised(tmp_path: Path, caplog):
    broken = tmp_path / "config.yaml"
    broken.write_text("cache: [unclosed\n")

    settings.load_configuration(config_file=broken)

    assert "Failed to load or parse YAML config" in caplog.text
    assert settings.get_config("cache") is None


def test_orchestrator_config_from_settings(yaml_config: Path):
    settings.load_configuration(config_file=yaml_config)

    config = OrchestratorConfig.from_settings()

    assert config.max_concurrent == 4
    assert config.max_cache_entries == 10
    assert config.ttl_table == [("/api/teachers", 30.0)]
    assert config.interval_table == [("/api/auth/", 5.0)]
    assert config.default_interval == 0.3
    assert config.uncacheable_prefixes == ["/api/auth/"]


def test_orchestrator_config_defaults():
    config = OrchestratorConfig()

    assert config.max_concurrent == 8
    assert config.max_cache_entries == 50
    assert config.max_retry_attempts == 3
    assert ("/api/auth/", 2.0) in config.interval_table
    assert config.as_dict()["default_ttl"] == 60.0


@pytest.mark.parametrize("overrides", [
    {"max_concurrent": 0},
    {"max_cache_entries": 0},
    {"max_retry_attempts": -1},
    {"default_interval": -0.1},
    {"ttl_table": [("/api/x", -5)]},
])
def test_orchestrator_config_rejects_invalid_values(overrides):
    with pytest.raises(ValueError):
        OrchestratorConfig(**overrides)


def test_set_config_is_visible_until_reset():
    settings.set_config("api.base_url", "http://runtime.test")
    assert settings.get_base_url() == "http://runtime.test"

    settings.reset_configuration()
    assert settings.get_base_url() == "http://localhost:3000"


def test_list_settings_from_environment_are_comma_separated(monkeypatch):
    monkeypatch.setenv("REQFLOW_ORCHESTRATOR_CRITICAL_PREFIXES", "/api/auth/login")
    monkeypatch.setenv("REQFLOW_CACHE_UNCACHEABLE_PREFIXES", "/api/auth/, /api/reports ,")

    config = OrchestratorConfig.from_settings()

    assert config.critical_prefixes == ["/api/auth/login"]
    assert config.uncacheable_prefixes == ["/api/auth/", "/api/reports"]


def test_table_settings_from_environment_are_prefix_seconds_pairs(monkeypatch):
    monkeypatch.setenv("REQFLOW_THROTTLE_INTERVALS", "/api/auth/=2.5, /api/students=1")
    monkeypatch.setenv("REQFLOW_CACHE_TTL", "/api/teachers=30")

    config = OrchestratorConfig.from_settings()

    assert config.interval_table == [("/api/auth/", 2.5), ("/api/students", 1.0)]
    assert config.ttl_table == [("/api/teachers", 30.0)]


def test_malformed_table_setting_is_rejected(monkeypatch):
    monkeypatch.setenv("REQFLOW_THROTTLE_INTERVALS", "/api/auth/")

    with pytest.raises(ValueError, match="prefix=seconds"):
        OrchestratorConfig.from_settings()
