"""Unit tests for settings loading and startup validation."""

import pytest
from pydantic import ValidationError

from kafkapub.common.config import load_settings
from kafkapub.common.startup import _safe_value, startup_config


def test_defaults():
    """Defaults point at a local broker and the test topic."""

    settings = load_settings()
    assert settings.bootstrap_servers == ["localhost:9092"]
    assert settings.kafka_topic == "test-topic"
    assert settings.kafka_auto_offset_reset == "earliest"
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    """KAFKA_* variables replace the defaults and address lists are split."""

    monkeypatch.setenv("KAFKA_BOOTSTRAP_SERVERS", "kafka-1:9092, kafka-2:9093")
    monkeypatch.setenv("KAFKA_AUTO_OFFSET_RESET", "latest")

    settings = load_settings()

    assert settings.bootstrap_servers == ["kafka-1:9092", "kafka-2:9093"]
    assert settings.kafka_auto_offset_reset == "latest"


def test_explicit_overrides_beat_environment(monkeypatch):
    """Explicit values win; None means fall back to the environment."""

    monkeypatch.setenv("KAFKA_TOPIC", "from-env")

    assert load_settings(kafka_topic="from-cli").kafka_topic == "from-cli"
    assert load_settings(kafka_topic=None).kafka_topic == "from-env"


@pytest.mark.parametrize("servers", ["", " , ", "localhost", ":9092", "localhost:abc", "localhost:0"])
def test_malformed_bootstrap_servers_fail_fast(servers):
    """Bad broker addresses must be rejected before any client exists."""

    with pytest.raises(ValidationError):
        load_settings(kafka_bootstrap_servers=servers)


def test_empty_bootstrap_from_environment_fails(monkeypatch):
    """An empty KAFKA_BOOTSTRAP_SERVERS is as fatal as an empty override."""

    monkeypatch.setenv("KAFKA_BOOTSTRAP_SERVERS", "")

    with pytest.raises(ValidationError):
        load_settings()


def test_offset_reset_is_an_enum():
    """Only earliest and latest are accepted offset-reset policies."""

    with pytest.raises(ValidationError):
        load_settings(kafka_auto_offset_reset="middle")


def test_blank_topic_rejected():
    """A whitespace topic name is not a topic."""

    with pytest.raises(ValidationError):
        load_settings(kafka_topic="  ")


def test_unknown_log_level_rejected():
    """Log levels are checked with the rest of the config, not at logger setup."""

    with pytest.raises(ValidationError):
        load_settings(log_level="LOUD")


def test_log_level_is_case_insensitive(monkeypatch):
    """Lower-case levels from the environment are normalized."""

    monkeypatch.setenv("LOG_LEVEL", "debug")

    assert load_settings().log_level == "DEBUG"


def test_startup_config_redacts_secret_like_fields():
    """Startup config shows plain values and hides secret-looking names."""

    config = startup_config(load_settings())

    assert config["kafka_topic"] == "test-topic"
    assert config["otel_exporter_otlp_endpoint"] == "<unset>"
    assert all(value != "<redacted>" for value in config.values())
    assert _safe_value("sasl_password", "hunter2") == "<redacted>"
