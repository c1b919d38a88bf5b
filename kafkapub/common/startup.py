"""Startup-time helpers for safe config logging."""

from kafkapub.common.config import KafkaSettings
from kafkapub.common.logging import logger


SECRET_MARKERS = ("key", "secret", "password", "token")


def _safe_value(name: str, value):
    """Return value with simple redaction for secret-like field names."""

    if value is None:
        return "<unset>"
    if any(marker in name.lower() for marker in SECRET_MARKERS):
        return "<redacted>"
    return value


def startup_config(settings: KafkaSettings) -> dict:
    config = {}
    for name, value in settings.model_dump().items():
        config[name] = _safe_value(name, value)
    return config


def log_startup_config(settings: KafkaSettings) -> None:
    """Log effective config once for quick troubleshooting."""

    logger.info("startup_config=%s", startup_config(settings))
