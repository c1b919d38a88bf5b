"""Central environment-driven settings for the produce API process.

The process loads this once at startup, before any Kafka client is built.
Behavior is controlled by environment variables (see `.env.example`) or by
the CLI flags in `kafkapub.cli`, which take precedence.
"""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class KafkaSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "kafkapub-produce-api"
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    kafka_bootstrap_servers: str = "localhost:9092"
    kafka_topic: str = "test-topic"
    kafka_client_id: str = "kafkapub-producer"
    kafka_consumer_group_id: str = "kafkapub-consumer-group"
    kafka_auto_offset_reset: Literal["earliest", "latest"] = "earliest"
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("kafka_bootstrap_servers")
    @classmethod
    def _check_bootstrap_servers(cls, value: str) -> str:
        addresses = [part.strip() for part in value.split(",") if part.strip()]
        if not addresses:
            raise ValueError("at least one bootstrap address is required")
        for address in addresses:
            host, sep, port = address.rpartition(":")
            if not sep or not host:
                raise ValueError(f"bootstrap address must be host:port, got {address!r}")
            if not port.isdigit() or not 0 < int(port) < 65536:
                raise ValueError(f"invalid port in bootstrap address {address!r}")
        return ",".join(addresses)

    @field_validator("kafka_topic", "kafka_consumer_group_id")
    @classmethod
    def _check_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @property
    def bootstrap_servers(self) -> list[str]:
        return self.kafka_bootstrap_servers.split(",")


def load_settings(**overrides) -> KafkaSettings:
    """Build validated settings; explicit overrides win over the environment.

    Raises `pydantic.ValidationError` on malformed configuration.
    """

    return KafkaSettings(**{k: v for k, v in overrides.items() if v is not None})
