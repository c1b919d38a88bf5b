"""In-memory stand-ins for aiokafka clients so tests need no broker."""

from collections import defaultdict
from typing import NamedTuple

import pytest
from aiokafka.errors import KafkaConnectionError

import kafkapub.common.kafka as kafka_module


class RecordMetadata(NamedTuple):
    topic: str
    partition: int
    offset: int


class FakeBroker:
    """Single-partition log per topic plus counters for client lifecycle calls."""

    def __init__(self) -> None:
        self.reachable = True
        self.send_error: Exception | None = None
        self.log: dict[str, list[tuple[bytes | None, bytes]]] = defaultdict(list)
        self.producers: list["FakeProducer"] = []
        self.consumers: list["FakeConsumer"] = []
        self.starts = 0

    def append(self, topic: str, key, value: bytes) -> RecordMetadata:
        self.log[topic].append((key, value))
        return RecordMetadata(topic=topic, partition=0, offset=len(self.log[topic]) - 1)


class FakeProducer:
    def __init__(self, broker: FakeBroker, **config) -> None:
        self.broker = broker
        self.config = config
        self.started = False
        self.stopped = False
        broker.producers.append(self)

    async def start(self) -> None:
        self.broker.starts += 1
        if not self.broker.reachable:
            raise KafkaConnectionError(f"Unable to bootstrap from {self.config['bootstrap_servers']}")
        self.started = True

    async def send_and_wait(self, topic: str, value: bytes, key=None):
        assert self.started and not self.stopped
        if self.broker.send_error is not None:
            raise self.broker.send_error
        return self.broker.append(topic, key, value)

    async def stop(self) -> None:
        self.stopped = True


class FakeConsumer:
    def __init__(self, broker: FakeBroker, *topics, **config) -> None:
        self.topics = topics
        self.config = config
        self.started = False
        self.stopped = False
        broker.consumers.append(self)

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True


@pytest.fixture
def broker(monkeypatch):
    """Patch the aiokafka client classes used by `kafkapub.common.kafka`."""

    fake = FakeBroker()
    monkeypatch.setattr(kafka_module, "AIOKafkaProducer", lambda **config: FakeProducer(fake, **config))
    monkeypatch.setattr(
        kafka_module,
        "AIOKafkaConsumer",
        lambda *topics, **config: FakeConsumer(fake, *topics, **config),
    )
    return fake


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep ambient KAFKA_* variables from leaking into settings."""

    for name in [
        "SERVICE_NAME",
        "LOG_LEVEL",
        "KAFKA_BOOTSTRAP_SERVERS",
        "KAFKA_TOPIC",
        "KAFKA_CLIENT_ID",
        "KAFKA_CONSUMER_GROUP_ID",
        "KAFKA_AUTO_OFFSET_RESET",
        "OTEL_EXPORTER_OTLP_ENDPOINT",
    ]:
        monkeypatch.delenv(name, raising=False)
