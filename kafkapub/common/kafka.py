"""Kafka producer/consumer construction owned by the app lifespan.

Clients are built once per process from validated settings. The producer
connects lazily on first publish, so an unreachable broker shows up as a
publish error rather than a startup failure.
"""

import asyncio
from dataclasses import dataclass

from aiokafka import AIOKafkaConsumer, AIOKafkaProducer
from pydantic import BaseModel, Field

from kafkapub.common.config import KafkaSettings
from kafkapub.common.logging import logger


class PublishAck(BaseModel):
    """Broker acknowledgment for one published record."""

    topic: str
    partition: int = Field(ge=0)
    offset: int = Field(ge=0)

    def __str__(self) -> str:
        return f"{self.topic}-{self.partition}-{self.offset}"


class KafkaProducerHandle:
    """Lazy Kafka producer wrapper shared by all request handlers."""

    def __init__(self, settings: KafkaSettings) -> None:
        self.settings = settings
        self._producer: AIOKafkaProducer | None = None
        self._start_lock = asyncio.Lock()

    @property
    def started(self) -> bool:
        return self._producer is not None

    def _new_producer(self) -> AIOKafkaProducer:
        return AIOKafkaProducer(
            bootstrap_servers=self.settings.bootstrap_servers,
            client_id=self.settings.kafka_client_id,
        )

    async def producer(self) -> AIOKafkaProducer:
        if self._producer is not None:
            return self._producer
        async with self._start_lock:
            if self._producer is None:
                producer = self._new_producer()
                try:
                    await producer.start()
                except Exception:
                    await producer.stop()
                    raise
                self._producer = producer
                logger.info(
                    "kafka_producer_started bootstrap_servers=%s",
                    self.settings.kafka_bootstrap_servers,
                )
        return self._producer

    async def publish(self, topic: str, value: str) -> PublishAck:
        """Send one unkeyed record and wait for the broker acknowledgment."""

        producer = await self.producer()
        metadata = await producer.send_and_wait(topic, value.encode("utf-8"))
        return PublishAck(topic=metadata.topic, partition=metadata.partition, offset=metadata.offset)

    async def close(self) -> None:
        # stop() flushes pending records before closing connections.
        if self._producer is not None:
            producer, self._producer = self._producer, None
            await producer.stop()


def make_consumer(settings: KafkaSettings) -> AIOKafkaConsumer:
    """Create a configured, unsubscribed Kafka consumer for the group."""

    return AIOKafkaConsumer(
        bootstrap_servers=settings.bootstrap_servers,
        group_id=settings.kafka_consumer_group_id,
        auto_offset_reset=settings.kafka_auto_offset_reset,
    )


@dataclass
class KafkaClients:
    """Producer and consumer handles for one process."""

    producer: KafkaProducerHandle
    consumer: AIOKafkaConsumer

    @classmethod
    def build(cls, settings: KafkaSettings) -> "KafkaClients":
        """Construct both clients. Must run inside the event loop."""

        return cls(producer=KafkaProducerHandle(settings), consumer=make_consumer(settings))

    async def close(self) -> None:
        try:
            await self.producer.close()
        finally:
            await self.consumer.stop()
        logger.info("kafka_clients_closed")
