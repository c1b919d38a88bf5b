"""Publish path behind `POST /api/kafka/produce`."""

from time import perf_counter

from kafkapub.common.kafka import KafkaProducerHandle, PublishAck
from kafkapub.common.logging import logger, topic_ctx
from kafkapub.common.metrics import (
    messages_published_total,
    publish_failures_total,
    publish_latency_seconds,
)


class ProduceService:
    """Forwards one text message to the configured topic."""

    def __init__(self, producer: KafkaProducerHandle, topic: str, service_name: str) -> None:
        self.producer = producer
        self.topic = topic
        self.service_name = service_name

    async def produce(self, message: str) -> PublishAck:
        """Publish without a key and return the broker acknowledgment.

        Broker errors are counted, logged and re-raised unchanged.
        """

        topic_token = topic_ctx.set(self.topic)
        started = perf_counter()
        try:
            try:
                ack = await self.producer.publish(self.topic, message)
            except Exception as exc:
                publish_failures_total.labels(
                    service=self.service_name,
                    topic=self.topic,
                    error_type=type(exc).__name__,
                ).inc()
                logger.error("publish_failed topic=%s error=%r", self.topic, exc)
                raise
            publish_latency_seconds.labels(service=self.service_name, topic=self.topic).observe(
                max(0.0, perf_counter() - started)
            )
            messages_published_total.labels(service=self.service_name, topic=self.topic).inc()
            logger.info(
                "message_published topic=%s partition=%s offset=%s",
                ack.topic,
                ack.partition,
                ack.offset,
            )
            return ack
        finally:
            topic_ctx.reset(topic_token)
