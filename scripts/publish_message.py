"""Publish one text message directly to a Kafka topic.

Useful for checking broker reachability without going through the HTTP API.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from aiokafka import AIOKafkaProducer


async def publish(bootstrap_servers: str, topic: str, message: str):
    """Open producer, publish one message, close producer."""

    producer = AIOKafkaProducer(bootstrap_servers=bootstrap_servers)
    await producer.start()
    try:
        return await producer.send_and_wait(topic, message.encode("utf-8"))
    finally:
        await producer.stop()


def main() -> None:
    """Parse CLI args and publish one message."""

    parser = argparse.ArgumentParser(description="Publish a text message to a Kafka topic.")
    parser.add_argument("--bootstrap-servers", default="localhost:9092")
    parser.add_argument("--topic", default="test-topic")
    parser.add_argument("--message", default=None, help="Inline message text")
    parser.add_argument("--file", dest="message_file", default=None, help="Path to a text file, '-' for stdin")
    args = parser.parse_args()

    if bool(args.message) == bool(args.message_file):
        raise SystemExit("Provide exactly one of --message or --file")

    if args.message:
        message = args.message
    elif args.message_file == "-":
        message = sys.stdin.read()
    else:
        message = Path(args.message_file).read_text()

    metadata = asyncio.run(publish(args.bootstrap_servers, args.topic, message))
    print(f"Message sent to {metadata.topic}-{metadata.partition}-{metadata.offset}")


if __name__ == "__main__":
    main()
