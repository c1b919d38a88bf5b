"""Process entrypoint for the produce API.

CLI flags override environment variables. Settings are validated before the
server (and any Kafka client) is started.
"""

import argparse

import uvicorn
from pydantic import ValidationError

from kafkapub.common.config import KafkaSettings, load_settings
from kafkapub.services.produce_api.main import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Relay HTTP text messages to a Kafka topic.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--bootstrap-servers", default=None, help="Comma separated host:port list")
    parser.add_argument("--topic", default=None)
    parser.add_argument("--group-id", default=None, help="Consumer group id")
    parser.add_argument("--auto-offset-reset", choices=["earliest", "latest"], default=None)
    parser.add_argument("--log-level", default=None)
    return parser


def settings_from_args(args: argparse.Namespace) -> KafkaSettings:
    return load_settings(
        kafka_bootstrap_servers=args.bootstrap_servers,
        kafka_topic=args.topic,
        kafka_consumer_group_id=args.group_id,
        kafka_auto_offset_reset=args.auto_offset_reset,
        log_level=args.log_level,
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI args, validate config and serve until interrupted."""

    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = settings_from_args(args)
    except ValidationError as exc:
        parser.error(f"invalid configuration:\n{exc}")
    app = create_app(settings)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
