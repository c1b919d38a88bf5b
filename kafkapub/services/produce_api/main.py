"""HTTP surface that relays text messages to a Kafka topic.

`create_app` is the composition root: it validates settings, wires logging,
tracing and metrics, and owns the Kafka clients for the server's lifetime.
Run it with `kafkapub-produce-api` or `uvicorn --factory`.
"""

import json
from contextlib import asynccontextmanager
from time import perf_counter
from typing import Callable
from uuid import uuid4

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse

from kafkapub.common.config import KafkaSettings, load_settings
from kafkapub.common.kafka import KafkaClients
from kafkapub.common.logging import configure_logging, request_id_ctx
from kafkapub.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
)
from kafkapub.common.startup import log_startup_config
from kafkapub.common.tracing import instrument_app, setup_tracing
from kafkapub.services.produce_api.service import ProduceService

router = APIRouter()


async def request_context_middleware(request: Request, call_next):
    """Tag the request with an id and record count and latency for every HTTP call."""

    service_name = request.app.state.settings.service_name
    request_id = request.headers.get("x-request-id") or str(uuid4())
    token = request_id_ctx.set(request_id)
    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        response.headers["x-request-id"] = request_id
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()
        request_id_ctx.reset(token)


async def read_message(request: Request) -> str:
    """Extract the message text from a plain-text or JSON-string body."""

    body = await request.body()
    if not body:
        raise HTTPException(status_code=400, detail="a non-empty request body is required")
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type == "application/json":
        try:
            message = json.loads(body)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail="request body is not valid JSON") from exc
        if not isinstance(message, str):
            raise HTTPException(status_code=422, detail="JSON request body must be a string")
    else:
        try:
            message = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise HTTPException(status_code=422, detail="request body must be UTF-8 text") from exc
    if not message:
        raise HTTPException(status_code=400, detail="a non-empty request body is required")
    return message


def get_produce_service(request: Request) -> ProduceService:
    settings: KafkaSettings = request.app.state.settings
    clients: KafkaClients = request.app.state.kafka
    return ProduceService(clients.producer, settings.kafka_topic, settings.service_name)


@router.post("/api/kafka/produce", response_class=PlainTextResponse)
async def produce(
    message: str = Depends(read_message),
    service: ProduceService = Depends(get_produce_service),
):
    """Publish the body to the configured topic and report where it landed.

    Broker failures are not translated; the server answers a plain 500.
    """

    ack = await service.produce(message)
    return f"Message sent to {ack}"


@router.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@router.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}


def create_app(
    settings: KafkaSettings | None = None,
    clients_factory: Callable[[KafkaSettings], KafkaClients] = KafkaClients.build,
) -> FastAPI:
    """Build the app; raises `pydantic.ValidationError` on bad configuration."""

    if settings is None:
        settings = load_settings()
    configure_logging(settings)
    setup_tracing(settings)
    log_startup_config(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Own the Kafka clients for the server lifetime; flush on exit."""

        app.state.kafka = clients_factory(settings)
        try:
            yield
        finally:
            await app.state.kafka.close()

    app = FastAPI(title="kafkapub Produce API", lifespan=lifespan)
    app.state.settings = settings
    app.middleware("http")(request_context_middleware)
    app.include_router(router)
    instrument_app(app)
    return app
