#!/usr/bin/env python3
"""TTS gateway application proxying browser synthesis requests upstream."""
from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

import logging
import os
import time
import uuid
from typing import Any, Dict

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from structlog.contextvars import bind_contextvars, unbind_contextvars
from structlog.stdlib import ProcessorFormatter

from .clients import GoogleTtsClient
from .config import Settings, get_settings
from .cors import cors_headers, options_response
from .credentials import CredentialProvider, EnvironmentCredentialProvider
from .errors import GENERIC_INTERNAL_ERROR, ClientInputError, GatewayError
from .gatekeeper import validate_synthesis_request
from .models import ErrorResponse
from .proxy import SynthesisProxy
from .telemetry import (
    configure_tracing,
    correlation_id_var,
    reset_correlation_id,
    set_correlation_id,
)

SYNTHESIS_PATH = "/api/v1/simple-tts"
NOT_FOUND_MESSAGE = f"Not Found. Use POST {SYNTHESIS_PATH}"

logger = logging.getLogger("tts_gateway")


class CorrelationIdFilter(logging.Filter):
    """Inject the correlation identifier into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - logging helper
        record.correlation_id = correlation_id_var.get() or "unknown"
        return True


def _add_correlation_id(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:  # pragma: no cover - logging helper
    event_dict.setdefault("correlation_id", correlation_id_var.get() or "unknown")
    return event_dict


def _configure_otlp_logging(service_name: str) -> None:
    if not (
        os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        or os.getenv("OTEL_EXPORTER_OTLP_LOGS_ENDPOINT")
    ):
        return

    root_logger = logging.getLogger()
    try:
        resource = Resource.create(
            {"service.name": os.getenv("OTEL_SERVICE_NAME", service_name)}
        )
        logger_provider = LoggerProvider(resource=resource)
        exporter = OTLPLogExporter()
        logger_provider.add_log_record_processor(BatchLogRecordProcessor(exporter))
        set_logger_provider(logger_provider)
        otlp_handler = LoggingHandler(level=logging.NOTSET, logger_provider=logger_provider)
        root_logger.addHandler(otlp_handler)
        root_logger.debug(
            "OTLP log exporter configured",
            extra={"service_name": resource.attributes.get("service.name")},
        )
    except Exception:  # pragma: no cover - optional exporter
        root_logger.exception("Failed to configure OTLP log exporter")


def configure_logging(service_name: str = "simple-tts-gateway") -> None:
    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        _add_correlation_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        timestamper,
        structlog.processors.format_exc_info,
    ]

    formatter = ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *shared_processors],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(logging.INFO)
    # httpx logs full request URLs, which carry the upstream API key.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    structlog.configure(
        processors=shared_processors + [ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configure_otlp_logging(service_name)


configure_logging(get_settings().service_name)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Attach correlation identifiers and latency to responses."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        token = set_correlation_id(correlation_id)
        bind_contextvars(correlation_id=correlation_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled exception during request", extra={"path": request.url.path})
            raise
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            reset_correlation_id(token)
            unbind_contextvars("correlation_id")
            logger.info(
                "Request completed",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": round(duration_ms, 2),
                },
            )

        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Process-Time-ms"] = f"{duration_ms:.2f}"
        return response


app = FastAPI(
    title="Simple TTS Gateway",
    version="0.1.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)
app.add_middleware(CorrelationIdMiddleware)
configure_tracing(app, get_settings().service_name)


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException) -> Response:
    # Unknown paths and wrong methods on the synthesis path share one answer.
    if exc.status_code in (404, 405):
        return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=404)
    return await http_exception_handler(request, exc)


# Dependency factories -----------------------------------------------------

def get_credential_provider(settings: Settings = Depends(get_settings)) -> CredentialProvider:
    return EnvironmentCredentialProvider(settings.credential_env_var)


def get_tts_client(settings: Settings = Depends(get_settings)) -> GoogleTtsClient:
    return GoogleTtsClient(url=settings.upstream_url, timeout=settings.upstream_timeout)


def get_synthesis_proxy(
    settings: Settings = Depends(get_settings),
    client: GoogleTtsClient = Depends(get_tts_client),
    credentials: CredentialProvider = Depends(get_credential_provider),
) -> SynthesisProxy:
    return SynthesisProxy(
        client=client,
        credentials=credentials,
        audio_encoding=settings.audio_encoding,
    )


def _error_response(status_code: int, detail: str, headers: Dict[str, str]) -> JSONResponse:
    return JSONResponse(
        ErrorResponse(detail=detail).model_dump(),
        status_code=status_code,
        headers=headers,
    )


# Routes -------------------------------------------------------------------


@app.options("/{full_path:path}", include_in_schema=False)
async def preflight(request: Request, settings: Settings = Depends(get_settings)) -> Response:
    return options_response(request, settings)


@app.post(SYNTHESIS_PATH)
async def simple_tts(
    request: Request,
    settings: Settings = Depends(get_settings),
    proxy: SynthesisProxy = Depends(get_synthesis_proxy),
) -> JSONResponse:
    headers = cors_headers(settings)
    try:
        payload = await request.json()
        synthesis_request = validate_synthesis_request(payload, settings)
        result = await proxy.synthesize(synthesis_request)
    except ClientInputError as exc:
        logger.info("TTS request rejected", extra={"reason": exc.detail})
        return _error_response(exc.status_code, exc.detail, headers)
    except GatewayError as exc:
        logger.warning(
            "TTS synthesis failed",
            extra={"error": type(exc).__name__, "status_code": exc.status_code},
        )
        return _error_response(exc.status_code, exc.detail, headers)
    except Exception as exc:
        logger.exception("Error while handling TTS request")
        return _error_response(500, str(exc) or GENERIC_INTERNAL_ERROR, headers)

    return JSONResponse(result.model_dump(by_alias=True), status_code=200, headers=headers)


def run() -> None:
    import uvicorn

    uvicorn.run(
        app,
        host=os.getenv("TTS_GATEWAY_HOST", "0.0.0.0"),
        port=int(os.getenv("TTS_GATEWAY_PORT", "8787")),
    )


if __name__ == "__main__":
    run()
