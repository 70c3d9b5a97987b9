"""HTTP client for the upstream speech-synthesis provider."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .errors import GENERIC_INTERNAL_ERROR, UpstreamTransportError
from .telemetry import get_correlation_id

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

UPSTREAM_TIMEOUT_MESSAGE = "External TTS service did not respond in time."


def _redact(message: str, secret: str) -> str:
    return message.replace(secret, "***") if secret else message


class GoogleTtsClient:
    """Async client performing a single ``text:synthesize`` call per request.

    The API key travels as the ``key`` query parameter. It is never part of
    log lines or error details produced here.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def synthesize(self, body: Dict[str, Any], api_key: str) -> httpx.Response:
        """POST ``body`` to the provider and return the raw response.

        Non-2xx responses are returned as-is; only transport failures raise.
        """

        span_attributes: Dict[str, Any] = {
            "tts.system": "google",
            "tts.language": body.get("voice", {}).get("languageCode") or "",
            "tts.audio_encoding": body.get("audioConfig", {}).get("audioEncoding") or "",
        }
        voice_name = body.get("voice", {}).get("name")
        if isinstance(voice_name, str) and voice_name:
            span_attributes["tts.voice"] = voice_name
        correlation_id = get_correlation_id()
        if correlation_id:
            span_attributes["correlation.id"] = correlation_id

        with tracer.start_as_current_span("GoogleTTS.synthesize") as span:
            for key, value in span_attributes.items():
                span.set_attribute(key, value)
            try:
                async with httpx.AsyncClient(
                    timeout=self._timeout, transport=self._transport
                ) as client:
                    response = await client.post(
                        self._url,
                        params={"key": api_key},
                        json=body,
                        headers={"Content-Type": "application/json"},
                    )
            except httpx.TimeoutException as exc:
                logger.error("Upstream TTS request timed out: POST %s", self._url)
                span.record_exception(exc)
                span.set_status(Status(StatusCode.ERROR, "timeout"))
                raise UpstreamTransportError(UPSTREAM_TIMEOUT_MESSAGE) from exc
            except httpx.HTTPError as exc:
                detail = _redact(str(exc), api_key) or GENERIC_INTERNAL_ERROR
                logger.error(
                    "Upstream TTS request failed: POST %s (%s: %s)",
                    self._url,
                    type(exc).__name__,
                    detail,
                )
                span.set_status(Status(StatusCode.ERROR, type(exc).__name__))
                raise UpstreamTransportError(detail) from exc

            span.set_attribute("http.status_code", response.status_code)
            if response.is_success:
                span.set_status(Status(StatusCode.OK))
            else:
                span.set_status(Status(StatusCode.ERROR, f"HTTP {response.status_code}"))
            return response
