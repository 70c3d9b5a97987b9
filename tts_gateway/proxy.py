"""Synthesis proxy translating validated requests into upstream calls."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from .clients import GoogleTtsClient
from .credentials import CredentialProvider
from .errors import ServerConfigurationError, UpstreamError, UpstreamShapeError
from .models import SynthesisRequest, SynthesisResponse

logger = logging.getLogger(__name__)

MISSING_CREDENTIAL_MESSAGE = "Server configuration error: TTS API key missing."
UNEXPECTED_FORMAT_MESSAGE = (
    "Failed to get audio content from external TTS service. Response format unexpected."
)
SUCCESS_MESSAGE = "Audio synthesized successfully."


def resolve_voice_name(request: SynthesisRequest) -> Any:
    """Return the upstream voice name for ``request``.

    ``voiceId`` is forwarded as-is; ``modelId`` is available here for a future
    quality-based voice selection but does not influence the result.
    """

    return request.voice_id


def build_upstream_payload(request: SynthesisRequest, audio_encoding: str) -> Dict[str, Any]:
    return {
        "input": {"text": request.text},
        "voice": {
            "languageCode": request.language,
            "name": resolve_voice_name(request),
        },
        "audioConfig": {"audioEncoding": audio_encoding},
    }


def extract_upstream_message(body: str) -> Optional[str]:
    """Pull ``error.message`` out of a provider error body, if present."""

    try:
        parsed = json.loads(body)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    error = parsed.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    if not isinstance(message, str) or not message:
        return None
    return message


def upstream_error_detail(status_code: int, body: str) -> str:
    message = extract_upstream_message(body)
    if message is not None:
        return f"External TTS Error: {message}"
    return f"External TTS service failed with status: {status_code}."


class SynthesisProxy:
    """Call the upstream provider and normalise every outcome.

    Raises a :class:`~tts_gateway.errors.GatewayError` subclass for every
    failure; callers turn it into the uniform JSON error body.
    """

    def __init__(
        self,
        client: GoogleTtsClient,
        credentials: CredentialProvider,
        audio_encoding: str = "MP3",
    ) -> None:
        self._client = client
        self._credentials = credentials
        self._audio_encoding = audio_encoding

    async def synthesize(self, request: SynthesisRequest) -> SynthesisResponse:
        api_key = self._credentials.get_api_key()
        if not api_key:
            logger.error("Upstream TTS API key is not configured")
            raise ServerConfigurationError(MISSING_CREDENTIAL_MESSAGE)

        payload = build_upstream_payload(request, self._audio_encoding)
        response = await self._client.synthesize(payload, api_key)

        if not response.is_success:
            raise self._upstream_failure(response)

        return SynthesisResponse(audio_data=self._audio_content(response), message=SUCCESS_MESSAGE)

    def _upstream_failure(self, response: httpx.Response) -> UpstreamError:
        body = response.text
        logger.error(
            "Upstream TTS error (%s): %s",
            response.status_code,
            body,
            extra={"upstream_status": response.status_code},
        )
        return UpstreamError(
            upstream_error_detail(response.status_code, body),
            status_code=response.status_code,
        )

    @staticmethod
    def _audio_content(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Upstream TTS returned a non-JSON success body: %s", response.text)
            raise UpstreamShapeError(UNEXPECTED_FORMAT_MESSAGE) from exc

        audio = data.get("audioContent") if isinstance(data, dict) else None
        if not audio or not isinstance(audio, str):
            logger.error("Upstream TTS response did not include audioContent: %s", data)
            raise UpstreamShapeError(UNEXPECTED_FORMAT_MESSAGE)
        return audio
