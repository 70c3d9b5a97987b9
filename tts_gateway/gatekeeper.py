"""Validation of inbound synthesis requests.

Rules are evaluated in a fixed order and the first failing rule decides the
message returned to the client:

1. ``text`` missing, not a string, or made only of whitespace and byte
   order marks.
2. ``text`` longer than the configured limit (counted in characters, the
   stored text is not trimmed).
3. ``language`` missing or outside the configured allow-list.

``voiceId`` and ``modelId`` are forwarded untouched.
"""
from __future__ import annotations

from typing import Any

from .config import Settings
from .errors import ClientInputError
from .models import SynthesisRequest

EMPTY_TEXT_MESSAGE = "Text input cannot be empty."
UNSUPPORTED_LANGUAGE_MESSAGE = "Invalid or unsupported language code."


def is_blank(text: str) -> bool:
    """Return whether ``text`` holds only whitespace or byte order marks."""

    return all(char.isspace() or char == "\ufeff" for char in text)


def text_too_long_message(limit: int) -> str:
    return f"Text exceeds the maximum limit of {limit} characters."


def validate_synthesis_request(payload: Any, settings: Settings) -> SynthesisRequest:
    """Return a validated request or raise :class:`ClientInputError`."""

    data = payload if isinstance(payload, dict) else {}

    text = data.get("text")
    if not isinstance(text, str) or is_blank(text):
        raise ClientInputError(EMPTY_TEXT_MESSAGE)
    if len(text) > settings.max_text_length:
        raise ClientInputError(text_too_long_message(settings.max_text_length))

    language = data.get("language")
    if not isinstance(language, str) or language not in settings.supported_languages:
        raise ClientInputError(UNSUPPORTED_LANGUAGE_MESSAGE)

    return SynthesisRequest(
        text=text,
        language=language,
        voice_id=data.get("voiceId"),
        model_id=data.get("modelId"),
    )
