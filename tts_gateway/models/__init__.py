"""Pydantic schemas exposed by the TTS gateway."""
from .tts import ErrorResponse, SynthesisRequest, SynthesisResponse

__all__ = [
    "ErrorResponse",
    "SynthesisRequest",
    "SynthesisResponse",
]
