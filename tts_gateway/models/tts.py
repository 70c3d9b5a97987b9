"""Pydantic models for text-to-speech interactions."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class SynthesisRequest(BaseModel):
    """Synthesis request that has passed the gatekeeper."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str = Field(..., min_length=1, description="Text to synthesise")
    language: str = Field(..., description="Locale tag of the requested voice")
    voice_id: Optional[Any] = Field(
        default=None,
        alias="voiceId",
        description="Provider voice name, forwarded without lookup",
    )
    model_id: Optional[Any] = Field(
        default=None,
        alias="modelId",
        description="Advisory quality hint such as 'standard' or 'enhanced'",
    )


class SynthesisResponse(BaseModel):
    """Successful synthesis payload returned to the browser."""

    model_config = ConfigDict(populate_by_name=True)

    audio_data: str = Field(
        ...,
        alias="audioData",
        description="Audio content encoded in base64, as produced by the provider",
    )
    message: str = Field(..., description="Human-readable confirmation")


class ErrorResponse(BaseModel):
    """Uniform error body for every failed synthesis request."""

    detail: str = Field(..., description="Client-safe description of the failure")
