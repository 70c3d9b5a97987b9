"""Access to the upstream speech provider credential."""
from __future__ import annotations

import os
from typing import Optional, Protocol


class CredentialProvider(Protocol):
    """Capability returning the upstream API key, or ``None`` when unset."""

    def get_api_key(self) -> Optional[str]:
        ...


def _normalise(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


class EnvironmentCredentialProvider:
    """Read the API key from the process environment on every call."""

    def __init__(self, variable: str = "GOOGLE_TTS_API_KEY") -> None:
        self.variable = variable

    def get_api_key(self) -> Optional[str]:
        return _normalise(os.environ.get(self.variable))

    def __repr__(self) -> str:
        return f"EnvironmentCredentialProvider(variable={self.variable!r})"


class StaticCredentialProvider:
    """Return a fixed API key (or none at all)."""

    def __init__(self, api_key: Optional[str]) -> None:
        self._api_key = api_key

    def get_api_key(self) -> Optional[str]:
        return _normalise(self._api_key)

    def __repr__(self) -> str:
        state = "set" if self.get_api_key() else "missing"
        return f"StaticCredentialProvider(<{state}>)"
