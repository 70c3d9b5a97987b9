"""Stateless HTTP gateway in front of a cloud text-to-speech provider."""

__version__ = "0.1.0"
