"""Renderer error taxonomy."""

from __future__ import annotations


class RenderError(Exception):
    """Base class for renderer errors."""


class DecodeError(RenderError):
    """Source image bytes could not be decoded."""


class ConfigurationError(RenderError):
    """Option value outside its documented range (strict parsing only)."""

    def __init__(self, field: str, value: object, message: str | None = None) -> None:
        self.field = field
        self.value = value
        super().__init__(message or f"invalid value for {field}: {value!r}")


class RenderFailure(RenderError):
    """Internal invariant violated while rendering."""
