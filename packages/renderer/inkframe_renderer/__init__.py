"""Renderer package for InkFrame photo and dashboard frames."""

from .bitmap import PackedBitmap, PixelBuffer, packed_length
from .dashboard import DashboardComposer, render_placeholder
from .dithering import DitheringAlgorithm, apply_dithering, list_algorithms
from .errors import ConfigurationError, DecodeError, RenderError, RenderFailure
from .font import BitmapFont, FontTable
from .locales import DEFAULT_LOCALE, get_locale, list_locales, truncate_text
from .models import (
    CalendarEvent,
    CropRect,
    DashboardModel,
    FitMode,
    TextPosition,
    TextSize,
    TodoItem,
    TransformOptions,
    Weather,
)
from .pipeline import RenderResult, TransformPipeline, generate_bitmap, generate_preview

__all__ = [
    "BitmapFont",
    "CalendarEvent",
    "ConfigurationError",
    "CropRect",
    "DEFAULT_LOCALE",
    "DashboardComposer",
    "DashboardModel",
    "DecodeError",
    "DitheringAlgorithm",
    "FitMode",
    "FontTable",
    "PackedBitmap",
    "PixelBuffer",
    "RenderError",
    "RenderFailure",
    "RenderResult",
    "TextPosition",
    "TextSize",
    "TodoItem",
    "TransformOptions",
    "TransformPipeline",
    "Weather",
    "apply_dithering",
    "generate_bitmap",
    "generate_preview",
    "get_locale",
    "list_algorithms",
    "list_locales",
    "packed_length",
    "render_placeholder",
    "truncate_text",
]
