"""Typed renderer models."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from enum import Enum
from typing import Any

from .errors import ConfigurationError

_log = logging.getLogger("inkframe.renderer.options")

MAX_DIMENSION = 2048


class FitMode(str, Enum):
    COVER = "cover"
    CONTAIN = "contain"
    FILL = "fill"


class TextPosition(str, Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


class TextSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


TEXT_SCALE = {TextSize.SMALL: 1, TextSize.MEDIUM: 1, TextSize.LARGE: 2}


@dataclass(frozen=True)
class CropRect:
    """Crop window as fractions of the rotated source frame."""

    x: float = 0.0
    y: float = 0.0
    w: float = 1.0
    h: float = 1.0

    def is_full(self) -> bool:
        return self.x <= 0 and self.y <= 0 and self.w >= 1 and self.h >= 1


def normalize_rotation(degrees: float) -> int:
    angle = _as_int(degrees, 0) % 360
    return int(math.floor(angle / 90 + 0.5)) * 90 % 360


def _as_int(value: Any, default: int) -> int:
    # Non-finite input ("Infinity", 1e999) takes the default.
    return int(_as_float(value, float(default)))


def _as_float(value: Any, default: float) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _as_enum(enum_type: type[Enum], value: Any, default: Enum) -> Enum:
    try:
        return enum_type(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class TransformOptions:
    width: int = 200
    height: int = 200
    brightness: int = 0
    contrast: int = 0
    sharpness: int = 0
    gamma: float = 1.0
    invert: bool = False
    dithering: str = "floydSteinberg"
    rotation: int = 0
    flip_h: bool = False
    flip_v: bool = False
    crop: CropRect = field(default_factory=CropRect)
    fit: FitMode = FitMode.COVER
    text_overlay: str = ""
    text_position: TextPosition = TextPosition.BOTTOM
    text_size: TextSize = TextSize.MEDIUM

    @property
    def text_scale(self) -> int:
        return TEXT_SCALE[self.text_size]

    def normalized(self, strict: bool = False) -> "TransformOptions":
        """Clamp every field to its documented range.

        Out-of-range values are pulled to the nearest bound and logged; with
        ``strict`` they raise ConfigurationError instead.
        """

        def clamp(name: str, value, low, high):
            if low <= value <= high:
                return value
            if strict:
                raise ConfigurationError(name, value, f"{name}={value!r} outside {low}..{high}")
            bounded = min(max(value, low), high)
            _log.warning(
                f"clamped {name} from {value!r} to {bounded!r}",
                extra={"event": "option_clamped"},
            )
            return bounded

        crop = CropRect(
            x=clamp("crop.x", self.crop.x, 0.0, 1.0),
            y=clamp("crop.y", self.crop.y, 0.0, 1.0),
            w=clamp("crop.w", self.crop.w, 0.0, 1.0),
            h=clamp("crop.h", self.crop.h, 0.0, 1.0),
        )
        return replace(
            self,
            width=clamp("width", _as_int(self.width, 200), 1, MAX_DIMENSION),
            height=clamp("height", _as_int(self.height, 200), 1, MAX_DIMENSION),
            brightness=clamp("brightness", _as_int(self.brightness, 0), -100, 100),
            contrast=clamp("contrast", _as_int(self.contrast, 0), -100, 100),
            sharpness=clamp("sharpness", _as_int(self.sharpness, 0), 0, 100),
            gamma=clamp("gamma", _as_float(self.gamma, 1.0), 0.5, 2.0),
            rotation=normalize_rotation(self.rotation),
            crop=crop,
            fit=_as_enum(FitMode, self.fit, FitMode.COVER),
            text_position=_as_enum(TextPosition, self.text_position, TextPosition.BOTTOM),
            text_size=_as_enum(TextSize, self.text_size, TextSize.MEDIUM),
        )

    @classmethod
    def from_dict(cls, raw: dict[str, Any], strict: bool = False) -> "TransformOptions":
        """Build options from a camelCase request body; missing keys take defaults."""
        d = cls()
        crop_raw = raw.get("crop") if isinstance(raw.get("crop"), dict) else {}
        crop = CropRect(
            x=_as_float(crop_raw.get("x", raw.get("cropX")), 0.0),
            y=_as_float(crop_raw.get("y", raw.get("cropY")), 0.0),
            w=_as_float(crop_raw.get("w", raw.get("cropW")), 1.0) or 1.0,
            h=_as_float(crop_raw.get("h", raw.get("cropH")), 1.0) or 1.0,
        )
        text = raw.get("textOverlay") or ""
        opts = cls(
            width=_as_int(raw.get("width"), d.width),
            height=_as_int(raw.get("height"), d.height),
            brightness=_as_int(raw.get("brightness"), d.brightness),
            contrast=_as_int(raw.get("contrast"), d.contrast),
            sharpness=_as_int(raw.get("sharpness"), d.sharpness),
            gamma=_as_float(raw.get("gamma"), d.gamma) or d.gamma,
            invert=_as_bool(raw.get("invert", False)),
            dithering=str(raw.get("dithering") or d.dithering),
            rotation=_as_int(raw.get("rotation"), d.rotation),
            flip_h=_as_bool(raw.get("flipH", False)),
            flip_v=_as_bool(raw.get("flipV", False)),
            crop=crop,
            fit=_as_enum(FitMode, raw.get("fit"), d.fit),
            text_overlay=str(text),
            text_position=_as_enum(TextPosition, raw.get("textPosition"), d.text_position),
            text_size=_as_enum(TextSize, raw.get("textSize"), d.text_size),
        )
        return opts.normalized(strict=strict)

    def to_dict(self) -> dict[str, Any]:
        names = {
            "flip_h": "flipH",
            "flip_v": "flipV",
            "text_overlay": "textOverlay",
            "text_position": "textPosition",
            "text_size": "textSize",
        }
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, CropRect):
                value = {"x": value.x, "y": value.y, "w": value.w, "h": value.h}
            out[names.get(f.name, f.name)] = value
        return out


@dataclass(frozen=True)
class Weather:
    temp: int
    condition: str = ""


@dataclass(frozen=True)
class CalendarEvent:
    start_time: datetime | date | None
    summary: str
    all_day: bool = False


@dataclass(frozen=True)
class TodoItem:
    text: str
    completed: bool = False


def _parse_iso(text: str) -> datetime | None:
    try:
        return datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_start(value: Any) -> tuple[datetime | date | None, bool]:
    """Event start and whether it is date-only; missing or unreadable starts have no time."""
    if isinstance(value, datetime):
        return value, False
    if isinstance(value, date):
        return value, True
    text = str(value or "").strip()
    # Date-only starts mark all-day events.
    if len(text) == 10:
        try:
            return date.fromisoformat(text), True
        except ValueError:
            return None, False
    return _parse_iso(text), False


@dataclass(frozen=True)
class DashboardModel:
    date: datetime
    weather: Weather | None = None
    events: tuple[CalendarEvent, ...] = ()
    todos: tuple[TodoItem, ...] = ()
    lang: str = "en"

    @classmethod
    def from_dict(cls, raw: dict[str, Any], now: datetime) -> "DashboardModel":
        weather_raw = raw.get("weather")
        weather = None
        if weather_raw:
            weather = Weather(
                temp=int(round(_as_float(weather_raw.get("temp"), 0.0))),
                condition=str(weather_raw.get("condition") or weather_raw.get("main") or ""),
            )

        events = []
        for item in raw.get("events") or []:
            start, date_only = _parse_start(item.get("startTime", item.get("start")))
            events.append(
                CalendarEvent(
                    start_time=start,
                    summary=str(item.get("summary") or ""),
                    all_day=_as_bool(item.get("allDay", date_only)),
                )
            )

        todos = [
            TodoItem(text=str(item.get("text") or ""), completed=_as_bool(item.get("completed", False)))
            for item in raw.get("todos") or []
        ]

        when = raw.get("date")
        return cls(
            date=(_parse_iso(when) if isinstance(when, str) else None) or now,
            weather=weather,
            events=tuple(events),
            todos=tuple(todos),
            lang=str(raw.get("lang") or "en"),
        )
