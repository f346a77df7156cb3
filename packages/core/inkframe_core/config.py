"""Persistent app settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


CONFIG_VERSION = 1

DITHERING_IDS = ("none", "floydSteinberg", "atkinson", "sierra", "stucki", "ordered", "bayer")
FIT_MODES = ("cover", "contain", "fill")
UNIT_SYSTEMS = ("metric", "imperial", "standard")


@dataclass
class RenderConfig:
    width: int = 200
    height: int = 200
    dithering: str = "floydSteinberg"
    fit: str = "cover"


@dataclass
class DashboardConfig:
    lang: str = "en"


@dataclass
class WeatherConfig:
    units: str = "metric"
    cache_ttl_s: int = 1800


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    render: RenderConfig = field(default_factory=RenderConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


DEFAULT_CONFIG = AppConfig()


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "InkFrame"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "InkFrame"
    return Path.home() / ".config" / "inkframe"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_render(cfg: AppConfig) -> None:
    cfg.render.width = max(1, min(2048, int(cfg.render.width)))
    cfg.render.height = max(1, min(2048, int(cfg.render.height)))
    if cfg.render.dithering not in DITHERING_IDS:
        cfg.render.dithering = "floydSteinberg"
    if cfg.render.fit not in FIT_MODES:
        cfg.render.fit = "cover"


def _normalize_weather(cfg: AppConfig) -> None:
    if cfg.weather.units not in UNIT_SYSTEMS:
        cfg.weather.units = "metric"
    cfg.weather.cache_ttl_s = max(60, int(cfg.weather.cache_ttl_s))


def _normalize_dashboard(cfg: AppConfig) -> None:
    cfg.dashboard.lang = str(cfg.dashboard.lang or "en").lower()
    cfg.diagnostics.keep_log_files = max(2, int(cfg.diagnostics.keep_log_files))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=int(raw.get("config_version", CONFIG_VERSION)),
        render=_merge(RenderConfig, raw.get("render", {})),
        dashboard=_merge(DashboardConfig, raw.get("dashboard", {})),
        weather=_merge(WeatherConfig, raw.get("weather", {})),
        diagnostics=_merge(DiagnosticsConfig, raw.get("diagnostics", {})),
    )

    _normalize_render(cfg)
    _normalize_weather(cfg)
    _normalize_dashboard(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
