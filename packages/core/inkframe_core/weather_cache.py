"""TTL cache for weather lookups, keyed by location and unit system."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable

from .logging_setup import get_logger

DEFAULT_TTL_S = 30 * 60

_log = get_logger("weather_cache")

ICON_CONDITIONS = {
    "01": "Clear",
    "02": "Few clouds",
    "03": "Cloudy",
    "04": "Overcast",
    "09": "Showers",
    "10": "Rain",
    "11": "Thunder",
    "13": "Snow",
    "50": "Mist",
}


def describe_icon(code: str | None) -> str:
    """Short condition text for an OpenWeather icon code such as ``"10d"``."""
    if not code:
        return "Unknown"
    return ICON_CONDITIONS.get(code[:2], "Unknown")


def coordinates_key(lat: float, lon: float, units: str = "metric") -> tuple[Hashable, str]:
    return ((round(float(lat), 4), round(float(lon), 4)), units)


def city_key(city: str, units: str = "metric") -> tuple[Hashable, str]:
    return (f"city:{city.strip().lower()}", units)


@dataclass
class _Entry:
    value: Any
    stored_at: float


class WeatherCache:
    """Explicit cache object; construct one per process or per test."""

    def __init__(self, ttl_s: float = DEFAULT_TTL_S, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_s = ttl_s
        self._clock = clock
        self._entries: dict[tuple[Hashable, str], _Entry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _fresh(self, entry: _Entry) -> bool:
        return self._clock() - entry.stored_at < self.ttl_s

    def get(self, key: tuple[Hashable, str]) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not self._fresh(entry):
                return None
            return entry.value

    def get_stale(self, key: tuple[Hashable, str]) -> Any | None:
        """Last stored value regardless of age, for use when a refresh fails."""
        with self._lock:
            entry = self._entries.get(key)
            return entry.value if entry is not None else None

    def put(self, key: tuple[Hashable, str], value: Any) -> None:
        with self._lock:
            self._entries[key] = _Entry(value=value, stored_at=self._clock())

    def expire(self) -> int:
        with self._lock:
            dead = [k for k, e in self._entries.items() if not self._fresh(e)]
            for k in dead:
                del self._entries[k]
        if dead:
            _log.debug(f"expired {len(dead)} weather entries", extra={"event": "weather_cache_expired"})
        return len(dead)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_or_fetch(self, key: tuple[Hashable, str], fetch: Callable[[], Any]) -> Any | None:
        """Return a fresh value, calling ``fetch`` on a miss.

        When ``fetch`` raises, the stale value (if any) is returned instead.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        try:
            value = fetch()
        except Exception as exc:
            _log.warning(f"weather fetch failed: {exc}", extra={"event": "weather_fetch_failed"})
            return self.get_stale(key)
        if value is not None:
            self.put(key, value)
        return value
