"""Built-in dashboard locales."""

from __future__ import annotations

import string
from dataclasses import dataclass

DEFAULT_LOCALE = "en"

_BASE_CHARS = frozenset(string.ascii_letters + string.digits + " .,:;!?-_+=/()[]'\"#%&*<>@")


@dataclass(frozen=True)
class Locale:
    code: str
    weekdays: tuple[str, ...]  # Monday first, matching date.weekday()
    months: tuple[str, ...]
    events_header: str
    todo_header: str
    no_events: str
    no_tasks: str
    all_day: str
    allowed_chars: frozenset[str] = _BASE_CHARS


LOCALES: dict[str, Locale] = {
    "en": Locale(
        code="en",
        weekdays=("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
        months=("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
        events_header="EVENTS",
        todo_header="TO-DO",
        no_events="No events today",
        no_tasks="No tasks",
        all_day="All day",
    ),
    "pl": Locale(
        code="pl",
        weekdays=("Pon", "Wt", "Śr", "Czw", "Pt", "Sob", "Nd"),
        months=("Sty", "Lut", "Mar", "Kwi", "Maj", "Cze", "Lip", "Sie", "Wrz", "Paź", "Lis", "Gru"),
        events_header="WYDARZENIA",
        todo_header="ZADANIA",
        no_events="Brak wydarzeń",
        no_tasks="Brak zadań",
        all_day="Cały dzień",
        allowed_chars=_BASE_CHARS | frozenset("ĄĆĘŁŃÓŚŹŻąćęłńóśźż"),
    ),
}


def list_locales() -> list[str]:
    return sorted(LOCALES.keys())


def get_locale(code: str | None) -> Locale:
    if not code:
        return LOCALES[DEFAULT_LOCALE]
    return LOCALES.get(code.lower(), LOCALES[DEFAULT_LOCALE])


def sanitize_text(text: str, locale: Locale) -> str:
    allowed = locale.allowed_chars
    return "".join(ch for ch in text if ch in allowed)


def truncate_text(text: str | None, max_len: int, locale: Locale, marker: str = "..") -> str:
    """Strip characters the locale cannot render, then shorten to ``max_len``."""
    if not text:
        return ""
    clean = sanitize_text(text, locale)
    if len(clean) <= max_len:
        return clean
    return clean[: max(max_len - len(marker), 0)] + marker
