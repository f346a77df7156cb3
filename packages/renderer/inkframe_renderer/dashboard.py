"""Dashboard composer for the 200x200 1-bit panel."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from .bitmap import PackedBitmap, PixelBuffer
from .font import BitmapFont
from .locales import Locale, get_locale, truncate_text
from .models import CalendarEvent, DashboardModel, TodoItem

_log = logging.getLogger("inkframe.renderer.dashboard")

WIDTH = 200
HEIGHT = 200

HEADER_HEIGHT = 50
MARGIN = 8
LINE_HEIGHT = 11
MAX_EVENTS = 3
MAX_TODOS = 4
EVENT_COLUMNS = 31
TODO_COLUMNS = 28
CONDITION_COLUMNS = 12
CHECKBOX_SIZE = 7


@dataclass(frozen=True)
class TextOp:
    x: int
    y: int
    text: str
    scale: int = 1
    is_black: bool = True


@dataclass(frozen=True)
class LargeNumberOp:
    x: int
    y: int
    value: int
    scale: int = 1
    is_black: bool = True


@dataclass(frozen=True)
class RectOp:
    x: int
    y: int
    w: int
    h: int
    filled: bool = True
    is_black: bool = True


@dataclass(frozen=True)
class HLineOp:
    x: int
    y: int
    length: int
    is_black: bool = True


DrawOp = TextOp | LargeNumberOp | RectOp | HLineOp


class DashboardComposer:
    """Lays out date, weather, events and todos with the embedded bitmap font."""

    def __init__(self, width: int = WIDTH, height: int = HEIGHT, font: BitmapFont | None = None) -> None:
        self.width = width
        self.height = height
        self.font = font or BitmapFont()

    def compose(self, model: DashboardModel) -> PixelBuffer:
        buf = PixelBuffer.blank(self.width, self.height)
        for op in self.layout(model):
            self._paint(buf, op)
        return buf

    def render_bitmap(self, model: DashboardModel) -> PackedBitmap:
        # Synthetic content is already two-level, so no dithering pass.
        bitmap = self.compose(model).to_bitmap()
        _log.info(
            f"dashboard rendered lang={model.lang} events={len(model.events)} todos={len(model.todos)}",
            extra={"event": "dashboard_rendered"},
        )
        return bitmap

    def preview_png(self, model: DashboardModel) -> bytes:
        return self.compose(model).to_png()

    def layout(self, model: DashboardModel) -> list[DrawOp]:
        locale = get_locale(model.lang)
        ops: list[DrawOp] = []
        self._layout_header(ops, model, locale)
        y = self._layout_events(ops, model.events, locale, HEADER_HEIGHT + 6)
        ops.append(HLineOp(MARGIN, y + 2, self.width - 2 * MARGIN))
        self._layout_todos(ops, model.todos, locale, y + 8)
        ops.append(HLineOp(0, self.height - 1, self.width))
        return ops

    def _layout_header(self, ops: list[DrawOp], model: DashboardModel, locale: Locale) -> None:
        now: datetime = model.date
        ops.append(RectOp(0, 0, self.width, HEADER_HEIGHT, filled=True))
        ops.append(LargeNumberOp(MARGIN, 11, now.day, scale=2, is_black=False))
        ops.append(TextOp(58, 13, locale.weekdays[now.weekday()], is_black=False))
        ops.append(TextOp(58, 28, f"{locale.months[now.month - 1]} {now.year}", is_black=False))

        if model.weather is not None:
            temp = f"{model.weather.temp}C"
            ops.append(TextOp(self._right(temp, 2), 10, temp, scale=2, is_black=False))
            condition = truncate_text(model.weather.condition, CONDITION_COLUMNS, locale)
            if condition:
                ops.append(TextOp(self._right(condition, 1), 32, condition, is_black=False))

    def _layout_events(self, ops: list[DrawOp], events: tuple[CalendarEvent, ...], locale: Locale, y: int) -> int:
        ops.append(TextOp(MARGIN, y, locale.events_header))
        y += LINE_HEIGHT + 1
        if not events:
            ops.append(TextOp(MARGIN, y, locale.no_events))
            return y + LINE_HEIGHT

        for event in events[:MAX_EVENTS]:
            if event.all_day:
                row = f"{locale.all_day} {event.summary}"
            elif isinstance(event.start_time, datetime):
                row = f"{event.start_time.strftime('%H:%M')} {event.summary}"
            elif event.start_time is None:
                row = event.summary
            else:
                row = f"{locale.all_day} {event.summary}"
            ops.append(TextOp(MARGIN, y, truncate_text(row, EVENT_COLUMNS, locale)))
            y += LINE_HEIGHT
        return y

    def _layout_todos(self, ops: list[DrawOp], todos: tuple[TodoItem, ...], locale: Locale, y: int) -> int:
        ops.append(TextOp(MARGIN, y, locale.todo_header))
        y += LINE_HEIGHT + 1
        if not todos:
            ops.append(TextOp(MARGIN, y, locale.no_tasks))
            return y + LINE_HEIGHT

        for todo in todos[:MAX_TODOS]:
            ops.append(RectOp(MARGIN, y, CHECKBOX_SIZE, CHECKBOX_SIZE, filled=todo.completed))
            ops.append(TextOp(MARGIN + CHECKBOX_SIZE + 4, y, truncate_text(todo.text, TODO_COLUMNS, locale)))
            y += LINE_HEIGHT
        return y

    def _right(self, text: str, scale: int) -> int:
        return self.width - MARGIN - self.font.text_width(text, scale)

    def _paint(self, buf: PixelBuffer, op: DrawOp) -> None:
        if isinstance(op, TextOp):
            self.font.draw_text(buf, op.x, op.y, op.text, op.scale, op.is_black)
        elif isinstance(op, LargeNumberOp):
            self.font.draw_large_number(buf, op.x, op.y, op.value, op.scale, op.is_black)
        elif isinstance(op, RectOp):
            if op.filled:
                buf.fill_rect(op.x, op.y, op.w, op.h, op.is_black)
            else:
                buf.draw_rect(op.x, op.y, op.w, op.h, op.is_black)
        elif isinstance(op, HLineOp):
            buf.draw_hline(op.x, op.y, op.length, op.is_black)


def render_placeholder(now: datetime, lang: str = "en") -> PackedBitmap:
    """Dashboard with no weather, events or todos, for devices without data yet."""
    return DashboardComposer().render_bitmap(DashboardModel(date=now, lang=lang))
