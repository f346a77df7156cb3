import sys
import unittest
from datetime import date, datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from inkframe_renderer.dashboard import (
    DashboardComposer,
    HLineOp,
    LargeNumberOp,
    RectOp,
    TextOp,
    render_placeholder,
)
from inkframe_renderer.locales import get_locale, list_locales, truncate_text
from inkframe_renderer.models import CalendarEvent, DashboardModel, TodoItem, Weather

NOW = datetime(2024, 5, 1, 8, 0)


def texts(ops):
    return [op.text for op in ops if isinstance(op, TextOp)]


class LocaleTests(unittest.TestCase):
    def test_available(self):
        self.assertEqual(list_locales(), ["en", "pl"])

    def test_unknown_falls_back_to_english(self):
        self.assertEqual(get_locale("de").code, "en")
        self.assertEqual(get_locale(None).code, "en")
        self.assertEqual(get_locale("PL").code, "pl")

    def test_truncate(self):
        en = get_locale("en")
        self.assertEqual(truncate_text("short", 10, en), "short")
        long = truncate_text("x" * 40, 31, en)
        self.assertEqual(len(long), 31)
        self.assertTrue(long.endswith(".."))
        self.assertEqual(truncate_text(None, 5, en), "")

    def test_strips_unrenderable_characters(self):
        self.assertEqual(truncate_text("Zażółć", 10, get_locale("en")), "Za")
        self.assertEqual(truncate_text("Zażółć", 10, get_locale("pl")), "Zażółć")
        self.assertEqual(truncate_text("Party 🎉", 10, get_locale("en")), "Party ")


class DashboardLayoutTests(unittest.TestCase):
    def test_empty_english(self):
        ops = DashboardComposer().layout(DashboardModel(date=NOW))
        labels = texts(ops)
        for expected in ("EVENTS", "No events today", "TO-DO", "No tasks", "Wed", "May 2024"):
            self.assertIn(expected, labels)
        self.assertFalse([op for op in ops if isinstance(op, TextOp) and op.scale == 2])
        self.assertIn(LargeNumberOp(8, 11, 1, scale=2, is_black=False), ops)
        self.assertEqual(ops[0], RectOp(0, 0, 200, 50, filled=True))
        self.assertEqual(ops[-1], HLineOp(0, 199, 200))

    def test_polish(self):
        labels = texts(DashboardComposer().layout(DashboardModel(date=NOW, lang="pl")))
        for expected in ("WYDARZENIA", "Brak wydarzeń", "ZADANIA", "Brak zadań", "Śr", "Maj 2024"):
            self.assertIn(expected, labels)

    def test_weather(self):
        model = DashboardModel(date=NOW, weather=Weather(temp=21, condition="Partly cloudy today"))
        ops = DashboardComposer().layout(model)
        temp = [op for op in ops if isinstance(op, TextOp) and op.text == "21C"]
        self.assertEqual(len(temp), 1)
        self.assertEqual((temp[0].x, temp[0].y, temp[0].scale), (158, 10, 2))
        self.assertFalse(temp[0].is_black)
        self.assertIn("Partly clo..", texts(ops))

    def test_events(self):
        events = (
            CalendarEvent(datetime(2024, 5, 1, 9, 30), "Standup"),
            CalendarEvent(date(2024, 5, 1), "Holiday", all_day=True),
            CalendarEvent(datetime(2024, 5, 1, 12, 0), "Lunch with a very long description attached"),
            CalendarEvent(datetime(2024, 5, 1, 18, 0), "Dropped"),
        )
        labels = texts(DashboardComposer().layout(DashboardModel(date=NOW, events=events)))
        self.assertIn("09:30 Standup", labels)
        self.assertIn("All day Holiday", labels)
        lunch = [t for t in labels if t.startswith("12:00")]
        self.assertEqual(len(lunch[0]), 31)
        self.assertTrue(lunch[0].endswith(".."))
        self.assertFalse([t for t in labels if "Dropped" in t])

    def test_event_without_time_shows_summary_only(self):
        events = (CalendarEvent(None, "Someday"),)
        labels = texts(DashboardComposer().layout(DashboardModel(date=NOW, events=events)))
        self.assertIn("Someday", labels)

    def test_event_without_start_from_data_renders(self):
        model = DashboardModel.from_dict({"events": [{"summary": "Someday"}]}, now=NOW)
        bitmap = DashboardComposer().render_bitmap(model)
        self.assertEqual(len(bitmap.bytes), 5000)

    def test_todos(self):
        todos = tuple(TodoItem(f"Task {i}", completed=(i == 0)) for i in range(6))
        ops = DashboardComposer().layout(DashboardModel(date=NOW, todos=todos))
        boxes = [op for op in ops if isinstance(op, RectOp) and op.w == 7]
        self.assertEqual(len(boxes), 4)
        self.assertTrue(boxes[0].filled)
        self.assertFalse(boxes[1].filled)
        self.assertIn("Task 3", texts(ops))
        self.assertNotIn("Task 4", texts(ops))


class DashboardRenderTests(unittest.TestCase):
    def test_compose(self):
        buf = DashboardComposer().compose(DashboardModel(date=NOW))
        self.assertEqual((buf.width, buf.height), (200, 200))
        self.assertTrue(buf.is_binary())
        self.assertEqual(buf.get_pixel(0, 0), 0)
        self.assertEqual(buf.get_pixel(100, 199), 0)
        self.assertEqual(buf.get_pixel(199, 120), 255)

    def test_render_bitmap(self):
        with self.assertLogs("inkframe.renderer.dashboard", level="INFO"):
            bitmap = DashboardComposer().render_bitmap(DashboardModel(date=NOW))
        self.assertEqual(len(bitmap.bytes), 5000)
        self.assertEqual(bitmap.headers()["X-Image-Width"], "200")

    def test_placeholder(self):
        bitmap = render_placeholder(NOW, lang="pl")
        self.assertEqual(len(bitmap.bytes), 5000)

    def test_preview_png(self):
        png = DashboardComposer().preview_png(DashboardModel(date=NOW))
        self.assertTrue(png.startswith(b"\x89PNG"))


if __name__ == "__main__":
    unittest.main()
