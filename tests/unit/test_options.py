import json
import sys
import unittest
from datetime import date, datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from inkframe_renderer.errors import ConfigurationError
from inkframe_renderer.models import (
    DashboardModel,
    FitMode,
    TextPosition,
    TextSize,
    TransformOptions,
    normalize_rotation,
)


class TransformOptionsTests(unittest.TestCase):
    def test_defaults(self):
        opts = TransformOptions.from_dict({})
        self.assertEqual((opts.width, opts.height), (200, 200))
        self.assertEqual(opts.dithering, "floydSteinberg")
        self.assertEqual(opts.gamma, 1.0)
        self.assertIs(opts.fit, FitMode.COVER)
        self.assertIs(opts.text_position, TextPosition.BOTTOM)
        self.assertIs(opts.text_size, TextSize.MEDIUM)
        self.assertTrue(opts.crop.is_full())

    def test_out_of_range_clamped_and_logged(self):
        with self.assertLogs("inkframe.renderer.options", level="WARNING"):
            opts = TransformOptions.from_dict({"width": 5000, "brightness": -300, "gamma": 9})
        self.assertEqual(opts.width, 2048)
        self.assertEqual(opts.brightness, -100)
        self.assertEqual(opts.gamma, 2.0)

    def test_strict_rejects(self):
        with self.assertRaises(ConfigurationError) as ctx:
            TransformOptions.from_dict({"sharpness": 150}, strict=True)
        self.assertEqual(ctx.exception.field, "sharpness")
        self.assertEqual(ctx.exception.value, 150)

    def test_zero_gamma_means_default(self):
        self.assertEqual(TransformOptions.from_dict({"gamma": 0}).gamma, 1.0)

    def test_unknown_enums_fall_back(self):
        opts = TransformOptions.from_dict({"fit": "stretch", "textPosition": "left", "textSize": "huge"})
        self.assertIs(opts.fit, FitMode.COVER)
        self.assertIs(opts.text_position, TextPosition.BOTTOM)
        self.assertIs(opts.text_size, TextSize.MEDIUM)

    def test_text_scale(self):
        self.assertEqual(TransformOptions.from_dict({"textSize": "small"}).text_scale, 1)
        self.assertEqual(TransformOptions.from_dict({"textSize": "medium"}).text_scale, 1)
        self.assertEqual(TransformOptions.from_dict({"textSize": "large"}).text_scale, 2)

    def test_non_finite_numbers_take_defaults(self):
        opts = TransformOptions.from_dict(
            {"width": float("inf"), "height": "-Infinity", "rotation": "Infinity", "brightness": float("nan")}
        )
        self.assertEqual((opts.width, opts.height), (200, 200))
        self.assertEqual(opts.rotation, 0)
        self.assertEqual(opts.brightness, 0)

    def test_json_overflow_takes_default(self):
        body = json.loads('{"width": 1e999, "contrast": 1e999}')
        opts = TransformOptions.from_dict(body, strict=True)
        self.assertEqual(opts.width, 200)
        self.assertEqual(opts.contrast, 0)

    def test_direct_construction_with_infinity_is_normalized(self):
        self.assertEqual(TransformOptions(width=float("inf")).normalized().width, 200)
        self.assertEqual(normalize_rotation(float("inf")), 0)

    def test_legacy_crop_keys(self):
        opts = TransformOptions.from_dict({"cropX": 0.25, "cropY": 0.1, "cropW": 0.5, "cropH": 0.8})
        self.assertEqual((opts.crop.x, opts.crop.y, opts.crop.w, opts.crop.h), (0.25, 0.1, 0.5, 0.8))

    def test_string_flags(self):
        opts = TransformOptions.from_dict({"invert": "true", "flipH": "1", "flipV": "no"})
        self.assertTrue(opts.invert)
        self.assertTrue(opts.flip_h)
        self.assertFalse(opts.flip_v)

    def test_to_dict_uses_wire_names(self):
        body = TransformOptions.from_dict({"flipH": True, "textOverlay": "Hi"}).to_dict()
        self.assertTrue(body["flipH"])
        self.assertEqual(body["textOverlay"], "Hi")
        self.assertEqual(body["fit"], "cover")
        self.assertEqual(body["crop"], {"x": 0.0, "y": 0.0, "w": 1.0, "h": 1.0})
        self.assertEqual(TransformOptions.from_dict(body), TransformOptions.from_dict({"flipH": True, "textOverlay": "Hi"}))

    def test_rotation_snaps_to_quarter_turns(self):
        self.assertEqual(normalize_rotation(90), 90)
        self.assertEqual(normalize_rotation(100), 90)
        self.assertEqual(normalize_rotation(359), 0)
        self.assertEqual(normalize_rotation(-90), 270)
        self.assertEqual(normalize_rotation(450), 90)


class DashboardModelTests(unittest.TestCase):
    def test_from_dict(self):
        now = datetime(2024, 5, 1, 8, 0)
        model = DashboardModel.from_dict(
            {
                "weather": {"temp": 21.6, "main": "Clouds"},
                "events": [
                    {"startTime": "2024-05-01", "summary": "Holiday"},
                    {"startTime": "2024-05-01T09:30:00Z", "summary": "Standup"},
                ],
                "todos": [{"text": "Buy milk", "completed": True}, {"text": "Call mom"}],
                "lang": "pl",
            },
            now=now,
        )
        self.assertEqual(model.date, now)
        self.assertEqual(model.weather.temp, 22)
        self.assertEqual(model.weather.condition, "Clouds")
        self.assertTrue(model.events[0].all_day)
        self.assertEqual(model.events[0].start_time, date(2024, 5, 1))
        self.assertFalse(model.events[1].all_day)
        self.assertEqual(model.events[1].start_time.hour, 9)
        self.assertTrue(model.todos[0].completed)
        self.assertFalse(model.todos[1].completed)
        self.assertEqual(model.lang, "pl")

    def test_event_without_start(self):
        model = DashboardModel.from_dict(
            {"events": [{"summary": "Someday"}, {"startTime": "soon", "summary": "Later"}]},
            now=datetime(2024, 5, 1),
        )
        self.assertEqual(len(model.events), 2)
        for event in model.events:
            self.assertIsNone(event.start_time)
            self.assertFalse(event.all_day)
        self.assertEqual(model.events[0].summary, "Someday")

    def test_date_field_accepts_utc_suffix(self):
        now = datetime(2024, 5, 1)
        model = DashboardModel.from_dict({"date": "2024-06-02T10:00:00Z"}, now=now)
        self.assertEqual(model.date, datetime(2024, 6, 2, 10, 0, tzinfo=timezone.utc))
        self.assertEqual(DashboardModel.from_dict({"date": "not a date"}, now=now).date, now)

    def test_empty(self):
        now = datetime(2024, 5, 1)
        model = DashboardModel.from_dict({}, now=now)
        self.assertIsNone(model.weather)
        self.assertEqual(model.events, ())
        self.assertEqual(model.todos, ())
        self.assertEqual(model.lang, "en")


if __name__ == "__main__":
    unittest.main()
