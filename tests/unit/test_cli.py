import contextlib
import io
import json
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "apps" / "cli"))
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from inkframe_app.cli import build_parser
from inkframe_core.config import AppConfig


def run(argv):
    args = build_parser().parse_args(argv)
    out = io.StringIO()
    with mock.patch("inkframe_app.cli.load_config", return_value=AppConfig()):
        with contextlib.redirect_stdout(out):
            code = args.func(args)
    return code, json.loads(out.getvalue())


class CliParserTests(unittest.TestCase):
    def test_render_image_command(self):
        args = build_parser().parse_args(
            ["render-image", "photo.jpg", "--output", "out.bin", "--dithering", "atkinson", "--crop", "0", "0", "0.5", "0.5"]
        )
        self.assertEqual(args.command, "render-image")
        self.assertEqual(args.input, "photo.jpg")
        self.assertEqual(args.dithering, "atkinson")
        self.assertEqual(args.crop, [0.0, 0.0, 0.5, 0.5])
        self.assertFalse(args.strict)

    def test_render_dashboard_command(self):
        args = build_parser().parse_args(["render-dashboard", "--lang", "pl", "--output", "dash.bin"])
        self.assertEqual(args.command, "render-dashboard")
        self.assertEqual(args.lang, "pl")
        self.assertIsNone(args.data)

    def test_unknown_algorithm_rejected(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args(["render-image", "a.png", "--output", "b", "--dithering", "jarvis"])

    def test_command_required(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args([])


class CliCommandTests(unittest.TestCase):
    def test_algorithms(self):
        code, payload = run(["algorithms"])
        self.assertEqual(code, 0)
        self.assertEqual(len(payload), 7)
        self.assertEqual(payload[1]["id"], "floydSteinberg")

    def test_config(self):
        code, payload = run(["config"])
        self.assertEqual(code, 0)
        self.assertEqual(payload["render"]["width"], 200)

    def test_render_image(self):
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "in.png"
            Image.new("L", (80, 80), 128).save(src)
            out = Path(tmp) / "out.bin"
            preview = Path(tmp) / "out.png"
            code, payload = run(
                ["render-image", str(src), "--output", str(out), "--preview", str(preview), "--width", "40", "--height", "40"]
            )
            self.assertEqual(code, 0)
            self.assertEqual(out.stat().st_size, 200)
            self.assertEqual(payload["headers"]["X-Image-Width"], "40")
            self.assertTrue(preview.read_bytes().startswith(b"\x89PNG"))

    def test_render_image_strict_failure(self):
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "in.png"
            Image.new("L", (8, 8), 0).save(src)
            code, payload = run(
                ["render-image", str(src), "--output", str(Path(tmp) / "o.bin"), "--gamma", "5", "--strict"]
            )
            self.assertEqual(code, 2)
            self.assertEqual(payload["error"], "ConfigurationError")

    def test_render_image_bad_source(self):
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "in.png"
            src.write_bytes(b"garbage")
            code, payload = run(["render-image", str(src), "--output", str(Path(tmp) / "o.bin")])
            self.assertEqual(code, 2)
            self.assertEqual(payload["error"], "DecodeError")

    def test_render_image_missing_source(self):
        with tempfile.TemporaryDirectory() as tmp:
            code, payload = run(["render-image", str(Path(tmp) / "nope.png"), "--output", str(Path(tmp) / "o.bin")])
            self.assertEqual(code, 2)
            self.assertFalse(payload["success"])
            self.assertEqual(payload["error"], "FileNotFoundError")

    def test_render_dashboard_bad_data(self):
        with tempfile.TemporaryDirectory() as tmp:
            data = Path(tmp) / "data.json"
            data.write_text("{broken", encoding="utf-8")
            out = Path(tmp) / "dash.bin"
            code, payload = run(["render-dashboard", "--data", str(data), "--output", str(out)])
            self.assertEqual(code, 2)
            self.assertEqual(payload["error"], "JSONDecodeError")
            self.assertFalse(out.exists())

            data.write_text("[1, 2]", encoding="utf-8")
            code, payload = run(["render-dashboard", "--data", str(data), "--output", str(out)])
            self.assertEqual(code, 2)
            self.assertEqual(payload["error"], "ValueError")

            code, payload = run(["render-dashboard", "--data", str(Path(tmp) / "missing.json"), "--output", str(out)])
            self.assertEqual(code, 2)
            self.assertEqual(payload["error"], "FileNotFoundError")

    def test_render_dashboard(self):
        with tempfile.TemporaryDirectory() as tmp:
            data = Path(tmp) / "data.json"
            data.write_text(
                json.dumps({"weather": {"temp": 3, "condition": "Snow"}, "todos": [{"text": "Shovel"}]}),
                encoding="utf-8",
            )
            out = Path(tmp) / "dash.bin"
            code, payload = run(["render-dashboard", "--data", str(data), "--lang", "pl", "--output", str(out)])
            self.assertEqual(code, 0)
            self.assertEqual(out.stat().st_size, 5000)
            self.assertEqual(payload["lang"], "pl")
            self.assertEqual(payload["todos"], 1)


if __name__ == "__main__":
    unittest.main()
