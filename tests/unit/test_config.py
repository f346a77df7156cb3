import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))

from inkframe_core.config import AppConfig, load_config, save_config


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "missing.json"
            cfg = load_config(path)
            self.assertIsInstance(cfg, AppConfig)
            self.assertEqual((cfg.render.width, cfg.render.height), (200, 200))
            self.assertEqual(cfg.render.dithering, "floydSteinberg")
            self.assertEqual(cfg.weather.cache_ttl_s, 1800)
            self.assertEqual(cfg.dashboard.lang, "en")

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "config.json"
            cfg = load_config(path)
            cfg.render.dithering = "atkinson"
            cfg.dashboard.lang = "pl"
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.render.dithering, "atkinson")
            self.assertEqual(reloaded.dashboard.lang, "pl")

    def test_corrupt_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_config(path), AppConfig())

    def test_values_normalized(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            raw = {
                "render": {"width": 99999, "height": 0, "dithering": "jarvis", "fit": "zoom", "extra": 1},
                "weather": {"units": "kelvin", "cache_ttl_s": 5},
                "dashboard": {"lang": "PL"},
            }
            path.write_text(json.dumps(raw), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual((cfg.render.width, cfg.render.height), (2048, 1))
            self.assertEqual(cfg.render.dithering, "floydSteinberg")
            self.assertEqual(cfg.render.fit, "cover")
            self.assertFalse(hasattr(cfg.render, "extra"))
            self.assertEqual(cfg.weather.units, "metric")
            self.assertEqual(cfg.weather.cache_ttl_s, 60)
            self.assertEqual(cfg.dashboard.lang, "pl")


if __name__ == "__main__":
    unittest.main()
