"""CLI entrypoints for InkFrame image and dashboard rendering."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from inkframe_core import load_config
from inkframe_core.config import DITHERING_IDS, FIT_MODES
from inkframe_core.logging_setup import configure_logging
from inkframe_renderer import (
    DashboardComposer,
    DashboardModel,
    RenderError,
    TransformOptions,
    TransformPipeline,
    list_algorithms,
    list_locales,
)


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _write(path: str, payload: bytes) -> str:
    out = Path(path).expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(payload)
    return str(out)


def _options_from_args(args: argparse.Namespace) -> TransformOptions:
    cfg = load_config()
    body = {
        "width": args.width if args.width is not None else cfg.render.width,
        "height": args.height if args.height is not None else cfg.render.height,
        "dithering": args.dithering or cfg.render.dithering,
        "fit": args.fit or cfg.render.fit,
        "brightness": args.brightness,
        "contrast": args.contrast,
        "sharpness": args.sharpness,
        "gamma": args.gamma,
        "rotation": args.rotation,
        "invert": args.invert,
        "flipH": args.flip_h,
        "flipV": args.flip_v,
        "textOverlay": args.text or "",
        "textPosition": args.text_position,
        "textSize": args.text_size,
    }
    if args.crop:
        body["crop"] = dict(zip(("x", "y", "w", "h"), args.crop))
    return TransformOptions.from_dict(body, strict=args.strict)


def _fail(exc: Exception) -> int:
    _print_json({"success": False, "error": type(exc).__name__, "detail": str(exc)})
    return 2


def cmd_render_image(args: argparse.Namespace) -> int:
    try:
        options = _options_from_args(args)
        source = Path(args.input).expanduser().read_bytes()
        result = TransformPipeline().process(source, options)
    except (RenderError, OSError) as exc:
        return _fail(exc)

    bitmap = result.bitmap()
    payload = {
        "success": True,
        "output": _write(args.output, bitmap.bytes),
        "headers": bitmap.headers(),
        "source_size": list(result.source_size),
        "options": options.to_dict(),
    }
    if args.preview:
        payload["preview"] = _write(args.preview, result.preview_png(dithered=not args.gray_preview))
    _print_json(payload)
    return 0


def cmd_render_dashboard(args: argparse.Namespace) -> int:
    cfg = load_config()
    raw: dict = {}
    if args.data:
        try:
            raw = json.loads(Path(args.data).expanduser().read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            return _fail(exc)
        if not isinstance(raw, dict):
            return _fail(ValueError("dashboard data must be a JSON object"))
    raw.setdefault("lang", cfg.dashboard.lang)
    if args.lang:
        raw["lang"] = args.lang

    model = DashboardModel.from_dict(raw, now=datetime.now())
    composer = DashboardComposer()
    bitmap = composer.render_bitmap(model)
    payload = {
        "success": True,
        "output": _write(args.output, bitmap.bytes),
        "headers": bitmap.headers(),
        "lang": model.lang,
        "events": len(model.events),
        "todos": len(model.todos),
    }
    if args.preview:
        payload["preview"] = _write(args.preview, composer.preview_png(model))
    _print_json(payload)
    return 0


def cmd_algorithms(_args: argparse.Namespace) -> int:
    _print_json([asdict(a) for a in list_algorithms()])
    return 0


def cmd_config(_args: argparse.Namespace) -> int:
    _print_json(asdict(load_config()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="inkframe", description="InkFrame e-ink rendering tools")
    sub = parser.add_subparsers(dest="command", required=True)

    img_cmd = sub.add_parser("render-image", help="Render a photo into a packed 1-bit frame")
    img_cmd.add_argument("input", help="Source image path (JPEG, PNG, ...)")
    img_cmd.add_argument("--output", required=True, help="Packed bitmap output path")
    img_cmd.add_argument("--preview", default=None, help="Optional PNG preview output path")
    img_cmd.add_argument("--gray-preview", action="store_true", help="Preview the tone-mapped image before dithering")
    img_cmd.add_argument("--width", type=int, default=None)
    img_cmd.add_argument("--height", type=int, default=None)
    img_cmd.add_argument("--dithering", choices=list(DITHERING_IDS), default=None)
    img_cmd.add_argument("--fit", choices=list(FIT_MODES), default=None)
    img_cmd.add_argument("--brightness", type=int, default=0)
    img_cmd.add_argument("--contrast", type=int, default=0)
    img_cmd.add_argument("--sharpness", type=int, default=0)
    img_cmd.add_argument("--gamma", type=float, default=1.0)
    img_cmd.add_argument("--rotation", type=int, default=0)
    img_cmd.add_argument("--invert", action="store_true")
    img_cmd.add_argument("--flip-h", action="store_true")
    img_cmd.add_argument("--flip-v", action="store_true")
    img_cmd.add_argument("--crop", type=float, nargs=4, metavar=("X", "Y", "W", "H"), default=None)
    img_cmd.add_argument("--text", default=None, help="Text overlay")
    img_cmd.add_argument("--text-position", choices=["top", "center", "bottom"], default="bottom")
    img_cmd.add_argument("--text-size", choices=["small", "medium", "large"], default="medium")
    img_cmd.add_argument("--strict", action="store_true", help="Reject out-of-range options instead of clamping")
    img_cmd.set_defaults(func=cmd_render_image)

    dash_cmd = sub.add_parser("render-dashboard", help="Render the calendar/weather/todo dashboard")
    dash_cmd.add_argument("--data", default=None, help="JSON file with weather, events and todos")
    dash_cmd.add_argument("--lang", choices=list_locales(), default=None)
    dash_cmd.add_argument("--output", required=True, help="Packed bitmap output path")
    dash_cmd.add_argument("--preview", default=None, help="Optional PNG preview output path")
    dash_cmd.set_defaults(func=cmd_render_dashboard)

    algo_cmd = sub.add_parser("algorithms", help="List dithering algorithms")
    algo_cmd.set_defaults(func=cmd_algorithms)

    cfg_cmd = sub.add_parser("config", help="Print effective configuration")
    cfg_cmd.set_defaults(func=cmd_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    cfg = load_config()
    configure_logging(keep_files=cfg.diagnostics.keep_log_files, console=False)
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
