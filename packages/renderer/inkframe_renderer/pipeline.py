"""Photo transform pipeline: source image bytes to a packed 1-bit frame.

Stage order is fixed: decode, rotate, crop, flip, resample, grayscale,
gamma, sharpen, brightness/contrast, normalize, dither, text overlay,
invert, pack. Rotation happens before the crop so crop fractions refer to
the frame the user sees after rotating.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from io import BytesIO

import numpy as np
from PIL import Image, ImageOps

from .bitmap import PackedBitmap, PixelBuffer
from .dithering import apply_dithering
from .errors import DecodeError, RenderError, RenderFailure
from .font import GLYPH_HEIGHT, BitmapFont
from .models import CropRect, FitMode, TextPosition, TransformOptions, normalize_rotation

_log = logging.getLogger("inkframe.renderer.pipeline")

RESAMPLE = Image.Resampling.BILINEAR
OVERLAY_PADDING = 4
OVERLAY_BAND_MARGIN = 2
NORMALIZE_PERCENTILES = (1.0, 99.0)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def decode_image(source: bytes) -> np.ndarray:
    """Decode to an RGB ``(height, width, 3)`` array, flattening alpha onto white."""
    if not source:
        raise DecodeError("empty image data")
    try:
        with Image.open(BytesIO(source)) as img:
            img.load()
            if img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info):
                rgba = img.convert("RGBA")
                background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
                rgb = Image.alpha_composite(background, rgba).convert("RGB")
            else:
                rgb = img.convert("RGB")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"cannot decode source image: {exc}") from exc
    return np.array(rgb, dtype=np.uint8)


def rotate(array: np.ndarray, degrees: float) -> np.ndarray:
    """Rotate clockwise by the nearest multiple of 90 degrees."""
    turns = normalize_rotation(degrees) // 90
    if turns == 0:
        return array
    return np.ascontiguousarray(np.rot90(array, k=-turns, axes=(0, 1)))


def crop_box(width: int, height: int, crop: CropRect) -> tuple[int, int, int, int]:
    """Absolute ``(left, top, width, height)`` for a fractional crop, never smaller than 1x1."""
    left = min(max(_round_half_up(crop.x * width), 0), width - 1)
    top = min(max(_round_half_up(crop.y * height), 0), height - 1)
    box_w = min(max(_round_half_up(crop.w * width), 1), width - left)
    box_h = min(max(_round_half_up(crop.h * height), 1), height - top)
    return left, top, box_w, box_h


def crop(array: np.ndarray, rect: CropRect) -> np.ndarray:
    if rect.is_full():
        return array
    height, width = array.shape[:2]
    left, top, box_w, box_h = crop_box(width, height, rect)
    return np.ascontiguousarray(array[top : top + box_h, left : left + box_w])


def flip(array: np.ndarray, horizontal: bool, vertical: bool) -> np.ndarray:
    if horizontal:
        array = array[:, ::-1]
    if vertical:
        array = array[::-1]
    return np.ascontiguousarray(array)


def resample(array: np.ndarray, width: int, height: int, fit: FitMode) -> Image.Image:
    image = Image.fromarray(array)
    size = (width, height)
    if fit is FitMode.CONTAIN:
        return ImageOps.pad(image, size, method=RESAMPLE, color=(255, 255, 255), centering=(0.5, 0.5))
    if fit is FitMode.FILL:
        return image.resize(size, RESAMPLE)
    return ImageOps.fit(image, size, method=RESAMPLE, centering=(0.5, 0.5))


def apply_gamma(gray: np.ndarray, gamma: float) -> np.ndarray:
    if gamma == 1.0:
        return gray
    return 255.0 * np.power(gray / 255.0, gamma)


def _gaussian_kernel(sigma: float) -> np.ndarray:
    radius = max(1, int(math.ceil(3 * sigma)))
    xs = np.arange(-radius, radius + 1, dtype=np.float64)
    kernel = np.exp(-(xs**2) / (2 * sigma * sigma))
    return kernel / kernel.sum()


def gaussian_blur(gray: np.ndarray, sigma: float) -> np.ndarray:
    kernel = _gaussian_kernel(sigma)
    radius = len(kernel) // 2
    height, width = gray.shape

    padded = np.pad(gray, ((0, 0), (radius, radius)), mode="edge")
    rows = np.zeros_like(gray)
    for i, weight in enumerate(kernel):
        rows += weight * padded[:, i : i + width]

    padded = np.pad(rows, ((radius, radius), (0, 0)), mode="edge")
    out = np.zeros_like(gray)
    for i, weight in enumerate(kernel):
        out += weight * padded[i : i + height, :]
    return out


def apply_sharpen(gray: np.ndarray, sharpness: int) -> np.ndarray:
    """Unsharp mask; blur radius and strength both grow with ``sharpness`` (0..100)."""
    if sharpness <= 0:
        return gray
    sigma = 0.5 + (sharpness / 100) * 2
    amount = (sharpness / 100) * 1.5
    blurred = gaussian_blur(gray, sigma)
    return np.clip(gray + amount * (gray - blurred), 0.0, 255.0)


def apply_linear(gray: np.ndarray, brightness: int, contrast: int) -> np.ndarray:
    if brightness == 0 and contrast == 0:
        return gray
    multiplier = 1 + contrast / 100
    offset = brightness * 2.55
    return np.clip(multiplier * gray + offset, 0.0, 255.0)


def apply_normalize(gray: np.ndarray) -> np.ndarray:
    """Stretch the 1st..99th percentile range to 0..255; flat images pass through."""
    low, high = np.percentile(gray, NORMALIZE_PERCENTILES)
    if high - low < 1.0:
        return gray
    return np.clip((gray - low) * (255.0 / (high - low)), 0.0, 255.0)


@dataclass(frozen=True)
class RenderResult:
    buffer: PixelBuffer
    gray: PixelBuffer
    options: TransformOptions
    source_size: tuple[int, int]
    region_size: tuple[int, int]

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    def bitmap(self) -> PackedBitmap:
        return self.buffer.to_bitmap()

    def preview_png(self, dithered: bool = True) -> bytes:
        return (self.buffer if dithered else self.gray).to_png()


class TransformPipeline:
    def __init__(self, font: BitmapFont | None = None) -> None:
        self.font = font or BitmapFont()

    def process(self, source: bytes, options: TransformOptions | None = None) -> RenderResult:
        opts = (options or TransformOptions()).normalized()
        rgb = decode_image(source)
        try:
            return self._run(rgb, opts)
        except RenderError:
            raise
        except Exception as exc:
            _log.exception("image render failed", extra={"event": "render_failed"})
            raise RenderFailure("image render failed") from exc

    def _run(self, rgb: np.ndarray, opts: TransformOptions) -> RenderResult:
        source_size = (rgb.shape[1], rgb.shape[0])

        region = rotate(rgb, opts.rotation)
        region = crop(region, opts.crop)
        region_size = (region.shape[1], region.shape[0])
        region = flip(region, opts.flip_h, opts.flip_v)
        _log.debug(
            f"source {source_size[0]}x{source_size[1]} -> region {region_size[0]}x{region_size[1]}",
            extra={"event": "region_extracted"},
        )

        resized = resample(region, opts.width, opts.height, opts.fit)
        gray = np.asarray(resized.convert("L"), dtype=np.float64)
        self._check_size(gray, opts)

        gray = apply_gamma(gray, opts.gamma)
        gray = apply_sharpen(gray, opts.sharpness)
        gray = apply_linear(gray, opts.brightness, opts.contrast)
        gray = apply_normalize(gray)
        gray_buf = PixelBuffer.from_array(gray)

        out = apply_dithering(gray_buf, opts.dithering)
        text = opts.text_overlay.strip()
        if text:
            self._overlay_text(out, text, opts.text_position, opts.text_scale)
        if opts.invert:
            out.invert()

        _log.info(
            f"rendered {out.width}x{out.height} with {opts.dithering}",
            extra={"event": "image_rendered"},
        )
        return RenderResult(
            buffer=out,
            gray=gray_buf,
            options=opts,
            source_size=source_size,
            region_size=region_size,
        )

    @staticmethod
    def _check_size(gray: np.ndarray, opts: TransformOptions) -> None:
        if gray.shape != (opts.height, opts.width):
            _log.error(
                f"resample produced {gray.shape[1]}x{gray.shape[0]}, expected {opts.width}x{opts.height}",
                extra={"event": "dimension_mismatch"},
            )
            raise RenderFailure("dimension mismatch after resample")

    def _overlay_text(self, buf: PixelBuffer, text: str, position: TextPosition, scale: int) -> None:
        char_height = GLYPH_HEIGHT * scale
        if position is TextPosition.TOP:
            y = OVERLAY_PADDING
        elif position is TextPosition.CENTER:
            y = (buf.height - char_height) // 2
        else:
            y = buf.height - char_height - OVERLAY_PADDING

        buf.fill_rect(0, y - OVERLAY_BAND_MARGIN, buf.width, char_height + 2 * OVERLAY_BAND_MARGIN, is_black=False)
        self.font.draw_text_centered(buf, y, text, scale, is_black=True)


def generate_bitmap(source: bytes, options: TransformOptions | None = None) -> PackedBitmap:
    return TransformPipeline().process(source, options).bitmap()


def generate_preview(source: bytes, options: TransformOptions | None = None) -> bytes:
    return TransformPipeline().process(source, options).preview_png()
