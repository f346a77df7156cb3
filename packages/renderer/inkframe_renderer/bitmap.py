"""8-bit working rasters and the packed 1-bit wire format."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

import numpy as np
from PIL import Image

from .errors import RenderFailure

WHITE = 255
BLACK = 0
PACK_THRESHOLD = 127


def packed_length(width: int, height: int) -> int:
    return (width * height + 7) // 8


@dataclass(frozen=True)
class PackedBitmap:
    """MSB-first 1-bit raster, bit 1 = white. Width and height travel out of band."""

    width: int
    height: int
    bytes: bytes

    def __post_init__(self) -> None:
        expected = packed_length(self.width, self.height)
        if len(self.bytes) != expected:
            raise RenderFailure(
                f"packed bitmap length {len(self.bytes)} does not match {self.width}x{self.height} ({expected})"
            )

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/octet-stream",
            "X-Image-Width": str(self.width),
            "X-Image-Height": str(self.height),
        }

    def is_white(self, x: int, y: int) -> bool:
        i = y * self.width + x
        return bool((self.bytes[i >> 3] >> (7 - (i & 7))) & 1)

    def to_pixel_buffer(self) -> "PixelBuffer":
        bits = np.unpackbits(np.frombuffer(self.bytes, dtype=np.uint8))
        bits = bits[: self.width * self.height].reshape((self.height, self.width))
        return PixelBuffer(self.width, self.height, bits.astype(np.uint8) * WHITE)


class PixelBuffer:
    """Row-major grayscale raster, one byte per pixel, origin top-left.

    Values in [0, 255] are valid while the buffer is still "gray"; after
    dithering every pixel is either 0 (black) or 255 (white). Drawing
    primitives silently clip anything that falls outside the canvas.
    """

    def __init__(self, width: int, height: int, pixels: np.ndarray | None = None) -> None:
        if width < 1 or height < 1:
            raise RenderFailure(f"invalid buffer size {width}x{height}")
        self.width = width
        self.height = height
        if pixels is None:
            pixels = np.full((height, width), WHITE, dtype=np.uint8)
        elif pixels.shape != (height, width):
            raise RenderFailure(f"pixel array shape {pixels.shape} does not match {width}x{height}")
        self.pixels = np.ascontiguousarray(pixels, dtype=np.uint8)

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        return cls(width, height)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        if array.dtype == np.uint8:
            data = array.copy()
        else:
            data = np.clip(np.rint(array), 0, 255).astype(np.uint8)
        height, width = data.shape
        return cls(width, height, data)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        if image.mode != "L":
            image = image.convert("L")
        return cls.from_array(np.array(image, dtype=np.uint8))

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.pixels.copy())

    def get_pixel(self, x: int, y: int) -> int:
        return int(self.pixels[y, x])

    def set_pixel(self, x: int, y: int, is_black: bool) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            self.pixels[y, x] = BLACK if is_black else WHITE

    def fill_rect(self, x: int, y: int, w: int, h: int, is_black: bool) -> None:
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + w, self.width), min(y + h, self.height)
        if x0 < x1 and y0 < y1:
            self.pixels[y0:y1, x0:x1] = BLACK if is_black else WHITE

    def draw_hline(self, x: int, y: int, length: int, is_black: bool) -> None:
        self.fill_rect(x, y, length, 1, is_black)

    def draw_vline(self, x: int, y: int, length: int, is_black: bool) -> None:
        self.fill_rect(x, y, 1, length, is_black)

    def draw_rect(self, x: int, y: int, w: int, h: int, is_black: bool) -> None:
        if w <= 0 or h <= 0:
            return
        self.draw_hline(x, y, w, is_black)
        self.draw_hline(x, y + h - 1, w, is_black)
        self.draw_vline(x, y, h, is_black)
        self.draw_vline(x + w - 1, y, h, is_black)

    def invert(self) -> None:
        np.subtract(WHITE, self.pixels, out=self.pixels)

    def is_binary(self) -> bool:
        return bool(np.all((self.pixels == BLACK) | (self.pixels == WHITE)))

    def black_count(self) -> int:
        return int(np.count_nonzero(self.pixels <= PACK_THRESHOLD))

    def to_bitmap(self) -> PackedBitmap:
        # Gray values are thresholded here, not dithered.
        bits = (self.pixels > PACK_THRESHOLD).ravel()
        packed = np.packbits(bits, bitorder="big")
        return PackedBitmap(width=self.width, height=self.height, bytes=packed.tobytes())

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def to_png(self) -> bytes:
        buf = BytesIO()
        self.to_image().save(buf, format="PNG")
        return buf.getvalue()
