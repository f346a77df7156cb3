"""Two-level dithering algorithms for 1-bit e-ink output."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np

from .bitmap import PixelBuffer

_log = logging.getLogger("inkframe.renderer.dithering")

THRESHOLD = 127
DEFAULT_ALGORITHM = "floydSteinberg"


@dataclass(frozen=True)
class ErrorKernel:
    """Error diffusion taps as (dy, dx, weight), divided by ``divisor``."""

    name: str
    taps: tuple[tuple[int, int, int], ...]
    divisor: int

    @property
    def diffused_fraction(self) -> float:
        return sum(w for _dy, _dx, w in self.taps) / self.divisor


FLOYD_STEINBERG = ErrorKernel(
    name="floydSteinberg",
    taps=((0, 1, 7), (1, -1, 3), (1, 0, 5), (1, 1, 1)),
    divisor=16,
)

# Six taps at 1/8; the remaining 2/8 of the error is dropped, which lightens the result.
ATKINSON = ErrorKernel(
    name="atkinson",
    taps=((0, 1, 1), (0, 2, 1), (1, -1, 1), (1, 0, 1), (1, 1, 1), (2, 0, 1)),
    divisor=8,
)

SIERRA_LITE = ErrorKernel(
    name="sierra",
    taps=((0, 1, 2), (1, -1, 1), (1, 0, 1)),
    divisor=4,
)

STUCKI = ErrorKernel(
    name="stucki",
    taps=(
        (0, 1, 8), (0, 2, 4),
        (1, -2, 2), (1, -1, 4), (1, 0, 8), (1, 1, 4), (1, 2, 2),
        (2, -2, 1), (2, -1, 2), (2, 0, 4), (2, 1, 2), (2, 2, 1),
    ),
    divisor=42,
)

BAYER_4X4 = np.array(
    [
        [0, 8, 2, 10],
        [12, 4, 14, 6],
        [3, 11, 1, 9],
        [15, 7, 13, 5],
    ],
    dtype=np.float64,
) / 16 * 255

BAYER_8X8 = np.array(
    [
        [0, 32, 8, 40, 2, 34, 10, 42],
        [48, 16, 56, 24, 50, 18, 58, 26],
        [12, 44, 4, 36, 14, 46, 6, 38],
        [60, 28, 52, 20, 62, 30, 54, 22],
        [3, 35, 11, 43, 1, 33, 9, 41],
        [51, 19, 59, 27, 49, 17, 57, 25],
        [15, 47, 7, 39, 13, 45, 5, 37],
        [63, 31, 55, 23, 61, 29, 53, 21],
    ],
    dtype=np.float64,
) / 64 * 255


@dataclass(frozen=True)
class DitheringAlgorithm:
    id: str
    name: str
    description: str


ALGORITHMS: tuple[DitheringAlgorithm, ...] = (
    DitheringAlgorithm("none", "None (Threshold)", "Simple black/white threshold"),
    DitheringAlgorithm("floydSteinberg", "Floyd-Steinberg", "Classic error diffusion, best overall quality"),
    DitheringAlgorithm("atkinson", "Atkinson", "Lighter result, great for E-ink displays"),
    DitheringAlgorithm("sierra", "Sierra Lite", "Fast with good quality"),
    DitheringAlgorithm("stucki", "Stucki", "Smooth gradients, larger error diffusion"),
    DitheringAlgorithm("ordered", "Ordered 4x4", "Pattern-based, retro look"),
    DitheringAlgorithm("bayer", "Bayer 8x8", "Larger pattern, smoother gradients"),
)

ALGORITHM_IDS = frozenset(a.id for a in ALGORITHMS)


def list_algorithms() -> list[DitheringAlgorithm]:
    return list(ALGORITHMS)


def threshold(buf: PixelBuffer, level: int = THRESHOLD) -> PixelBuffer:
    out = np.where(buf.pixels > level, 255, 0).astype(np.uint8)
    return PixelBuffer(buf.width, buf.height, out)


def ordered(buf: PixelBuffer, matrix: np.ndarray = BAYER_4X4) -> PixelBuffer:
    n = matrix.shape[0]
    reps_y = -(-buf.height // n)
    reps_x = -(-buf.width // n)
    thresholds = np.tile(matrix, (reps_y, reps_x))[: buf.height, : buf.width]
    out = np.where(buf.pixels > thresholds, 255, 0).astype(np.uint8)
    return PixelBuffer(buf.width, buf.height, out)


def bayer(buf: PixelBuffer) -> PixelBuffer:
    return ordered(buf, BAYER_8X8)


def error_diffusion(buf: PixelBuffer, kernel: ErrorKernel) -> PixelBuffer:
    """Quantize in raster order, pushing each residual forward through ``kernel``.

    Later pixels read values already updated by earlier ones, so the scan
    order is part of the result. Taps that land outside the raster are dropped.
    """
    width, height = buf.width, buf.height
    work = buf.pixels.astype(np.float64).ravel().tolist()
    out = bytearray(width * height)
    taps = [(dy, dx, dy * width + dx, weight / kernel.divisor) for dy, dx, weight in kernel.taps]

    for y in range(height):
        row = y * width
        for x in range(width):
            idx = row + x
            old = work[idx]
            new = 255 if old > THRESHOLD else 0
            out[idx] = new
            err = old - new
            if err == 0:
                continue
            for dy, dx, offset, fraction in taps:
                nx = x + dx
                if 0 <= nx < width and y + dy < height:
                    work[idx + offset] += err * fraction

    pixels = np.frombuffer(out, dtype=np.uint8).reshape((height, width))
    return PixelBuffer(width, height, pixels)


def floyd_steinberg(buf: PixelBuffer) -> PixelBuffer:
    return error_diffusion(buf, FLOYD_STEINBERG)


def atkinson(buf: PixelBuffer) -> PixelBuffer:
    return error_diffusion(buf, ATKINSON)


def sierra_lite(buf: PixelBuffer) -> PixelBuffer:
    return error_diffusion(buf, SIERRA_LITE)


def stucki(buf: PixelBuffer) -> PixelBuffer:
    return error_diffusion(buf, STUCKI)


_DISPATCH: dict[str, Callable[[PixelBuffer], PixelBuffer]] = {
    "none": threshold,
    "floydSteinberg": floyd_steinberg,
    "atkinson": atkinson,
    "sierra": sierra_lite,
    "stucki": stucki,
    "ordered": ordered,
    "bayer": bayer,
}


def apply_dithering(buf: PixelBuffer, algorithm: str | None) -> PixelBuffer:
    func = _DISPATCH.get(algorithm or "none")
    if func is None:
        _log.warning(
            f"unknown dithering algorithm {algorithm!r}, using threshold",
            extra={"event": "dithering_fallback"},
        )
        func = threshold
    return func(buf)
