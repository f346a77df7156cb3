"""Embedded 5x7 bitmap font and 10x14 large digits."""

from __future__ import annotations

from datetime import date
from types import MappingProxyType
from typing import Mapping

from .bitmap import PixelBuffer

GLYPH_WIDTH = 5
GLYPH_HEIGHT = 7
# Bit 7 holds ogonek and descender tails below the 7-row body.
GLYPH_ROWS = 8
GLYPH_SPACING = 1

LARGE_DIGIT_WIDTH = 10
LARGE_DIGIT_HEIGHT = 14
LARGE_DIGIT_SPACING = 2

PLACEHOLDER_GLYPH = (0x7F, 0x41, 0x41, 0x41, 0x7F)

# Column-major, bit 0 is the top row.
STANDARD_GLYPHS: Mapping[str, tuple[int, ...]] = MappingProxyType({
    "A": (0x7E, 0x11, 0x11, 0x11, 0x7E), "B": (0x7F, 0x49, 0x49, 0x49, 0x36), "C": (0x3E, 0x41, 0x41, 0x41, 0x22),
    "D": (0x7F, 0x41, 0x41, 0x22, 0x1C), "E": (0x7F, 0x49, 0x49, 0x49, 0x41), "F": (0x7F, 0x09, 0x09, 0x09, 0x01),
    "G": (0x3E, 0x41, 0x49, 0x49, 0x7A), "H": (0x7F, 0x08, 0x08, 0x08, 0x7F), "I": (0x00, 0x41, 0x7F, 0x41, 0x00),
    "J": (0x20, 0x40, 0x41, 0x3F, 0x01), "K": (0x7F, 0x08, 0x14, 0x22, 0x41), "L": (0x7F, 0x40, 0x40, 0x40, 0x40),
    "M": (0x7F, 0x02, 0x0C, 0x02, 0x7F), "N": (0x7F, 0x04, 0x08, 0x10, 0x7F), "O": (0x3E, 0x41, 0x41, 0x41, 0x3E),
    "P": (0x7F, 0x09, 0x09, 0x09, 0x06), "Q": (0x3E, 0x41, 0x51, 0x21, 0x5E), "R": (0x7F, 0x09, 0x19, 0x29, 0x46),
    "S": (0x46, 0x49, 0x49, 0x49, 0x31), "T": (0x01, 0x01, 0x7F, 0x01, 0x01), "U": (0x3F, 0x40, 0x40, 0x40, 0x3F),
    "V": (0x1F, 0x20, 0x40, 0x20, 0x1F), "W": (0x3F, 0x40, 0x38, 0x40, 0x3F), "X": (0x63, 0x14, 0x08, 0x14, 0x63),
    "Y": (0x07, 0x08, 0x70, 0x08, 0x07), "Z": (0x61, 0x51, 0x49, 0x45, 0x43),
    "a": (0x20, 0x54, 0x54, 0x54, 0x78), "b": (0x7F, 0x48, 0x44, 0x44, 0x38), "c": (0x38, 0x44, 0x44, 0x44, 0x20),
    "d": (0x38, 0x44, 0x44, 0x48, 0x7F), "e": (0x38, 0x54, 0x54, 0x54, 0x18), "f": (0x08, 0x7E, 0x09, 0x01, 0x02),
    "g": (0x0C, 0x52, 0x52, 0x52, 0x3E), "h": (0x7F, 0x08, 0x04, 0x04, 0x78), "i": (0x00, 0x44, 0x7D, 0x40, 0x00),
    "j": (0x20, 0x40, 0x44, 0x3D, 0x00), "k": (0x7F, 0x10, 0x28, 0x44, 0x00), "l": (0x00, 0x41, 0x7F, 0x40, 0x00),
    "m": (0x7C, 0x04, 0x18, 0x04, 0x78), "n": (0x7C, 0x08, 0x04, 0x04, 0x78), "o": (0x38, 0x44, 0x44, 0x44, 0x38),
    "p": (0x7C, 0x14, 0x14, 0x14, 0x08), "q": (0x08, 0x14, 0x14, 0x18, 0x7C), "r": (0x7C, 0x08, 0x04, 0x04, 0x08),
    "s": (0x48, 0x54, 0x54, 0x54, 0x20), "t": (0x04, 0x3F, 0x44, 0x40, 0x20), "u": (0x3C, 0x40, 0x40, 0x20, 0x7C),
    "v": (0x1C, 0x20, 0x40, 0x20, 0x1C), "w": (0x3C, 0x40, 0x30, 0x40, 0x3C), "x": (0x44, 0x28, 0x10, 0x28, 0x44),
    "y": (0x0C, 0x50, 0x50, 0x50, 0x3C), "z": (0x44, 0x64, 0x54, 0x4C, 0x44),
    "0": (0x3E, 0x51, 0x49, 0x45, 0x3E), "1": (0x00, 0x42, 0x7F, 0x40, 0x00), "2": (0x42, 0x61, 0x51, 0x49, 0x46),
    "3": (0x21, 0x41, 0x45, 0x4B, 0x31), "4": (0x18, 0x14, 0x12, 0x7F, 0x10), "5": (0x27, 0x45, 0x45, 0x45, 0x39),
    "6": (0x3C, 0x4A, 0x49, 0x49, 0x30), "7": (0x01, 0x71, 0x09, 0x05, 0x03), "8": (0x36, 0x49, 0x49, 0x49, 0x36),
    "9": (0x06, 0x49, 0x49, 0x29, 0x1E),
    " ": (0x00, 0x00, 0x00, 0x00, 0x00), ".": (0x00, 0x60, 0x60, 0x00, 0x00), ",": (0x00, 0x80, 0x60, 0x00, 0x00),
    ":": (0x00, 0x36, 0x36, 0x00, 0x00), ";": (0x00, 0x56, 0x36, 0x00, 0x00), "!": (0x00, 0x00, 0x5F, 0x00, 0x00),
    "?": (0x02, 0x01, 0x51, 0x09, 0x06), "-": (0x08, 0x08, 0x08, 0x08, 0x08), "_": (0x40, 0x40, 0x40, 0x40, 0x40),
    "+": (0x08, 0x08, 0x3E, 0x08, 0x08), "=": (0x14, 0x14, 0x14, 0x14, 0x14), "/": (0x20, 0x10, 0x08, 0x04, 0x02),
    "(": (0x00, 0x1C, 0x22, 0x41, 0x00), ")": (0x00, 0x41, 0x22, 0x1C, 0x00), "[": (0x00, 0x7F, 0x41, 0x41, 0x00),
    "]": (0x00, 0x41, 0x41, 0x7F, 0x00), "'": (0x00, 0x05, 0x03, 0x00, 0x00), '"': (0x00, 0x07, 0x00, 0x07, 0x00),
    "#": (0x14, 0x7F, 0x14, 0x7F, 0x14), "%": (0x23, 0x13, 0x08, 0x64, 0x62), "&": (0x36, 0x49, 0x55, 0x22, 0x50),
    "*": (0x14, 0x08, 0x3E, 0x08, 0x14), "<": (0x08, 0x14, 0x22, 0x41, 0x00), ">": (0x00, 0x41, 0x22, 0x14, 0x08),
    "@": (0x32, 0x49, 0x79, 0x41, 0x3E),
    "Ą": (0x7E, 0x11, 0x11, 0x11, 0xFE), "Ć": (0x3E, 0x41, 0x41, 0x45, 0x22), "Ę": (0x7F, 0x49, 0x49, 0x49, 0xC1),
    "Ł": (0x7F, 0x48, 0x70, 0x40, 0x40), "Ń": (0x7F, 0x04, 0x0A, 0x10, 0x7F), "Ó": (0x3E, 0x45, 0x41, 0x41, 0x3E),
    "Ś": (0x46, 0x49, 0x4B, 0x49, 0x31), "Ź": (0x61, 0x53, 0x49, 0x45, 0x43), "Ż": (0x61, 0x55, 0x49, 0x45, 0x43),
    "ą": (0x20, 0x54, 0x54, 0x54, 0xF8), "ć": (0x38, 0x44, 0x46, 0x44, 0x20), "ę": (0x38, 0x54, 0x54, 0x54, 0x98),
    "ł": (0x00, 0x41, 0x7F, 0x60, 0x00), "ń": (0x7C, 0x0A, 0x04, 0x04, 0x78), "ó": (0x38, 0x46, 0x44, 0x44, 0x38),
    "ś": (0x48, 0x54, 0x56, 0x54, 0x20), "ź": (0x44, 0x66, 0x54, 0x4C, 0x44), "ż": (0x44, 0x56, 0x54, 0x4C, 0x44),
})

LARGE_DIGITS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "0": (
        "..######..", ".########.", "###....###", "##......##", "##......##", "##......##", "##......##",
        "##......##", "##......##", "##......##", "##......##", "###....###", ".########.", "..######..",
    ),
    "1": (
        "....##....", "...###....", "..####....", ".##.##....", "....##....", "....##....", "....##....",
        "....##....", "....##....", "....##....", "....##....", "....##....", ".########.", ".########.",
    ),
    "2": (
        "..######..", ".########.", "##......##", "........##", "........##", ".......##.", "......##..",
        ".....##...", "....##....", "...##.....", "..##......", ".##.......", "##########", "##########",
    ),
    "3": (
        "..######..", ".########.", "##......##", "........##", "........##", "........##", "...#####..",
        "...#####..", "........##", "........##", "........##", "##......##", ".########.", "..######..",
    ),
    "4": (
        "......##..", ".....###..", "....####..", "...##.##..", "..##..##..", ".##...##..", "##....##..",
        "##########", "##########", "......##..", "......##..", "......##..", "......##..", "......##..",
    ),
    "5": (
        "##########", "##########", "##........", "##........", "##........", "########..", "#########.",
        "........##", "........##", "........##", "........##", "##......##", ".########.", "..######..",
    ),
    "6": (
        "..######..", ".########.", "##......##", "##........", "##........", "##.#####..", "#########.",
        "###....###", "##......##", "##......##", "##......##", "###....###", ".########.", "..######..",
    ),
    "7": (
        "##########", "##########", "........##", ".......##.", "......##..", "......##..", ".....##...",
        ".....##...", "....##....", "....##....", "...##.....", "...##.....", "..##......", "..##......",
    ),
    "8": (
        "..######..", ".########.", "##......##", "##......##", "##......##", ".##....##.", "..######..",
        ".########.", "##......##", "##......##", "##......##", "##......##", ".########.", "..######..",
    ),
    "9": (
        "..######..", ".########.", "###....###", "##......##", "##......##", "##......##", "###....###",
        ".#########", "..#####.##", "........##", "........##", "##......##", ".########.", "..######..",
    ),
})


class FontTable:
    """Read-only glyph lookup with a placeholder for unmapped characters."""

    def __init__(
        self,
        glyphs: Mapping[str, tuple[int, ...]] = STANDARD_GLYPHS,
        large_digits: Mapping[str, tuple[str, ...]] = LARGE_DIGITS,
        placeholder: tuple[int, ...] = PLACEHOLDER_GLYPH,
    ) -> None:
        self._glyphs = MappingProxyType(dict(glyphs))
        self._large = MappingProxyType(dict(large_digits))
        self.placeholder = placeholder

    def __contains__(self, ch: str) -> bool:
        return ch in self._glyphs

    def glyph(self, ch: str) -> tuple[int, ...]:
        return self._glyphs.get(ch, self.placeholder)

    def large_digit(self, ch: str) -> tuple[str, ...] | None:
        return self._large.get(ch)

    def characters(self) -> frozenset[str]:
        return frozenset(self._glyphs)


DEFAULT_FONT_TABLE = FontTable()


class BitmapFont:
    def __init__(self, table: FontTable | None = None) -> None:
        self.table = table or DEFAULT_FONT_TABLE

    @staticmethod
    def advance(scale: int = 1) -> int:
        return (GLYPH_WIDTH + GLYPH_SPACING) * scale

    def text_width(self, text: str, scale: int = 1) -> int:
        if not text:
            return 0
        return len(text) * self.advance(scale) - GLYPH_SPACING * scale

    def draw_char(self, buf: PixelBuffer, x: int, y: int, ch: str, scale: int = 1, is_black: bool = True) -> int:
        columns = self.table.glyph(ch)
        for col, bits in enumerate(columns):
            for row in range(GLYPH_ROWS):
                if bits & (1 << row):
                    buf.fill_rect(x + col * scale, y + row * scale, scale, scale, is_black)
        return self.advance(scale)

    def draw_text(self, buf: PixelBuffer, x: int, y: int, text: str, scale: int = 1, is_black: bool = True) -> int:
        cursor = x
        for ch in text:
            cursor += self.draw_char(buf, cursor, y, ch, scale, is_black)
        return cursor - x

    def draw_text_centered(
        self,
        buf: PixelBuffer,
        y: int,
        text: str,
        scale: int = 1,
        is_black: bool = True,
        x: int = 0,
        width: int | None = None,
    ) -> int:
        span = buf.width - x if width is None else width
        start = x + (span - self.text_width(text, scale)) // 2
        self.draw_text(buf, start, y, text, scale, is_black)
        return start

    def draw_large_number(
        self, buf: PixelBuffer, x: int, y: int, value: int, scale: int = 1, is_black: bool = True
    ) -> int:
        """Draw ``value`` as two zero-padded large digits and return the width used."""
        cursor = x
        for ch in f"{value % 100:02d}":
            mask = self.table.large_digit(ch)
            if mask is None:
                self.draw_char(buf, cursor, y, ch, scale * 2, is_black)
            else:
                for row, line in enumerate(mask):
                    for col, cell in enumerate(line):
                        if cell == "#":
                            buf.fill_rect(cursor + col * scale, y + row * scale, scale, scale, is_black)
            cursor += (LARGE_DIGIT_WIDTH + LARGE_DIGIT_SPACING) * scale
        return cursor - x - LARGE_DIGIT_SPACING * scale

    def draw_large_date(
        self, buf: PixelBuffer, x: int, y: int, day: date, scale: int = 1, is_black: bool = True
    ) -> int:
        return self.draw_large_number(buf, x, y, day.day, scale, is_black)
