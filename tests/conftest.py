"""Shared pytest fixtures: small synthetic spritesheets."""

import struct
import zlib

import numpy as np
import pytest

from sprite_cutter.models.image import RasterImage
from sprite_cutter.models.cutter_config import CutterConfig

RED = (255, 0, 0, 255)
WHITE = (255, 255, 255, 255)
MAGENTA = (255, 0, 255, 255)
NAVY = (0, 0, 128, 255)
TRANSPARENT = (0, 0, 0, 0)


def make_image(width: int, height: int, color=TRANSPARENT) -> np.ndarray:
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :] = color
    return pixels


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


def write_oversized_png(path, width: int = 20000, height: int = 20000):
    """A tiny PNG whose header declares a huge RGBA canvas."""
    header = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    path.write_bytes(
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b""))
        + _png_chunk(b"IEND", b"")
    )
    return path


@pytest.fixture
def config() -> CutterConfig:
    return CutterConfig()


@pytest.fixture
def three_column_sheet() -> RasterImage:
    """
    Three opaque red blocks on a 104x32 transparent canvas,
    at x = 0, 40 and 80, separated by 8px transparent gutters.
    """
    pixels = make_image(104, 32)
    for x in (0, 40, 80):
        pixels[:, x:x + 32] = RED
    return RasterImage(pixels)


@pytest.fixture
def grid_sheet() -> RasterImage:
    """2x2 grid of 24x24 red blocks with 8px transparent gutters on every side."""
    pixels = make_image(72, 72)
    for y in (8, 40):
        for x in (8, 40):
            pixels[y:y + 24, x:x + 24] = RED
    return RasterImage(pixels)


@pytest.fixture
def strip_on_fill() -> RasterImage:
    """
    Opaque magenta 96x32 sheet with three 16x16 navy sprites at x = 8, 40, 72.
    No transparency and no dark gutters, so only the fallback can read it.
    """
    pixels = make_image(96, 32, MAGENTA)
    for x in (8, 40, 72):
        pixels[8:24, x:x + 16] = NAVY
    return RasterImage(pixels)


@pytest.fixture
def white_with_red_dot() -> RasterImage:
    pixels = make_image(20, 20, WHITE)
    pixels[10, 10] = RED
    return RasterImage(pixels)
