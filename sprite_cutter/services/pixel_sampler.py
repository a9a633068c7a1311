from __future__ import annotations
from typing import Optional, Tuple

import cv2
import numpy as np

from ..models.image import RasterImage, GrayscaleView

Color = Tuple[int, int, int, int]

_OPAQUE_WHITE: Color = (255, 255, 255, 255)

# BT.709 luma weights for R, G, B.
_LUMA_WEIGHTS = np.array([[0.2126, 0.7152, 0.0722]], dtype=np.float32)


class PixelSampler:
    """
    Read-only pixel queries over RasterImage / GrayscaleView.
    Scalar lookups return None outside the image; whole-image helpers are vectorised.
    """

    # ─── Projections ──────────────────────────────────────────────
    @staticmethod
    def to_grayscale(img: RasterImage) -> GrayscaleView:
        """BT.709 luma of the colour channels, rounded; alpha is ignored."""
        rgb = np.ascontiguousarray(img.pixels[:, :, :3], dtype=np.uint8)
        luma = cv2.transform(rgb, _LUMA_WEIGHTS)
        return GrayscaleView(luma=luma.reshape(img.height, img.width))

    @staticmethod
    def alpha_plane(img: RasterImage) -> np.ndarray:
        return img.pixels[:, :, 3]

    # ─── Scalar lookups ───────────────────────────────────────────
    @staticmethod
    def _inside(x: int, y: int, width: int, height: int) -> bool:
        return 0 <= x < width and 0 <= y < height

    def color_at(self, img: RasterImage, x: int, y: int) -> Optional[Color]:
        if not self._inside(x, y, img.width, img.height):
            return None
        return tuple(int(c) for c in img.pixels[y, x])

    def alpha_at(self, img: RasterImage, x: int, y: int) -> Optional[int]:
        if not self._inside(x, y, img.width, img.height):
            return None
        return int(img.pixels[y, x, 3])

    def luma_at(self, gray: GrayscaleView, x: int, y: int) -> Optional[int]:
        if not self._inside(x, y, gray.width, gray.height):
            return None
        return int(gray.luma[y, x])

    # ─── Colour matching ──────────────────────────────────────────
    @staticmethod
    def is_background_pixel(pixel, background, tolerance: int) -> bool:
        """
        True when R, G and B are each within *tolerance* of *background*.
        Alpha is not compared.
        """
        return all(abs(int(pixel[c]) - int(background[c])) <= tolerance for c in range(3))

    @staticmethod
    def background_mask(pixels: np.ndarray, background, tolerance: int) -> np.ndarray:
        """Vectorised is_background_pixel over an (H, W, 3|4) array."""
        ref = np.asarray(background[:3], dtype=np.int16)
        diff = np.abs(pixels[:, :, :3].astype(np.int16) - ref)
        return np.all(diff <= tolerance, axis=2)

    # ─── Mode detection ───────────────────────────────────────────
    @staticmethod
    def most_common_luma(gray: GrayscaleView, step: int = 4) -> int:
        """
        Mode of the luma sampled every *step* pixels on both axes.
        Ties resolve to the darker value; an empty view gives 0.
        """
        sample = gray.luma[::step, ::step]
        if sample.size == 0:
            return 0
        counts = np.bincount(sample.ravel(), minlength=256)
        return int(counts.argmax())

    @staticmethod
    def most_common_color(img: RasterImage, width: int, height: int) -> Color:
        """
        Mode RGBA colour of the top-left width x height block, clamped to the image.
        """
        block = img.pixels[:min(height, img.height), :min(width, img.width)]
        if block.size == 0:
            return _OPAQUE_WHITE
        colors, counts = np.unique(block.reshape(-1, 4), axis=0, return_counts=True)
        return tuple(int(c) for c in colors[counts.argmax()])
