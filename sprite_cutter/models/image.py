from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np


@dataclass(frozen=True)
class RasterImage:
    """
    Simple data object: RGBA pixels (+ optional source path for bookkeeping).
    No decoding logic outside the repository layer.
    """
    pixels: np.ndarray # Shape (H, W, 4), dtype uint8, RGBA order.
    path: Path | None = None # Source of the image.

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]


@dataclass(frozen=True)
class GrayscaleView:
    """
    Luma projection of a RasterImage, computed once per input.
    """
    luma: np.ndarray # Shape (H, W), dtype uint8.

    @property
    def height(self) -> int:
        return self.luma.shape[0]

    @property
    def width(self) -> int:
        return self.luma.shape[1]
