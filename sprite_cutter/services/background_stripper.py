import logging

import numpy as np

from ..models.image import RasterImage
from ..models.cutter_config import CutterConfig
from .pixel_sampler import PixelSampler, Color

logger = logging.getLogger(__name__)

_TRANSPARENT = np.array([0, 0, 0, 0], dtype=np.uint8)


class BackgroundStripper:
    """
    Turns the sheet's fill colour transparent.
    *   Background = mode colour of the top-left corner block.
    *   Returns a new RasterImage; the input pixels are left alone.
    """

    def __init__(self, config: CutterConfig, sampler: PixelSampler = None):
        self.config = config
        self.sampler = sampler or PixelSampler()

    def detect_background_color(self, img: RasterImage) -> Color:
        size = self.config.thresholds.corner_sample_size
        return self.sampler.most_common_color(img, size, size)

    def strip(self, img: RasterImage) -> RasterImage:
        background = self.detect_background_color(img)
        mask = self.sampler.background_mask(img.pixels, background, self.config.background_tolerance)

        out = img.pixels.copy()
        out[mask] = _TRANSPARENT
        logger.debug(f"Background {background}: cleared {int(mask.sum())} of {mask.size} pixels")
        return RasterImage(pixels=out, path=img.path)
