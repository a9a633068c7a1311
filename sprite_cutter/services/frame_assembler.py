from typing import List
import logging

from ..models.image import RasterImage
from ..models.sprite_frame import SpriteFrame
from ..models.boundary_list import BoundaryList
from ..models.cutter_config import CutterConfig
from .pixel_sampler import PixelSampler

logger = logging.getLogger(__name__)


class FrameAssembler:
    """
    Turns two boundary lists into accepted SpriteFrames.
    Also owns the size and content-density filters the fallback reuses.
    """

    def __init__(self, config: CutterConfig, sampler: PixelSampler = None):
        self.config = config
        self.sampler = sampler or PixelSampler()

    def fits_size(self, width: int, height: int) -> bool:
        lo, hi = self.config.min_sprite_size, self.config.max_sprite_size
        return lo <= width <= hi and lo <= height <= hi

    def content_density(self, img: RasterImage, frame: SpriteFrame) -> float:
        """
        Share of the frame's pixels whose alpha is above the content threshold.
        """
        total = frame.width * frame.height
        if total == 0:
            return 0.0
        alpha = self.sampler.alpha_plane(img)[frame.y:frame.bottom, frame.x:frame.right]
        opaque = int((alpha > self.config.thresholds.content_alpha).sum())
        return opaque / total

    def accepts(self, img: RasterImage, frame: SpriteFrame) -> bool:
        if not self.fits_size(frame.width, frame.height):
            return False
        return self.content_density(img, frame) > self.config.thresholds.min_content_density

    def assemble(
        self,
        img: RasterImage,
        vertical: BoundaryList,
        horizontal: BoundaryList,
    ) -> List[SpriteFrame]:
        """
        Cross the adjacent boundary pairs into candidates and keep the accepted ones.

        Order: outer loop over column bands, inner loop over row bands.
        A grid without any interior boundary is the whole image, which is not a frame.
        """
        if len(vertical) <= 2 and len(horizontal) <= 2:
            logger.debug("No separators on either axis; nothing to assemble")
            return []

        frames: List[SpriteFrame] = []
        for x, x_end in zip(vertical, vertical[1:]):
            for y, y_end in zip(horizontal, horizontal[1:]):
                candidate = SpriteFrame(x=x, y=y, width=x_end - x, height=y_end - y)
                if self.accepts(img, candidate):
                    frames.append(candidate)
        return frames
