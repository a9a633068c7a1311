from __future__ import annotations
from dataclasses import dataclass, field
from typing import List
import logging

from ..models.image import RasterImage
from ..models.sprite_frame import SpriteFrame
from ..models.boundary_list import BoundaryList
from ..models.cutter_config import CutterConfig
from .pixel_sampler import PixelSampler
from .boundary_detector import BoundaryDetector
from .frame_assembler import FrameAssembler
from .fallback_segmenter import FallbackSegmenter

logger = logging.getLogger(__name__)


@dataclass
class Detection:
    """
    Frames found on one sheet plus the tier that found them
    ("grid", "fallback", "estimate", or "none").
    """
    frames: List[SpriteFrame]
    method: str
    vertical: BoundaryList = field(default_factory=list)
    horizontal: BoundaryList = field(default_factory=list)


class SpriteDetectionService:
    """
    Runs the detection tiers in order until one yields frames:
        1. boundary grid (BoundaryDetector + FrameAssembler)
        2. empty-band strips (FallbackSegmenter)
        3. size-estimate tiling, only when config.estimate_fallback is set
    """

    def __init__(self, config: CutterConfig):
        self.config = config
        self.sampler = PixelSampler()
        self.detector = BoundaryDetector(config.thresholds)
        self.assembler = FrameAssembler(config, self.sampler)
        self.fallback = FallbackSegmenter(config, self.assembler, self.sampler)

    def detect(self, img: RasterImage) -> Detection:
        gray = self.sampler.to_grayscale(img)

        vertical = self.detector.find_vertical_boundaries(gray)
        horizontal = self.detector.find_horizontal_boundaries(gray)
        frames = self.assembler.assemble(img, vertical, horizontal)
        if frames:
            return Detection(frames, "grid", vertical, horizontal)

        logger.info("No frames detected with main algorithm, trying fallback...")
        frames = self.fallback.segment(img, gray)
        if frames:
            logger.info(f"Fallback detection found {len(frames)} frames")
            return Detection(frames, "fallback", vertical, horizontal)

        if self.config.estimate_fallback:
            frames = self.fallback.tile_by_estimate(img, gray)
            if frames:
                return Detection(frames, "estimate", vertical, horizontal)

        return Detection([], "none", vertical, horizontal)

    def detect_sprite_frames(self, img: RasterImage) -> List[SpriteFrame]:
        return self.detect(img).frames
