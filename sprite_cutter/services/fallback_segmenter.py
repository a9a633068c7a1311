from typing import List
import logging

import numpy as np

from ..models.image import RasterImage, GrayscaleView
from ..models.sprite_frame import SpriteFrame
from ..models.boundary_list import BoundaryList, build_boundary_list
from ..models.cutter_config import CutterConfig
from .pixel_sampler import PixelSampler
from .frame_assembler import FrameAssembler

logger = logging.getLogger(__name__)

# Thresholds of the single-frame-size estimators.
_CONTENT_LUMA = 20
_CONTENT_START_FRACTION = 0.1
_CONTENT_END_FRACTION = 0.8
_BG_LUMA_DISTANCE = 10
_BG_START_FRACTION = 0.05
_BG_END_FRACTION = 0.7


class FallbackSegmenter:
    """
    Strip-layout segmentation for sheets the grid detector cannot read.

    Looks for bands of lines that match the sheet's dominant luma, first
    column-wise (horizontal strips), then row-wise (vertical strips).
    """

    def __init__(
        self,
        config: CutterConfig,
        assembler: FrameAssembler = None,
        sampler: PixelSampler = None,
    ):
        self.config = config
        self.sampler = sampler or PixelSampler()
        self.assembler = assembler or FrameAssembler(config, self.sampler)

    # ─── Public API ────────────────────────────────────────────────
    def segment(self, img: RasterImage, gray: GrayscaleView) -> List[SpriteFrame]:
        """
        Frames of the first axis that yields any, or an empty list.
        """
        background = self.sampler.most_common_luma(gray, self.config.thresholds.mode_sample_step)

        columns = self._empty_lines(gray.luma, background)
        vertical = self._gap_boundaries(columns)
        logger.info(f"Fallback found {len(vertical)} vertical boundaries: {vertical}")
        frames = self._strip_frames(img, vertical, columns, along_x=True)
        if frames:
            return frames

        rows = self._empty_lines(gray.luma.T, background)
        horizontal = self._gap_boundaries(rows)
        logger.info(f"Fallback found {len(horizontal)} horizontal boundaries: {horizontal}")
        return self._strip_frames(img, horizontal, rows, along_x=False)

    def find_column_gap_boundaries(self, gray: GrayscaleView) -> BoundaryList:
        background = self.sampler.most_common_luma(gray, self.config.thresholds.mode_sample_step)
        return self._gap_boundaries(self._empty_lines(gray.luma, background))

    def find_row_gap_boundaries(self, gray: GrayscaleView) -> BoundaryList:
        background = self.sampler.most_common_luma(gray, self.config.thresholds.mode_sample_step)
        return self._gap_boundaries(self._empty_lines(gray.luma.T, background))

    def merge_close_boundaries(self, boundaries: BoundaryList, extent: int) -> BoundaryList:
        """
        Drop boundaries closer than min_sprite_size to the last kept one.
        0 and *extent* always survive.
        """
        merged = [0]
        for b in boundaries:
            if b == 0:
                continue
            if b - merged[-1] >= self.config.min_sprite_size or b == extent:
                merged.append(b)
        return merged

    # ─── Single-frame-size estimators ──────────────────────────────
    def estimate_sprite_width(self, gray: GrayscaleView) -> int:
        """Width of the first sprite found scanning columns left to right, 0 if none."""
        return self._estimate_extent(gray, gray.luma)

    def estimate_sprite_height(self, gray: GrayscaleView) -> int:
        """Height of the first sprite found scanning rows top to bottom, 0 if none."""
        return self._estimate_extent(gray, gray.luma.T)

    def tile_by_estimate(self, img: RasterImage, gray: GrayscaleView) -> List[SpriteFrame]:
        """
        Cut the sheet into equal strips of the estimated sprite width
        (then height) and filter them like any other candidate.
        """
        width = self.estimate_sprite_width(gray)
        if width > 0:
            frames = [
                frame for frame in (
                    SpriteFrame(x=x, y=0, width=min(width, img.width - x), height=img.height)
                    for x in range(0, img.width, width)
                )
                if self.assembler.accepts(img, frame)
            ]
            if frames:
                logger.info(f"Width estimate {width}px gave {len(frames)} frames")
                return frames

        height = self.estimate_sprite_height(gray)
        if height > 0:
            frames = [
                frame for frame in (
                    SpriteFrame(x=0, y=y, width=img.width, height=min(height, img.height - y))
                    for y in range(0, img.height, height)
                )
                if self.assembler.accepts(img, frame)
            ]
            if frames:
                logger.info(f"Height estimate {height}px gave {len(frames)} frames")
                return frames

        return []

    # ─── Helpers ───────────────────────────────────────────────────
    def _empty_lines(self, lines: np.ndarray, background: int) -> np.ndarray:
        """
        Args:
            lines (np.ndarray): (L, N) luma, one line of length L per column.
            background (int): dominant luma.

        Returns:
            (np.ndarray): bool (N,), True where the line is mostly background.
        """
        t = self.config.thresholds
        length = lines.shape[0]
        if length == 0:
            return np.zeros(lines.shape[1], dtype=bool)
        close = np.abs(lines.astype(np.int16) - background) <= t.fallback_luma_distance
        return close.sum(axis=0) / length > t.fallback_empty_fraction

    def _gap_boundaries(self, empty: np.ndarray) -> BoundaryList:
        extent = empty.shape[0]
        interior = np.flatnonzero(empty[1:extent - 1]) + 1
        return self.merge_close_boundaries(build_boundary_list(interior.tolist(), extent), extent)

    def _strip_frames(
        self,
        img: RasterImage,
        boundaries: BoundaryList,
        empty: np.ndarray,
        *,
        along_x: bool,
    ) -> List[SpriteFrame]:
        # No gap on this axis: the only band would be the whole image.
        if len(boundaries) <= 2:
            return []

        frames: List[SpriteFrame] = []
        for start, end in zip(boundaries, boundaries[1:]):
            # A band of background lines only is a gutter.
            if empty[start:end].all():
                continue
            if along_x:
                frame = SpriteFrame(x=start, y=0, width=end - start, height=img.height)
            else:
                frame = SpriteFrame(x=0, y=start, width=img.width, height=end - start)
            if self.assembler.accepts(img, frame):
                frames.append(frame)
        return frames

    def _estimate_extent(self, gray: GrayscaleView, lines: np.ndarray) -> int:
        length = lines.shape[0]
        if length == 0:
            return 0

        # First content run against near-black (transparent) surroundings.
        content = (lines > _CONTENT_LUMA).sum(axis=0) / length > _CONTENT_START_FRACTION
        gap = (lines <= _CONTENT_LUMA).sum(axis=0) / length > _CONTENT_END_FRACTION
        run = self._first_run(content, gap)
        if run:
            return run

        # Retry against the dominant luma for sheets on a solid fill.
        background = self.sampler.most_common_luma(gray, self.config.thresholds.mode_sample_step)
        distance = np.abs(lines.astype(np.int16) - background)
        foreground = (distance > _BG_LUMA_DISTANCE).sum(axis=0) / length > _BG_START_FRACTION
        backdrop = (distance <= _BG_LUMA_DISTANCE).sum(axis=0) / length > _BG_END_FRACTION
        return self._first_run(foreground, backdrop)

    @staticmethod
    def _first_run(starts: np.ndarray, ends: np.ndarray) -> int:
        start_idx = np.flatnonzero(starts)
        if start_idx.size == 0:
            return 0
        start = int(start_idx[0])
        end_idx = np.flatnonzero(ends[start + 1:])
        if end_idx.size == 0:
            return 0
        return int(end_idx[0]) + 1
