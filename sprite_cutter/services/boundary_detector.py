import logging

import numpy as np

from ..models.image import GrayscaleView
from ..models.boundary_list import BoundaryList, build_boundary_list
from ..models.cutter_config import DetectionThresholds, RELAXED

logger = logging.getLogger(__name__)


class BoundaryDetector:
    """
    Finds separator lines between sprites on a grayscale view.

    A line (column or row) is a separator when it is mostly dark, which catches
    transparent gutters, or when many neighbouring samples along it jump in luma,
    which catches sprites packed against differently coloured fills.
    Results are approximate; downstream size and content filters absorb the noise.
    """

    def __init__(self, thresholds: DetectionThresholds = RELAXED):
        self.thresholds = thresholds

    def find_vertical_boundaries(self, gray: GrayscaleView) -> BoundaryList:
        """Column separators, from 0 to gray.width."""
        boundaries = self._scan_lines(gray.luma)
        logger.debug(f"Vertical boundaries: {boundaries}")
        return boundaries

    def find_horizontal_boundaries(self, gray: GrayscaleView) -> BoundaryList:
        """Row separators, from 0 to gray.height."""
        boundaries = self._scan_lines(gray.luma.T)
        logger.debug(f"Horizontal boundaries: {boundaries}")
        return boundaries

    def separator_mask(self, lines: np.ndarray) -> np.ndarray:
        """
        Args:
            lines (np.ndarray): (L, N) luma, one line of length L per column.

        Returns:
            (np.ndarray): bool (N,), True for every line classified as a separator.
        """
        t = self.thresholds
        length, count = lines.shape
        if length == 0:
            return np.zeros(count, dtype=bool)

        dark_fraction = (lines < t.darkness).sum(axis=0) / length

        # Normalised by the full line length, not by the number of pairs.
        jumps = np.abs(np.diff(lines.astype(np.int16), axis=0)) > t.edge_delta
        edge_fraction = jumps.sum(axis=0) / length

        return (dark_fraction > t.empty_fraction) | (edge_fraction > t.edge_fraction)

    def _scan_lines(self, lines: np.ndarray) -> BoundaryList:
        extent = lines.shape[1]
        mask = self.separator_mask(lines)
        # Only interior lines are candidates; the sentinels are added unconditionally.
        interior = np.flatnonzero(mask[1:extent - 1]) + 1
        return build_boundary_list(interior.tolist(), extent)
