from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Union
import logging

import numpy as np

from ..models.image import RasterImage
from ..models.sprite_frame import SpriteFrame
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class ImageService:
    """I/O and cropping helpers.  No detection logic."""

    def __init__(self, image_repository: ImageRepository = None):
        self.image_repository = image_repository or ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> RasterImage:
        return self.image_repository.create_image(pixels, path)

    def load(self, path: str | Path) -> RasterImage:
        """Load a single image from disk into a RasterImage object."""
        return self.image_repository.load(path)

    def save(self, image: RasterImage, path: str | Path) -> Path:
        return self.image_repository.save(image, path)

    def list_images(self, folder: Union[str, Path], *, exts: Iterable[str] | None = None) -> List[Path]:
        return self.image_repository.list_image_files(folder, exts=exts)

    def prepare_output_dir(self, folder: Union[str, Path]) -> Path:
        return self.image_repository.ensure_dir(folder)

    def crop_pixels(self, img: RasterImage, bound_r, bound_l, bound_t, bound_b) -> np.ndarray:
        width = bound_r - bound_l
        height = bound_b - bound_t
        img_h, img_w = img.pixels.shape[:2]

        if bound_l < 0 or bound_t < 0 or bound_r > img_w or bound_b > img_h or width <= 0 or height <= 0:
            logger.error(
                f"Invalid crop bounds: left={bound_l}, right={bound_r}, top={bound_t}, bottom={bound_b} "
                f"on a {img_w}x{img_h} image"
            )
            raise ValueError(f"Invalid crop bounds would create {width}x{height} image")

        return img.pixels[bound_t:bound_b, bound_l:bound_r].copy()

    def crop_frame(self, img: RasterImage, frame: SpriteFrame) -> RasterImage:
        """
        Cut *frame* out of *img* as a new image of exactly frame.width x frame.height.
        """
        left, top, right, bottom = frame.as_box()
        pixels = self.crop_pixels(img, bound_r=right, bound_l=left, bound_t=top, bound_b=bottom)
        return self.create_image(pixels)

    @staticmethod
    def frame_filename(source: Path, index: int) -> str:
        """'{stem}_frame_{NNN}.png' with a 1-based, zero-padded index."""
        return f"{Path(source).stem}_frame_{index:03d}.png"
