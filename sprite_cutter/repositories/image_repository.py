from __future__ import annotations
from pathlib import Path
from typing import Union, Iterable, List
import logging
import os

import numpy as np
from PIL import Image as PILImage, UnidentifiedImageError
from dotenv import load_dotenv

from ..models.image import RasterImage
from ..exceptions import ImageDecodeFailure, ImageSaveFailure, DirectoryAccessFailure

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_EXTS = "png,jpg,jpeg,bmp,gif,tiff,webp"

# Formats without an alpha channel; RGBA is flattened before encoding.
_OPAQUE_SUFFIXES = {".jpg", ".jpeg"}


class ImageRepository:
    """
    Handles file enumeration, decoding and encoding of RasterImage entities.
    """
    def __init__(self):
        exts = os.getenv("VALID_IMAGE_EXTENSIONS") or DEFAULT_EXTS
        self.VALID_EXTS = {"." + ext.strip().lower().lstrip(".") for ext in exts.split(",") if ext.strip()}

    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> RasterImage:
        if path is None:
            return RasterImage(pixels)
        return RasterImage(pixels=pixels, path=Path(path))

    @staticmethod
    def load(path: Union[str, Path]) -> RasterImage:
        """
        Decode the first frame of *path* into RGBA pixels.
        Images without alpha come back fully opaque.
        """
        path = Path(path)
        try:
            with PILImage.open(path) as pil_img:
                arr = np.asarray(pil_img.convert("RGBA"), dtype=np.uint8).copy()
        except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError, ValueError) as err:
            raise ImageDecodeFailure(f"Image not found or unreadable: {path}") from err
        return RasterImage(pixels=arr, path=path)

    @staticmethod
    def save(image: RasterImage, path: Union[str, Path]) -> Path:
        path = Path(path)
        pil_img = PILImage.fromarray(np.ascontiguousarray(image.pixels))
        if path.suffix.lower() in _OPAQUE_SUFFIXES:
            pil_img = pil_img.convert("RGB")
        try:
            pil_img.save(path)
        except (OSError, ValueError, KeyError) as err:
            raise ImageSaveFailure(f"Failed to save image: {path}") from err
        return path

    @staticmethod
    def ensure_dir(folder: Union[str, Path]) -> Path:
        folder = Path(folder)
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise DirectoryAccessFailure(f"Failed to create output directory: {folder}") from err
        return folder

    def list_image_files(
        self,
        folder: Union[str, Path],
        *,
        exts: Iterable[str] | None = None,
    ) -> List[Path]:
        """
        Image files directly inside *folder* (no recursion), sorted by name.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise DirectoryAccessFailure(f"Not a directory: {folder}")

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        try:
            entries = sorted(folder.iterdir())
        except OSError as err:
            raise DirectoryAccessFailure(f"Failed to list directory: {folder}") from err

        files = []
        for p in entries:
            if not p.is_file():
                continue
            if p.suffix.lower() not in allowed:
                logger.debug(f"Skipping due to extension: {p}")
                continue
            files.append(p)
        return files
