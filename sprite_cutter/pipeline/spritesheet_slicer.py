# pipeline/spritesheet_slicer.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List
import logging

from ..models.image import RasterImage
from ..models.cutter_config import CutterConfig
from ..services.image_service import ImageService
from ..services.sprite_detection_service import SpriteDetectionService
from ..services.background_stripper import BackgroundStripper

logger = logging.getLogger(__name__)


@dataclass
class SliceResult:
    """What one sheet turned into on disk."""
    source: Path
    method: str                      # detection tier, or "passthrough"
    outputs: List[Path] = field(default_factory=list)

    @property
    def frame_count(self) -> int:
        return 0 if self.method == "passthrough" else len(self.outputs)


def slice_spritesheet(
    image_path: str | Path,
    output_dir: str | Path,
    config: CutterConfig,
    *,
    image_service: ImageService = ImageService(),
    detection_service: SpriteDetectionService | None = None,
    stripper: BackgroundStripper | None = None,
) -> SliceResult:
    """
    Slice one sheet into output_dir:
        • decode
        • detect frames (grid, then fallback tiers)
        • crop each frame, strip its background if enabled, save as
          {stem}_frame_{NNN}.png
        • no frames at all → save the whole sheet under its own file name
    Raises ImageDecodeFailure / ImageSaveFailure; the caller decides whether to go on.
    """
    image_path = Path(image_path)
    output_dir = Path(output_dir)
    detection_service = detection_service or SpriteDetectionService(config)
    stripper = stripper or BackgroundStripper(config)

    sheet = image_service.load(image_path)
    detection = detection_service.detect(sheet)

    if not detection.frames:
        target = output_dir / image_path.name
        image_service.save(_finish(sheet, config, stripper), target)
        return SliceResult(source=image_path, method="passthrough", outputs=[target])

    logger.info(f"Detected {len(detection.frames)} frames in {image_path.name} ({detection.method})")

    outputs: List[Path] = []
    for index, frame in enumerate(detection.frames, start=1):
        cropped = image_service.crop_frame(sheet, frame)
        target = output_dir / image_service.frame_filename(image_path, index)
        outputs.append(image_service.save(_finish(cropped, config, stripper), target))

    return SliceResult(source=image_path, method=detection.method, outputs=outputs)


def _finish(img: RasterImage, config: CutterConfig, stripper: BackgroundStripper) -> RasterImage:
    return stripper.strip(img) if config.remove_background else img
