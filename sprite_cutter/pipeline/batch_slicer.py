# pipeline/batch_slicer.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple
import logging

from ..exceptions import ImageDecodeFailure, ImageSaveFailure
from ..models.cutter_config import CutterConfig
from ..services.image_service import ImageService
from ..services.sprite_detection_service import SpriteDetectionService
from ..services.background_stripper import BackgroundStripper
from .spritesheet_slicer import slice_spritesheet, SliceResult

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    results: List[SliceResult] = field(default_factory=list)
    failures: List[Tuple[Path, str]] = field(default_factory=list)
    skipped_folders: List[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def frames_written(self) -> int:
        return sum(r.frame_count for r in self.results)


def _work_items(input_root: Path, config: CutterConfig) -> List[Tuple[str, Path, Path]]:
    output_root = input_root / config.output_dir
    if not config.input_folders:
        return [(input_root.name or str(input_root), input_root, output_root)]
    return [(name, input_root / name, output_root / name) for name in config.input_folders]


def process_directory(
    input_root: str | Path,
    config: CutterConfig,
    *,
    image_service: ImageService = ImageService(),
) -> BatchReport:
    """
    Slice every sheet under *input_root* (one level deep per folder).

    DirectoryAccessFailure propagates and ends the run; a sheet that cannot
    be decoded or saved is logged and the batch moves on.
    """
    input_root = Path(input_root)
    detection_service = SpriteDetectionService(config)
    stripper = BackgroundStripper(config)
    report = BatchReport()

    for name, folder, output_dir in _work_items(input_root, config):
        if not folder.exists():
            logger.warning(f"Folder '{name}' not found, skipping...")
            report.skipped_folders.append(name)
            continue

        print(f"\n=== Processing {name} folder ===")
        image_service.prepare_output_dir(output_dir)
        image_files = image_service.list_images(folder)

        if not image_files:
            logger.info(f"No image files found in the {name} directory.")
            continue
        logger.info(f"Found {len(image_files)} image files to process in {name}")

        for index, image_path in enumerate(image_files, start=1):
            logger.info(f"Processing {index}/{len(image_files)}: {image_path.name}")
            try:
                result = slice_spritesheet(
                    image_path,
                    output_dir,
                    config,
                    image_service=image_service,
                    detection_service=detection_service,
                    stripper=stripper,
                )
            except (ImageDecodeFailure, ImageSaveFailure) as err:
                cause = f"{err} ({err.__cause__})" if err.__cause__ else str(err)
                logger.error(f"Error processing {image_path.name}: {cause}")
                report.failures.append((image_path, cause))
                continue

            if result.method == "passthrough":
                logger.info("  → Copied as single sprite")
            else:
                logger.info(f"  → Extracted {result.frame_count} frames")
            report.results.append(result)

    return report
