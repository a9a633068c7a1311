import os
import sys
import logging
from pathlib import Path

from dotenv import load_dotenv

from ..exceptions import DirectoryAccessFailure
from ..models.cutter_config import CutterConfig
from ..pipeline.batch_slicer import process_directory

logger = logging.getLogger(__name__)


def log_level_from_env() -> str:
    """LOG_LEVEL as a logging level name; blank or unknown values give INFO."""
    level = os.getenv("LOG_LEVEL", "").strip().upper()
    if not level or not isinstance(logging.getLevelName(level), int):
        return "INFO"
    return level


def main() -> int:
    # Load environment variables first
    load_dotenv()

    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=log_level_from_env(),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    print("Spritesheet Cutter - Automatic Sprite Frame Extraction")
    print("=====================================================")

    config = CutterConfig.from_env()
    input_root = Path(os.getenv("SPRITE_INPUT_DIR") or Path.cwd())

    try:
        report = process_directory(input_root, config)
    except DirectoryAccessFailure as err:
        logger.error(f"Aborting: {err}")
        return 1

    print("\n=== Processing Complete! ===")
    print(f"Successfully processed {report.processed} images ({report.frames_written} frames).")
    if report.failures:
        print(f"Failed on {len(report.failures)} images:")
        for path, reason in report.failures:
            print(f"  {path.name}: {reason}")
    print(f"Check the '{config.output_dir}' directory for results.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
