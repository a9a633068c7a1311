from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Tuple
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class DetectionThresholds:
    """
    Empirically tuned constants of the boundary heuristics.
    Two variants exist, see RELAXED and STRICT below.
    """
    darkness: int = 10               # luma below this counts as dark/transparent
    edge_delta: int = 30             # luma jump between neighbours that counts as an edge
    empty_fraction: float = 0.6      # dark share that makes a line a separator
    edge_fraction: float = 0.2       # edge share that makes a line a separator
    content_alpha: int = 10          # alpha above this counts as content
    min_content_density: float = 0.02

    # ── Fallback segmenter ───────────────────────────────────────────
    fallback_luma_distance: int = 15
    fallback_empty_fraction: float = 0.85
    mode_sample_step: int = 4

    # ── Background stripper ──────────────────────────────────────────
    corner_sample_size: int = 10


RELAXED = DetectionThresholds()
STRICT = DetectionThresholds(
    edge_delta=50,
    empty_fraction=0.8,
    edge_fraction=0.3,
    min_content_density=0.05,
)

_PRESETS = {"relaxed": RELAXED, "strict": STRICT}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError as err:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from err


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class CutterConfig:
    """
    Immutable parameter set, built once at startup and shared read-only.
    """
    min_sprite_size: int = 8
    max_sprite_size: int = 1024
    background_tolerance: int = 20
    remove_background: bool = True
    output_dir: str = "assets2"
    input_folders: Tuple[str, ...] = ()
    estimate_fallback: bool = False
    thresholds: DetectionThresholds = field(default_factory=lambda: RELAXED)

    def __post_init__(self):
        if self.min_sprite_size < 1:
            raise ValueError(f"min_sprite_size must be positive, got {self.min_sprite_size}")
        if self.max_sprite_size < self.min_sprite_size:
            raise ValueError(
                f"max_sprite_size ({self.max_sprite_size}) is below min_sprite_size ({self.min_sprite_size})"
            )
        if not 0 <= self.background_tolerance <= 255:
            raise ValueError(f"background_tolerance must be in [0, 255], got {self.background_tolerance}")

    @classmethod
    def legacy(cls) -> CutterConfig:
        """The earlier, stricter parameter set."""
        return cls(
            min_sprite_size=16,
            max_sprite_size=512,
            background_tolerance=10,
            thresholds=STRICT,
        )

    @classmethod
    def from_env(cls) -> CutterConfig:
        """
        Build a config from SPRITE_* environment variables (a .env file is honoured).
        Unset variables keep the defaults.
        """
        defaults = cls()

        preset_name = os.getenv("SPRITE_THRESHOLD_PRESET", "").strip().lower() or "relaxed"
        if preset_name not in _PRESETS:
            raise ValueError(f"Unknown SPRITE_THRESHOLD_PRESET: {preset_name!r}")

        folders = os.getenv("SPRITE_INPUT_FOLDERS", "")
        input_folders = tuple(f.strip() for f in folders.split(",") if f.strip())

        return replace(
            defaults,
            min_sprite_size=_env_int("SPRITE_MIN_SIZE", defaults.min_sprite_size),
            max_sprite_size=_env_int("SPRITE_MAX_SIZE", defaults.max_sprite_size),
            background_tolerance=_env_int("SPRITE_BACKGROUND_TOLERANCE", defaults.background_tolerance),
            remove_background=_env_bool("SPRITE_REMOVE_BACKGROUND", defaults.remove_background),
            output_dir=os.getenv("SPRITE_OUTPUT_DIR", "").strip() or defaults.output_dir,
            input_folders=input_folders,
            estimate_fallback=_env_bool("SPRITE_ESTIMATE_FALLBACK", defaults.estimate_fallback),
            thresholds=_PRESETS[preset_name],
        )
