"""Automatic spritesheet slicing: frame detection and background removal."""

__version__ = "1.0.0"
