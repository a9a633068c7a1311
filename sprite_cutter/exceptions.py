class SpriteCutterError(Exception):
    """Base class for every error raised by the sprite cutter."""


class ImageDecodeFailure(SpriteCutterError):
    """An input file could not be read or decoded."""


class ImageSaveFailure(SpriteCutterError):
    """An output image could not be encoded or written."""


class DirectoryAccessFailure(SpriteCutterError):
    """An input directory could not be listed, or an output directory created."""
