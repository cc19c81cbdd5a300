"""
Exception types raised by the shadow pipeline
"""


class ShadowError(Exception):
    """Base class for every error raised by cutout_shadow"""


class MissingInputError(ShadowError):
    """Foreground or background image was not supplied"""


class DimensionMismatchError(ShadowError):
    """Input buffers do not share the same width x height"""


class ConfigError(ShadowError, ValueError):
    """Shadow configuration value out of its documented range"""


class ImageDecodeError(ShadowError):
    """Raised by image_io when an input cannot be decoded"""
