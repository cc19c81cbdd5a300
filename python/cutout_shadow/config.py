"""
Shadow configuration

A single immutable ShadowConfig is built (and validated) once per generation
run; the algorithm modules receive plain scalars and never re-check ranges.
"""

import math
from dataclasses import asdict, dataclass, replace

from .errors import ConfigError

DEFAULT_ALPHA_THRESHOLD = 10
DEFAULT_MAX_SHADOW_DISTANCE = 150.0
DEFAULT_MIN_BLUR_RADIUS = 1.0
DEFAULT_MAX_BLUR_RADIUS = 10.0

# camelCase option key -> ShadowConfig field
OPTION_KEYS = {
    "lightAngle": "light_angle",
    "lightElevation": "light_elevation",
    "maxShadowDistance": "max_shadow_distance",
    "contactOpacity": "contact_opacity",
    "falloffRate": "falloff_rate",
    "minBlurRadius": "min_blur_radius",
    "maxBlurRadius": "max_blur_radius",
}


@dataclass(frozen=True)
class ShadowConfig:
    """
    Parameters of one shadow generation run

    Ranges:
        light_angle: [0, 360) degrees, 0 = +x, increasing toward +y (y down)
        light_elevation: [0, 90] degrees, 90 = overhead
        max_shadow_distance: > 0 pixels
        contact_opacity: [0, 1]
        falloff_rate: >= 0
        min_blur_radius: >= 0 pixels
        max_blur_radius: >= min_blur_radius pixels
    """

    light_angle: float
    light_elevation: float
    max_shadow_distance: float = DEFAULT_MAX_SHADOW_DISTANCE
    contact_opacity: float = 0.75
    falloff_rate: float = 4.0
    min_blur_radius: float = DEFAULT_MIN_BLUR_RADIUS
    max_blur_radius: float = DEFAULT_MAX_BLUR_RADIUS

    def __post_init__(self):
        for name, value in asdict(self).items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigError(f"{name} must be finite, got {value!r}")

        if not 0 <= self.light_angle < 360:
            raise ConfigError(f"light_angle must be in [0, 360), got {self.light_angle}")
        if not 0 <= self.light_elevation <= 90:
            raise ConfigError(f"light_elevation must be in [0, 90], got {self.light_elevation}")
        if self.max_shadow_distance <= 0:
            raise ConfigError(f"max_shadow_distance must be > 0, got {self.max_shadow_distance}")
        if not 0 <= self.contact_opacity <= 1:
            raise ConfigError(f"contact_opacity must be in [0, 1], got {self.contact_opacity}")
        if self.falloff_rate < 0:
            raise ConfigError(f"falloff_rate must be >= 0, got {self.falloff_rate}")
        if self.min_blur_radius < 0:
            raise ConfigError(f"min_blur_radius must be >= 0, got {self.min_blur_radius}")
        if self.max_blur_radius < self.min_blur_radius:
            raise ConfigError(
                f"max_blur_radius ({self.max_blur_radius}) must be >= min_blur_radius ({self.min_blur_radius})"
            )

    @classmethod
    def from_options(cls, options, defaults=None):
        """
        Build a config from a camelCase options dict

        Args:
            options: Dict using the JSON entry point keys (lightAngle, ...)
            defaults: Optional ShadowConfig supplying values for absent keys

        Returns:
            Validated ShadowConfig
        """
        values = {}
        for key, field_name in OPTION_KEYS.items():
            if key in options and options[key] is not None:
                values[field_name] = options[key]

        if defaults is not None:
            return replace(defaults, **values)

        missing = [key for key in ("lightAngle", "lightElevation") if OPTION_KEYS[key] not in values]
        if missing:
            raise ConfigError(f"missing required options: {', '.join(missing)}")
        return cls(**values)

    def to_dict(self):
        return asdict(self)


def validate_alpha_threshold(threshold):
    """Alpha threshold must be an integer-valued level in [0, 255]"""
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ConfigError(f"alpha_threshold must be a number, got {threshold!r}")
    if not 0 <= threshold <= 255:
        raise ConfigError(f"alpha_threshold must be in [0, 255], got {threshold}")
    return threshold
