"""
Projected shadow synthesis for cut-out subjects

Turns the alpha silhouette of a foreground cut-out into a soft, distance-faded,
optionally depth-aware shadow and composites background, shadow and foreground.
"""

from .blur import apply_distance_weighted_blur, uniform_blur
from .compositing import composite, composite_attached_shadow, create_shadow_layer
from .config import ShadowConfig
from .contact_detection import contact_line_bounds, detect_contact_line, visualize_contact_line
from .distance_transform import compute_distance_map, distance_statistics, visualize_distance_map
from .errors import (
    ConfigError,
    DimensionMismatchError,
    ImageDecodeError,
    MissingInputError,
    ShadowError,
)
from .generator import generate, get_default_config, validate_images
from .light import calculate_light_vector, get_shadow_length_multiplier, get_suggested_shadow_params
from .models import ImageSet, LightVector, ShadowResult
from .preview import generate_preview
from .projection import bresenham_line, project_shadow, remove_occlusions
from .silhouette import extract_silhouette, mask_to_image_data, silhouette_stats

__version__ = "0.1.0"
