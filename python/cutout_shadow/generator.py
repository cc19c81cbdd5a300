"""
Shadow generation pipeline

Stages run strictly in order, each on fresh buffers:
1. silhouette from foreground alpha
2. light vector and shadow length
3. contact line
4. distance transform
5. projection + occlusion removal
6. shadow layer with opacity falloff
7. distance-weighted blur
8. mask debug view
9. composite
"""

import logging

from .blur import apply_distance_weighted_blur
from .compositing import composite, composite_attached_shadow, create_shadow_layer
from .config import (
    DEFAULT_ALPHA_THRESHOLD,
    DEFAULT_MAX_BLUR_RADIUS,
    DEFAULT_MAX_SHADOW_DISTANCE,
    DEFAULT_MIN_BLUR_RADIUS,
    ShadowConfig,
    validate_alpha_threshold,
)
from .contact_detection import detect_contact_line
from .distance_transform import compute_distance_map
from .errors import ConfigError, DimensionMismatchError, MissingInputError
from .light import calculate_light_vector, get_shadow_length_multiplier, get_suggested_shadow_params
from .models import ShadowResult
from .pixels import buffer_size, check_buffer
from .projection import project_shadow, remove_occlusions
from .silhouette import extract_silhouette, mask_to_image_data

logger = logging.getLogger(__name__)

STAGES = (
    "silhouette",
    "light",
    "contact_line",
    "distance",
    "projection",
    "shadow_layer",
    "blur",
    "mask_debug",
    "composite",
)


def get_default_config(light_angle=135, light_elevation=45):
    """
    Reasonable starting configuration for a light direction

    Opacity and falloff come from get_suggested_shadow_params; distance and
    blur radii are fixed defaults (150 px, 1 - 10 px).
    """
    suggested = get_suggested_shadow_params(light_elevation)

    return ShadowConfig(
        light_angle=light_angle,
        light_elevation=light_elevation,
        max_shadow_distance=DEFAULT_MAX_SHADOW_DISTANCE,
        contact_opacity=suggested["contact_opacity"],
        falloff_rate=suggested["falloff_rate"],
        min_blur_radius=DEFAULT_MIN_BLUR_RADIUS,
        max_blur_radius=DEFAULT_MAX_BLUR_RADIUS,
    )


def validate_images(images):
    """
    Check that the required inputs are present and report size mismatches

    Missing foreground/background is fatal. Size mismatches are only reported:
    they are logged and returned so the caller can normalise the inputs
    (see image_io.ensure_same_dimensions).

    Raises:
        MissingInputError: foreground or background is None
        ValueError: a buffer is not an (H, W, 4) uint8 array

    Returns:
        List of warning strings, empty when all sizes agree
    """
    if images.foreground is None:
        raise MissingInputError("Foreground image is required")
    if images.background is None:
        raise MissingInputError("Background image is required")

    check_buffer(images.foreground, "foreground")
    check_buffer(images.background, "background")

    warnings = []
    fg_w, fg_h = buffer_size(images.foreground)
    bg_w, bg_h = buffer_size(images.background)

    if (fg_w, fg_h) != (bg_w, bg_h):
        warnings.append(
            f"Image dimension mismatch: foreground {fg_w}x{fg_h}, background {bg_w}x{bg_h}"
        )

    if images.depth_map is not None:
        if images.depth_map.ndim not in (2, 3):
            raise ValueError(f"depth_map must be 2D or 3D, got shape {images.depth_map.shape}")
        dm_w, dm_h = buffer_size(images.depth_map)
        if (dm_w, dm_h) != (fg_w, fg_h):
            warnings.append(
                f"Depth map dimension mismatch: {dm_w}x{dm_h}, expected {fg_w}x{fg_h}"
            )

    for message in warnings:
        logger.warning("validate_images: %s", message)

    return warnings


def generate(images, config, alpha_threshold=DEFAULT_ALPHA_THRESHOLD, attached=False, progress=None):
    """
    Run the full pipeline and return every output

    Args:
        images: ImageSet (foreground, background, optional depth_map)
        config: ShadowConfig
        alpha_threshold: Alpha level at or below which a foreground pixel is transparent
        attached: Use composite_attached_shadow instead of composite
        progress: Optional callback(stage, fraction) called synchronously;
            purely informational

    Raises:
        MissingInputError, DimensionMismatchError, ConfigError, ValueError
        before any pixel work starts

    Returns:
        ShadowResult
    """
    if not isinstance(config, ShadowConfig):
        raise ConfigError(f"config must be a ShadowConfig, got {type(config).__name__}")
    validate_alpha_threshold(alpha_threshold)

    mismatches = validate_images(images)
    if mismatches:
        raise DimensionMismatchError("; ".join(mismatches))

    def report(stage, fraction=1.0):
        if progress is not None:
            progress(stage, fraction)

    foreground = images.foreground
    width, height = buffer_size(foreground)

    logger.info(
        "generate: %dx%d, angle=%.1f, elevation=%.1f, depth_map=%s",
        width, height, config.light_angle, config.light_elevation, images.depth_map is not None,
    )

    silhouette = extract_silhouette(foreground, alpha_threshold)
    report("silhouette")

    light_vector = calculate_light_vector(config.light_angle, config.light_elevation)
    shadow_length = get_shadow_length_multiplier(config.light_elevation) * config.max_shadow_distance
    logger.debug(
        "generate: light vector (%.3f, %.3f, %.3f), shadow length %.1f px",
        light_vector.dx, light_vector.dy, light_vector.dz, shadow_length,
    )
    report("light")

    contact_line = detect_contact_line(silhouette)
    logger.debug("generate: %d contact points", len(contact_line))
    report("contact_line")

    distance_map = compute_distance_map(silhouette, contact_line)
    report("distance")

    shadow_mask = project_shadow(silhouette, light_vector, shadow_length, images.depth_map)
    shadow_mask = remove_occlusions(shadow_mask, silhouette)
    report("projection")

    shadow_layer = create_shadow_layer(shadow_mask, distance_map, config)
    report("shadow_layer")

    shadow_layer = apply_distance_weighted_blur(
        shadow_layer,
        distance_map,
        config.min_blur_radius,
        config.max_blur_radius,
        config.max_shadow_distance,
        progress=lambda fraction: report("blur", fraction),
    )
    report("blur")

    mask_debug = mask_to_image_data(silhouette)
    report("mask_debug")

    if attached:
        final = composite_attached_shadow(images.background, shadow_layer, foreground, silhouette)
    else:
        final = composite(images.background, shadow_layer, foreground)
    report("composite")

    logger.info("generate: complete, %d shadow pixels", int(shadow_mask.sum()))

    return ShadowResult(
        shadow_only=shadow_layer,
        mask_debug=mask_debug,
        composite=final,
        silhouette=silhouette,
        contact_line=contact_line,
        distance_map=distance_map,
        shadow_mask=shadow_mask,
        light_vector=light_vector,
        shadow_length=shadow_length,
    )
