"""
Reduced-resolution preview rendering

Inputs are downsampled so the short side is at most target_short, every
length-like parameter is scaled by the same factor, and the normal pipeline
runs on the small buffers. An optional SSIM check compares the preview shadow
with the full-resolution one.
"""

import logging
from dataclasses import replace

import cv2
import numpy as np
from skimage.metrics import structural_similarity

from .config import DEFAULT_ALPHA_THRESHOLD
from .errors import DimensionMismatchError
from .generator import generate, validate_images
from .image_io import resize
from .models import ImageSet

logger = logging.getLogger(__name__)

DEFAULT_TARGET_SHORT = 640
CONSISTENCY_THRESHOLD = 0.985
SSIM_WINDOW = 7


def preview_scale_factor(width, height, target_short=DEFAULT_TARGET_SHORT):
    """Scale factor (<= 1) bringing the short side down to target_short"""
    short = min(width, height)
    if short <= 0:
        return 1.0
    return min(1.0, target_short / short)


def scale_config(config, scale_factor):
    """
    Scale distances and blur radii of a ShadowConfig

    Angles, opacity and falloff rate are resolution independent and kept.
    Distances stay float; rounding them would shift the shadow between
    preview and final renders.
    """
    return replace(
        config,
        max_shadow_distance=config.max_shadow_distance * scale_factor,
        min_blur_radius=config.min_blur_radius * scale_factor,
        max_blur_radius=config.max_blur_radius * scale_factor,
    )


def calc_ssim(img1, img2):
    """
    SSIM between two equally sized 8-bit grayscale images

    Returns:
        SSIM in [-1, 1] (1 = identical), or None when the images are
        smaller than the SSIM window
    """
    if img1.shape != img2.shape:
        raise ValueError(f"SSIM needs equal shapes, got {img1.shape} and {img2.shape}")
    if min(img1.shape[:2]) < SSIM_WINDOW:
        return None
    return float(structural_similarity(img1, img2, data_range=255, win_size=SSIM_WINDOW))


def generate_preview(images, config, target_short=DEFAULT_TARGET_SHORT, consistency_check=False,
                     alpha_threshold=DEFAULT_ALPHA_THRESHOLD, attached=False, progress=None):
    """
    Run the pipeline on downsampled inputs

    Args:
        images: ImageSet at full resolution
        config: ShadowConfig expressed in full-resolution pixels
        target_short: Maximum short side of the preview
        consistency_check: Also render at full size and compare shadow alpha by SSIM
        alpha_threshold, attached, progress: forwarded to generate

    Returns:
        (ShadowResult, info dict with scale_factor, processing_size, ssim)
    """
    mismatches = validate_images(images)
    if mismatches:
        raise DimensionMismatchError("; ".join(mismatches))

    full_w, full_h = images.foreground.shape[1], images.foreground.shape[0]
    scale_factor = preview_scale_factor(full_w, full_h, target_short)

    new_w = max(1, int(round(full_w * scale_factor)))
    new_h = max(1, int(round(full_h * scale_factor)))

    def shrink(buffer):
        if buffer is None:
            return None
        return resize(buffer, new_w, new_h)

    small_images = ImageSet(
        foreground=shrink(images.foreground),
        background=shrink(images.background),
        depth_map=shrink(images.depth_map),
    )
    small_config = scale_config(config, scale_factor)

    logger.info(
        "generate_preview: scale=%.3f, %dx%d -> %dx%d, max_shadow_distance %.1f -> %.1f",
        scale_factor, full_w, full_h, new_w, new_h,
        config.max_shadow_distance, small_config.max_shadow_distance,
    )

    result = generate(
        small_images, small_config,
        alpha_threshold=alpha_threshold, attached=attached, progress=progress,
    )

    info = {
        "scale_factor": scale_factor,
        "processing_size": {"w": new_w, "h": new_h},
        "ssim": None,
    }

    if consistency_check:
        full = generate(images, config, alpha_threshold=alpha_threshold, attached=attached)
        final_alpha = cv2.resize(
            np.ascontiguousarray(full.shadow_only[:, :, 3]), (new_w, new_h), interpolation=cv2.INTER_AREA
        )
        score = calc_ssim(np.ascontiguousarray(result.shadow_only[:, :, 3]), final_alpha)
        info["ssim"] = score

        if score is None:
            logger.info("generate_preview: preview too small for SSIM check")
        elif score < CONSISTENCY_THRESHOLD:
            logger.warning(
                "generate_preview: preview/final mismatch, SSIM=%.3f < %.3f",
                score, CONSISTENCY_THRESHOLD,
            )
        else:
            logger.info("generate_preview: preview/final consistent, SSIM=%.3f", score)

    return result, info
