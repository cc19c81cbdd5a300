"""
Silhouette extraction: alpha channel -> binary opacity mask
"""

import logging

import numpy as np

from .config import DEFAULT_ALPHA_THRESHOLD
from .pixels import mask_to_image

logger = logging.getLogger(__name__)


def extract_silhouette(foreground, alpha_threshold=DEFAULT_ALPHA_THRESHOLD):
    """
    Threshold the foreground alpha channel into an opacity mask

    A pixel is opaque iff alpha > alpha_threshold (alpha equal to the
    threshold counts as background). The default of 10/255 absorbs the
    anti-aliased fringe of a cut-out without eating thin features.

    Args:
        foreground: RGBA uint8 buffer
        alpha_threshold: Alpha level at or below which a pixel is transparent

    Returns:
        (H, W) uint8 mask, 1 = opaque
    """
    alpha = foreground[:, :, 3]
    mask = (alpha > alpha_threshold).astype(np.uint8)

    stats = silhouette_stats(mask)
    logger.debug(
        "extract_silhouette: %d opaque (%.1f%%), %d transparent",
        stats["opaque"], stats["opaque_fraction"] * 100, stats["transparent"],
    )

    # A full-frame silhouette is legal input but almost always a foreground without alpha
    if mask.size > 0 and stats["transparent"] == 0:
        logger.warning(
            "extract_silhouette: entire image is opaque; foreground needs a transparent background"
        )

    return mask


def silhouette_stats(mask):
    """Opaque / transparent pixel counts of a mask"""
    total = int(mask.size)
    opaque = int(np.count_nonzero(mask))
    return {
        "opaque": opaque,
        "transparent": total - opaque,
        "opaque_fraction": opaque / total if total > 0 else 0.0,
    }


def mask_to_image_data(mask):
    """Debug view of a mask: 1 -> white, 0 -> black, alpha forced opaque"""
    return mask_to_image(mask, 255)
