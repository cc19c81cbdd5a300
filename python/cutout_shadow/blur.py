"""
Distance-weighted blur of the shadow layer

Each pixel is replaced by the unweighted mean of the pixels inside a disc of
its own radius (dx^2 + dy^2 <= r^2). Near the contact line the radius is small
(sharp shadow), far away it grows (soft shadow). Neighbours outside the image
are left out of the mean rather than padded.

Because dx^2 + dy^2 is an integer, the disc only depends on floor(r^2). Pixels
are grouped by that value and each group is summed row by row from prefix
sums, which keeps the arithmetic exact integer math.
"""

import logging
from math import isqrt

import numpy as np

logger = logging.getLogger(__name__)

MIN_EFFECTIVE_RADIUS = 0.5


def blur_radius_map(distance_map, min_blur, max_blur, max_distance):
    """
    Per-pixel blur radius: lerp(min_blur, max_blur, clamp(distance / max_distance, 0, 1))
    """
    t = np.clip(distance_map.astype(np.float64) / max_distance, 0.0, 1.0)
    return min_blur + (max_blur - min_blur) * t


def apply_distance_weighted_blur(shadow_layer, distance_map, min_blur, max_blur, max_distance,
                                 progress=None):
    """
    Blur the shadow layer with a radius driven by the distance map

    Args:
        shadow_layer: RGBA uint8 buffer
        distance_map: (H, W) distance from the contact line
        min_blur: Radius at distance 0
        max_blur: Radius at distance >= max_distance
        max_distance: Distance normalising the lerp
        progress: Optional callback(fraction) called between radius groups

    Returns:
        New RGBA uint8 buffer; all four channels (alpha included) are averaged
    """
    radii = blur_radius_map(distance_map, min_blur, max_blur, max_distance)
    logger.debug(
        "apply_distance_weighted_blur: radius range %.2f - %.2f px",
        float(radii.min()) if radii.size else 0.0,
        float(radii.max()) if radii.size else 0.0,
    )
    return _blur_with_radii(shadow_layer, radii, progress)


def uniform_blur(buffer, radius):
    """Same circular mean with one radius for every pixel"""
    radii = np.full(buffer.shape[:2], float(radius), dtype=np.float64)
    return _blur_with_radii(buffer, radii)


def _blur_with_radii(buffer, radii, progress=None):
    height, width = buffer.shape[:2]
    result = buffer.copy()

    # Radii below 0.5 keep the original pixel
    active = radii >= MIN_EFFECTIVE_RADIUS
    if not active.any():
        if progress is not None:
            progress(1.0)
        return result

    # Row prefix sums: prefix[y, x] = sum of buffer[y, :x]; 255 * width fits in int32
    prefix = np.zeros((height, width + 1, 4), dtype=np.int32)
    np.cumsum(buffer, axis=1, dtype=np.int32, out=prefix[:, 1:])

    disc_keys = np.floor(radii * radii).astype(np.int64)
    disc_keys[~active] = -1

    keys = np.unique(disc_keys[active])
    total = int(np.count_nonzero(active))
    done = 0

    for key in keys:
        ys, xs = np.nonzero(disc_keys == key)
        sums, counts = _disc_sums(prefix, ys, xs, int(key), width, height)

        # Round half up of sums / counts without leaving integer arithmetic
        averaged = (2 * sums + counts[:, None]) // (2 * counts[:, None])
        result[ys, xs] = np.clip(averaged, 0, 255).astype(np.uint8)

        done += len(xs)
        if progress is not None:
            progress(done / total)

    return result


def _disc_sums(prefix, ys, xs, key, width, height):
    """Channel sums and sample counts over the disc dx^2 + dy^2 <= key around each (x, y)"""
    sums = np.zeros((len(xs), 4), dtype=np.int64)
    counts = np.zeros(len(xs), dtype=np.int64)

    reach = isqrt(key)
    for dy in range(-reach, reach + 1):
        half = isqrt(key - dy * dy)
        rows = ys + dy
        valid = (rows >= 0) & (rows < height)
        if not valid.any():
            continue

        row = rows[valid]
        x0 = np.maximum(xs[valid] - half, 0)
        x1 = np.minimum(xs[valid] + half, width - 1)

        sums[valid] += prefix[row, x1 + 1] - prefix[row, x0]
        counts[valid] += x1 - x0 + 1

    return sums, counts
