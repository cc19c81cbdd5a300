"""
Distance from each silhouette pixel to the ground contact line

The result drives both the opacity falloff and the blur radius, so it must be
the exact Euclidean distance to the nearest contact point. A k-d tree finds the
nearest point; the distance is then recomputed from integer offsets so the
value matches a brute-force scan bit for bit.
"""

import logging

import numpy as np
from scipy.spatial import cKDTree

from .pixels import round_half_up

logger = logging.getLogger(__name__)


def compute_distance_map(mask, contact_line):
    """
    Minimum Euclidean distance from every opaque pixel to the contact line

    Args:
        mask: (H, W) 0/1 opacity mask
        contact_line: (N, 2) array of (x, y) contact points

    Returns:
        (H, W) float32 map; 0 for transparent pixels and for every pixel when
        the contact line is empty
    """
    distances = np.zeros(mask.shape, dtype=np.float32)

    if len(contact_line) == 0:
        logger.debug("compute_distance_map: empty contact line, all distances are 0")
        return distances

    ys, xs = np.nonzero(mask)
    if len(xs) == 0:
        return distances

    points = np.asarray(contact_line, dtype=np.int64)
    tree = cKDTree(points.astype(np.float64))
    _, nearest = tree.query(np.column_stack([xs, ys]).astype(np.float64), k=1)

    # Integer offsets keep dx^2 + dy^2 exact before the single sqrt
    off_x = xs - points[nearest, 0]
    off_y = ys - points[nearest, 1]
    distances[ys, xs] = np.sqrt((off_x * off_x + off_y * off_y).astype(np.float64))

    logger.debug(
        "compute_distance_map: %d silhouette pixels, %d contact points, max=%.1f",
        len(xs), len(points), float(distances.max()),
    )
    return distances


def visualize_distance_map(distance_map, max_distance):
    """
    Debug view: distance mapped to gray, 0 = black, >= max_distance = white
    """
    normalized = np.minimum(distance_map.astype(np.float64) / max_distance, 1.0)
    value = round_half_up(normalized * 255).astype(np.uint8)

    out = np.empty(distance_map.shape + (4,), dtype=np.uint8)
    out[:, :, 0] = value
    out[:, :, 1] = value
    out[:, :, 2] = value
    out[:, :, 3] = 255
    return out


def distance_statistics(distance_map, mask):
    """Min / max / average distance over the silhouette pixels only"""
    values = distance_map[mask.astype(bool)]
    if values.size == 0:
        return dict(min=0.0, max=0.0, average=0.0)

    return dict(
        min=float(values.min()),
        max=float(values.max()),
        average=float(values.mean(dtype=np.float64)),
    )
