"""
Geometric shadow projection

Every opaque pixel casts a segment away from the light. Segments are
rasterized with Bresenham's algorithm and OR-ed into one binary mask.
"""

import logging

import numpy as np

from .pixels import round_half_up

logger = logging.getLogger(__name__)

DEPTH_WARP_STRENGTH = 0.5


def bresenham_line(x0, y0, x1, y1):
    """
    Integer cells traversed from (x0, y0) to (x1, y1), both ends included

    Returns:
        (N, 2) int64 array of (x, y) cells in drawing order
    """
    x0, y0, x1, y1 = int(x0), int(y0), int(x1), int(y1)

    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    cells = []
    x, y = x0, y0
    while True:
        cells.append((x, y))
        if x == x1 and y == y1:
            break

        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy

    return np.array(cells, dtype=np.int64)


def depth_warp(depth_map, ys, xs):
    """
    Per-pixel shadow stretch from the depth map red channel

    warp = 1 + depth * 0.5 with depth = red / 255, so far pixels (255) cast
    shadows 1.5x longer than near ones (0).
    """
    if depth_map is None:
        return np.ones(len(xs), dtype=np.float64)

    if depth_map.ndim == 3:
        red = depth_map[ys, xs, 0]
    else:
        red = depth_map[ys, xs]
    depth = red.astype(np.float64) / 255.0
    return 1.0 + depth * DEPTH_WARP_STRENGTH


def project_shadow(mask, light_vector, max_distance, depth_map=None):
    """
    Cast the silhouette away from the light into a binary shadow mask

    For each opaque pixel (x, y) the endpoint is
    (x - dx * max_distance * warp, y - dy * max_distance * warp); start and
    end are rounded to integer cells and the segment between them is marked.
    Cells outside the canvas are dropped.

    Args:
        mask: (H, W) 0/1 opacity mask
        light_vector: LightVector (dz is not used)
        max_distance: Shadow length in pixels (already scaled by elevation)
        depth_map: Optional RGBA (or single-channel) depth buffer, same size as mask

    Returns:
        (H, W) uint8 shadow mask, 1 = shadow
    """
    height, width = mask.shape
    shadow_mask = np.zeros((height, width), dtype=np.uint8)

    ys, xs = np.nonzero(mask)
    if len(xs) == 0:
        return shadow_mask

    warp = depth_warp(depth_map, ys, xs)
    end_x = round_half_up(xs - light_vector.dx * max_distance * warp).astype(np.int64)
    end_y = round_half_up(ys - light_vector.dy * max_distance * warp).astype(np.int64)

    # Integer Bresenham is translation invariant: pixels sharing an end offset share a pattern
    offsets = np.column_stack([end_x - xs, end_y - ys])
    patterns, inverse = np.unique(offsets, axis=0, return_inverse=True)
    inverse = np.asarray(inverse).reshape(-1)

    logger.debug(
        "project_shadow: %d source pixels, %d distinct segment patterns, max_distance=%.1f",
        len(xs), len(patterns), max_distance,
    )

    for index, (off_x, off_y) in enumerate(patterns):
        members = inverse == index
        src_x = xs[members]
        src_y = ys[members]

        for step_x, step_y in bresenham_line(0, 0, off_x, off_y):
            tx = src_x + step_x
            ty = src_y + step_y
            inside = (tx >= 0) & (tx < width) & (ty >= 0) & (ty < height)
            shadow_mask[ty[inside], tx[inside]] = 1

    return shadow_mask


def remove_occlusions(shadow_mask, silhouette_mask):
    """
    Drop shadow cells covered by the (unshifted) silhouette

    Returns:
        New mask: 1 where shadow_mask is set and silhouette_mask is not
    """
    keep = (shadow_mask == 1) & (silhouette_mask == 0)
    return keep.astype(np.uint8)
