"""
Ground contact line detection

The lowest opaque pixel of every column is taken as the point where the
subject touches the ground. This assumes the ground plane is roughly aligned
with the bottom of the image.
"""

import numpy as np

from .pixels import mask_to_image


def detect_contact_line(mask):
    """
    Find the lowest (largest y) opaque pixel of each column

    Args:
        mask: (H, W) 0/1 opacity mask

    Returns:
        (N, 2) int64 array of (x, y) rows ordered by x; columns without any
        opaque pixel contribute no row
    """
    height, width = mask.shape
    if height == 0 or width == 0:
        return np.zeros((0, 2), dtype=np.int64)

    opaque = mask.astype(bool)

    has_pixel = opaque.any(axis=0)
    # argmax on the vertically flipped mask finds the first hit scanning upward from y = h - 1
    lowest_y = height - 1 - np.argmax(opaque[::-1, :], axis=0)

    xs = np.nonzero(has_pixel)[0]
    return np.column_stack([xs, lowest_y[xs]]).astype(np.int64).reshape(-1, 2)


def contact_line_bounds(contact_line):
    """
    Axis-aligned bounding box of the contact points

    An empty contact line gives an all-zero box; guard before dividing by its size.
    """
    if len(contact_line) == 0:
        return dict(min_x=0, max_x=0, min_y=0, max_y=0)

    xs = contact_line[:, 0]
    ys = contact_line[:, 1]
    return dict(
        min_x=int(xs.min()), max_x=int(xs.max()),
        min_y=int(ys.min()), max_y=int(ys.max()),
    )


def visualize_contact_line(mask, contact_line):
    """
    Debug view: silhouette in dim gray (128), contact points in red, alpha 255
    """
    debug_img = mask_to_image(mask, 128)

    if len(contact_line) > 0:
        xs = contact_line[:, 0]
        ys = contact_line[:, 1]
        debug_img[ys, xs] = (255, 0, 0, 255)

    return debug_img
