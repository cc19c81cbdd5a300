"""
RGBA pixel buffer helpers shared by the pipeline stages

Buffers are numpy arrays of shape (height, width, 4), dtype uint8, RGBA order.
"""

import numpy as np


def round_half_up(values):
    """Round to the nearest integer with .5 going up (same as JS Math.round)"""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def new_buffer(width, height):
    """Fully transparent black RGBA buffer"""
    return np.zeros((height, width, 4), dtype=np.uint8)


def check_buffer(buffer, name="buffer"):
    """
    Validate that buffer is an (H, W, 4) uint8 RGBA array

    Raises:
        ValueError: on any other shape or dtype
    """
    if not isinstance(buffer, np.ndarray):
        raise ValueError(f"{name} must be a numpy array, got {type(buffer).__name__}")
    if buffer.ndim != 3 or buffer.shape[2] != 4:
        raise ValueError(f"{name} must have shape (H, W, 4), got {buffer.shape}")
    if buffer.dtype != np.uint8:
        raise ValueError(f"{name} must be uint8, got {buffer.dtype}")
    return buffer


def buffer_size(buffer):
    """(width, height) of an RGBA buffer or a 2D map"""
    return buffer.shape[1], buffer.shape[0]


def mask_to_image(mask, value=255):
    """
    Render a 0/1 mask as an opaque grayscale RGBA buffer

    Args:
        mask: (H, W) array of 0/1
        value: gray level used for set pixels

    Returns:
        RGBA buffer, set pixels gray=value, others black, alpha 255
    """
    gray = (mask.astype(np.uint16) * value).astype(np.uint8)
    out = np.empty(mask.shape + (4,), dtype=np.uint8)
    out[:, :, 0] = gray
    out[:, :, 1] = gray
    out[:, :, 2] = gray
    out[:, :, 3] = 255
    return out


def alpha_blend(backdrop, source):
    """
    Porter-Duff "over" of source onto backdrop with straight (non-premultiplied) alpha

    outA = srcA + dstA * (1 - srcA)
    outC = (srcC * srcA + dstC * dstA * (1 - srcA)) / outA

    Pixels where the source is fully transparent keep the backdrop value
    untouched. Results are rounded half-up per channel.

    Args:
        backdrop: RGBA uint8 buffer
        source: RGBA uint8 buffer of the same shape

    Returns:
        New RGBA uint8 buffer
    """
    dst = backdrop.astype(np.float64)
    src = source.astype(np.float64)

    src_a = src[:, :, 3:4] / 255.0
    dst_a = dst[:, :, 3:4] / 255.0

    out_a = src_a + dst_a * (1.0 - src_a)

    # outA == 0 only when both layers are transparent; keep backdrop colour there
    safe_a = np.where(out_a > 0, out_a, 1.0)
    out_rgb = (src[:, :, :3] * src_a + dst[:, :, :3] * dst_a * (1.0 - src_a)) / safe_a
    out_rgb = np.where(out_a > 0, out_rgb, dst[:, :, :3])

    out = np.empty_like(backdrop)
    out[:, :, :3] = np.clip(round_half_up(out_rgb), 0, 255).astype(np.uint8)
    out[:, :, 3] = np.clip(round_half_up(out_a[:, :, 0] * 255.0), 0, 255).astype(np.uint8)

    transparent = source[:, :, 3] == 0
    out[transparent] = backdrop[transparent]
    return out
