"""
Image acquisition / export adapter

Decoding, encoding and size normalisation live here, outside the numeric
core. Buffers handed to the pipeline are always RGBA uint8; OpenCV's BGRA
order only appears inside encode_png.
"""

import base64
import binascii
import logging
import os
from io import BytesIO

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import ImageDecodeError

logger = logging.getLogger(__name__)


def _source_bytes(source):
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)

    if isinstance(source, os.PathLike) or (isinstance(source, str) and os.path.isfile(source)):
        with open(source, "rb") as f:
            return f.read()

    if isinstance(source, str):
        # data:image/png;base64,<payload>
        if source.startswith("data:image"):
            source = source.split(",", 1)[1]
        try:
            return base64.b64decode(source, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageDecodeError(f"invalid base64 image data: {e}") from e

    raise ImageDecodeError(f"unsupported image source type: {type(source).__name__}")


def decode_image(source):
    """
    Decode an image into an RGBA uint8 buffer

    Args:
        source: base64 string, data URL, raw bytes or file path

    Returns:
        (H, W, 4) uint8 RGBA array; inputs without alpha get a fully opaque one
    """
    data = _source_bytes(source)
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"cannot decode image: {e}") from e

    rgba = np.array(image.convert("RGBA"), dtype=np.uint8)
    logger.debug("decode_image: mode=%s size=%dx%d", image.mode, rgba.shape[1], rgba.shape[0])
    return rgba


def depth_to_rgba(depth):
    """
    Lift a single-channel depth map into an RGBA buffer whose red channel is depth
    """
    if depth.ndim == 3:
        depth = depth[:, :, 0]
    gray = np.clip(depth, 0, 255).astype(np.uint8)
    out = np.empty(gray.shape + (4,), dtype=np.uint8)
    out[:, :, 0] = gray
    out[:, :, 1] = gray
    out[:, :, 2] = gray
    out[:, :, 3] = 255
    return out


def encode_png(buffer):
    """PNG bytes of an RGBA buffer"""
    bgra = cv2.cvtColor(buffer, cv2.COLOR_RGBA2BGRA)
    ok, encoded = cv2.imencode(".png", bgra)
    if not ok:
        raise ValueError("PNG encoding failed")
    return encoded.tobytes()


def to_data_url(buffer):
    """data:image/png;base64,... string for an RGBA buffer"""
    image_base64 = base64.b64encode(encode_png(buffer)).decode("utf-8")
    return f"data:image/png;base64,{image_base64}"


def save_png(buffer, path):
    with open(path, "wb") as f:
        f.write(encode_png(buffer))


def resize(buffer, width, height):
    """
    Resample to width x height

    INTER_AREA when shrinking (no aliasing), INTER_LINEAR when enlarging.
    """
    src_h, src_w = buffer.shape[:2]
    if (src_w, src_h) == (width, height):
        return buffer.copy()

    shrinking = width * height < src_w * src_h
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
    return cv2.resize(buffer, (width, height), interpolation=interpolation)


def ensure_same_dimensions(buffers):
    """
    Resize every buffer to the size of the first one

    None entries are passed through so an optional depth map can be included.
    """
    first = next((b for b in buffers if b is not None), None)
    if first is None:
        return list(buffers)

    target_h, target_w = first.shape[:2]
    result = []
    for buffer in buffers:
        if buffer is None:
            result.append(None)
            continue
        if buffer.shape[:2] != (target_h, target_w):
            logger.info(
                "ensure_same_dimensions: %dx%d -> %dx%d",
                buffer.shape[1], buffer.shape[0], target_w, target_h,
            )
        result.append(resize(buffer, target_w, target_h))
    return result
