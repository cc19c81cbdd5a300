"""Shared test fixtures: synthetic RGBA cut-outs and backgrounds."""

import cv2
import numpy as np
import pytest

from cutout_shadow.models import ImageSet


def make_cutout(width=64, height=64):
    """Opaque ellipse body with a smaller head on a transparent canvas"""
    image = np.zeros((height, width, 4), dtype=np.uint8)
    alpha = np.zeros((height, width), dtype=np.uint8)

    cx = width // 2
    cv2.ellipse(alpha, (cx, int(height * 0.7)), (width // 4, height // 6), 0, 0, 360, 255, -1)
    cv2.ellipse(alpha, (cx, int(height * 0.4)), (width // 8, height // 8), 0, 0, 360, 255, -1)

    image[:, :, 0] = 200
    image[:, :, 1] = 80
    image[:, :, 2] = 40
    image[:, :, 3] = alpha
    return image


def solid(width, height, rgba):
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[:, :] = rgba
    return image


def single_pixel_foreground(width, height, x, y, rgba=(255, 0, 0, 255)):
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[y, x] = rgba
    return image


@pytest.fixture
def cutout():
    return make_cutout()


@pytest.fixture
def background():
    return solid(64, 64, (180, 190, 200, 255))


@pytest.fixture
def image_set(cutout, background):
    return ImageSet(foreground=cutout, background=background)
