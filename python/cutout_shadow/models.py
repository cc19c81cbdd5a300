"""
Data carried between the pipeline stages
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional

import numpy as np


class LightVector(NamedTuple):
    """Unit direction of the incoming light; dz is informational only"""

    dx: float
    dy: float
    dz: float


@dataclass
class ImageSet:
    """
    Input buffers for one generation run

    foreground: RGBA cut-out, alpha carries the silhouette
    background: RGBA background
    depth_map: optional RGBA buffer whose red channel holds depth (0 = near, 255 = far)
    """

    foreground: Optional[np.ndarray]
    background: Optional[np.ndarray]
    depth_map: Optional[np.ndarray] = None


@dataclass
class ShadowResult:
    """
    Outputs of generator.generate

    shadow_only, mask_debug and composite are independent RGBA buffers; the
    remaining fields expose the intermediate stages for debugging.
    """

    shadow_only: np.ndarray
    mask_debug: np.ndarray
    composite: np.ndarray
    silhouette: np.ndarray
    contact_line: np.ndarray
    distance_map: np.ndarray
    shadow_mask: np.ndarray
    light_vector: LightVector
    shadow_length: float

    def shadow_stats(self):
        """Non-zero alpha count and mean alpha of the shadow layer"""
        alpha = self.shadow_only[:, :, 3]
        visible = alpha > 0
        count = int(np.count_nonzero(visible))
        return {
            "non_zero_pixels": count,
            "mean_intensity": float(alpha[visible].mean()) if count > 0 else 0.0,
        }
