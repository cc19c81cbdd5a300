"""
Directional light model

Angle convention: 0 degrees points along +x and increasing angles rotate
toward +y. Image space is y-down, so 90 degrees points down the screen.
"""

from math import cos, sin, radians

from .models import LightVector

MIN_SIN_ELEVATION = 0.1


def calculate_light_vector(angle_deg, elevation_deg):
    """
    Convert light angle / elevation to a 3D direction vector

    Args:
        angle_deg: Horizontal light direction in degrees
        elevation_deg: Elevation above the ground plane in degrees (90 = overhead)

    Returns:
        LightVector(dx, dy, dz)
    """
    angle = radians(angle_deg)
    elevation = radians(elevation_deg)

    return LightVector(
        dx=cos(angle) * cos(elevation),
        dy=sin(angle) * cos(elevation),
        dz=sin(elevation),
    )


def get_shadow_length_multiplier(elevation_deg):
    """
    Shadow length relative to max_shadow_distance

    1 / sin(elevation), with sin clamped to 0.1 so a grazing light
    (elevation 0) gives a x10 shadow instead of an infinite one.
    Overhead light (90 degrees) gives 1.
    """
    return 1.0 / max(MIN_SIN_ELEVATION, sin(radians(elevation_deg)))


def get_suggested_shadow_params(elevation_deg):
    """
    Starting contact opacity / falloff rate for a given elevation

    Low sun: darker contact, slower falloff. High sun: lighter, faster.
    These are UX defaults only.

    Returns:
        Dict with contact_opacity (0.6 - 0.9) and falloff_rate (3 - 5)
    """
    elevation_norm = elevation_deg / 90.0

    return dict(
        contact_opacity=0.9 - elevation_norm * 0.3,
        falloff_rate=3.0 + elevation_norm * 2.0,
    )
