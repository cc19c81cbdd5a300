"""
Shadow layer construction and final compositing

Layer order (bottom to top): background, shadow, foreground. All blends are
straight-alpha Porter-Duff "over".
"""

import numpy as np

from .pixels import alpha_blend, new_buffer, round_half_up


def shadow_opacity(distance, contact_opacity, falloff_rate, max_distance):
    """contact_opacity * exp(-falloff_rate * distance / max_distance)"""
    distance = np.asarray(distance, dtype=np.float64)
    return contact_opacity * np.exp(-falloff_rate * distance / max_distance)


def create_shadow_layer(shadow_mask, distance_map, config):
    """
    Turn a binary shadow mask into a black RGBA layer with distance falloff

    Args:
        shadow_mask: (H, W) 0/1 shadow mask
        distance_map: (H, W) distance from the contact line
        config: ShadowConfig (contact_opacity, falloff_rate, max_shadow_distance)

    Returns:
        RGBA uint8 buffer; shadow pixels are black with
        alpha = round(opacity * 255), everything else is transparent black
    """
    height, width = shadow_mask.shape
    layer = new_buffer(width, height)

    opacity = shadow_opacity(
        distance_map, config.contact_opacity, config.falloff_rate, config.max_shadow_distance
    )
    alpha = np.clip(round_half_up(opacity * 255.0), 0, 255).astype(np.uint8)

    shadow = shadow_mask == 1
    layer[:, :, 3] = np.where(shadow, alpha, 0)
    return layer


def composite(background, shadow, foreground):
    """
    Blend background <- shadow <- foreground

    Returns:
        New RGBA uint8 buffer; inputs are not modified
    """
    with_shadow = alpha_blend(background, shadow)
    return alpha_blend(with_shadow, foreground)


def composite_attached_shadow(background, shadow, foreground, silhouette_mask):
    """
    Like composite, but the shadow is suppressed wherever the silhouette is set

    Keeps the shadow from showing through semi-transparent foreground edges.
    """
    visible_shadow = shadow.copy()
    visible_shadow[silhouette_mask.astype(bool)] = 0
    return composite(background, visible_shadow, foreground)
