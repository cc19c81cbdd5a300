"""
JSON-over-stdin entry point

Input (stdin):
    {
        "foregroundImageBase64": "...",   # RGBA cut-out
        "backgroundImageBase64": "...",
        "depthMapBase64": "...",          # optional
        "options": {
            "lightAngle": 135, "lightElevation": 45,
            "maxShadowDistance", "contactOpacity", "falloffRate",
            "minBlurRadius", "maxBlurRadius",   # optional overrides
            "alphaThreshold": 10,
            "quality": "final" | "preview",
            "attached": false,
            "normalizeDimensions": false
        }
    }

Output (stdout): {"ok": true, "shadowOnlyBase64", "maskDebugBase64",
"compositeBase64", "shadowParams", "debug"} or {"ok": false, "error"}.
Diagnostics go to stderr.
"""

import json
import logging
import sys

from .config import DEFAULT_ALPHA_THRESHOLD, ShadowConfig
from .generator import generate, get_default_config
from .image_io import decode_image, depth_to_rgba, ensure_same_dimensions, to_data_url
from .models import ImageSet
from .preview import DEFAULT_TARGET_SHORT, generate_preview

logger = logging.getLogger(__name__)


def load_images(input_data, normalize=False):
    """Decode the base64 inputs of a request into an ImageSet"""
    foreground = input_data.get("foregroundImageBase64")
    background = input_data.get("backgroundImageBase64")
    depth = input_data.get("depthMapBase64")

    foreground = decode_image(foreground) if foreground else None
    background = decode_image(background) if background else None
    depth_map = depth_to_rgba(decode_image(depth)) if depth else None

    if normalize and foreground is not None:
        foreground, background, depth_map = ensure_same_dimensions([foreground, background, depth_map])

    return ImageSet(foreground=foreground, background=background, depth_map=depth_map)


def build_config(options):
    """Defaults for the requested light direction, overridden by explicit options"""
    angle = options.get("lightAngle")
    elevation = options.get("lightElevation")
    defaults = get_default_config(
        135 if angle is None else angle,
        45 if elevation is None else elevation,
    )
    return ShadowConfig.from_options(options, defaults=defaults)


def run(input_data):
    """
    Handle one request dict and return the response dict

    Every failure is reported as {"ok": False, "error": ...}.
    """
    try:
        options = input_data.get("options") or {}
        quality = options.get("quality", "final")
        attached = bool(options.get("attached", False))
        alpha_threshold = options.get("alphaThreshold", DEFAULT_ALPHA_THRESHOLD)

        images = load_images(input_data, normalize=bool(options.get("normalizeDimensions", False)))
        config = build_config(options)

        logger.info("run: quality=%s, attached=%s, config=%s", quality, attached, config.to_dict())

        if quality == "preview":
            result, info = generate_preview(
                images, config,
                target_short=options.get("previewShortSide", DEFAULT_TARGET_SHORT),
                consistency_check=bool(options.get("consistencyCheck", False)),
                alpha_threshold=alpha_threshold,
                attached=attached,
            )
        elif quality == "final":
            result = generate(images, config, alpha_threshold=alpha_threshold, attached=attached)
            info = {"scale_factor": 1.0, "ssim": None}
        else:
            raise ValueError(f"unknown quality: {quality!r}")

        height, width = result.composite.shape[:2]
        return {
            "ok": True,
            "shadowOnlyBase64": to_data_url(result.shadow_only),
            "maskDebugBase64": to_data_url(result.mask_debug),
            "compositeBase64": to_data_url(result.composite),
            "processedSize": {"width": width, "height": height},
            "shadowParams": {
                **config.to_dict(),
                "light_vector": list(result.light_vector),
                "shadow_length": float(result.shadow_length),
            },
            "debug": {
                "quality": quality,
                "attached": attached,
                "contact_points": int(len(result.contact_line)),
                "shadow_stats": result.shadow_stats(),
                **info,
            },
        }

    except Exception as e:
        logger.error("run failed: %s", e)
        return {
            "ok": False,
            "error": str(e),
        }


def main(stdin=None, stdout=None):
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        input_data = json.loads(stdin.read())
    except json.JSONDecodeError as e:
        result = {"ok": False, "error": f"invalid JSON input: {e}"}
    else:
        result = run(input_data)

    stdout.write(json.dumps(result))
    stdout.write("\n")
    return 0 if result["ok"] else 1
