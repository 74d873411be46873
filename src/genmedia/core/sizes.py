"""
Abstract size tokens and numeric clamping shared by all adapters.

Callers pick one of five size tokens; each vendor gets the token translated
to its own aspect-ratio string or pixel dimensions. Numeric knobs are
clamped, never rejected; non-finite values fall back to the default.
"""

import math
from collections.abc import Mapping

from genmedia.logging_config import get_logger

logger = get_logger(__name__)

SQUARE = "1:1"

ASPECT_RATIOS: dict[str, str] = {
    "square_hd": SQUARE,
    "portrait_4_3": "3:4",
    "portrait_16_9": "9:16",
    "landscape_4_3": "4:3",
    "landscape_16_9": "16:9",
}

SIZE_TOKENS = tuple(ASPECT_RATIOS)

# Ranges accepted by every supported vendor
NUM_IMAGES_RANGE = (1, 4)
STEPS_RANGE = (1, 50)
GUIDANCE_RANGE = (1.0, 20.0)


def aspect_ratio_for(token: str | None) -> str:
    """Map a size token to a ratio string; unknown tokens fall back to 1:1."""
    if token is None:
        return SQUARE
    return ASPECT_RATIOS.get(token, SQUARE)


def dimensions_for(token: str | None, sizes: Mapping[str, tuple[int, int]]) -> tuple[int, int]:
    """
    Return (width, height) for a size token from a vendor size table.

    Unknown tokens use the table's square entry.
    """
    if token in sizes:
        return sizes[token]
    return sizes["square_hd"]


def _clamp(name: str, value, default, low, high):
    if value is None:
        return default
    # NaN passes through min/max unchanged
    if not math.isfinite(value):
        logger.debug("Replaced non-finite %s %s with default %s", name, value, default)
        return default
    clamped = min(max(value, low), high)
    if clamped != value:
        logger.debug("Clamped %s from %s to %s", name, value, clamped)
    return clamped


def clamp_num_images(value: int | None, default: int = 1) -> int:
    return _clamp("num_images", value, default, *NUM_IMAGES_RANGE)


def clamp_steps(value: int | None, default: int) -> int:
    return _clamp("num_inference_steps", value, default, *STEPS_RANGE)


def clamp_guidance(value: float | None, default: float) -> float:
    return _clamp("guidance_scale", value, default, *GUIDANCE_RANGE)


def clamp_range(name: str, value: int | None, default: int, low: int, high: int) -> int:
    """Clamp a vendor-specific knob (e.g. video frame count) into [low, high]."""
    return _clamp(name, value, default, low, high)
