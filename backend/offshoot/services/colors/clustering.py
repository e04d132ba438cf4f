"""
Greedy frequency-first color clustering.

Candidates are walked from most to least frequent; a color is kept when it is
far enough from every color already kept and is neither near-black nor
near-white. Inputs are pre-quantized by the sampler, so most near duplicates
have already collapsed into one bucket.
"""
from typing import List, Mapping, Optional, Tuple

from loguru import logger

from offshoot.config import config
from .utils import SampledColor, color_distance, hex_to_rgb

Palette = Tuple[str, ...]


def is_extreme_brightness(color: SampledColor,
                          low: Optional[float] = None,
                          high: Optional[float] = None) -> bool:
    """True when mean channel value falls outside the open interval (low, high)."""
    low = config.BRIGHTNESS_MIN if low is None else low
    high = config.BRIGHTNESS_MAX if high is None else high
    return not (low < color.brightness < high)


def cluster_colors(histogram: Mapping[str, int],
                   max_colors: Optional[int] = None,
                   min_distance: Optional[float] = None,
                   brightness_min: Optional[float] = None,
                   brightness_max: Optional[float] = None) -> Palette:
    """
    Reduce an aggregate color histogram to an ordered palette.

    Args:
        histogram: Hex color -> aggregate count; iteration order breaks ties
        max_colors: Palette size cap
        min_distance: Minimum RGB distance between any two palette entries
        brightness_min: Exclusive lower bound on mean channel value
        brightness_max: Exclusive upper bound on mean channel value

    Returns:
        Tuple of hex strings, most frequent first
    """
    max_colors = max_colors or config.PALETTE_MAX_COLORS
    min_distance = config.PALETTE_MIN_DISTANCE if min_distance is None else min_distance

    # sorted() is stable, so equal counts keep first-seen order
    ranked = sorted(histogram.items(), key=lambda item: -item[1])

    accepted: List[Tuple[str, SampledColor]] = []
    for hex_color, _count in ranked:
        if len(accepted) >= max_colors:
            break

        rgb = hex_to_rgb(hex_color)
        if rgb is None:
            continue
        if is_extreme_brightness(rgb, brightness_min, brightness_max):
            continue
        if any(color_distance(rgb, kept) < min_distance for _, kept in accepted):
            continue

        accepted.append((rgb.hex, rgb))

    palette = tuple(hex_color for hex_color, _ in accepted)
    logger.debug(f"Clustered {len(histogram)} candidate colors into {len(palette)}")
    return palette
