"""
Pixel sampling for palette extraction.

Reduces one decoded image to a histogram of quantized hex colors. The image
is first scaled so its longer edge fits the sampling resolution, then every
Nth pixel is visited; transparent pixels are skipped and each channel is
rounded to the nearest multiple of the quantization step.
"""
from collections import Counter
from typing import Any, Optional

import numpy as np
from loguru import logger

from offshoot.config import config
from offshoot.errors import DecodeError
from offshoot.services.imaging import decode_image, scale_for_sampling

# Hex color -> occurrence count, in first-seen order
ColorHistogram = Counter


def quantize_channels(rgb: np.ndarray, step: int) -> np.ndarray:
    """Round channels to the nearest multiple of step, clamped to 0-255."""
    # floor(x + 0.5) rounds halves up
    quantized = np.floor(rgb.astype(np.float32) / step + 0.5) * step
    return np.clip(quantized, 0, 255).astype(np.int32)


def histogram_from_pixels(pixels_rgba: np.ndarray,
                          stride: Optional[int] = None,
                          step: Optional[int] = None,
                          alpha_min: Optional[int] = None) -> ColorHistogram:
    """
    Build a color histogram from an RGBA pixel buffer.

    Args:
        pixels_rgba: (H, W, 4) or (N, 4) uint8 array
        stride: Visit every stride-th pixel in row-major order
        step: Quantization bucket size per channel
        alpha_min: Pixels with alpha below this are skipped

    Returns:
        Counter mapping lowercase #rrggbb to count, keys in first-seen order
    """
    stride = stride or config.SAMPLE_STRIDE
    step = step or config.QUANT_STEP
    alpha_min = config.ALPHA_MIN if alpha_min is None else alpha_min

    flat = np.asarray(pixels_rgba).reshape(-1, 4)[::stride]
    opaque = flat[flat[:, 3] >= alpha_min]
    if opaque.size == 0:
        return Counter()

    quantized = quantize_channels(opaque[:, :3], step)
    codes = (quantized[:, 0] << 16) | (quantized[:, 1] << 8) | quantized[:, 2]

    unique_codes, first_index, counts = np.unique(codes, return_index=True, return_counts=True)
    histogram: ColorHistogram = Counter()
    for order in np.argsort(first_index, kind="stable"):
        histogram[f"#{int(unique_codes[order]):06x}"] = int(counts[order])
    return histogram


def sample_image(source: Any,
                 max_edge: Optional[int] = None,
                 stride: Optional[int] = None,
                 step: Optional[int] = None) -> ColorHistogram:
    """
    Sample one image handle into a color histogram.

    Unreadable or corrupt images yield an empty histogram instead of raising.
    """
    try:
        image = scale_for_sampling(decode_image(source), max_edge)
        pixels = np.asarray(image, dtype=np.uint8)
    except DecodeError as e:
        logger.warning(f"Image sampling skipped: {e}")
        return Counter()

    histogram = histogram_from_pixels(pixels, stride=stride, step=step)
    logger.debug(f"Sampled {image.width}x{image.height} image into {len(histogram)} colors")
    return histogram


def merge_histograms(histograms) -> ColorHistogram:
    """Sum counts per hex key across histograms."""
    merged: ColorHistogram = Counter()
    for histogram in histograms:
        merged.update(histogram)
    return merged
