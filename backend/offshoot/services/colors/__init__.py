"""
Offshoot Colors Module

Pixel sampling, greedy palette clustering and palette matching for batches
of sample images.
"""
from .clustering import Palette, cluster_colors
from .engine import ColorMatch, MatchReport, PaletteEngine
from .sampler import histogram_from_pixels, merge_histograms, sample_image

__all__ = [
    'Palette',
    'cluster_colors',
    'ColorMatch',
    'MatchReport',
    'PaletteEngine',
    'histogram_from_pixels',
    'merge_histograms',
    'sample_image',
]
