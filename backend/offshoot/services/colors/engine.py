"""
Palette engine: batch analysis, match scoring and nearest-color lookup.

Holds the current reference palette as an immutable tuple and swaps it with a
single assignment, so readers see either the old palette or the new one.
"""
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from offshoot.config import config
from offshoot.errors import InvalidInputError
from offshoot.services.imaging import image_dimensions
from offshoot.utils.ids import generate_request_id
from offshoot.utils.logging import get_logger
from .clustering import Palette, cluster_colors
from .sampler import merge_histograms, sample_image
from .utils import color_distance, hex_to_rgb

# Only the most frequent colors of a scored image take part in matching
SCORE_TOP_COLORS = 20
MAX_STYLE_TAGS = 5


@dataclass(frozen=True)
class ColorMatch:
    reference: str
    candidate: str


@dataclass(frozen=True)
class MatchReport:
    """How well one image reproduces the reference palette."""
    score: float = 0.0
    matches: Tuple[ColorMatch, ...] = field(default_factory=tuple)

    def to_dict(self):
        return {
            "score": self.score,
            "matches": [{"reference": m.reference, "candidate": m.candidate} for m in self.matches],
        }


class PaletteEngine:
    """Derives and serves the reference palette for a batch of sample images."""

    def __init__(self,
                 max_colors: Optional[int] = None,
                 min_distance: Optional[float] = None,
                 match_distance: Optional[float] = None):
        self.max_colors = max_colors or config.PALETTE_MAX_COLORS
        self.min_distance = config.PALETTE_MIN_DISTANCE if min_distance is None else min_distance
        self.match_distance = config.MATCH_DISTANCE if match_distance is None else match_distance
        self._palette: Palette = ()

    @property
    def palette(self) -> Palette:
        """Current reference palette."""
        return self._palette

    def reset(self) -> None:
        self._palette = ()

    def analyze(self, images: Sequence[Any], request_id: Optional[str] = None) -> Palette:
        """
        Derive a new reference palette from a batch of images.

        Images that fail to decode contribute nothing; the batch continues.
        The resulting palette replaces any previous one.

        Raises:
            InvalidInputError: If no images were supplied
        """
        if not images:
            raise InvalidInputError("At least one image is required for palette analysis")

        request_id = request_id or generate_request_id("pal")
        log = get_logger().for_request(request_id)
        start_time = time.time()

        histograms = []
        for index, image in enumerate(images):
            histogram = sample_image(image)
            if not histogram:
                log.warning(f"Image {index} contributed no colors")
            histograms.append(histogram)

        merged = merge_histograms(histograms)
        palette = cluster_colors(merged, max_colors=self.max_colors, min_distance=self.min_distance)

        self._palette = palette

        log.info(
            f"Palette replaced with {len(palette)} colors from {len(images)} images "
            f"in {(time.time() - start_time) * 1000:.1f}ms"
        )
        return palette

    def score(self, candidate_image: Any) -> MatchReport:
        """
        Score how many reference colors appear in a candidate image.

        Returns a zero report when either side has no colors.
        """
        reference = self._palette
        histogram = sample_image(candidate_image)
        if not reference or not histogram:
            return MatchReport()

        candidate_colors = [hex_to_rgb(hex_color) for hex_color, _ in histogram.most_common(SCORE_TOP_COLORS)]

        matches: List[ColorMatch] = []
        for reference_hex in reference:
            reference_rgb = hex_to_rgb(reference_hex)
            for candidate_rgb in candidate_colors:
                if color_distance(reference_rgb, candidate_rgb) < self.match_distance:
                    matches.append(ColorMatch(reference=reference_hex, candidate=candidate_rgb.hex))
                    break

        score = len(matches) / len(reference) * 100
        return MatchReport(score=score, matches=tuple(matches))

    def closest(self, hex_color: str) -> Optional[str]:
        """Reference palette entry nearest to hex_color, or None."""
        reference = self._palette
        target = hex_to_rgb(hex_color)
        if not reference or target is None:
            return None

        return min(reference, key=lambda entry: color_distance(target, hex_to_rgb(entry)))

    def infer_styles(self, images: Sequence[Any]) -> List[str]:
        """
        Coarse style tags from image geometry and the dominant palette color.
        """
        styles: List[str] = []

        ratios = [w / h for w, h in (image_dimensions(image) for image in images) if w and h]
        if ratios:
            avg_ratio = sum(ratios) / len(ratios)
            if avg_ratio > 1.5:
                styles.append("Landscape")
            elif avg_ratio < 0.7:
                styles.append("Portrait")
            else:
                styles.append("Square")

        reference = self._palette
        if reference:
            primary = hex_to_rgb(reference[0])
            if primary.r > primary.g and primary.r > primary.b:
                styles.append("Warm Tones")
            elif primary.b > primary.r and primary.b > primary.g:
                styles.append("Cool Tones")
            elif primary.g > primary.r and primary.g > primary.b:
                styles.append("Natural")

            if primary.brightness < 80:
                styles.append("Dark")
            elif primary.brightness > 180:
                styles.append("Light")
            else:
                styles.append("Balanced")

        if len(images) > 10:
            styles.append("Diverse")

        styles.append("Professional")
        return styles[:MAX_STYLE_TAGS]
