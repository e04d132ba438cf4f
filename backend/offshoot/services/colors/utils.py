"""
Color conversion and distance helpers shared by sampling, clustering and matching.
"""
import math
import re
from typing import NamedTuple, Optional

HEX_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


class SampledColor(NamedTuple):
    """Quantized RGB triple taken from one opaque pixel."""
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.r, self.g, self.b)

    @property
    def brightness(self) -> float:
        return (self.r + self.g + self.b) / 3


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB channels to a lowercase #rrggbb string, clamping to 0-255."""
    return "#" + "".join(f"{min(255, max(0, int(c))):02x}" for c in (r, g, b))


def hex_to_rgb(hex_color: str) -> Optional[SampledColor]:
    """Parse #rrggbb (leading # optional); None if malformed."""
    if not isinstance(hex_color, str):
        return None
    match = HEX_RE.match(hex_color.strip())
    if not match:
        return None
    return SampledColor(*(int(part, 16) for part in match.groups()))


def color_distance(c1: SampledColor, c2: SampledColor) -> float:
    """Euclidean distance in RGB space."""
    return math.sqrt((c1.r - c2.r) ** 2 + (c1.g - c2.g) ** 2 + (c1.b - c2.b) ** 2)
