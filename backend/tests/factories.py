"""
Synthetic images and stand-in collaborators shared by the test suite.
"""
import io
from typing import Dict, List, Optional, Tuple

import numpy as np
from PIL import Image

from offshoot.errors import FetchChainExhaustedError

RED = (224, 32, 32)
BLUE = (32, 32, 224)
GREEN = (32, 224, 32)


def make_png(color: Tuple[int, int, int], size: Tuple[int, int] = (10, 10), alpha: int = 255) -> bytes:
    """Encode a solid-color RGBA PNG."""
    image = Image.new("RGBA", size, (*color, alpha))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def make_split_pixels(left: Tuple[int, int, int], right: Tuple[int, int, int], size: int = 10) -> np.ndarray:
    """RGBA array whose left half is one color and right half another."""
    pixels = np.zeros((size, size, 4), dtype=np.uint8)
    pixels[:, : size // 2, :3] = left
    pixels[:, size // 2:, :3] = right
    pixels[:, :, 3] = 255
    return pixels


class StubFetchChain:
    """Stands in for FetchChain; serves canned markup and image bytes."""

    def __init__(self, markup: str = "", images: Optional[Dict[str, bytes]] = None, fail: bool = False):
        self.markup = markup
        self.images = images or {}
        self.fail = fail
        self.calls: List[str] = []

    async def retrieve(self, url: str) -> str:
        self.calls.append(url)
        if self.fail:
            raise FetchChainExhaustedError(RuntimeError("HTTP 503"))
        return self.markup

    async def retrieve_bytes(self, url: str) -> Optional[bytes]:
        self.calls.append(url)
        return self.images.get(url)
