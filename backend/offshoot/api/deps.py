"""
Offshoot API Dependencies
One PaletteEngine and one ImageHarvester per process, handed to routes via Depends.
"""
from typing import Optional

from offshoot.services.colors import PaletteEngine
from offshoot.services.scraping import FetchChain, ImageHarvester

_palette_engine: Optional[PaletteEngine] = None
_harvester: Optional[ImageHarvester] = None


def get_palette_engine() -> PaletteEngine:
    """Get or create the process-wide palette engine."""
    global _palette_engine
    if _palette_engine is None:
        _palette_engine = PaletteEngine()
    return _palette_engine


def get_harvester() -> ImageHarvester:
    """Get or create the process-wide image harvester."""
    global _harvester
    if _harvester is None:
        _harvester = ImageHarvester(fetch_chain=FetchChain())
    return _harvester
