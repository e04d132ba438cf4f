"""
Offshoot Error Taxonomy
Exceptions raised by the palette and harvesting services.
"""
from typing import Optional


class OffshootError(Exception):
    """Base class for all Offshoot service errors."""
    pass


class InvalidInputError(OffshootError, ValueError):
    """Malformed URL, empty image list or bad color; raised before any I/O."""
    pass


class DecodeError(OffshootError):
    """A single image could not be decoded or sampled."""
    pass


class TransientFetchError(OffshootError):
    """One relay attempt failed; the fetch chain moves on to the next relay."""
    pass


class FetchChainExhaustedError(OffshootError):
    """Every configured relay failed."""

    def __init__(self, last_error: Optional[BaseException] = None):
        self.last_error = last_error
        detail = str(last_error) if last_error is not None and str(last_error) else "Unknown"
        super().__init__(f"All relays failed. Last error: {detail}")


class NoCandidatesFoundError(OffshootError):
    """Markup was fetched but no strategy produced a usable image URL."""

    def __init__(self, page_url: str = ""):
        self.page_url = page_url
        super().__init__("No product images found on this page")
