"""
Product image discovery for arbitrary web pages.

discover() validates the page URL, fetches markup through the relay chain,
runs every extraction strategy and returns a cleaned, capped list of
absolute image URLs.
"""
import asyncio
import time
from typing import List, Optional, Sequence

from loguru import logger

from offshoot.config import config
from offshoot.errors import InvalidInputError, NoCandidatesFoundError
from offshoot.utils.ids import generate_request_id
from offshoot.utils.logging import get_logger
from .fetch_chain import FetchChain
from .strategies import STRATEGIES, Strategy, collect_candidates
from .urls import (
    has_image_extension, is_decorative, is_public_http_url, is_valid_http_url, normalize_url,
    upgrade_resolution
)


class ImageHarvester:
    """Collects candidate product photo URLs from a page."""

    def __init__(self,
                 fetch_chain: Optional[FetchChain] = None,
                 strategies: Sequence[Strategy] = STRATEGIES,
                 max_results: Optional[int] = None):
        self.fetch_chain = fetch_chain or FetchChain()
        self.strategies = tuple(strategies)
        self.max_results = max_results or config.HARVEST_MAX_RESULTS

    async def discover(self, page_url: str, request_id: Optional[str] = None) -> List[str]:
        """
        Discover product image URLs on page_url.

        Markup parsing runs in a worker thread so the event loop stays free.

        Raises:
            InvalidInputError: If page_url is not an absolute http(s) URL
            FetchChainExhaustedError: If no relay could fetch the page
            NoCandidatesFoundError: If the page yielded no usable image URL
        """
        if not is_valid_http_url(page_url):
            raise InvalidInputError(f"Invalid URL: {page_url!r}")

        request_id = request_id or generate_request_id("hrv")
        start_time = time.time()
        log = get_logger().for_request(request_id, page_url=page_url)

        log.info("Fetching product page")
        markup = await self.fetch_chain.retrieve(page_url)

        images = await asyncio.to_thread(self.extract, markup, page_url)
        if not images:
            log.warning("No product images found")
            raise NoCandidatesFoundError(page_url)

        log.info(f"Found {len(images)} images in {(time.time() - start_time) * 1000:.1f}ms")
        return images

    def extract(self, markup: str, page_url: str) -> List[str]:
        """Candidate URLs from already-fetched markup; may be empty."""
        cleaned = {}
        for raw in collect_candidates(markup, self.strategies):
            url = upgrade_resolution(normalize_url(raw, page_url))
            cleaned.setdefault(url, None)

        images = [
            url for url in cleaned
            if is_valid_http_url(url) and not is_decorative(url) and has_image_extension(url)
        ]
        return images[:self.max_results]

    async def load_image(self, image_url: str) -> Optional[bytes]:
        """
        Download a picked candidate so it can be fed to palette analysis.

        Internal hosts are never contacted. Returns None on any failure.
        """
        if not is_public_http_url(image_url):
            logger.warning(f"Refusing to load invalid or internal image URL: {image_url!r}")
            return None
        return await self.fetch_chain.retrieve_bytes(image_url)
