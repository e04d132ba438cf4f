"""
Ordered relay fallback for fetching remote pages.

Relays are tried strictly one after another. Each attempt is bounded by its
own timeout and cancelled when it expires; any failure moves on to the next
relay, and only when every relay has failed is a single aggregated error
raised.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Sequence

import httpx
from loguru import logger

from offshoot.config import config
from offshoot.errors import FetchChainExhaustedError, TransientFetchError
from offshoot.services.reliability import TimeoutManager, timeout_manager as default_timeout_manager
from .relays import ProxyDescriptor, build_relays

PAGE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}
IMAGE_HEADERS = {
    "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
}


class FetchChain:
    """Retrieves page markup through an ordered list of relays."""

    def __init__(self,
                 relays: Optional[Sequence[ProxyDescriptor]] = None,
                 client: Optional[httpx.AsyncClient] = None,
                 timeout: Optional[float] = None,
                 min_length: Optional[int] = None,
                 timeouts: Optional[TimeoutManager] = None):
        self.relays = tuple(relays) if relays is not None else build_relays()
        if not self.relays:
            raise ValueError("FetchChain needs at least one relay")
        self.timeout = timeout or config.FETCH_TIMEOUT
        self.min_length = config.FETCH_MIN_LENGTH if min_length is None else min_length
        self.timeouts = timeouts or default_timeout_manager
        self._client = client

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(follow_redirects=True) as client:
            yield client

    async def retrieve(self, url: str) -> str:
        """
        Fetch markup for url, falling through relays in order.

        Raises:
            FetchChainExhaustedError: If every relay failed
        """
        last_error: Optional[Exception] = None

        async with self._session() as client:
            for relay in self.relays:
                logger.info(f"Trying relay: {relay.name}")
                try:
                    markup = await self._attempt(client, relay, url)
                except TransientFetchError as e:
                    logger.warning(f"Relay {relay.name} failed: {e}")
                    last_error = e
                    continue

                logger.info(f"Success with relay: {relay.name} ({len(markup)} chars)")
                return markup

        raise FetchChainExhaustedError(last_error)

    async def _attempt(self, client: httpx.AsyncClient, relay: ProxyDescriptor, url: str) -> str:
        request_url = relay.build_url(url)

        try:
            async with self.timeouts.timeout("relay_attempt", self.timeout):
                response = await client.get(request_url, headers=PAGE_HEADERS)
        except httpx.HTTPError as e:
            raise TransientFetchError(str(e) or type(e).__name__)

        if not response.is_success:
            raise TransientFetchError(f"HTTP {response.status_code}")

        if relay.is_json:
            try:
                payload = response.json()
            except ValueError:
                raise TransientFetchError("Relay returned invalid JSON")
            markup = payload.get(relay.json_field) if isinstance(payload, dict) else None
        else:
            markup = response.text

        if not isinstance(markup, str) or len(markup) <= self.min_length:
            raise TransientFetchError("Empty response")
        return markup

    async def retrieve_bytes(self, url: str) -> Optional[bytes]:
        """
        Fetch binary content (an image) directly, then through raw-text relays.

        Returns None when nothing worked; never raises.
        """
        sources = [url] + [relay.build_url(url) for relay in self.relays if not relay.is_json]

        async with self._session() as client:
            for source in sources:
                try:
                    async with self.timeouts.timeout("image_load", self.timeout):
                        response = await client.get(source, headers=IMAGE_HEADERS)
                except (httpx.HTTPError, TransientFetchError) as e:
                    logger.warning(f"Image load failed via {source}: {e}")
                    continue

                if response.is_success and response.content:
                    return response.content
                logger.warning(f"Image load via {source} returned HTTP {response.status_code}")

        return None
