"""
Offshoot Timeout Management
Per-operation timeouts for relay attempts and the built-in relay endpoint.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Optional

from loguru import logger

from offshoot.config import config
from offshoot.errors import TransientFetchError


class TimeoutError(TransientFetchError):
    """Custom timeout exception."""
    pass


class TimeoutManager:
    """Manages timeouts for different operations."""

    def __init__(self, default_timeout: float = 30.0, timeouts: Optional[Dict[str, float]] = None):
        self.default_timeout = default_timeout
        self.timeouts = {
            'relay_attempt': config.FETCH_TIMEOUT,
            'relay_endpoint': config.RELAY_TIMEOUT,
            'image_load': config.FETCH_TIMEOUT,
        }
        if timeouts:
            self.timeouts.update(timeouts)

    @asynccontextmanager
    async def timeout(self, operation: str, custom_timeout: Optional[float] = None):
        """
        Context manager for timeout handling.

        The body is cancelled when the deadline passes, so nothing it was
        awaiting is consulted afterwards.
        """
        timeout_value = custom_timeout or self.timeouts.get(operation, self.default_timeout)

        try:
            async with asyncio.timeout(timeout_value):
                yield
        except asyncio.TimeoutError:
            logger.warning(f"Timeout in {operation} after {timeout_value}s")
            raise TimeoutError(f"Operation {operation} timed out after {timeout_value}s")


# Global timeout manager instance
timeout_manager = TimeoutManager()
