"""
Offshoot Scraping Module

Relay-backed page fetching and multi-strategy product image discovery.
"""
from .fetch_chain import FetchChain
from .harvester import ImageHarvester
from .relays import DEFAULT_RELAYS, ProxyDescriptor, ResponseShape, build_relays

__all__ = [
    'FetchChain',
    'ImageHarvester',
    'DEFAULT_RELAYS',
    'ProxyDescriptor',
    'ResponseShape',
    'build_relays',
]
