"""
Offshoot Core

Palette extraction from sample images and product image discovery from
arbitrary web pages.
"""

__version__ = "1.0.0"
