"""
Offshoot Configuration
Manages environment variables and defaults for palette and harvesting services.
"""
import json
import os
from typing import Any, Dict, List, Optional


class Config:
    """Configuration class for Offshoot services."""

    # Logging
    LOG_LEVEL: str = os.environ.get("OFFSHOOT_LOG_LEVEL", "INFO")
    LOG_JSON: bool = os.environ.get("OFFSHOOT_LOG_JSON", "false").lower() == "true"

    # Pixel sampling
    SAMPLE_MAX_EDGE: int = int(os.environ.get("OFFSHOOT_SAMPLE_MAX_EDGE", "100"))
    SAMPLE_STRIDE: int = int(os.environ.get("OFFSHOOT_SAMPLE_STRIDE", "4"))
    QUANT_STEP: int = int(os.environ.get("OFFSHOOT_QUANT_STEP", "32"))
    ALPHA_MIN: int = int(os.environ.get("OFFSHOOT_ALPHA_MIN", "128"))

    # Palette clustering
    PALETTE_MAX_COLORS: int = int(os.environ.get("OFFSHOOT_PALETTE_MAX_COLORS", "8"))
    PALETTE_MIN_DISTANCE: float = float(os.environ.get("OFFSHOOT_PALETTE_MIN_DISTANCE", "50"))
    BRIGHTNESS_MIN: float = float(os.environ.get("OFFSHOOT_BRIGHTNESS_MIN", "20"))
    BRIGHTNESS_MAX: float = float(os.environ.get("OFFSHOOT_BRIGHTNESS_MAX", "235"))
    MATCH_DISTANCE: float = float(os.environ.get("OFFSHOOT_MATCH_DISTANCE", "60"))

    # Relay fetching (seconds)
    FETCH_TIMEOUT: float = float(os.environ.get("OFFSHOOT_FETCH_TIMEOUT", "15"))
    FETCH_MIN_LENGTH: int = int(os.environ.get("OFFSHOOT_FETCH_MIN_LENGTH", "100"))
    RELAYS: str = os.environ.get("OFFSHOOT_RELAYS", "")
    RELAY_TIMEOUT: float = float(os.environ.get("OFFSHOOT_RELAY_TIMEOUT", "30"))

    # Harvesting
    HARVEST_MAX_RESULTS: int = int(os.environ.get("OFFSHOOT_HARVEST_MAX_RESULTS", "20"))
    HARVEST_MIN_IMG_URL_LENGTH: int = int(os.environ.get("OFFSHOOT_HARVEST_MIN_IMG_URL_LENGTH", "60"))

    # URL path must end in one of these (query string ignored)
    IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif")

    # Lowercase substrings marking decorative or tracking imagery
    DECORATIVE_URL_MARKERS = (
        "logo", "icon", "sprite", "nav-", "button", "badge", "banner", "arrow",
        "checkbox", "_ss40", "_ss50", "transparent-pixel", "pixel", "blank", "data:",
    )

    # Attributes used for deferred / high-res image loading
    LAZY_IMAGE_ATTRIBUTES = (
        "data-src", "data-zoom-image", "data-large", "data-full", "data-original",
        "data-old-hires", "data-a-hires", "data-zoom", "data-highres", "data-hi-res",
        "data-full-size", "data-src-zoom", "data-lazy-src",
    )

    # Uploads
    MAX_FILE_MB: int = int(os.environ.get("OFFSHOOT_MAX_FILE_MB", "10"))
    SUPPORTED_MIME_TYPES = ["image/png", "image/jpeg", "image/jpg", "image/webp"]

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get(
        "OFFSHOOT_ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:5000,http://127.0.0.1:3000,http://127.0.0.1:5000",
    )

    @classmethod
    def relay_overrides(cls) -> Optional[List[Dict[str, Any]]]:
        """Parse the OFFSHOOT_RELAYS JSON list, or None when unset."""
        if not cls.RELAYS.strip():
            return None
        records = json.loads(cls.RELAYS)
        if not isinstance(records, list):
            raise ValueError("OFFSHOOT_RELAYS must be a JSON list")
        return records

    @classmethod
    def allowed_origins(cls) -> List[str]:
        return [origin.strip() for origin in cls.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @classmethod
    def validate_mime_type(cls, content_type: Optional[str]) -> bool:
        """Validate upload MIME type."""
        return content_type in cls.SUPPORTED_MIME_TYPES

    @classmethod
    def validate_file_size(cls, size: int) -> bool:
        """Validate upload size in bytes."""
        return 0 < size <= cls.MAX_FILE_MB * 1024 * 1024


# Global config instance
config = Config()
