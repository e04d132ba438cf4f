"""
Offshoot Imaging Utilities
Handles image decoding, upload validation and sampling-resolution resizing.
"""
import base64
import binascii
import io
from typing import Any, Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from offshoot.config import config
from offshoot.errors import DecodeError, InvalidInputError


def validate_upload(content_type: Optional[str], size: int) -> None:
    """
    Validate an uploaded image before decoding.

    Raises:
        InvalidInputError: For unsupported MIME types or out-of-range sizes
    """
    if not config.validate_mime_type(content_type):
        raise InvalidInputError(
            f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )
    if not config.validate_file_size(size):
        raise InvalidInputError(f"File empty or too large. Maximum size: {config.MAX_FILE_MB}MB")


def _decode_base64(data: str) -> bytes:
    # Remove data URL prefix if present
    if data.startswith("data:"):
        if "," not in data:
            raise DecodeError("Malformed data URL")
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 image data: {e}")


def decode_image(source: Any) -> Image.Image:
    """
    Decode an image handle into an RGBA PIL image.

    Args:
        source: Raw bytes, a base64 string or data URL, a PIL image, or an
            HxWx3 / HxWx4 uint8 numpy array

    Returns:
        PIL image in RGBA mode

    Raises:
        DecodeError: If the source cannot be read as an image
    """
    if isinstance(source, Image.Image):
        image = source
    elif isinstance(source, np.ndarray):
        if source.ndim != 3 or source.shape[2] not in (3, 4) or source.size == 0:
            raise DecodeError(f"Unsupported pixel array shape: {source.shape}")
        try:
            image = Image.fromarray(np.ascontiguousarray(source, dtype=np.uint8))
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Unreadable pixel array: {e}")
    else:
        if isinstance(source, str):
            source = _decode_base64(source)
        if not isinstance(source, (bytes, bytearray)) or not source:
            raise DecodeError(f"Unsupported image source: {type(source).__name__}")
        try:
            image = Image.open(io.BytesIO(source))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise DecodeError(f"Failed to decode image: {e}")

    if image.width == 0 or image.height == 0:
        raise DecodeError("Image has no pixels")

    if image.mode != "RGBA":
        try:
            image = image.convert("RGBA")
        except (OSError, ValueError) as e:
            raise DecodeError(f"Cannot convert {image.mode} image: {e}")
    return image


def scale_for_sampling(image: Image.Image, max_edge: Optional[int] = None) -> Image.Image:
    """
    Resize so the longer edge is at most max_edge, preserving aspect ratio.

    Images already within bounds are returned untouched.
    """
    max_edge = max_edge or config.SAMPLE_MAX_EDGE
    width, height = image.size
    scale = min(1.0, max_edge / max(width, height))
    if scale >= 1.0:
        return image

    new_size = (max(1, int(width * scale)), max(1, int(height * scale)))
    return image.resize(new_size, Image.BILINEAR)


def image_dimensions(source: Any) -> Tuple[int, int]:
    """Return (width, height) of an image handle, or (0, 0) if unreadable."""
    try:
        image = decode_image(source)
    except DecodeError:
        return 0, 0
    return image.size
