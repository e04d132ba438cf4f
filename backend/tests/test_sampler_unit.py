"""
Unit tests for pixel sampling.

Covers quantization, transparency handling, stride sampling, resizing and
tolerance of unreadable images.
"""
import base64
import re

import numpy as np
import pytest
from PIL import Image

from offshoot.errors import DecodeError
from offshoot.services.colors.sampler import (
    histogram_from_pixels, merge_histograms, quantize_channels, sample_image
)
from offshoot.services.imaging import decode_image, scale_for_sampling

from factories import RED, make_png

HEX_KEY_RE = re.compile(r"^#[0-9a-f]{6}$")


class TestQuantizeChannels:
    """Test rounding to the 32-wide buckets"""

    def test_rounds_to_nearest_multiple(self):
        values = np.array([[0, 15, 16], [100, 200, 255]])
        result = quantize_channels(values, 32)
        np.testing.assert_array_equal(result, [[0, 0, 32], [96, 192, 255]])

    def test_clamps_top_bucket(self):
        # 255 rounds to 256 and is clamped
        assert quantize_channels(np.array([[255, 250, 240]]), 32).max() == 255


class TestHistogramFromPixels:
    """Test histogram construction from raw RGBA buffers"""

    def test_solid_opaque_image(self):
        pixels = np.full((10, 10, 4), (*RED, 255), dtype=np.uint8)
        histogram = histogram_from_pixels(pixels, stride=4)

        assert dict(histogram) == {"#e02020": 25}

    def test_keys_are_hex_strings(self):
        rng = np.random.default_rng(7)
        pixels = rng.integers(0, 256, size=(20, 20, 4), dtype=np.uint8)
        pixels[:, :, 3] = 255

        histogram = histogram_from_pixels(pixels)
        assert histogram
        assert all(HEX_KEY_RE.match(key) for key in histogram)

    def test_transparent_pixels_skipped(self):
        pixels = np.zeros((4, 4, 4), dtype=np.uint8)
        pixels[:, :, :3] = 200
        pixels[:, :, 3] = 127

        assert histogram_from_pixels(pixels, stride=1) == {}

    def test_alpha_threshold_inclusive(self):
        pixels = np.array([[200, 200, 200, 128]], dtype=np.uint8)
        assert histogram_from_pixels(pixels, stride=1) == {"#c0c0c0": 1}

    def test_first_seen_order(self):
        pixels = np.array([
            [0, 0, 224, 255],
            [224, 0, 0, 255],
            [224, 0, 0, 255],
        ], dtype=np.uint8)

        histogram = histogram_from_pixels(pixels, stride=1)
        assert list(histogram) == ["#0000e0", "#e00000"]
        assert histogram["#e00000"] == 2

    def test_stride_visits_every_nth_pixel(self):
        pixels = np.zeros((8, 4), dtype=np.uint8)
        pixels[:, 3] = 255
        pixels[::4, 0] = 224  # only pixels 0 and 4 are red

        histogram = histogram_from_pixels(pixels, stride=4)
        assert dict(histogram) == {"#e00000": 2}


class TestSampleImage:
    """Test sampling of decoded image handles"""

    def test_png_bytes(self):
        histogram = sample_image(make_png(RED))
        assert dict(histogram) == {"#e02020": 25}

    def test_data_url(self):
        data_url = "data:image/png;base64," + base64.b64encode(make_png(RED)).decode("ascii")
        assert "#e02020" in sample_image(data_url)

    def test_numpy_rgb_array(self):
        pixels = np.full((8, 8, 3), RED, dtype=np.uint8)
        assert list(sample_image(pixels)) == ["#e02020"]

    def test_corrupt_bytes_yield_empty_histogram(self):
        assert sample_image(b"definitely not an image") == {}

    def test_unsupported_handle_yields_empty_histogram(self):
        assert sample_image(12345) == {}
        assert sample_image(np.zeros((4, 4), dtype=np.uint8)) == {}

    def test_fully_transparent_image(self):
        assert sample_image(make_png(RED, alpha=0)) == {}

    def test_non_numeric_array_yields_empty_histogram(self):
        assert sample_image(np.array([[["a", "b", "c"]]])) == {}
        assert sample_image(np.array([[[None, None, None]]], dtype=object)) == {}

    def test_oversized_image_yields_empty_histogram(self, monkeypatch):
        # 20x20 is more than twice the lowered pixel limit
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        assert sample_image(make_png(RED, size=(20, 20))) == {}


class TestScaling:
    """Test resize to the sampling resolution"""

    def test_longer_edge_capped(self):
        image = Image.new("RGBA", (400, 200))
        assert scale_for_sampling(image, 100).size == (100, 50)

    def test_small_image_untouched(self):
        image = Image.new("RGBA", (60, 30))
        assert scale_for_sampling(image, 100) is image

    def test_decode_rejects_garbage(self):
        with pytest.raises(DecodeError):
            decode_image(b"\x89PNG broken")


def test_merge_histograms_sums_counts():
    merged = merge_histograms([{"#e00000": 2, "#0000e0": 1}, {"#0000e0": 4}, {}])
    assert merged == {"#e00000": 2, "#0000e0": 5}
    assert list(merged) == ["#e00000", "#0000e0"]
