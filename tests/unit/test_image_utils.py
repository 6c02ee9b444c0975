"""
Unit tests for data URL helpers and image compression
"""
import base64
import io

import pytest
from PIL import Image

from otto.services.image_utils import (
    JPEG_DATA_URL_PREFIX,
    compress_image,
    get_data_url_size_kb,
    needs_compression,
    strip_data_url,
    to_data_url,
)


def _decode(data_url: str) -> Image.Image:
    return Image.open(io.BytesIO(base64.b64decode(strip_data_url(data_url))))


class TestDataUrls:
    """Tests for data URL normalisation"""

    @pytest.mark.unit
    def test_bare_base64_gets_jpeg_prefix(self, sample_base64_image):
        assert to_data_url(sample_base64_image) == f"{JPEG_DATA_URL_PREFIX}{sample_base64_image}"

    @pytest.mark.unit
    def test_data_url_is_left_alone(self):
        png = "data:image/png;base64,AAAA"
        assert to_data_url(png) == png

    @pytest.mark.unit
    def test_strip_data_url(self, sample_image_data_url, sample_base64_image):
        assert strip_data_url(sample_image_data_url) == sample_base64_image
        assert strip_data_url(sample_base64_image) == sample_base64_image

    @pytest.mark.unit
    def test_size_is_measured_on_string_length(self):
        assert get_data_url_size_kb("x" * 2048) == 2
        assert get_data_url_size_kb("x" * 1500) == 1

    @pytest.mark.unit
    def test_needs_compression_threshold(self):
        assert needs_compression("x" * 1024 * 600, max_size_kb=500) is True
        assert needs_compression("x" * 1024 * 400, max_size_kb=500) is False


class TestCompressImage:
    """Tests for JPEG compression"""

    @pytest.mark.unit
    def test_downscales_keeping_aspect_ratio(self, make_image):
        compressed = compress_image(make_image(400, 200), max_width=100, max_height=100)

        assert compressed.startswith(JPEG_DATA_URL_PREFIX)
        assert _decode(compressed).size == (100, 50)

    @pytest.mark.unit
    def test_small_images_are_not_upscaled(self, make_image):
        compressed = compress_image(make_image(40, 30), max_width=100, max_height=100)
        assert _decode(compressed).size == (40, 30)

    @pytest.mark.unit
    def test_non_rgb_images_are_converted(self):
        img = Image.new("RGBA", (20, 20), color=(255, 0, 0, 128))
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        png = f"data:image/png;base64,{base64.b64encode(buffer.getvalue()).decode()}"

        compressed = compress_image(png)
        assert _decode(compressed).mode == "RGB"

    @pytest.mark.unit
    def test_invalid_payload_raises_value_error(self):
        with pytest.raises(ValueError):
            compress_image("data:image/jpeg;base64,bm90IGFuIGltYWdl")
