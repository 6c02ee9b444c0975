"""
Helpers for data-URL images: normalisation, size checks and JPEG compression
"""
import base64
import io
import logging

from PIL import Image

logger = logging.getLogger(__name__)

JPEG_DATA_URL_PREFIX = "data:image/jpeg;base64,"


def to_data_url(image: str) -> str:
    """Return a data URL; bare base64 payloads are assumed to be JPEG"""
    return image if image.startswith("data:") else f"{JPEG_DATA_URL_PREFIX}{image}"


def strip_data_url(image: str) -> str:
    """Return the base64 payload of a data URL (or the input if it already is one)"""
    if image.startswith("data:") and "," in image:
        return image.split(",", 1)[1]
    return image


def get_data_url_size_kb(data_url: str) -> int:
    """Encoded size in KB, measured on the string length like the upload limit is"""
    return round(len(data_url) / 1024)


def needs_compression(data_url: str, max_size_kb: int = 500) -> bool:
    return get_data_url_size_kb(data_url) > max_size_kb


def compress_image(data_url: str, max_width: int = 1024, max_height: int = 1024, quality: int = 70) -> str:
    """
    Downscale (keeping aspect ratio) and re-encode an image as a JPEG data URL.

    Raises:
        ValueError: if the payload cannot be decoded as an image
    """
    try:
        image_bytes = base64.b64decode(strip_data_url(data_url))
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except Exception as e:
        raise ValueError(f"Failed to load image: {e}") from e

    if image.mode != "RGB":
        image = image.convert("RGB")

    image.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality, optimize=True)
    compressed = f"{JPEG_DATA_URL_PREFIX}{base64.b64encode(buffer.getvalue()).decode()}"

    original_kb = get_data_url_size_kb(data_url)
    compressed_kb = get_data_url_size_kb(compressed)
    if original_kb:
        reduction = round((1 - compressed_kb / original_kb) * 100)
        logger.info(f"Image compressed: {original_kb}KB → {compressed_kb}KB ({reduction}% reduction)")

    return compressed
