"""
Client for the image generation endpoint
"""
import logging
from typing import Iterable, Optional

import httpx

from otto.core.config import settings
from otto.core.errors import ExternalServiceError, ImageTooLargeError
from otto.schemas.commerce import Product
from otto.services.image_utils import get_data_url_size_kb, to_data_url
from otto.services.vision_client import error_message_from_response

logger = logging.getLogger(__name__)

SERVICE_NAME = "image-generation"

TRANSFORMATION_PROMPT = (
    "Transform this room with the selected furniture items. "
    "Create a photorealistic interior design visualization. "
    "Keep the same camera angle, architecture and lighting as the original photo."
)

# On-demand renders of the cart as the shopper left it
PREVIEW_PROMPT = (
    "Transform this room with the selected furniture items. "
    "Create a photorealistic interior design visualization."
)


def product_references(products: Iterable[Product]) -> list:
    """Wire representation of the products forwarded to the generator"""
    return [
        {"name": product.name, "description": product.description, "imageUrl": product.image_url}
        for product in products
    ]


class ImageGenerationClient:
    """POSTs an image, prompt and products to the generate endpoint"""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        path: Optional[str] = None,
        max_image_size_kb: Optional[int] = None,
    ):
        self.http_client = http_client
        self.path = path or settings.generate_image_path
        self.max_image_size_kb = max_image_size_kb or settings.max_image_size_kb

    async def generate(
        self,
        image: str,
        prompt: str,
        products: Iterable[Product],
        analysis: Optional[str] = None,
    ) -> str:
        """
        Render the room with the given products and return the image URL.

        Raises:
            ImageTooLargeError: if the encoded image is over the endpoint's limit
            ExternalServiceError: on network failure, non-ok status or a malformed body
        """
        image = to_data_url(image)
        size_kb = get_data_url_size_kb(image)
        if size_kb > self.max_image_size_kb:
            raise ImageTooLargeError(size_kb, self.max_image_size_kb)

        body = {"image": image, "prompt": prompt, "products": product_references(products)}
        if analysis:
            body["analysis"] = analysis

        try:
            response = await self.http_client.post(self.path, json=body)
        except httpx.HTTPError as e:
            raise ExternalServiceError(SERVICE_NAME, str(e) or type(e).__name__) from e

        if response.status_code != 200:
            raise ExternalServiceError(SERVICE_NAME, error_message_from_response(response), status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, "response is not JSON", status_code=response.status_code) from e

        image_url = payload.get("imageUrl") if isinstance(payload, dict) else None
        if not image_url:
            raise ExternalServiceError(SERVICE_NAME, "response is missing imageUrl", status_code=response.status_code)

        logger.info(f"Image generation succeeded ({size_kb}KB input)")
        return image_url
