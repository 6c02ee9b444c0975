"""
Client for the vision analysis endpoint.

The endpoint answers with a free-text analysis and, when the upstream model
produced parsable JSON, structured room attributes. The client turns that
into a tagged result instead of guessing at fields:

    StructuredAnalysis  - at least one structured field was returned
    RawAnalysis         - only the free-text analysis is available
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

import httpx

from otto.core.config import settings
from otto.core.errors import ExternalServiceError
from otto.services.image_utils import to_data_url

logger = logging.getLogger(__name__)

SERVICE_NAME = "vision-analysis"


@dataclass
class StructuredAnalysis:
    """Room attributes parsed by the upstream model"""

    analysis: str
    room_type: Optional[str] = None
    style: Optional[str] = None
    lighting: Optional[str] = None
    colors: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)


@dataclass
class RawAnalysis:
    """Unstructured analysis text"""

    analysis: str


VisionResult = Union[StructuredAnalysis, RawAnalysis]

_STRUCTURED_KEYS = ("roomType", "style", "lighting", "colors", "suggestions")


def parse_vision_response(payload: dict) -> VisionResult:
    """Turn an analyze-image response body into a tagged result"""
    if not isinstance(payload, dict) or not isinstance(payload.get("analysis"), str):
        raise ExternalServiceError(SERVICE_NAME, "response is missing the analysis text")

    if not any(payload.get(key) for key in _STRUCTURED_KEYS):
        return RawAnalysis(analysis=payload["analysis"])

    return StructuredAnalysis(
        analysis=payload["analysis"],
        room_type=payload.get("roomType"),
        style=payload.get("style"),
        lighting=payload.get("lighting"),
        colors=list(payload.get("colors") or []),
        suggestions=list(payload.get("suggestions") or []),
    )


def error_message_from_response(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body)[:200]
    return str(body)[:200]


class VisionAnalysisClient:
    """POSTs an image to the analyze endpoint"""

    def __init__(self, http_client: httpx.AsyncClient, path: Optional[str] = None):
        self.http_client = http_client
        self.path = path or settings.analyze_image_path

    async def analyze(self, image: str) -> VisionResult:
        """
        Analyze a room image.

        Raises:
            ExternalServiceError: on network failure, non-ok status or a malformed body
        """
        try:
            response = await self.http_client.post(self.path, json={"image": to_data_url(image)})
        except httpx.HTTPError as e:
            raise ExternalServiceError(SERVICE_NAME, str(e) or type(e).__name__) from e

        if response.status_code != 200:
            raise ExternalServiceError(SERVICE_NAME, error_message_from_response(response), status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, "response is not JSON", status_code=response.status_code) from e

        result = parse_vision_response(payload)
        logger.info(f"Vision analysis returned {type(result).__name__}")
        return result
