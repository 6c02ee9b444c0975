"""
Vision analysis and image generation endpoints called by the orchestrator's HTTP clients
"""
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from otto.core.config import settings
from otto.core.errors import ExternalServiceError
from otto.schemas.images import (
    AnalyzeImageRequest,
    AnalyzeImageResponse,
    ErrorResponse,
    GenerateImageRequest,
    GenerateImageResponse,
)
from otto.services.image_utils import get_data_url_size_kb
from otto.services.openai_image_service import image_ai_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["images"])

_ERROR_RESPONSES = {400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "/analyze-image",
    response_model=AnalyzeImageResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def analyze_image(request: AnalyzeImageRequest):
    """Analyze a room photo and return its type, style, lighting, colors and suggestions"""
    if not request.image:
        return _error(400, "Image is required")

    try:
        return await image_ai_service.analyze_image(request.image)
    except ExternalServiceError as e:
        logger.error(f"Error analyzing image: {e}", exc_info=True)
        return _error(500, f"Failed to analyze image: {e.message}")
    except Exception as e:
        logger.error(f"Error analyzing image: {e}", exc_info=True)
        return _error(500, f"Failed to analyze image: {e}")


@router.post("/generate-image", response_model=GenerateImageResponse, responses=_ERROR_RESPONSES)
async def generate_image(request: GenerateImageRequest):
    """Render the room redesigned with the selected products"""
    if not request.image or not request.prompt:
        return _error(400, "Image and prompt are required")

    image_size_kb = get_data_url_size_kb(request.image)
    logger.info(f"Received image size: {image_size_kb}KB")
    if image_size_kb > settings.max_image_size_kb:
        return _error(413, f"Image too large. Please use a smaller image (max {settings.max_image_size_kb / 1000:g}MB).")

    try:
        return await image_ai_service.generate_image(
            request.image,
            request.prompt,
            request.products,
            analysis=request.analysis,
        )
    except ExternalServiceError as e:
        logger.error(f"Error generating image: {e}", exc_info=True)
        if e.status_code == 400:
            return _error(400, e.message)
        return _error(500, f"Failed to generate image: {e.message}")
    except Exception as e:
        logger.error(f"Error generating image: {e}", exc_info=True)
        return _error(500, f"Failed to generate image: {e}")
