"""
Server side of the vision analysis and image generation endpoints.

Vision analysis always goes through the OpenAI chat completions API with an
image part. Image generation goes to DALL-E 3 by default, or to Gemini image
models through google-genai when `image_generation_provider` is "gemini".
"""
import asyncio
import base64
import json
import logging
import re
from typing import List, Optional

import openai
from google import genai
from google.genai import types

from otto.core.config import settings
from otto.core.errors import ExternalServiceError
from otto.schemas.images import AnalyzeImageResponse, GenerateImageResponse, ProductReference
from otto.services.image_utils import strip_data_url, to_data_url

logger = logging.getLogger(__name__)

VISION_SERVICE = "openai-vision"
GENERATION_SERVICE = "image-generation"

ANALYSIS_PROMPT = """Analyze this room/space image and provide a brief JSON response with:
1. roomType: The type of room (living room, bedroom, patio, office, etc.)
2. style: The current style (modern, rustic, minimalist, traditional, etc.)
3. lighting: The lighting conditions (natural, artificial, dim, bright)
4. colors: Main color palette (list 2-3 dominant colors)
5. suggestions: 2-3 brief suggestions for improvement

Respond ONLY with valid JSON, no markdown or explanation."""

DESCRIPTION_PROMPT = """Analyze this room image briefly and describe:
1. Room type and approximate size
2. Current style and color scheme
3. Lighting conditions
Then provide a concise prompt (max 200 words) for generating an image that shows this room redesigned with these products: {product_details}"""

CONTENT_POLICY_MESSAGE = "The image could not be processed due to content policy. Please try a different image."

_CODE_FENCE = re.compile(r"```(?:json)?\n?")


def parse_analysis_text(text: str) -> AnalyzeImageResponse:
    """
    Build the analysis response from the model's text.

    The model is asked for bare JSON but sometimes wraps it in markdown fences.
    Anything that does not parse to an object yields just the raw text.
    """
    try:
        data = json.loads(_CODE_FENCE.sub("", text).strip())
    except ValueError:
        data = None

    if not isinstance(data, dict):
        return AnalyzeImageResponse(analysis=text)

    def _text(key):
        value = data.get(key)
        return value if isinstance(value, str) else None

    def _text_list(key):
        value = data.get(key)
        if isinstance(value, list):
            return [str(v) for v in value]
        return None

    return AnalyzeImageResponse(
        roomType=_text("roomType"),
        style=_text("style"),
        lighting=_text("lighting"),
        colors=_text_list("colors"),
        suggestions=_text_list("suggestions"),
        analysis=text,
    )


def product_details(products: List[ProductReference]) -> str:
    return ". ".join(f"{p.name}: {p.description}" for p in products)


def build_enhanced_prompt(prompt: str, products: List[ProductReference]) -> str:
    return (
        f"{prompt}\n"
        f"Products to incorporate: {product_details(products)}\n"
        "Important: Create a photorealistic result that looks like a professional interior design photo.\n"
        "The furniture should be naturally integrated into the space with proper scale, lighting, and shadows."
    )


def build_generation_prompt(analysis: str, enhanced_prompt: str) -> str:
    return (
        "Professional interior design photography.\n"
        f"{analysis}\n"
        f"{enhanced_prompt}\n"
        "Style: Photorealistic, high-end interior design magazine quality, natural lighting.\n"
        "Technical: High quality, proper perspective, realistic shadows."
    )


def is_content_policy_error(error: Exception) -> bool:
    if getattr(error, "code", None) == "content_policy_violation":
        return True
    return "content_policy" in str(error)


class ImageAIService:
    """Vision analysis and room visualization backed by OpenAI or Gemini"""

    def __init__(self):
        self.client = None
        self.genai_client = None

        if settings.openai_api_key:
            self.client = openai.AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.openai_timeout,
                max_retries=2,
            )
        else:
            logger.warning("OpenAI API key not configured - image endpoints will answer 500")

        if settings.google_ai_api_key:
            self.genai_client = genai.Client(api_key=settings.google_ai_api_key)

        logger.info(f"Image AI service initialized (generation provider: {settings.image_generation_provider})")

    def _require_openai(self):
        if self.client is None:
            raise ExternalServiceError(VISION_SERVICE, "OPENAI_API_KEY environment variable is not set")
        return self.client

    async def _vision_completion(self, image: str, instruction: str) -> str:
        client = self._require_openai()
        response = await client.chat.completions.create(
            model=settings.openai_vision_model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": instruction},
                        {"type": "image_url", "image_url": {"url": to_data_url(image)}},
                    ],
                }
            ],
            max_tokens=settings.openai_vision_max_tokens,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def analyze_image(self, image: str) -> AnalyzeImageResponse:
        """
        Describe a room photo.

        Raises:
            ExternalServiceError: when OpenAI is not configured or the call fails
        """
        try:
            text = await self._vision_completion(image, ANALYSIS_PROMPT)
        except ExternalServiceError:
            raise
        except Exception as e:
            raise ExternalServiceError(VISION_SERVICE, str(e)) from e

        result = parse_analysis_text(text)
        logger.info(f"Image analyzed (structured={result.roomType is not None or result.style is not None})")
        return result

    async def generate_image(
        self,
        image: str,
        prompt: str,
        products: List[ProductReference],
        analysis: Optional[str] = None,
    ) -> GenerateImageResponse:
        """
        Render the room redesigned with the given products.

        When no analysis is supplied the vision model first describes the room;
        that description is returned alongside the image URL.

        Raises:
            ExternalServiceError: status_code 400 for content-policy rejections, None otherwise
        """
        enhanced_prompt = build_enhanced_prompt(prompt, products)

        try:
            if not analysis:
                analysis = await self._vision_completion(
                    image, DESCRIPTION_PROMPT.format(product_details=product_details(products))
                )

            if settings.image_generation_provider == "gemini":
                image_url = await self._generate_with_gemini(image, build_generation_prompt(analysis, enhanced_prompt))
            else:
                image_url = await self._generate_with_dalle(build_generation_prompt(analysis, enhanced_prompt))
        except ExternalServiceError:
            raise
        except Exception as e:
            if is_content_policy_error(e):
                logger.warning(f"Image generation rejected by content policy: {e}")
                raise ExternalServiceError(GENERATION_SERVICE, CONTENT_POLICY_MESSAGE, status_code=400) from e
            raise ExternalServiceError(GENERATION_SERVICE, str(e)) from e

        if not image_url:
            raise ExternalServiceError(GENERATION_SERVICE, "No image generated")

        return GenerateImageResponse(imageUrl=image_url, analysis=analysis)

    async def _generate_with_dalle(self, prompt: str) -> Optional[str]:
        client = self._require_openai()
        response = await client.images.generate(
            model=settings.openai_image_model,
            prompt=prompt,
            n=1,
            size=settings.openai_image_size,
            quality=settings.openai_image_quality,
            style=settings.openai_image_style,
        )
        if not response.data:
            return None
        return response.data[0].url

    async def _generate_with_gemini(self, image: str, prompt: str) -> Optional[str]:
        """Edit the room photo with a Gemini image model; returns a data URL"""
        if self.genai_client is None:
            raise ExternalServiceError(GENERATION_SERVICE, "GOOGLE_AI_API_KEY environment variable is not set")

        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=prompt),
                    types.Part(inline_data=types.Blob(mime_type="image/jpeg", data=base64.b64decode(strip_data_url(image)))),
                ],
            )
        ]
        config = types.GenerateContentConfig(
            response_modalities=["IMAGE", "TEXT"],
            temperature=settings.google_ai_temperature,
        )

        def _run_generate():
            """Run the blocking streaming call in a worker thread"""
            generated = None
            for chunk in self.genai_client.models.generate_content_stream(
                model=settings.google_ai_image_model,
                contents=contents,
                config=config,
            ):
                if (
                    chunk.candidates is None
                    or chunk.candidates[0].content is None
                    or chunk.candidates[0].content.parts is None
                ):
                    continue

                for part in chunk.candidates[0].content.parts:
                    if part.inline_data and part.inline_data.data:
                        mime_type = part.inline_data.mime_type or "image/png"
                        image_base64 = base64.b64encode(part.inline_data.data).decode("utf-8")
                        generated = f"data:{mime_type};base64,{image_base64}"
            return generated

        loop = asyncio.get_event_loop()
        generated_image = await loop.run_in_executor(None, _run_generate)
        if generated_image:
            logger.info("Gemini visualization generated")
        return generated_image


# Global service instance
image_ai_service = ImageAIService()
