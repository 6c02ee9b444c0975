"""
Unit tests for the OpenAI / Gemini backed image service
Tests analysis parsing, prompt building, provider selection and error mapping
"""
import base64
from unittest.mock import AsyncMock, Mock, patch

import pytest

from otto.core.config import settings
from otto.core.errors import ExternalServiceError
from otto.schemas.images import ProductReference
from otto.services.openai_image_service import (
    CONTENT_POLICY_MESSAGE,
    ImageAIService,
    build_enhanced_prompt,
    parse_analysis_text,
)

PRODUCTS = [
    ProductReference(name="Sofa", description="Oat linen sofa"),
    ProductReference(name="Lamp", description="Rice paper lamp"),
]


@pytest.fixture
def service(mock_openai_client):
    svc = ImageAIService()
    svc.client = mock_openai_client
    return svc


class TestParseAnalysisText:
    """Tests for best-effort JSON parsing of the vision answer"""

    @pytest.mark.unit
    def test_plain_json(self):
        text = '{"roomType": "Bedroom", "style": "Modern", "colors": ["white", "grey"]}'
        result = parse_analysis_text(text)
        assert result.roomType == "Bedroom"
        assert result.style == "Modern"
        assert result.colors == ["white", "grey"]
        assert result.analysis == text

    @pytest.mark.unit
    def test_fenced_json(self):
        text = '```json\n{"roomType": "Patio", "lighting": "bright"}\n```'
        result = parse_analysis_text(text)
        assert result.roomType == "Patio"
        assert result.lighting == "bright"
        assert result.analysis == text

    @pytest.mark.unit
    @pytest.mark.parametrize("text", ["A cozy room with a sofa", "[1, 2, 3]", ""])
    def test_unparsable_text_yields_only_analysis(self, text):
        result = parse_analysis_text(text)
        assert result.roomType is None
        assert result.style is None
        assert result.analysis == text

    @pytest.mark.unit
    def test_wrong_field_types_are_dropped(self):
        result = parse_analysis_text('{"roomType": 3, "colors": "red"}')
        assert result.roomType is None
        assert result.colors is None


class TestPrompts:
    @pytest.mark.unit
    def test_enhanced_prompt_lists_products(self):
        prompt = build_enhanced_prompt("Transform this room", PRODUCTS)
        assert prompt.startswith("Transform this room\n")
        assert "Products to incorporate: Sofa: Oat linen sofa. Lamp: Rice paper lamp" in prompt


class TestAnalyzeImage:
    """Tests for vision analysis"""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sends_image_part(self, service, mock_openai_client, chat_completion, sample_base64_image):
        mock_openai_client.chat.completions.create.return_value = chat_completion('{"roomType": "Office"}')

        result = await service.analyze_image(sample_base64_image)

        assert result.roomType == "Office"
        kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == settings.openai_vision_model
        content = kwargs["messages"][0]["content"]
        assert content[1]["type"] == "image_url"
        assert content[1]["image_url"]["url"].startswith("data:image/jpeg;base64,")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_upstream_failure_is_wrapped(self, service, mock_openai_client, sample_image_data_url):
        mock_openai_client.chat.completions.create.side_effect = RuntimeError("rate limited")

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.analyze_image(sample_image_data_url)

        assert "rate limited" in exc_info.value.message

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_key_is_reported(self, sample_image_data_url):
        svc = ImageAIService()
        svc.client = None
        with pytest.raises(ExternalServiceError) as exc_info:
            await svc.analyze_image(sample_image_data_url)
        assert "OPENAI_API_KEY" in exc_info.value.message


class TestGenerateImage:
    """Tests for room visualization"""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_describes_room_when_no_analysis(
        self, service, mock_openai_client, chat_completion, image_generation, sample_image_data_url
    ):
        mock_openai_client.chat.completions.create.return_value = chat_completion("A small bright living room")
        mock_openai_client.images.generate.return_value = image_generation("https://img.example.com/out.png")

        result = await service.generate_image(sample_image_data_url, "Transform", PRODUCTS)

        assert result.imageUrl == "https://img.example.com/out.png"
        assert result.analysis == "A small bright living room"
        mock_openai_client.chat.completions.create.assert_awaited_once()

        image_kwargs = mock_openai_client.images.generate.call_args.kwargs
        assert image_kwargs["model"] == "dall-e-3"
        assert image_kwargs["size"] == "1024x1024"
        assert image_kwargs["n"] == 1
        assert "A small bright living room" in image_kwargs["prompt"]
        assert "Sofa: Oat linen sofa" in image_kwargs["prompt"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_existing_analysis_skips_vision(
        self, service, mock_openai_client, image_generation, sample_image_data_url
    ):
        mock_openai_client.images.generate.return_value = image_generation("https://img.example.com/out.png")

        result = await service.generate_image(sample_image_data_url, "Transform", PRODUCTS, analysis="Known room")

        assert result.analysis == "Known room"
        mock_openai_client.chat.completions.create.assert_not_awaited()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_content_policy_maps_to_400(self, service, mock_openai_client, sample_image_data_url):
        mock_openai_client.images.generate.side_effect = Exception("Error code: 400 - content_policy_violation")

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.generate_image(sample_image_data_url, "Transform", PRODUCTS, analysis="room")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == CONTENT_POLICY_MESSAGE

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_image_returned_is_an_error(
        self, service, mock_openai_client, image_generation, sample_image_data_url
    ):
        mock_openai_client.images.generate.return_value = image_generation(None)

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.generate_image(sample_image_data_url, "Transform", PRODUCTS, analysis="room")

        assert exc_info.value.status_code is None
        assert "No image generated" in exc_info.value.message

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_gemini_provider_returns_data_url(self, service, mock_google_ai_client, sample_image_data_url):
        part = Mock(inline_data=Mock(data=b"png-bytes", mime_type="image/png"), text=None)
        chunk = Mock(candidates=[Mock(content=Mock(parts=[part]))])
        mock_google_ai_client.models.generate_content_stream.return_value = [chunk]
        service.genai_client = mock_google_ai_client

        with patch.object(settings, "image_generation_provider", "gemini"):
            result = await service.generate_image(sample_image_data_url, "Transform", PRODUCTS, analysis="room")

        assert result.imageUrl == f"data:image/png;base64,{base64.b64encode(b'png-bytes').decode()}"
        call_kwargs = mock_google_ai_client.models.generate_content_stream.call_args.kwargs
        assert call_kwargs["model"] == settings.google_ai_image_model

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_gemini_without_key_is_reported(self, service, sample_image_data_url):
        service.genai_client = None
        with patch.object(settings, "image_generation_provider", "gemini"):
            with pytest.raises(ExternalServiceError) as exc_info:
                await service.generate_image(sample_image_data_url, "Transform", PRODUCTS, analysis="room")
        assert "GOOGLE_AI_API_KEY" in exc_info.value.message
