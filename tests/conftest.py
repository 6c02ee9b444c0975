"""
Shared pytest fixtures and configuration for all tests
"""
import base64
import io
import json
from typing import List, Optional
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from PIL import Image

from otto.services.chat_store import ChatStore
from otto.services.image_generation_client import ImageGenerationClient
from otto.services.orchestrator import OrchestrationTimings, RequestOrchestrator
from otto.services.vision_client import VisionAnalysisClient

TEST_BASE_URL = "http://testserver"


def make_jpeg_data_url(width: int = 64, height: int = 48, color: str = "red") -> str:
    img = Image.new("RGB", (width, height), color=color)
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG")
    return f"data:image/jpeg;base64,{base64.b64encode(buffer.getvalue()).decode()}"


class SleepRecorder:
    """Zero-delay stand-in for asyncio.sleep that remembers every requested duration"""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeImageEndpoints:
    """
    In-memory analyze/generate endpoints served through httpx.MockTransport.

    Records every call, and the cart size at generation time when a store is attached.
    """

    def __init__(self):
        self.vision_status = 200
        self.vision_body = {
            "roomType": "Living room",
            "style": "Minimalist",
            "lighting": "natural",
            "colors": ["white", "oak"],
            "suggestions": ["Add a rug"],
            "analysis": '{"roomType": "Living room", "style": "Minimalist"}',
        }
        self.generate_status = 200
        self.generate_body = {"imageUrl": "https://images.example.com/generated.png", "analysis": "A bright room"}
        self.vision_requests: List[dict] = []
        self.generate_requests: List[dict] = []
        self.cart_sizes_at_generation: List[int] = []
        self.store: Optional[ChatStore] = None

    def attach(self, store: ChatStore) -> None:
        self.store = store

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        if request.url.path == "/api/analyze-image":
            self.vision_requests.append(body)
            return httpx.Response(self.vision_status, json=self.vision_body)
        if request.url.path == "/api/generate-image":
            self.generate_requests.append(body)
            if self.store is not None:
                self.cart_sizes_at_generation.append(len(self.store.state.cart))
            return httpx.Response(self.generate_status, json=self.generate_body)
        return httpx.Response(404, json={"error": "not found"})

    def client(self) -> httpx.AsyncClient:
        # Late-bound so tests can swap the handler after the client exists
        return httpx.AsyncClient(transport=httpx.MockTransport(lambda request: self.handler(request)), base_url=TEST_BASE_URL)


@pytest.fixture
def sample_image_data_url():
    """Small JPEG room photo as a data URL"""
    return make_jpeg_data_url()


@pytest.fixture
def sample_base64_image(sample_image_data_url):
    """Same photo without the data URL prefix"""
    return sample_image_data_url.split(",", 1)[1]


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def chat_store():
    return ChatStore()


@pytest.fixture
def fake_endpoints(chat_store):
    endpoints = FakeImageEndpoints()
    endpoints.attach(chat_store)
    return endpoints


@pytest.fixture
async def http_client(fake_endpoints):
    client = fake_endpoints.client()
    yield client
    await client.aclose()


@pytest.fixture
def orchestrator(chat_store, http_client, sleep_recorder):
    """Orchestrator wired to the fake endpoints with zero-delay sleeps"""
    return RequestOrchestrator(
        chat_store,
        vision_client=VisionAnalysisClient(http_client),
        image_client=ImageGenerationClient(http_client),
        timings=OrchestrationTimings(),
        sleep=sleep_recorder,
    )


@pytest.fixture
def mock_openai_client():
    """Mock OpenAI client for testing without API calls"""
    mock = Mock()
    mock.chat = Mock()
    mock.chat.completions = Mock()
    mock.chat.completions.create = AsyncMock()
    mock.images = Mock()
    mock.images.generate = AsyncMock()
    return mock


@pytest.fixture
def mock_google_ai_client():
    """Mock Google AI client for testing without API calls"""
    mock = Mock()
    mock.models = Mock()
    mock.models.generate_content_stream = Mock(return_value=[])
    return mock


@pytest.fixture
def chat_completion():
    """Factory for minimal OpenAI chat completion responses"""

    def _make(content: str) -> Mock:
        return Mock(choices=[Mock(message=Mock(content=content))])

    return _make


@pytest.fixture
def image_generation():
    """Factory for minimal OpenAI images.generate responses"""

    def _make(url: Optional[str]) -> Mock:
        return Mock(data=[Mock(url=url)] if url else [])

    return _make


@pytest.fixture
def make_image():
    """Factory for JPEG data URLs of a given size"""
    return make_jpeg_data_url
