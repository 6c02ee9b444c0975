"""
In-memory chat session registry.

Each chat session owns one ChatStore and one RequestOrchestrator. The vision
and image generation clients share a single httpx.AsyncClient that either
targets `external_api_base_url` or, when that is empty, this application
in-process through httpx.ASGITransport.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

import httpx

from otto.core.config import settings
from otto.services.chat_store import ChatStore
from otto.services.image_generation_client import ImageGenerationClient
from otto.services.orchestrator import OrchestrationTimings, RequestOrchestrator, Sleep
from otto.services.vision_client import VisionAnalysisClient

logger = logging.getLogger(__name__)

IN_PROCESS_BASE_URL = "http://otto.internal"


@dataclass
class ChatSession:
    """One conversation: its state container and the orchestrator driving it"""

    session_id: str
    store: ChatStore
    orchestrator: RequestOrchestrator
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SessionManager:
    """Creates, looks up and discards chat sessions"""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        timings: Optional[OrchestrationTimings] = None,
        sleep: Optional[Sleep] = None,
    ):
        self._sessions: Dict[str, ChatSession] = {}
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._app = None
        self.timings = timings
        self.sleep = sleep

    def bind_app(self, app) -> None:
        """Application the in-process transport routes to when no base URL is configured"""
        self._app = app

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = self._create_http_client()
        return self._http_client

    def _create_http_client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(settings.external_call_timeout)
        if settings.external_api_base_url:
            logger.info(f"External image endpoints at {settings.external_api_base_url}")
            return httpx.AsyncClient(base_url=settings.external_api_base_url, timeout=timeout)

        if self._app is None:
            raise RuntimeError("No application bound for in-process image endpoints")
        logger.info("Image endpoints routed in-process")
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=self._app),
            base_url=IN_PROCESS_BASE_URL,
            timeout=timeout,
        )

    def create_session(self) -> ChatSession:
        session_id = str(uuid.uuid4())
        store = ChatStore()
        orchestrator = RequestOrchestrator(
            store,
            vision_client=VisionAnalysisClient(self.http_client),
            image_client=ImageGenerationClient(self.http_client),
            timings=self.timings,
            sleep=self.sleep,
        )
        session = ChatSession(session_id=session_id, store=store, orchestrator=orchestrator)
        self._sessions[session_id] = session
        logger.info(f"Chat session created: {session_id}")
        return session

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        return self._sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Forget a session; a run still in flight finishes against the detached store"""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info(f"Chat session deleted: {session_id}")
        return True

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    async def close(self) -> None:
        """Drop all sessions and close the shared HTTP client if this manager created it"""
        self._sessions.clear()
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None


# Global session registry
session_manager = SessionManager()


def get_session_manager() -> SessionManager:
    """FastAPI dependency returning the process-wide registry"""
    return session_manager
