"""
Chat API routes: sessions, messages, cart and live state
"""
import asyncio
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, WebSocket, WebSocketDisconnect

from otto.core.errors import PreviewUnavailableError, RunInProgressError
from otto.data.catalog import get_product
from otto.schemas.chat import (
    AddToCartRequest,
    CartOpenRequest,
    ChatMessageRequest,
    SessionStateResponse,
    StartSessionResponse,
)
from otto.services.chat_store import summarize_cart
from otto.services.orchestrator import OrchestrationRun, RequestOrchestrator
from otto.services.session_manager import ChatSession, SessionManager, get_session_manager

logger = logging.getLogger(__name__)
router = APIRouter(tags=["chat"])

IMAGE_ONLY_MESSAGE = "Analyze this image and suggest products"


def _get_session(manager: SessionManager, session_id: str) -> ChatSession:
    session = manager.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return session


def _snapshot(session: ChatSession) -> SessionStateResponse:
    return SessionStateResponse(
        session_id=session.session_id,
        state=session.store.state,
        cart_summary=session.store.cart_summary(),
    )


def latest_only(queue: asyncio.Queue):
    """Store listener for a size-1 queue: a newer snapshot replaces one not yet sent"""

    def put(state):
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(state)

    return put


async def _run_in_background(orchestrator: RequestOrchestrator, run: OrchestrationRun, session_id: str) -> None:
    try:
        await orchestrator.run(run)
    except Exception as e:
        logger.error(f"Background run failed for session {session_id}: {e}", exc_info=True)


@router.post("/sessions", response_model=StartSessionResponse)
async def start_chat_session(manager: SessionManager = Depends(get_session_manager)):
    """Start a new chat session"""
    session = manager.create_session()
    return StartSessionResponse(session_id=session.session_id)


@router.get("/sessions/{session_id}", response_model=SessionStateResponse)
async def get_session_state(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    """Current state snapshot of a session"""
    return _snapshot(_get_session(manager, session_id))


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    if not manager.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Chat session not found")
    return {"status": "deleted", "session_id": session_id}


@router.post("/sessions/{session_id}/messages", response_model=SessionStateResponse)
async def send_message(
    session_id: str,
    request: ChatMessageRequest,
    background_tasks: BackgroundTasks,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Send a message (and optionally a room photo) and run the recommendation flow.

    With wait_for_completion the response carries the final state; otherwise the
    run continues in the background and progress is observable via GET or the
    WebSocket stream.
    """
    session = _get_session(manager, session_id)
    query = request.message.strip()
    if not query and not request.image:
        raise HTTPException(status_code=400, detail="Message or image is required")

    orchestrator = session.orchestrator
    if orchestrator.is_busy:
        raise HTTPException(status_code=409, detail="A request is already being processed")

    session.store.add_user_message(query or IMAGE_ONLY_MESSAGE, image_url=request.image)
    try:
        run = orchestrator.start(query, has_image=bool(request.image))
    except RunInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not request.wait_for_completion:
        background_tasks.add_task(_run_in_background, orchestrator, run, session_id)
        return _snapshot(session)

    try:
        await orchestrator.run(run)
    except Exception as e:
        logger.error(f"Error processing message for session {session_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"{type(e).__name__}: {str(e)}")

    return _snapshot(session)


@router.delete("/sessions/{session_id}/messages", response_model=SessionStateResponse)
async def clear_messages(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    """Clear the transcript; the cart is kept"""
    session = _get_session(manager, session_id)
    if session.orchestrator.is_busy:
        raise HTTPException(status_code=409, detail="A request is already being processed")
    session.store.clear_chat()
    return _snapshot(session)


@router.post("/sessions/{session_id}/cart", response_model=SessionStateResponse)
async def add_to_cart(
    session_id: str,
    request: AddToCartRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    session = _get_session(manager, session_id)
    product = get_product(request.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    session.store.add_to_cart(product, request.role)
    return _snapshot(session)


@router.delete("/sessions/{session_id}/cart/{product_id}", response_model=SessionStateResponse)
async def remove_from_cart(session_id: str, product_id: str, manager: SessionManager = Depends(get_session_manager)):
    session = _get_session(manager, session_id)
    session.store.remove_from_cart(product_id)
    return _snapshot(session)


@router.delete("/sessions/{session_id}/cart", response_model=SessionStateResponse)
async def clear_cart(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    """Empty the cart and drop the current solution and visualization"""
    session = _get_session(manager, session_id)
    session.store.clear_cart()
    return _snapshot(session)


@router.post("/sessions/{session_id}/cart/toggle", response_model=SessionStateResponse)
async def toggle_cart(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    session = _get_session(manager, session_id)
    session.store.toggle_cart()
    return _snapshot(session)


@router.post("/sessions/{session_id}/cart/open", response_model=SessionStateResponse)
async def set_cart_open(
    session_id: str,
    request: CartOpenRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    session = _get_session(manager, session_id)
    session.store.set_cart_open(request.open)
    return _snapshot(session)


@router.post("/sessions/{session_id}/cart/preview", response_model=SessionStateResponse)
async def generate_cart_preview(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    """Visualize the uploaded room with the products currently in the cart"""
    session = _get_session(manager, session_id)
    try:
        image_url = await session.orchestrator.generate_cart_preview()
    except PreviewUnavailableError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RunInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if image_url is None:
        raise HTTPException(status_code=502, detail="Failed to generate preview")
    return _snapshot(session)


@router.websocket("/sessions/{session_id}/ws")
async def session_updates(
    websocket: WebSocket,
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """Push the session snapshot on connect and after every state change"""
    session = manager.get_session(session_id)
    await websocket.accept()
    if session is None:
        await websocket.send_json({"type": "error", "message": "Chat session not found"})
        await websocket.close(code=1008)
        return

    queue: asyncio.Queue = asyncio.Queue(maxsize=1)
    put_latest = latest_only(queue)
    unsubscribe = session.store.subscribe(put_latest)
    put_latest(session.store.state)

    async def push_snapshots():
        while True:
            state = await queue.get()
            await websocket.send_json(
                {
                    "type": "state",
                    "session_id": session_id,
                    "state": state.model_dump(mode="json"),
                    "cart_summary": summarize_cart(state.cart).model_dump(mode="json"),
                }
            )

    async def receive_until_disconnect():
        # Incoming frames are ignored; receiving only detects the disconnect
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected for session {session_id}")

    push_task = asyncio.create_task(push_snapshots())
    receive_task = asyncio.create_task(receive_until_disconnect())
    try:
        await asyncio.wait({push_task, receive_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        unsubscribe()
        push_task.cancel()
        receive_task.cancel()
        outcomes = await asyncio.gather(push_task, receive_task, return_exceptions=True)

    for outcome in outcomes:
        if isinstance(outcome, Exception):
            logger.warning(f"WebSocket stream for session {session_id} stopped: {outcome}")
