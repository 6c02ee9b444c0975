"""
Pydantic schemas for chat-related API endpoints
"""
from typing import Optional

from pydantic import BaseModel, Field

from otto.schemas.commerce import CartSummary, ChatState


class StartSessionResponse(BaseModel):
    """Response for starting a new session"""

    session_id: str
    message: str = "What can I fetch for you? Upload a photo of your space or just tell me what you need."


class ChatMessageRequest(BaseModel):
    """Request to send a chat message"""

    message: str = Field(default="", max_length=2000)
    image: Optional[str] = None  # Data URL or base64 encoded image
    wait_for_completion: bool = Field(
        default=True,
        description="When False the run continues in the background and the call returns immediately",
    )


class SessionStateResponse(BaseModel):
    """Snapshot of a session's state plus derived cart figures"""

    session_id: str
    state: ChatState
    cart_summary: CartSummary


class AddToCartRequest(BaseModel):
    """Add a catalog product to the cart"""

    product_id: str
    role: str = "Extra"


class CartOpenRequest(BaseModel):
    """Open or close the cart panel"""

    open: bool
