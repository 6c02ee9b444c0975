"""
Pydantic schemas for products, solutions, reasoning steps and chat state
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_serializer, model_validator


class ProductCategory(str, Enum):
    """Catalog categories"""

    home = "home"
    fashion = "fashion"


class TopicKey(str, Enum):
    """Identifiers of the prebuilt solution templates"""

    LIVING_ROOM = "livingRoom"
    CASUAL_OUTFIT = "casualOutfit"
    OFFICE_STYLE = "officeStyle"
    HOME_IMPROVEMENT = "homeImprovement"


class StepType(str, Enum):
    """Stages of the simulated reasoning pipeline, in run order"""

    VISION = "VISION"
    DETECT = "DETECT"
    SEARCH = "SEARCH"
    OPTIMIZE = "OPTIMIZE"
    DONE = "DONE"


class StepStatus(str, Enum):
    """Reasoning step status; only moves forward"""

    pending = "pending"
    active = "active"
    completed = "completed"


class MessageRole(str, Enum):
    """Chat message author"""

    user = "user"
    assistant = "assistant"


class Product(BaseModel):
    """A catalog product"""

    id: str
    name: str
    description: str
    price: float = Field(..., ge=0)
    currency: str = "CLP"
    store: str
    store_url: str
    image_url: str
    category: ProductCategory
    tags: List[str] = Field(default_factory=list)
    delivery_days: int = Field(..., ge=0)

    class Config:
        frozen = True


class SolutionTemplate(BaseModel):
    """Ordered role -> product mapping for a topic"""

    title: str
    description: str
    product_ids: List[str]
    roles: List[str]

    @model_validator(mode="after")
    def check_parallel_lists(self) -> "SolutionTemplate":
        if len(self.product_ids) != len(self.roles):
            raise ValueError(
                f"product_ids ({len(self.product_ids)}) and roles ({len(self.roles)}) must have the same length"
            )
        return self

    class Config:
        frozen = True


class SolutionItem(BaseModel):
    """A product filling a named slot of a solution (e.g. "Main Sofa")"""

    role: str
    product: Product

    class Config:
        frozen = True


class Solution(BaseModel):
    """A priced, ordered bundle of role-labeled products"""

    id: str
    title: str
    description: str
    items: Tuple[SolutionItem, ...]
    total_price: float
    currency: str = "CLP"

    class Config:
        frozen = True


class CartItem(BaseModel):
    """Cart entry; unique per product id"""

    product: Product
    role: str
    quantity: int = Field(default=1, ge=1)

    class Config:
        frozen = True


class ReasoningStep(BaseModel):
    """One stage of the reasoning trace shown to the user"""

    id: str
    type: StepType
    message: str
    status: StepStatus = StepStatus.pending

    class Config:
        frozen = True


class Message(BaseModel):
    """Chat transcript entry"""

    id: str
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    image_url: Optional[str] = None
    solution: Optional[Solution] = None
    reasoning: Optional[Tuple[ReasoningStep, ...]] = None
    is_thinking: bool = False

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        """Serialize timestamp as ISO format with UTC indicator for correct JS parsing"""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()

    class Config:
        frozen = True


class ChatState(BaseModel):
    """Immutable snapshot of everything the presentation layer reads"""

    messages: Tuple[Message, ...] = ()
    is_processing: bool = False
    current_reasoning: Tuple[ReasoningStep, ...] = ()

    cart: Tuple[CartItem, ...] = ()
    is_cart_open: bool = False

    original_image: Optional[str] = None
    generated_image: Optional[str] = None
    is_generating_image: bool = False
    last_analysis: Optional[str] = None

    current_solution: Optional[Solution] = None

    version: int = 0

    class Config:
        frozen = True


class CartSummary(BaseModel):
    """Figures derived from the cart contents"""

    item_count: int
    total_quantity: int
    total_price: float
    max_delivery_days: int
    currency: str = "CLP"
