"""
Observable state container shared by the orchestrator and its readers.

The store holds one frozen ChatState. Every action builds the next snapshot
with all affected slices replaced at once, swaps it in, bumps the version and
publishes it to subscribers. Readers therefore never see a half-applied
update.
"""
import logging
import uuid
from typing import Callable, List, Optional

from otto.core.errors import InvalidStepTransition
from otto.schemas.commerce import (
    CartItem,
    CartSummary,
    ChatState,
    Message,
    MessageRole,
    Product,
    ReasoningStep,
    Solution,
    StepStatus,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[ChatState], None]

# Allowed forward moves; anything else is rejected
_NEXT_STATUS = {
    StepStatus.pending: StepStatus.active,
    StepStatus.active: StepStatus.completed,
}


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def solution_summary(solution: Solution) -> str:
    """Human-readable text of the final assistant message"""
    title = solution.title.replace("Project: ", "")
    return (
        f'I\'ve curated {len(solution.items)} items for your "{title}". '
        "Check the cart panel to review and customize your selection."
    )


def summarize_cart(cart) -> CartSummary:
    """Totals for a cart; the price is quantity-weighted, delivery is the slowest item"""
    return CartSummary(
        item_count=len(cart),
        total_quantity=sum(item.quantity for item in cart),
        total_price=sum(item.product.price * item.quantity for item in cart),
        max_delivery_days=max((item.product.delivery_days for item in cart), default=0),
    )


class ChatStore:
    """Single source of truth for one chat conversation"""

    def __init__(self, initial_state: Optional[ChatState] = None):
        self._state = initial_state or ChatState()
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> ChatState:
        """Current snapshot"""
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every new snapshot; returns an unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, **changes) -> ChatState:
        changes["version"] = self._state.version + 1
        self._state = self._state.model_copy(update=changes)

        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"State listener failed: {e}", exc_info=True)

        return self._state

    # ------------------------------------------------------------------
    # Transcript
    # ------------------------------------------------------------------

    def add_user_message(self, content: str, image_url: Optional[str] = None) -> Message:
        message = Message(id=_new_id("msg"), role=MessageRole.user, content=content, image_url=image_url)
        self._commit(
            messages=self._state.messages + (message,),
            original_image=image_url or self._state.original_image,
        )
        return message

    def start_processing(self, steps: List[ReasoningStep]) -> Message:
        """Append the thinking message carrying the pending steps and open the cart panel"""
        reasoning = tuple(steps)
        thinking = Message(
            id=_new_id("msg-thinking"),
            role=MessageRole.assistant,
            content="",
            reasoning=reasoning,
            is_thinking=True,
        )
        self._commit(
            is_processing=True,
            current_reasoning=reasoning,
            messages=self._state.messages + (thinking,),
            is_cart_open=True,
        )
        return thinking

    def _replace_step(self, step_id: str, transform: Callable[[ReasoningStep], ReasoningStep]) -> None:
        if not any(step.id == step_id for step in self._state.current_reasoning):
            raise InvalidStepTransition(step_id, "unknown", "update")

        def apply(steps):
            return tuple(transform(step) if step.id == step_id else step for step in steps)

        messages = tuple(
            msg.model_copy(update={"reasoning": apply(msg.reasoning)}) if msg.is_thinking and msg.reasoning else msg
            for msg in self._state.messages
        )
        self._commit(current_reasoning=apply(self._state.current_reasoning), messages=messages)

    def update_reasoning_step(self, step_id: str, status: StepStatus, message: Optional[str] = None) -> None:
        """
        Move a step forward (pending -> active -> completed) everywhere it is shown,
        optionally rewriting its message in the same snapshot.

        Raises:
            InvalidStepTransition: for unknown steps, regressions and skipped states
        """
        current = next((step for step in self._state.current_reasoning if step.id == step_id), None)
        if current is None:
            raise InvalidStepTransition(step_id, "unknown", status.value)
        if _NEXT_STATUS.get(current.status) != status:
            raise InvalidStepTransition(step_id, current.status.value, status.value)

        update = {"status": status}
        if message is not None:
            update["message"] = message
        self._replace_step(step_id, lambda step: step.model_copy(update=update))

    def complete_processing(self, solution: Solution) -> Message:
        """Swap the thinking message for the solution message and end the run"""
        solution_message = Message(
            id=_new_id("msg-solution"),
            role=MessageRole.assistant,
            content=solution_summary(solution),
            solution=solution,
        )
        without_thinking = tuple(msg for msg in self._state.messages if not msg.is_thinking)
        self._commit(
            is_processing=False,
            current_reasoning=(),
            messages=without_thinking + (solution_message,),
            current_solution=solution,
        )
        return solution_message

    def abort_processing(self) -> None:
        """Drop the thinking message and clear run flags after an unexpected failure"""
        self._commit(
            is_processing=False,
            is_generating_image=False,
            current_reasoning=(),
            messages=tuple(msg for msg in self._state.messages if not msg.is_thinking),
        )

    def clear_chat(self) -> None:
        self._commit(messages=(), is_processing=False, current_reasoning=(), current_solution=None)

    # ------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------

    def add_to_cart(self, product: Product, role: str) -> None:
        """Add a product; a product already in the cart gets its quantity bumped"""
        if any(item.product.id == product.id for item in self._state.cart):
            cart = tuple(
                item.model_copy(update={"quantity": item.quantity + 1}) if item.product.id == product.id else item
                for item in self._state.cart
            )
            self._commit(cart=cart)
            return

        self._commit(cart=self._state.cart + (CartItem(product=product, role=role),), is_cart_open=True)

    def remove_from_cart(self, product_id: str) -> None:
        self._commit(cart=tuple(item for item in self._state.cart if item.product.id != product_id))

    def clear_cart(self) -> None:
        """Empty the cart and forget the solution and its rendering; an in-flight run is not affected"""
        self._commit(cart=(), current_solution=None, generated_image=None)

    def toggle_cart(self) -> None:
        self._commit(is_cart_open=not self._state.is_cart_open)

    def set_cart_open(self, is_open: bool) -> None:
        self._commit(is_cart_open=is_open)

    def cart_summary(self) -> CartSummary:
        return summarize_cart(self._state.cart)

    # ------------------------------------------------------------------
    # Images, analysis and solution
    # ------------------------------------------------------------------

    def set_original_image(self, image_url: Optional[str]) -> None:
        self._commit(original_image=image_url)

    def set_generated_image(self, image_url: Optional[str]) -> None:
        self._commit(generated_image=image_url)

    def set_is_generating_image(self, is_generating: bool) -> None:
        self._commit(is_generating_image=is_generating)

    def set_last_analysis(self, analysis: Optional[str]) -> None:
        self._commit(last_analysis=analysis)

    def set_current_solution(self, solution: Optional[Solution]) -> None:
        self._commit(current_solution=solution)
