"""
Unit tests for the shared chat state container
"""
import pytest

from otto.core.errors import InvalidStepTransition
from otto.data.catalog import get_product
from otto.schemas.commerce import Product, ProductCategory, StepStatus, TopicKey
from otto.services.chat_store import ChatStore, solution_summary, summarize_cart
from otto.services.reasoning_steps import generate_reasoning_steps
from otto.services.solution_builder import build_solution


def _product(product_id: str, price: float = 1000, delivery_days: int = 3) -> Product:
    return Product(
        id=product_id,
        name=f"Product {product_id}",
        description="Test product",
        price=price,
        store="Test Store",
        store_url="https://store.example.com",
        image_url="https://images.example.com/p.jpg",
        category=ProductCategory.home,
        delivery_days=delivery_days,
    )


class TestSnapshots:
    """Tests for snapshot publishing"""

    @pytest.mark.unit
    def test_every_action_bumps_version(self, chat_store):
        start = chat_store.state.version
        chat_store.toggle_cart()
        chat_store.add_user_message("hello")
        assert chat_store.state.version == start + 2

    @pytest.mark.unit
    def test_snapshots_are_immutable(self, chat_store):
        before = chat_store.state
        chat_store.add_user_message("hello")
        assert before.messages == ()
        assert len(chat_store.state.messages) == 1
        with pytest.raises(Exception):
            chat_store.state.is_processing = True

    @pytest.mark.unit
    def test_subscribers_receive_each_snapshot(self, chat_store):
        received = []
        unsubscribe = chat_store.subscribe(received.append)

        chat_store.toggle_cart()
        chat_store.toggle_cart()
        unsubscribe()
        chat_store.toggle_cart()

        assert [state.is_cart_open for state in received] == [True, False]

    @pytest.mark.unit
    def test_failing_listener_does_not_break_writer(self, chat_store):
        def broken(_state):
            raise RuntimeError("listener exploded")

        chat_store.subscribe(broken)
        chat_store.toggle_cart()
        assert chat_store.state.is_cart_open is True


class TestTranscript:
    """Tests for transcript actions and step transitions"""

    @pytest.mark.unit
    def test_user_message_with_image_sets_original_image(self, chat_store, sample_image_data_url):
        message = chat_store.add_user_message("look", image_url=sample_image_data_url)
        assert message.image_url == sample_image_data_url
        assert chat_store.state.original_image == sample_image_data_url

    @pytest.mark.unit
    def test_start_processing_adds_thinking_message_and_opens_cart(self, chat_store):
        steps = generate_reasoning_steps("living", False)
        thinking = chat_store.start_processing(steps)

        state = chat_store.state
        assert state.is_processing is True
        assert state.is_cart_open is True
        assert thinking.is_thinking is True
        assert state.messages[-1].id == thinking.id
        assert len(state.current_reasoning) == 5

    @pytest.mark.unit
    def test_step_update_is_reflected_in_thinking_message(self, chat_store):
        chat_store.start_processing(generate_reasoning_steps("living", False))
        chat_store.update_reasoning_step("step-1", StepStatus.active, message="Looking closer...")

        thinking = chat_store.state.messages[-1]
        assert chat_store.state.current_reasoning[0].status == StepStatus.active
        assert thinking.reasoning[0].status == StepStatus.active
        assert thinking.reasoning[0].message == "Looking closer..."

    @pytest.mark.unit
    def test_steps_cannot_skip_active(self, chat_store):
        chat_store.start_processing(generate_reasoning_steps("living", False))
        with pytest.raises(InvalidStepTransition):
            chat_store.update_reasoning_step("step-1", StepStatus.completed)

    @pytest.mark.unit
    def test_steps_cannot_regress(self, chat_store):
        chat_store.start_processing(generate_reasoning_steps("living", False))
        chat_store.update_reasoning_step("step-1", StepStatus.active)
        chat_store.update_reasoning_step("step-1", StepStatus.completed)
        with pytest.raises(InvalidStepTransition):
            chat_store.update_reasoning_step("step-1", StepStatus.active)

    @pytest.mark.unit
    def test_unknown_step_is_rejected(self, chat_store):
        chat_store.start_processing(generate_reasoning_steps("living", False))
        with pytest.raises(InvalidStepTransition):
            chat_store.update_reasoning_step("step-99", StepStatus.active)

    @pytest.mark.unit
    def test_complete_processing_replaces_thinking_message(self, chat_store):
        chat_store.add_user_message("living")
        chat_store.start_processing(generate_reasoning_steps("living", False))
        solution = build_solution(TopicKey.LIVING_ROOM)

        message = chat_store.complete_processing(solution)

        state = chat_store.state
        assert state.is_processing is False
        assert state.current_reasoning == ()
        assert not any(msg.is_thinking for msg in state.messages)
        assert state.messages[-1] == message
        assert message.solution == solution
        assert state.current_solution == solution
        assert "6 items" in message.content
        assert '"Japandi Living Room"' in message.content

    @pytest.mark.unit
    def test_abort_processing_clears_run_flags(self, chat_store):
        chat_store.start_processing(generate_reasoning_steps("living", True))
        chat_store.set_is_generating_image(True)

        chat_store.abort_processing()

        state = chat_store.state
        assert state.is_processing is False
        assert state.is_generating_image is False
        assert state.messages == ()

    @pytest.mark.unit
    def test_clear_chat_keeps_cart(self, chat_store):
        chat_store.add_user_message("hello")
        chat_store.add_to_cart(get_product("home-001"), "Main Sofa")
        chat_store.clear_chat()
        assert chat_store.state.messages == ()
        assert len(chat_store.state.cart) == 1


class TestCart:
    """Tests for cart actions and summaries"""

    @pytest.mark.unit
    def test_adding_same_product_twice_increments_quantity(self, chat_store):
        sofa = get_product("home-001")
        chat_store.add_to_cart(sofa, "Main Sofa")
        chat_store.add_to_cart(sofa, "Main Sofa")

        assert len(chat_store.state.cart) == 1
        assert chat_store.state.cart[0].quantity == 2

    @pytest.mark.unit
    def test_new_item_opens_cart_duplicate_does_not(self, chat_store):
        sofa = get_product("home-001")
        chat_store.add_to_cart(sofa, "Main Sofa")
        assert chat_store.state.is_cart_open is True

        chat_store.set_cart_open(False)
        chat_store.add_to_cart(sofa, "Main Sofa")
        assert chat_store.state.is_cart_open is False

    @pytest.mark.unit
    def test_remove_deletes_entry_entirely(self, chat_store):
        sofa = get_product("home-001")
        chat_store.add_to_cart(sofa, "Main Sofa")
        chat_store.add_to_cart(sofa, "Main Sofa")
        chat_store.add_to_cart(get_product("home-002"), "Coffee Table")

        chat_store.remove_from_cart("home-001")

        assert [item.product.id for item in chat_store.state.cart] == ["home-002"]

    @pytest.mark.unit
    def test_clear_cart_drops_solution_and_generated_image(self, chat_store):
        chat_store.add_to_cart(get_product("home-001"), "Main Sofa")
        chat_store.set_current_solution(build_solution(TopicKey.LIVING_ROOM))
        chat_store.set_generated_image("https://images.example.com/g.png")

        chat_store.clear_cart()

        state = chat_store.state
        assert state.cart == ()
        assert state.current_solution is None
        assert state.generated_image is None

    @pytest.mark.unit
    def test_max_delivery_is_slowest_item(self):
        store = ChatStore()
        store.add_to_cart(_product("a", delivery_days=3), "A")
        store.add_to_cart(_product("b", delivery_days=7), "B")
        assert store.cart_summary().max_delivery_days == 7

    @pytest.mark.unit
    def test_total_is_quantity_weighted(self):
        store = ChatStore()
        store.add_to_cart(_product("a", price=1000), "A")
        store.add_to_cart(_product("a", price=1000), "A")
        store.add_to_cart(_product("b", price=250), "B")

        summary = store.cart_summary()
        assert summary.total_price == 2250
        assert summary.item_count == 2
        assert summary.total_quantity == 3

    @pytest.mark.unit
    def test_empty_cart_summary(self):
        summary = summarize_cart(())
        assert summary.item_count == 0
        assert summary.total_price == 0
        assert summary.max_delivery_days == 0


class TestSolutionSummary:
    @pytest.mark.unit
    def test_summary_strips_project_prefix(self):
        text = solution_summary(build_solution(TopicKey.OFFICE_STYLE))
        assert "Project:" not in text
        assert text.startswith("I've curated 5 items")
