"""
Unit tests for reasoning step generation
"""
import pytest

from otto.schemas.commerce import StepStatus, StepType
from otto.services.reasoning_steps import (
    DONE_MESSAGE,
    OPTIMIZE_MESSAGE,
    VISION_IMAGE_MESSAGE,
    VISION_TEXT_MESSAGE,
    generate_reasoning_steps,
    template_stores,
)


class TestGenerateReasoningSteps:
    """Tests for the five-stage step list"""

    @pytest.mark.unit
    @pytest.mark.parametrize("has_image", [True, False])
    def test_five_pending_steps_in_fixed_order(self, has_image):
        steps = generate_reasoning_steps("Fix my living room", has_image)

        assert [step.type for step in steps] == [
            StepType.VISION,
            StepType.DETECT,
            StepType.SEARCH,
            StepType.OPTIMIZE,
            StepType.DONE,
        ]
        assert [step.id for step in steps] == ["step-1", "step-2", "step-3", "step-4", "step-5"]
        assert all(step.status == StepStatus.pending for step in steps)

    @pytest.mark.unit
    def test_vision_message_depends_on_image(self):
        assert generate_reasoning_steps("", True)[0].message == VISION_IMAGE_MESSAGE
        assert generate_reasoning_steps("", False)[0].message == VISION_TEXT_MESSAGE

    @pytest.mark.unit
    def test_detect_message_names_style(self):
        steps = generate_reasoning_steps("un living industrial", False)
        assert steps[1].message == "Identifying style preference: Industrial..."

    @pytest.mark.unit
    def test_search_message_lists_template_stores(self):
        steps = generate_reasoning_steps("Fix my living room", False)
        assert steps[2].message == "Scraping inventory: IKEA, Falabella, Paris, Sodimac..."

    @pytest.mark.unit
    def test_fixed_messages(self):
        steps = generate_reasoning_steps("office", False)
        assert steps[3].message == OPTIMIZE_MESSAGE
        assert steps[4].message == DONE_MESSAGE


class TestTemplateStores:
    """Tests for store extraction"""

    @pytest.mark.unit
    def test_stores_are_distinct_in_first_seen_order(self):
        stores = template_stores("casual weekend")
        assert stores == ["H&M", "Zara", "Falabella", "Paris"]
        assert len(stores) == len(set(stores))
