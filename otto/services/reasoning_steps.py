"""
Builds the five-stage reasoning trace for a request
"""
from typing import List

from otto.schemas.commerce import ReasoningStep, StepStatus, StepType
from otto.services.query_classifier import detect_style, find_matching_template
from otto.services.solution_builder import resolve_template, resolve_template_products

STEP_ORDER = (StepType.VISION, StepType.DETECT, StepType.SEARCH, StepType.OPTIMIZE, StepType.DONE)

VISION_IMAGE_MESSAGE = "Scanning image composition and room geometry..."
VISION_TEXT_MESSAGE = "Analyzing request parameters..."
OPTIMIZE_MESSAGE = "Comparing prices and delivery times..."
DONE_MESSAGE = "Solution generated."


def template_stores(query: str) -> List[str]:
    """Distinct store names of the query's template products, in first-seen order"""
    template = resolve_template(find_matching_template(query))
    stores: List[str] = []
    for product in resolve_template_products(template):
        if product.store not in stores:
            stores.append(product.store)
    return stores


def generate_reasoning_steps(query: str, has_image: bool) -> List[ReasoningStep]:
    """Return the five pending steps for a run, in fixed order"""
    style = detect_style(query)
    stores = template_stores(query)

    messages = {
        StepType.VISION: VISION_IMAGE_MESSAGE if has_image else VISION_TEXT_MESSAGE,
        StepType.DETECT: f"Identifying style preference: {style}...",
        StepType.SEARCH: f"Scraping inventory: {', '.join(stores)}...",
        StepType.OPTIMIZE: OPTIMIZE_MESSAGE,
        StepType.DONE: DONE_MESSAGE,
    }

    return [
        ReasoningStep(id=f"step-{index}", type=step_type, message=messages[step_type], status=StepStatus.pending)
        for index, step_type in enumerate(STEP_ORDER, start=1)
    ]
