"""
Request orchestration: drives one chat request from the thinking message to
the final solution message.

Run sequence (strictly sequential, one step at a time):

    VISION -> DETECT -> SEARCH -> OPTIMIZE -> build solution + fill cart -> DONE

Each step waits a settle delay, turns active, does its (simulated or real)
work and turns completed. VISION calls the vision endpoint when the request
carries an image; DONE calls the image generation endpoint in the same case.
External failures only change the step's message, they never abort the run.

All waiting goes through the injected `sleep` so tests can run with no delay.
"""
import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from otto.core.config import settings
from otto.core.errors import PreviewUnavailableError, RunInProgressError
from otto.middleware.logging_middleware import get_logger
from otto.schemas.commerce import Product, ReasoningStep, Solution, StepStatus, StepType
from otto.services.chat_store import ChatStore
from otto.services.image_generation_client import PREVIEW_PROMPT, TRANSFORMATION_PROMPT, ImageGenerationClient
from otto.services.image_utils import compress_image, needs_compression
from otto.services.reasoning_steps import DONE_MESSAGE, generate_reasoning_steps
from otto.services.solution_builder import generate_solution
from otto.services.vision_client import StructuredAnalysis, VisionAnalysisClient

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]

VISION_FALLBACK_MESSAGE = "Image composition analyzed"
GENERATING_MESSAGE = "Generating AI visualization of your space..."
VISUALIZATION_READY_MESSAGE = "AI visualization ready! Check the preview panel."


@dataclass
class OrchestrationTimings:
    """Simulated durations, in seconds"""

    settle_delay: float = 0.3
    default_step_duration: float = 0.6
    search_step_duration: float = 1.2
    optimize_step_duration: float = 0.8
    pre_solution_delay: float = 0.5
    cart_item_delay: float = 0.3
    done_step_duration: float = 0.6

    @classmethod
    def from_settings(cls) -> "OrchestrationTimings":
        return cls(
            settle_delay=settings.step_settle_delay,
            default_step_duration=settings.step_default_duration,
            search_step_duration=settings.search_step_duration,
            optimize_step_duration=settings.optimize_step_duration,
            pre_solution_delay=settings.pre_solution_delay,
            cart_item_delay=settings.cart_item_delay,
            done_step_duration=settings.done_step_duration,
        )

    @classmethod
    def instant(cls) -> "OrchestrationTimings":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    def duration_for(self, step_type: StepType) -> float:
        if step_type == StepType.SEARCH:
            return self.search_step_duration
        if step_type == StepType.OPTIMIZE:
            return self.optimize_step_duration
        return self.default_step_duration


@dataclass
class OrchestrationRun:
    """A started run: the request and the steps it will walk through"""

    query: str
    has_image: bool
    steps: List[ReasoningStep]
    thinking_message_id: str


def vision_step_message(result: StructuredAnalysis) -> str:
    """VISION message built from the structured room attributes"""
    if result.room_type and result.style:
        return f"Detected {result.room_type} · {result.style} style"
    if result.room_type:
        return f"Detected {result.room_type}"
    if result.style:
        return f"Detected {result.style} style"
    return VISION_FALLBACK_MESSAGE


class RequestOrchestrator:
    """Runs chat requests against one ChatStore, one at a time"""

    def __init__(
        self,
        store: ChatStore,
        vision_client: Optional[VisionAnalysisClient] = None,
        image_client: Optional[ImageGenerationClient] = None,
        timings: Optional[OrchestrationTimings] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.store = store
        self.vision_client = vision_client
        self.image_client = image_client
        self.timings = timings or OrchestrationTimings.from_settings()
        self.sleep = sleep or asyncio.sleep

    @property
    def is_busy(self) -> bool:
        return self.store.state.is_processing

    def start(self, query: str, has_image: bool) -> OrchestrationRun:
        """
        Begin a run: post the thinking message with all steps pending and open the cart.

        Runs on the event loop without suspending, so the busy check and the
        processing flag are set atomically with respect to other requests.

        Raises:
            RunInProgressError: if this store already has a run in flight
        """
        if self.is_busy:
            raise RunInProgressError()

        steps = generate_reasoning_steps(query, has_image)
        thinking = self.store.start_processing(steps)
        logger.info(f"Run started (has_image={has_image}, query={query[:60]!r})")
        return OrchestrationRun(query=query, has_image=has_image, steps=steps, thinking_message_id=thinking.id)

    async def run(self, run: OrchestrationRun) -> Solution:
        """Drive a started run to completion and return its Solution"""
        try:
            *work_steps, done_step = run.steps
            for step in work_steps:
                await self._run_step(run, step)

            await self.sleep(self.timings.pre_solution_delay)
            solution = generate_solution(run.query)

            for item in solution.items:
                await self.sleep(self.timings.cart_item_delay)
                self.store.add_to_cart(item.product, item.role)

            await self._run_done_step(run, done_step, solution)
        except Exception as e:
            logger.error(f"Run failed unexpectedly: {e}", exc_info=True)
            self.store.abort_processing()
            raise

        self.store.complete_processing(solution)
        logger.info(f"Run completed with {len(solution.items)} items")
        return solution

    async def process_user_request(self, query: str, has_image: bool) -> Solution:
        """Start and drive a run"""
        return await self.run(self.start(query, has_image))

    async def _run_step(self, run: OrchestrationRun, step: ReasoningStep) -> None:
        await self.sleep(self.timings.settle_delay)
        self.store.update_reasoning_step(step.id, StepStatus.active)

        message = None
        if step.type == StepType.VISION and run.has_image:
            message = await self._analyze_image()
        else:
            await self.sleep(self.timings.duration_for(step.type))

        self.store.update_reasoning_step(step.id, StepStatus.completed, message=message)

    async def _analyze_image(self) -> str:
        """Call the vision endpoint; returns the VISION message to show"""
        image = self.store.state.original_image
        if not image or self.vision_client is None:
            logger.warning("Vision analysis skipped: no image or no vision client")
            return VISION_FALLBACK_MESSAGE

        try:
            result = await self.vision_client.analyze(image)
        except Exception as e:
            logger.warning(f"Vision analysis failed, continuing without it: {e}")
            return VISION_FALLBACK_MESSAGE

        self.store.set_last_analysis(result.analysis)
        if isinstance(result, StructuredAnalysis):
            return vision_step_message(result)
        return VISION_FALLBACK_MESSAGE

    async def _run_done_step(self, run: OrchestrationRun, step: ReasoningStep, solution: Solution) -> None:
        await self.sleep(self.timings.settle_delay)

        if not run.has_image:
            self.store.update_reasoning_step(step.id, StepStatus.active)
            await self.sleep(self.timings.done_step_duration)
            self.store.update_reasoning_step(step.id, StepStatus.completed)
            return

        self.store.update_reasoning_step(step.id, StepStatus.active, message=GENERATING_MESSAGE)
        self.store.set_is_generating_image(True)
        try:
            image_url = await self._generate_visualization(
                [item.product for item in solution.items], TRANSFORMATION_PROMPT
            )
        finally:
            self.store.set_is_generating_image(False)

        message = VISUALIZATION_READY_MESSAGE if image_url else DONE_MESSAGE
        self.store.update_reasoning_step(step.id, StepStatus.completed, message=message)

    async def generate_cart_preview(self) -> Optional[str]:
        """
        Render the uploaded room photo with the products currently in the cart.

        The cart may have been edited since the last solution; its items are
        sent as they are now. Returns the image URL, or None when generation failed.

        Raises:
            RunInProgressError: while a run or another rendering is in flight
            PreviewUnavailableError: without an uploaded photo or with an empty cart
        """
        state = self.store.state
        if state.is_processing or state.is_generating_image:
            raise RunInProgressError("A request or visualization is already in progress")
        if not state.original_image:
            raise PreviewUnavailableError("Upload a photo of your space to generate a preview")
        if not state.cart:
            raise PreviewUnavailableError("Add products to the cart to generate a preview")

        self.store.set_is_generating_image(True)
        try:
            image_url = await self._generate_visualization([item.product for item in state.cart], PREVIEW_PROMPT)
        finally:
            self.store.set_is_generating_image(False)

        logger.info(f"Cart preview {'ready' if image_url else 'failed'} ({len(state.cart)} items)")
        return image_url

    async def _generate_visualization(self, products: List[Product], prompt: str) -> Optional[str]:
        """Call the image generation endpoint; returns the image URL or None on failure"""
        image = self.store.state.original_image
        if not image or self.image_client is None:
            logger.warning("Image generation skipped: no image or no generation client")
            return None

        try:
            if needs_compression(image, settings.max_image_size_kb):
                image = compress_image(
                    image,
                    max_width=settings.compression_max_dimension,
                    max_height=settings.compression_max_dimension,
                    quality=settings.compression_quality,
                )

            image_url = await self.image_client.generate(
                image,
                prompt,
                products,
                analysis=self.store.state.last_analysis,
            )
        except Exception as e:
            logger.warning(f"Image generation failed, keeping the text solution: {e}")
            return None

        self.store.set_generated_image(image_url)
        return image_url
