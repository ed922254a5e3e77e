"""Render coordination: drives the engine and owns the current visual tree."""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from ..config import RenderConfig
from .engine import RenderEngine
from .visual import VisualTree

logger = logging.getLogger(__name__)

FAILURE_TITLE = "Failed to render mindmap"
FAILURE_HINT = (
    "There was an issue rendering the diagram. "
    "Try refreshing the page or regenerating the mindmap."
)

Teardown = Callable[[], None]


class RenderState(str, Enum):
    """Lifecycle states of a render attempt."""
    IDLE = "idle"
    RENDERING = "rendering"
    READY = "ready"
    FAILED = "failed"
    SKIPPED = "skipped"  # Surface had no area
    STALE = "stale"      # Superseded by a newer render


@dataclass
class DrawingSurface:
    """Target area the diagram is drawn into."""
    width: float = 0
    height: float = 0

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height


@dataclass
class RenderFailure:
    """Terminal failure of a render attempt."""
    message: str
    error: BaseException
    generation: int
    title: str = FAILURE_TITLE
    hint: str = FAILURE_HINT

    @property
    def error_type(self) -> str:
        return type(self.error).__name__

    @property
    def detail(self) -> str:
        return str(self.error) or self.error_type


@dataclass
class RenderResult:
    """Outcome of one call to ``RenderCoordinator.render``."""
    generation: int
    state: RenderState
    tree: VisualTree | None = None
    failure: RenderFailure | None = None


class RenderCoordinator:
    """Single-flight renderer for one drawing surface.

    Every call to ``render`` starts a new generation. Results arriving for an
    older generation are dropped. Registered teardowns (interaction handler
    disposers) run before a new render starts and before a new tree is
    exposed.
    """

    def __init__(
        self,
        engine: RenderEngine,
        surface: DrawingSurface | None = None,
        config: RenderConfig | None = None,
    ):
        self.engine = engine
        self.config = config or RenderConfig()
        self.surface = surface or DrawingSurface(self.config.surface_width, self.config.surface_height)
        self.generation = 0
        self.state = RenderState.IDLE
        self.tree: VisualTree | None = None
        self.failure: RenderFailure | None = None
        self.abandoned_text: str | None = None
        self._teardowns: list[Teardown] = []

    def register_teardown(self, teardown: Teardown) -> None:
        """Register a disposer to run when the current tree is replaced."""
        self._teardowns.append(teardown)

    def teardown(self) -> None:
        """Run and clear all registered disposers."""
        teardowns, self._teardowns = self._teardowns, []
        for teardown in teardowns:
            teardown()
        if teardowns:
            logger.debug(f"Tore down {len(teardowns)} interaction batch(es)")

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    async def render(self, text: str) -> RenderResult:
        """Render diagram text and expose the resulting tree.

        Returns a result whose state is READY, FAILED, SKIPPED (surface has
        no area; nothing is torn down and the text is kept in
        ``abandoned_text``) or STALE (a newer render superseded this one).
        Engine errors never propagate to the caller.
        """
        self.generation += 1
        generation = self.generation

        if not self.surface.has_area:
            logger.warning("Drawing surface has no area yet, skipping render")
            self.abandoned_text = text
            self.state = RenderState.SKIPPED
            return RenderResult(generation, RenderState.SKIPPED)

        self.abandoned_text = None
        self.teardown()
        self.state = RenderState.RENDERING
        render_id = f"mermaid-{generation}-{uuid.uuid4().hex[:9]}"

        try:
            submission = self.engine.submit(text, render_id)
            if self.config.timeout_seconds is not None:
                tree = await asyncio.wait_for(submission, self.config.timeout_seconds)
            else:
                tree = await submission
        except Exception as e:
            if not self.is_current(generation):
                logger.debug(f"Discarding failure of stale render {generation}: {e}")
                return RenderResult(generation, RenderState.STALE)
            return self._fail(generation, text, e)

        if not self.is_current(generation):
            logger.debug(f"Discarding stale render {generation} (current is {self.generation})")
            return RenderResult(generation, RenderState.STALE)

        self.teardown()
        self.tree = tree
        self.failure = None
        self.state = RenderState.READY
        logger.debug(f"Render {generation} ready with {len(tree.groups)} groups")
        return RenderResult(generation, RenderState.READY, tree=tree)

    def dispose(self) -> None:
        """Release the tree and invalidate any render still in flight."""
        self.generation += 1
        self.teardown()
        self.tree = None
        self.failure = None
        self.abandoned_text = None
        self.state = RenderState.IDLE

    def _fail(self, generation: int, text: str, error: Exception) -> RenderResult:
        if isinstance(error, asyncio.TimeoutError):
            message = f"Rendering timed out after {self.config.timeout_seconds}s"
        else:
            message = str(error) or type(error).__name__

        logger.error(f"Mermaid rendering error: {type(error).__name__}: {message}")
        logger.error(f"  Surface: {self.surface.width}x{self.surface.height}, code length: {len(text)}")

        self.teardown()
        self.tree = None
        self.failure = RenderFailure(message=message, error=error, generation=generation)
        self.state = RenderState.FAILED
        return RenderResult(generation, RenderState.FAILED, failure=self.failure)
