"""Interactive mindmap view: pipeline orchestration and view controls.

``ConceptMapView`` ties the pieces together for one drawing surface:
generate diagram text, render it, reconcile labels and attach interaction.
``ViewControls`` holds zoom and pan state.
"""

import logging
from pathlib import Path

from slugify import slugify

from .config import ConceptMapConfig, ViewConfig, create_default_config
from .diagnostics import DiagnosticContext, ErrorCollector
from .diagram import create_generator
from .diagram.mermaid import DEFAULT_TITLE
from .interaction import AttachedBatch, ClickCallback, InteractionManager
from .models.concept import Concept, ConceptGraph
from .reconcile import reconcile
from .render.coordinator import DrawingSurface, RenderCoordinator, RenderFailure, RenderResult, RenderState
from .render.engine import RenderEngine
from .render.visual import NodeGroup, VisualTree

logger = logging.getLogger(__name__)

ZOOM_IN_KEYS = ("+", "=")
ZOOM_OUT_KEYS = ("-",)
RESET_KEYS = ("0", "r")


class ViewControls:
    """Bounded zoom and free pan over the rendered diagram."""

    def __init__(self, config: ViewConfig | None = None):
        self.config = config or ViewConfig()
        self.zoom = self.config.zoom_initial
        self.pan = (0.0, 0.0)
        self.is_panning = False
        self._pan_anchor = (0.0, 0.0)

    def _set_zoom(self, value: float) -> None:
        value = round(value, 4)
        self.zoom = max(self.config.zoom_min, min(self.config.zoom_max, value))

    @property
    def zoom_percent(self) -> int:
        return round(self.zoom * 100)

    @property
    def can_zoom_in(self) -> bool:
        return self.zoom < self.config.zoom_max

    @property
    def can_zoom_out(self) -> bool:
        return self.zoom > self.config.zoom_min

    def zoom_in(self) -> None:
        self._set_zoom(self.zoom + self.config.zoom_step)

    def zoom_out(self) -> None:
        self._set_zoom(self.zoom - self.config.zoom_step)

    def reset(self) -> None:
        self.zoom = self.config.zoom_reset
        self.pan = (0.0, 0.0)

    def wheel(self, delta_y: float, ctrl: bool = False, meta: bool = False) -> bool:
        """Zoom on a modified scroll; scrolling down zooms out.

        Returns:
            True if the event was consumed
        """
        if not (ctrl or meta):
            return False
        step = -self.config.wheel_step if delta_y > 0 else self.config.wheel_step
        self._set_zoom(self.zoom + step)
        return True

    def key(self, key: str, ctrl: bool = False, meta: bool = False, alt: bool = False) -> bool:
        """Keyboard shortcuts; ignored while any modifier is held.

        Returns:
            True if the key was handled
        """
        if ctrl or meta or alt:
            return False
        if key in ZOOM_IN_KEYS:
            self.zoom_in()
        elif key in ZOOM_OUT_KEYS:
            self.zoom_out()
        elif key.lower() in RESET_KEYS:
            self.reset()
        else:
            return False
        return True

    def start_pan(self, x: float, y: float) -> None:
        self.is_panning = True
        self._pan_anchor = (x - self.pan[0], y - self.pan[1])

    def pan_to(self, x: float, y: float) -> None:
        if not self.is_panning:
            return
        self.pan = (x - self._pan_anchor[0], y - self._pan_anchor[1])

    def end_pan(self) -> None:
        self.is_panning = False

    @property
    def transform(self) -> str:
        return f"translate({self.pan[0]}px, {self.pan[1]}px) scale({self.zoom})"


class ConceptMapView:
    """One interactive mindmap bound to a drawing surface.

    A new graph or title always regenerates, re-renders and re-reconciles
    from scratch.
    """

    def __init__(
        self,
        engine: RenderEngine,
        config: ConceptMapConfig | None = None,
        on_node_click: ClickCallback | None = None,
        surface: DrawingSurface | None = None,
        collector: ErrorCollector | None = None,
        format_name: str = "mindmap",
    ):
        self.config = config or create_default_config()
        self.generator = create_generator(self.config)
        self.coordinator = RenderCoordinator(engine, surface, self.config.render)
        self.interactions = InteractionManager(on_node_click)
        self.controls = ViewControls(self.config.view)
        self.collector = collector
        self.format_name = format_name

        self.graph: ConceptGraph | None = None
        self.title = DEFAULT_TITLE
        self.code = ""
        self.mapping: dict[NodeGroup, Concept] = {}
        self.misses: list[str] = []
        self._batch: AttachedBatch | None = None

    @property
    def tree(self) -> VisualTree | None:
        return self.coordinator.tree

    @property
    def state(self) -> RenderState:
        return self.coordinator.state

    @property
    def failure(self) -> RenderFailure | None:
        return self.coordinator.failure

    async def show(self, graph: ConceptGraph | None, title: str = DEFAULT_TITLE) -> RenderResult:
        """Generate, render and wire up the diagram for ``graph``."""
        self.graph = graph
        self.title = title
        self.code = self.generator.render_diagram(graph, title, self.format_name)

        result = await self.coordinator.render(self.code)

        if result.state == RenderState.READY:
            self._bind(result)
        elif result.state == RenderState.FAILED:
            self.mapping = {}
            self._collect_failure(result.failure)
        elif result.state == RenderState.SKIPPED and self.collector is not None:
            surface = self.coordinator.surface
            self.collector.collect_warning(
                "Drawing surface has no area, render deferred until resize",
                DiagnosticContext(
                    operation="render",
                    component="RenderCoordinator",
                    title=self.title,
                    generation=result.generation,
                    additional_context={"surface": [surface.width, surface.height]},
                ),
            )

        return result

    async def resize(self, width: float, height: float) -> RenderResult | None:
        """Resize the surface and retry a render abandoned for lack of area."""
        self.coordinator.surface.resize(width, height)
        if self.coordinator.abandoned_text is None or not self.coordinator.surface.has_area:
            return None
        logger.info("Drawing surface is ready, retrying abandoned render")
        return await self.show(self.graph, self.title)

    def _bind(self, result: RenderResult) -> None:
        self.misses = []

        def record_miss(group: NodeGroup, text: str) -> None:
            self.misses.append(text)
            if self.collector is not None:
                self.collector.collect_info(
                    f"No concept matches rendered label {text!r}",
                    DiagnosticContext(
                        operation="reconcile",
                        component="LabelReconciliation",
                        title=self.title,
                        generation=result.generation,
                        additional_context={"group_index": group.index},
                    ),
                )

        self.mapping = reconcile(self.graph or ConceptGraph(), result.tree, on_miss=record_miss)
        self._batch = self.interactions.attach(self.mapping, result.generation)
        self.coordinator.register_teardown(self._batch.dispose)
        logger.info(f"Mapped {len(self.mapping)} node groups to concepts ({len(self.misses)} unmatched)")

    def _collect_failure(self, failure: RenderFailure | None) -> None:
        if failure is None or self.collector is None:
            return
        self.collector.collect_error(
            failure.error,
            DiagnosticContext(
                operation="render",
                component="RenderCoordinator",
                title=self.title,
                generation=failure.generation,
                additional_context={"code_length": len(self.code)},
            ),
        )

    def click(self, group: NodeGroup) -> None:
        """Simulate a pointer click on a group of the current tree."""
        if self.tree is not None:
            self.tree.dispatch(group, "click")

    def export_name(self) -> str:
        """File name of the export artifact, derived from the title."""
        return f"{slugify(self.title or '') or 'mindmap'}.svg"

    def export(self, directory: str | Path) -> Path | None:
        """Write the current tree's SVG markup unchanged.

        Returns:
            Path written, or None when nothing has been rendered yet
        """
        tree = self.tree
        if tree is None:
            logger.debug("Nothing rendered yet, export skipped")
            return None

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        output_file = directory / self.export_name()
        output_file.write_bytes(tree.to_markup())
        logger.info(f"Exported diagram to {output_file}")
        return output_file

    def close(self) -> None:
        """Detach all handlers and drop the visual tree."""
        self.coordinator.dispose()
        self.mapping = {}
        self._batch = None
