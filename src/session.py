"""Analysis session.

An AnalysisSession owns everything tied to one explorer instance: the
current graph, its force layout, the pain-point cache and the drill-down
navigation state. It runs the analysis pipeline

    query -> sanitise -> graph source -> build -> reduce -> validate -> commit

and turns every layout tick into a SceneFrame (node positions plus curved
edge geometry) pushed to frame listeners.

A failed analysis never touches the committed state: the previous graph,
layout, selection and cache stay as they were and only `error` is set.

Example:
    ```python
    session = AnalysisSession(graph_source, detail_source, width=1280, height=720)
    session.add_frame_listener(render)
    if await session.analyze("healthcare"):
        await session.select_node("cfo")
    ```
"""

import logging
from typing import Callable

from pydantic import BaseModel, Field

from src.config import Config, get_config
from src.drilldown.cache import AnalysisCache
from src.drilldown.selection import SelectionStateMachine
from src.drilldown.sources import DetailSource, GraphSource, fetch_graph
from src.exceptions.base import BaseExplorerError
from src.exceptions.fetch_error import FetchError
from src.exceptions.validation_error import ValidationError
from src.graph.builder import build_graph_from_payload
from src.graph.edge_labels import EdgeGeometry, place_edges
from src.graph.layout import ForceLayout, LayoutSnapshot
from src.graph.reducer import ReductionResult, reduce_graph
from src.graph.validators.graph_validator import GraphValidator
from src.models.pain_point_model import StepAnalysis
from src.models.stakeholder_graph import StakeholderGraph
from src.utils.input_validator import sanitize_industry_query

logger = logging.getLogger(__name__)

ANALYSIS_ERROR_MESSAGE = "Failed to analyze. Please try again."

FrameListener = Callable[["SceneFrame"], None]


class SceneFrame(BaseModel):
    """Everything needed to draw the graph after one layout tick.

    Attributes:
        tick: Layout tick that produced the frame
        alpha: Simulation energy after the tick
        positions: Node id to (x, y)
        pinned: Ids of nodes pinned by a drag
        edges: Curve and label geometry for every edge, in edge order
    """

    model_config = {"frozen": True}

    tick: int
    alpha: float
    positions: dict[str, tuple[float, float]]
    pinned: frozenset[str] = frozenset()
    edges: list[EdgeGeometry] = Field(default_factory=list)


class AnalysisSession:
    """One explorer instance: graph, layout, cache and navigation state.

    Attributes:
        industry: Sanitised query of the committed analysis
        graph: Committed (possibly reduced) graph
        layout: Force layout of the committed graph
        reduction: Reducer output of the committed analysis
        cache: Pain-point analysis cache, cleared on every commit
        selection: Drill-down navigation state
        error: User-facing message of the last failed analysis
        notice: Non-fatal notice of the committed analysis (truncation)
        last_error: Exception behind `error`, for diagnostics
    """

    def __init__(
        self,
        graph_source: GraphSource,
        detail_source: DetailSource,
        config: Config | None = None,
        width: float = 800,
        height: float = 600,
    ) -> None:
        self._config = config or get_config()
        self._graph_source = graph_source
        self.width = width
        self.height = height

        self.industry = ""
        self.graph: StakeholderGraph | None = None
        self.layout: ForceLayout | None = None
        self.reduction: ReductionResult | None = None

        self.cache = AnalysisCache()
        self.selection = SelectionStateMachine(detail_source, self.cache, self._config)

        self.error: str | None = None
        self.notice: str | None = None
        self.last_error: BaseExplorerError | None = None

        self._frame: SceneFrame | None = None
        self._frame_listeners: list[FrameListener] = []
        self._analyzing = False

    @property
    def is_analyzing(self) -> bool:
        return self._analyzing

    @property
    def latest_frame(self) -> SceneFrame | None:
        """Frame of the most recent tick of the current layout."""
        return self._frame

    @property
    def current_error(self) -> str | None:
        """Analysis error, or else the drill-down error."""
        return self.error or self.selection.error

    def add_frame_listener(self, listener: FrameListener) -> None:
        self._frame_listeners.append(listener)

    def remove_frame_listener(self, listener: FrameListener) -> None:
        if listener in self._frame_listeners:
            self._frame_listeners.remove(listener)

    async def analyze(self, industry: str) -> bool:
        """Run a full analysis and commit it on success.

        Ignored while another analysis is running.

        Args:
            industry: Raw industry or use-case query

        Returns:
            True if a new graph was committed
        """
        if self._analyzing:
            logger.debug(f"Ignoring analysis of '{industry}', another analysis is running")
            return False

        self._analyzing = True
        self.error = None
        try:
            query = sanitize_industry_query(industry, self._config)
            payload = await fetch_graph(self._graph_source, query, self._config)
            graph = build_graph_from_payload(payload)
            reduction = reduce_graph(graph, self._config.max_nodes_to_display)

            result = GraphValidator().validate({
                "graph": reduction.graph,
                "max_nodes": self._config.max_nodes_to_display,
            })
            if not result.is_valid:
                raise ValidationError(result.get_summary(), context={"errors": result.errors})
            for warning in result.warnings:
                logger.warning(f"Graph for '{query}': {warning}")

        except FetchError as e:
            logger.error(f"Analysis of '{industry}' failed: {e}", exc_info=True)
            self.error = ANALYSIS_ERROR_MESSAGE
            self.last_error = e
            return False
        except ValidationError as e:
            logger.error(f"Analysis of '{industry}' rejected: {e}", exc_info=True)
            self.error = e.message
            self.last_error = e
            return False
        finally:
            self._analyzing = False

        self._commit(query, reduction)
        return True

    def _commit(self, industry: str, reduction: ReductionResult) -> None:
        if self.layout is not None:
            self.layout.stop()

        self.industry = industry
        self.graph = reduction.graph
        self.reduction = reduction
        self.notice = reduction.warning
        self.last_error = None

        self.cache.clear()
        self.selection.reset(reduction.graph, industry)

        self._frame = None
        self.layout = self._create_layout(reduction.graph)
        self.layout.start()
        logger.info(
            f"Committed analysis of '{industry}': {len(reduction.graph.nodes)} nodes, "
            f"{len(reduction.graph.edges)} edges"
        )

    def _create_layout(self, graph: StakeholderGraph) -> ForceLayout:
        layout = ForceLayout(graph, self.width, self.height, self._config)

        def on_tick(snapshot: LayoutSnapshot) -> None:
            if layout is self.layout:
                self._publish(graph, snapshot)

        layout.add_tick_listener(on_tick)
        return layout

    def _publish(self, graph: StakeholderGraph, snapshot: LayoutSnapshot) -> None:
        frame = SceneFrame(
            tick=snapshot.tick,
            alpha=snapshot.alpha,
            positions=snapshot.positions,
            pinned=snapshot.pinned,
            edges=place_edges(graph.edges, snapshot.positions, self._config),
        )
        self._frame = frame
        for listener in list(self._frame_listeners):
            listener(frame)

    def resize(self, width: float, height: float) -> None:
        """Change the viewport and restart the layout for it."""
        self.width = width
        self.height = height
        if self.graph is None:
            return

        if self.layout is not None:
            self.layout.stop()
        for node in self.graph.nodes:
            node.fx = node.fy = None
        self.layout = self._create_layout(self.graph)
        self.layout.start()

    def settle(self, max_ticks: int = 1000) -> SceneFrame | None:
        """Run the current layout to rest synchronously and return the last frame."""
        if self.layout is None:
            return None
        self.layout.settle(max_ticks)
        return self._frame

    # Drag gestures

    def start_drag(self, node_id: str) -> None:
        if self.layout is not None:
            self.layout.start_drag(node_id)

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        if self.layout is not None:
            self.layout.drag_to(node_id, x, y)

    def end_drag(self, node_id: str) -> None:
        if self.layout is not None:
            self.layout.end_drag(node_id)

    # Drill-down navigation

    async def select_node(self, node_id: str) -> bool:
        return await self.selection.select_node(node_id)

    async def refresh_workflow(self, stakeholder: str) -> bool:
        return await self.selection.refresh_workflow(stakeholder)

    def select_step(self, step_id: str) -> bool:
        return self.selection.select_step(step_id)

    async def request_step_analysis(self) -> StepAnalysis | None:
        return await self.selection.request_step_analysis()

    def toggle_section(self, stakeholder: str) -> bool:
        return self.selection.toggle_section(stakeholder)

    def toggle_pain_point(self, point: str) -> bool:
        return self.selection.toggle_pain_point(point)

    def dismiss_error(self) -> None:
        """Clear both the analysis and the drill-down error."""
        self.error = None
        self.selection.dismiss_error()

    def close(self) -> None:
        """Stop the layout. The session keeps its state."""
        if self.layout is not None:
            self.layout.stop()
        logger.debug("Analysis session closed")
