"""Navigation state for the stakeholder drill-down.

The SelectionStateMachine tracks where the user is in the drill-down
(selected node, workflow sections, selected step, displayed pain-point
analysis, expanded pain points) and decides what has to be fetched.

Section lifecycle per stakeholder::

    uninitialized --select_node--> loading --ok--> ready
          ^                           |              |
          +----------failure----------+   refresh_workflow --> loading

Only one stakeholder can be loading at a time. While one is, selection
input (select_node, select_step, refresh_workflow) is ignored rather than
queued.

Every asynchronous result is applied by key: workflow responses carry the
generation of the graph they were requested for and are dropped if the
graph has since been replaced, and pain-point analyses land in the cache
under their own key and only reach the display if their step is still
selected.
"""

import logging

from src.config import Config, get_config
from src.drilldown.cache import AnalysisCache, normalize_cache_key
from src.drilldown.sources import (DetailSource, fetch_pain_points,
                                   fetch_workflow)
from src.exceptions.fetch_error import PainPointFetchError, WorkflowFetchError
from src.models.pain_point_model import StepAnalysis
from src.models.source_payloads import PainPointRequest, WorkflowRequest
from src.models.stakeholder_graph import StakeholderGraph
from src.models.workflow_model import (SectionStatus, WorkflowSection,
                                       WorkflowStep)

logger = logging.getLogger(__name__)

WORKFLOW_FETCH_ERROR_MESSAGE = "Failed to fetch stakeholder workflow. Please try again."
STEP_ANALYSIS_ERROR_MESSAGE = "Failed to analyze step details"


class SelectionStateMachine:
    """Drill-down navigation store for one analysis session.

    Attributes:
        industry: Industry of the current graph
        graph: Current graph, None before the first analysis
        selected_node_id: Id of the last selected node
        selected_step: Currently selected workflow step
        step_analysis: Analysis shown for the selected step, if cached
        expanded_pain_points: Pain point texts expanded in the analysis panel
        error: User-facing error message, None when there is nothing to show
    """

    def __init__(
        self,
        detail_source: DetailSource,
        cache: AnalysisCache,
        config: Config | None = None,
    ) -> None:
        self._detail_source = detail_source
        self._cache = cache
        self._config = config or get_config()

        self.industry = ""
        self.graph: StakeholderGraph | None = None
        self.selected_node_id: str | None = None
        self.selected_step: WorkflowStep | None = None
        self.step_analysis: StepAnalysis | None = None
        self.expanded_pain_points: set[str] = set()
        self.error: str | None = None

        self._sections: dict[str, WorkflowSection] = {}
        self._loading_stakeholder: str | None = None
        self._generation = 0

    def reset(self, graph: StakeholderGraph | None, industry: str) -> None:
        """Start over for a new graph.

        Drops every section and selection. Workflow fetches still in flight
        for the previous graph are discarded when they complete.
        """
        self._generation += 1
        self.graph = graph
        self.industry = industry
        self._sections = {}
        self._loading_stakeholder = None
        self.selected_node_id = None
        self._clear_step()
        self.error = None

    @property
    def sections(self) -> dict[str, WorkflowSection]:
        """Workflow sections keyed by stakeholder name, in fetch order."""
        return dict(self._sections)

    @property
    def loading_stakeholder(self) -> str | None:
        return self._loading_stakeholder

    def is_loading(self) -> bool:
        return self._loading_stakeholder is not None

    def section_status(self, stakeholder: str) -> SectionStatus:
        if self._loading_stakeholder == stakeholder:
            return "loading"
        if stakeholder in self._sections:
            return "ready"
        return "uninitialized"

    def cache_key(self, step: WorkflowStep) -> str:
        """Cache key of a step's pain-point analysis in the current industry."""
        return normalize_cache_key(self.industry, step.stakeholder, step.title)

    async def select_node(self, node_id: str) -> bool:
        """Select a stakeholder node and show its workflow.

        Fetches the stakeholder's workflow while its section has no steps;
        afterwards only expands the existing section.

        Args:
            node_id: Id of the selected node

        Returns:
            True if the selection took effect, False if it was ignored
            (unknown node, or another stakeholder is loading) or the
            workflow fetch failed
        """
        if self.graph is None:
            return False
        node = self.graph.get_node(node_id)
        if node is None:
            logger.warning(f"Ignoring selection of unknown node '{node_id}'")
            return False
        if self._loading_stakeholder is not None:
            logger.debug(
                f"Ignoring selection of '{node.name}' while '{self._loading_stakeholder}' is loading"
            )
            return False

        self.selected_node_id = node_id
        section = self._sections.get(node.name)
        if section is None or not section.steps:
            return await self._load_section(node.name)

        self._sections[node.name] = section.model_copy(update={"is_expanded": True})
        has_selected_step = self.selected_step is not None and section.find_step(self.selected_step.id) is not None
        if not has_selected_step:
            self._show_step(section.steps[0])
        return True

    async def refresh_workflow(self, stakeholder: str) -> bool:
        """Explicitly re-fetch a stakeholder's workflow.

        On failure the previous section (if any) is kept.

        Returns:
            True if new steps were stored
        """
        if self.graph is None or stakeholder not in self.graph.node_names():
            return False
        if self._loading_stakeholder is not None:
            return False
        return await self._load_section(stakeholder)

    async def _load_section(self, stakeholder: str) -> bool:
        # The token is set before the first await, so a second caller sees it
        self._loading_stakeholder = stakeholder
        generation = self._generation
        request = WorkflowRequest(
            industry=self.industry,
            stakeholder=stakeholder,
            other_stakeholders=[name for name in self.graph.node_names() if name != stakeholder],
        )

        try:
            steps = await fetch_workflow(self._detail_source, request, self._config)
        except WorkflowFetchError as e:
            logger.error(f"Workflow fetch failed for '{stakeholder}': {e}", exc_info=True)
            if generation == self._generation:
                self.error = WORKFLOW_FETCH_ERROR_MESSAGE
            return False
        finally:
            if generation == self._generation and self._loading_stakeholder == stakeholder:
                self._loading_stakeholder = None

        if generation != self._generation:
            logger.info(f"Discarding workflow for '{stakeholder}', the graph was replaced")
            return False

        self._sections[stakeholder] = WorkflowSection(
            stakeholder=stakeholder,
            is_expanded=True,
            steps=steps,
        )
        if steps:
            self._show_step(steps[0])
        elif self.selected_step is not None and self.selected_step.stakeholder == stakeholder:
            self._clear_step()
        return True

    def select_step(self, step_id: str) -> bool:
        """Select a workflow step of an expanded section.

        Shows the cached analysis of the step if there is one. Never fetches.

        Returns:
            True if the step was selected
        """
        if self._loading_stakeholder is not None:
            return False
        for section in self._sections.values():
            step = section.find_step(step_id)
            if step is not None:
                if not section.is_expanded:
                    return False
                self._show_step(step)
                return True
        return False

    def _show_step(self, step: WorkflowStep) -> None:
        if self.selected_step != step:
            self.expanded_pain_points = set()
        self.selected_step = step
        self.step_analysis = self._cache.get(self.cache_key(step))

    def _clear_step(self) -> None:
        self.selected_step = None
        self.step_analysis = None
        self.expanded_pain_points = set()

    def is_analyzing_step(self) -> bool:
        """Whether the selected step's analysis is being fetched."""
        return self.selected_step is not None and self._cache.is_pending(self.cache_key(self.selected_step))

    async def request_step_analysis(self) -> StepAnalysis | None:
        """Analyse the selected step, reusing the cache.

        A second request for a step whose analysis is already in flight waits
        for the same fetch. The result is always cached under the step's
        key; it is only displayed if the step is still selected.

        Returns:
            The analysis, or None if no step is selected or the fetch failed
        """
        step = self.selected_step
        if step is None:
            return None

        generation = self._generation
        request = PainPointRequest(
            industry=self.industry,
            stakeholder=step.stakeholder,
            step=step.title,
            description=step.description,
        )

        try:
            analysis = await self._cache.get_or_fetch(
                self.cache_key(step),
                lambda: fetch_pain_points(self._detail_source, request, self._config),
            )
        except PainPointFetchError as e:
            logger.error(f"Step analysis failed for '{step.title}': {e}", exc_info=True)
            if generation == self._generation:
                self.error = STEP_ANALYSIS_ERROR_MESSAGE
            return None

        if generation == self._generation and self.selected_step == step:
            self.step_analysis = analysis
        return analysis

    def toggle_section(self, stakeholder: str) -> bool:
        """Expand or collapse a section.

        Collapsing the section that owns the selected step clears the
        selected step and its analysis.

        Returns:
            The new expanded flag, False for an unknown section
        """
        section = self._sections.get(stakeholder)
        if section is None:
            return False

        expanded = not section.is_expanded
        self._sections[stakeholder] = section.model_copy(update={"is_expanded": expanded})
        if not expanded and self.selected_step is not None and section.find_step(self.selected_step.id) is not None:
            self._clear_step()
        return expanded

    def toggle_pain_point(self, point: str) -> bool:
        """Expand or collapse a pain point; returns the new state."""
        if point in self.expanded_pain_points:
            self.expanded_pain_points.discard(point)
            return False
        self.expanded_pain_points.add(point)
        return True

    def dismiss_error(self) -> None:
        self.error = None
