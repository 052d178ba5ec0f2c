"""Collaborator contracts and boundary fetch functions.

The core reaches the outside world through two asynchronous collaborators:

- a GraphSource, which returns raw stakeholder and relationship data for an
  industry query
- a DetailSource, which returns the workflow steps of a stakeholder and the
  pain-point evidence for a workflow step

The functions in this module are the only callers of those collaborators.
Each one applies the retry policy, validates the response against its
schema and converts every failure into a FetchError subclass, so nothing
past this module handles an untyped payload.
"""

import logging
from typing import Any, Mapping, Protocol

from pydantic import ValidationError as PydanticValidationError

from src.config import Config
from src.exceptions.fetch_error import (FetchError, FormatError,
                                        PainPointFetchError,
                                        WorkflowFetchError)
from src.models.pain_point_model import StepAnalysis
from src.models.source_payloads import (PainPointRequest, PainPointResponse,
                                        WorkflowRequest, WorkflowResponse)
from src.models.workflow_model import WorkflowStep, make_step_id
from src.utils.metrics import track_execution_time
from src.utils.retry import call_source_with_retry

logger = logging.getLogger(__name__)


class GraphSource(Protocol):
    """Returns raw stakeholder graph data for an industry query."""

    async def fetch_graph(self, industry: str) -> Mapping[str, Any]:
        """Return ``{"stakeholders": {...}, "relationships": [...]}``."""
        ...


class DetailSource(Protocol):
    """Returns workflow steps and pain-point evidence."""

    async def fetch_workflow(self, request: dict[str, Any]) -> Mapping[str, Any]:
        """Answer ``{industry, stakeholder, otherStakeholders}`` with ``{"workflow": [...]}``."""
        ...

    async def fetch_pain_points(self, request: dict[str, Any]) -> Mapping[str, Any]:
        """Answer ``{industry, stakeholder, step, description}`` with ``{success, data?, error?}``."""
        ...


@track_execution_time("graph_source")
async def fetch_graph(
    source: GraphSource,
    industry: str,
    config: Config | None = None,
) -> Any:
    """Fetch raw graph data for an industry.

    The payload is returned unvalidated; src.graph.builder owns its schema.

    Raises:
        FetchError: If the graph source fails or times out
    """
    logger.info(f"Fetching stakeholder graph for '{industry}'")
    return await call_source_with_retry(
        "fetch_graph",
        lambda: source.fetch_graph(industry),
        config,
    )


@track_execution_time("workflow_source")
async def fetch_workflow(
    source: DetailSource,
    request: WorkflowRequest,
    config: Config | None = None,
) -> list[WorkflowStep]:
    """Fetch the workflow steps of one stakeholder.

    Each returned step gets a positional id (see make_step_id).

    Args:
        source: Detail source to call
        request: Industry, stakeholder and the other stakeholder names
        config: Optional Config instance. If not provided, uses get_config()

    Returns:
        Ordered workflow steps, possibly empty

    Raises:
        WorkflowFetchError: If the call fails or `workflow` is not a list of steps
    """
    payload = request.to_payload()
    try:
        raw = await call_source_with_retry(
            "fetch_workflow",
            lambda: source.fetch_workflow(payload),
            config,
        )
        try:
            response = WorkflowResponse.model_validate(raw)
            steps = [
                WorkflowStep(
                    id=make_step_id(request.stakeholder, index),
                    stakeholder=request.stakeholder,
                    **step.model_dump(),
                )
                for index, step in enumerate(response.workflow)
            ]
        except PydanticValidationError as e:
            raise FormatError(
                "Invalid workflow data format",
                context={
                    "stakeholder": request.stakeholder,
                    "errors": e.errors(include_url=False),
                },
            ) from e
    except FetchError as e:
        raise WorkflowFetchError(
            f"Failed to fetch workflow for '{request.stakeholder}': {e.message}",
            context={
                **e.context,
                "industry": request.industry,
                "stakeholder": request.stakeholder,
                "error_type": type(e).__name__,
            },
        ) from e

    logger.info(f"Fetched {len(steps)} workflow steps for '{request.stakeholder}'")
    return steps


@track_execution_time("pain_point_source")
async def fetch_pain_points(
    source: DetailSource,
    request: PainPointRequest,
    config: Config | None = None,
) -> StepAnalysis:
    """Fetch the pain-point analysis of one workflow step.

    Args:
        source: Detail source to call
        request: Industry, stakeholder, step title and step description
        config: Optional Config instance. If not provided, uses get_config()

    Returns:
        The StepAnalysis carried in `data`

    Raises:
        PainPointFetchError: If the call fails, the source answers
            ``success: false``, or `data` is missing or malformed
    """
    payload = request.to_payload()
    try:
        raw = await call_source_with_retry(
            "fetch_pain_points",
            lambda: source.fetch_pain_points(payload),
            config,
        )
        try:
            response = PainPointResponse.model_validate(raw)
        except PydanticValidationError as e:
            raise FormatError(
                "Invalid pain point data format",
                context={"step": request.step, "errors": e.errors(include_url=False)},
            ) from e

        if not response.success:
            raise FetchError(
                response.error or "Pain point analysis failed",
                context={"step": request.step, "source_error": response.error},
            )
        if response.data is None:
            raise FormatError(
                "Pain point response has no data",
                context={"step": request.step},
            )
    except FetchError as e:
        raise PainPointFetchError(
            f"Failed to analyze step '{request.step}': {e.message}",
            context={
                **e.context,
                "industry": request.industry,
                "stakeholder": request.stakeholder,
                "step": request.step,
                "error_type": type(e).__name__,
            },
        ) from e

    logger.info(
        f"Fetched {len(response.data.pain_points)} pain points for step '{request.step}'"
    )
    return response.data
