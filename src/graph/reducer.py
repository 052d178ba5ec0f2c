"""Bounding oversized stakeholder graphs.

Large graphs are cut down to the most connected stakeholders before layout.
Truncation is reported as a warning on the result, never as an error.
"""

import logging

from pydantic import BaseModel, Field

from src.config import get_config
from src.models.stakeholder_graph import StakeholderGraph

logger = logging.getLogger(__name__)


class ReductionResult(BaseModel):
    """Outcome of reduce_graph.

    Attributes:
        graph: The (possibly reduced) graph
        truncated: Whether nodes were dropped
        original_node_count: Node count before reduction
        warning: User-facing truncation notice, None when nothing was dropped
    """

    model_config = {"extra": "forbid"}

    graph: StakeholderGraph
    truncated: bool = False
    original_node_count: int = Field(..., ge=0)
    warning: str | None = None


def reduce_graph(graph: StakeholderGraph, max_nodes: int | None = None) -> ReductionResult:
    """Keep the `max_nodes` most connected stakeholders.

    Nodes are ranked by degree, highest first; ties keep their original
    order, so identical input always yields identical output. Edges touching
    a dropped node are removed, surviving edges keep their order.

    Args:
        graph: Graph to reduce
        max_nodes: Node limit, defaults to Config.max_nodes_to_display

    Returns:
        ReductionResult. When the graph already fits, its `graph` is the
        input object itself.
    """
    if max_nodes is None:
        max_nodes = get_config().max_nodes_to_display

    node_count = len(graph.nodes)
    if node_count <= max_nodes:
        return ReductionResult(graph=graph, original_node_count=node_count)

    degrees = graph.degrees()
    # sorted() is stable, equal degrees keep insertion order
    ranked = sorted(graph.nodes, key=lambda node: -degrees[node.id])
    kept_nodes = ranked[:max_nodes]
    kept_ids = {node.id for node in kept_nodes}
    kept_edges = [
        edge for edge in graph.edges
        if edge.source in kept_ids and edge.target in kept_ids
    ]

    warning = (
        f"Network is too large ({node_count} nodes). "
        f"Showing top {max_nodes} most connected nodes."
    )
    logger.warning(warning)

    return ReductionResult(
        graph=StakeholderGraph(nodes=kept_nodes, edges=kept_edges),
        truncated=True,
        original_node_count=node_count,
        warning=warning,
    )
