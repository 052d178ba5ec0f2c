"""Validator for stakeholder graphs.

Checks the structural invariants every graph handed to the layout must
satisfy, and flags shapes that are legal but worth telling the user about.

Errors:
- Duplicate node ids
- Edge endpoints that are not node ids

Warnings:
- Self-referencing relationships
- Stakeholders without any relationship
- More stakeholders than the display limit
"""

import logging
from collections import Counter
from typing import Any

from src.config import get_config
from src.graph.validators.base_validator import BaseValidator, ValidationResult
from src.models.stakeholder_graph import StakeholderGraph

logger = logging.getLogger(__name__)


class GraphValidator(BaseValidator):
    """Validates a StakeholderGraph.

    Expects ``{"graph": StakeholderGraph}`` and optionally ``"max_nodes"``
    (defaults to Config.max_nodes_to_display).
    """

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate graph invariants.

        Args:
            data: Dictionary with a "graph" entry and optional "max_nodes"

        Returns:
            ValidationResult; invalid when ids are duplicated or edges dangle
        """
        result = ValidationResult.success()

        graph = data.get("graph")
        if not isinstance(graph, StakeholderGraph):
            result.add_error("Graph is missing or is not a StakeholderGraph")
            return result

        max_nodes = data.get("max_nodes") or get_config().max_nodes_to_display

        id_counts = Counter(node.id for node in graph.nodes)
        for node_id, count in id_counts.items():
            if count > 1:
                result.add_error(f"Duplicate stakeholder id '{node_id}' ({count} occurrences)")

        node_ids = set(id_counts)
        connected: set[str] = set()
        for position, edge in enumerate(graph.edges):
            for endpoint in (edge.source, edge.target):
                if endpoint not in node_ids:
                    result.add_error(
                        f"Relationship {position} ('{edge.label}') references unknown stakeholder '{endpoint}'"
                    )
            if edge.source == edge.target:
                result.add_warning(f"Stakeholder '{edge.source}' has a relationship with itself")
            connected.add(edge.source)
            connected.add(edge.target)

        isolated = [node.id for node in graph.nodes if node.id not in connected]
        if isolated and len(graph.nodes) > 1:
            result.add_warning(f"Stakeholders without relationships: {', '.join(isolated)}")

        if len(graph.nodes) > max_nodes:
            result.add_warning(
                f"Graph has {len(graph.nodes)} stakeholders, more than the display limit of {max_nodes}"
            )

        logger.debug(f"{self.name}: {result.get_summary()}")
        return result

    @property
    def name(self) -> str:
        return "graph_validator"
