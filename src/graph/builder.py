"""Graph construction from raw graph source data.

Turns the stakeholder map and relationship list returned by a graph source
into a validated StakeholderGraph. Any malformed or dangling record aborts
construction; no partial graph is ever returned.

Example:
    ```python
    from src.graph.builder import build_graph

    graph = build_graph(
        {"cfo": {"name": "CFO", "role": "Finance", "goals": ["Cut costs"]},
         "ceo": {"name": "CEO", "role": "Executive", "goals": []}},
        [{"from": "cfo", "to": "ceo", "label": "reports to"}],
    )
    ```
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from src.exceptions.fetch_error import FormatError
from src.exceptions.validation_error import (DanglingReference,
                                             MalformedRelationship,
                                             MalformedStakeholder,
                                             ValidationError)
from src.models.stakeholder_graph import (RelationshipEdge, StakeholderGraph,
                                          StakeholderNode)

logger = logging.getLogger(__name__)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _required_text(record: Mapping[str, Any], key: str) -> str | None:
    value = record.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _build_node(stakeholder_id: str, entry: Any) -> StakeholderNode:
    if not isinstance(entry, Mapping):
        raise MalformedStakeholder(
            f"Stakeholder '{stakeholder_id}' is not an object",
            context={"stakeholder_id": stakeholder_id},
        )

    name = _required_text(entry, "name")
    role = _required_text(entry, "role")
    goals = entry.get("goals")

    if name is None or role is None:
        missing = [key for key, value in (("name", name), ("role", role)) if value is None]
        raise MalformedStakeholder(
            f"Stakeholder '{stakeholder_id}' is missing {' and '.join(missing)}",
            context={"stakeholder_id": stakeholder_id, "missing": missing},
        )

    if not _is_sequence(goals) or not all(isinstance(goal, str) for goal in goals):
        raise MalformedStakeholder(
            f"Stakeholder '{stakeholder_id}' goals must be a list of strings",
            context={"stakeholder_id": stakeholder_id, "goals_type": type(goals).__name__},
        )

    return StakeholderNode(id=stakeholder_id, name=name, role=role, goals=list(goals))


def _build_edge(position: int, record: Any, node_ids: set[str]) -> RelationshipEdge:
    if not isinstance(record, Mapping):
        raise MalformedRelationship(
            f"Relationship {position} is not an object",
            context={"position": position},
        )

    source = _required_text(record, "from")
    target = _required_text(record, "to")
    label = _required_text(record, "label")
    missing = [key for key, value in (("from", source), ("to", target), ("label", label)) if value is None]
    if missing:
        raise MalformedRelationship(
            f"Relationship {position} is missing {', '.join(missing)}",
            context={"position": position, "missing": missing},
        )

    unknown = [endpoint for endpoint in (source, target) if endpoint not in node_ids]
    if unknown:
        raise DanglingReference(
            f"Relationship {position} references non-existent stakeholder '{unknown[0]}'",
            context={"position": position, "from": source, "to": target, "unknown": unknown},
        )

    return RelationshipEdge(source=source, target=target, label=label)


def build_graph(
    stakeholders: Mapping[str, Any],
    relationships: Sequence[Any],
) -> StakeholderGraph:
    """Validate raw stakeholder data and build a graph.

    Nodes keep the iteration order of `stakeholders`; edges keep the order of
    `relationships`. All stakeholders are validated before any relationship.

    Args:
        stakeholders: Mapping of stakeholder id to ``{name, role, goals}``
        relationships: Sequence of ``{from, to, label}`` records

    Returns:
        A StakeholderGraph whose edge endpoints are all node ids

    Raises:
        MalformedStakeholder: If a stakeholder lacks a name or role, or its
            goals are not a list of strings
        MalformedRelationship: If a relationship lacks from, to or label
        DanglingReference: If a relationship endpoint is not a stakeholder id
        ValidationError: If two stakeholder keys map to the same id
    """
    nodes = []
    node_ids: set[str] = set()
    for stakeholder_id, entry in stakeholders.items():
        node = _build_node(str(stakeholder_id), entry)
        # Keys such as 1 and "1" collapse to the same id
        if node.id in node_ids:
            raise ValidationError(
                f"Duplicate stakeholder id '{node.id}'",
                context={"stakeholder_id": node.id},
            )
        node_ids.add(node.id)
        nodes.append(node)

    edges = [
        _build_edge(position, record, node_ids)
        for position, record in enumerate(relationships)
    ]

    graph = StakeholderGraph(nodes=nodes, edges=edges)
    logger.info(f"Built stakeholder graph: {len(nodes)} nodes, {len(edges)} edges")
    return graph


def build_graph_from_payload(payload: Any) -> StakeholderGraph:
    """Build a graph from a complete graph source response.

    Args:
        payload: Response of the form ``{stakeholders: {...}, relationships: [...]}``

    Returns:
        Validated StakeholderGraph

    Raises:
        FormatError: If the envelope does not have the expected shape
        ValidationError: If any record inside it is invalid (see build_graph)
    """
    if not isinstance(payload, Mapping):
        raise FormatError(
            "Invalid stakeholder data format",
            context={"payload_type": type(payload).__name__},
        )

    stakeholders = payload.get("stakeholders")
    relationships = payload.get("relationships")

    if not isinstance(stakeholders, Mapping):
        raise FormatError(
            "Invalid stakeholder data format",
            context={"stakeholders_type": type(stakeholders).__name__},
        )
    if not _is_sequence(relationships):
        raise FormatError(
            "Invalid relationship data format",
            context={"relationships_type": type(relationships).__name__},
        )

    return build_graph(stakeholders, relationships)
