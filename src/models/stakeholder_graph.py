"""Stakeholder graph models.

This module defines the Pydantic models for the stakeholder relationship
graph: nodes carry the stakeholder description plus a mutable layout
position, edges carry a labelled directed relationship.

Example:
    ```python
    from src.models.stakeholder_graph import (RelationshipEdge,
                                              StakeholderGraph,
                                              StakeholderNode)

    graph = StakeholderGraph(
        nodes=[
            StakeholderNode(id="cfo", name="CFO", role="Finance", goals=["Cut costs"]),
            StakeholderNode(id="ceo", name="CEO", role="Executive", goals=[]),
        ],
        edges=[RelationshipEdge(source="cfo", target="ceo", label="reports to")],
    )
    ```
"""

from pydantic import BaseModel, Field


class StakeholderNode(BaseModel):
    """A stakeholder vertex in the relationship graph.

    Position fields are written by the force layout on every tick. The pin
    (`fx`, `fy`) is set by drag gestures and cleared on release; while set,
    the layout places the node exactly at the pin.

    Attributes:
        id: Identifier, unique within a graph
        name: Display name
        role: Role label
        goals: Ordered goal statements
        x: Current horizontal position
        y: Current vertical position
        fx: Pinned horizontal position while dragged
        fy: Pinned vertical position while dragged
    """

    model_config = {"extra": "forbid"}

    id: str = Field(
        ...,
        description="Stakeholder identifier",
        min_length=1,
    )

    name: str = Field(
        ...,
        description="Stakeholder display name",
        min_length=1,
    )

    role: str = Field(
        ...,
        description="Stakeholder role label",
        min_length=1,
    )

    goals: list[str] = Field(
        default_factory=list,
        description="Ordered list of stakeholder goals",
    )

    x: float = Field(default=0.0, description="Horizontal layout position")
    y: float = Field(default=0.0, description="Vertical layout position")
    fx: float | None = Field(default=None, description="Pinned horizontal position")
    fy: float | None = Field(default=None, description="Pinned vertical position")

    @property
    def is_pinned(self) -> bool:
        """Whether a drag gesture currently pins this node."""
        return self.fx is not None and self.fy is not None


class RelationshipEdge(BaseModel):
    """A labelled directed relationship between two stakeholders."""

    model_config = {"extra": "forbid", "frozen": True}

    source: str = Field(..., description="Source stakeholder id", min_length=1)
    target: str = Field(..., description="Target stakeholder id", min_length=1)
    label: str = Field(..., description="Relationship label", min_length=1)


class StakeholderGraph(BaseModel):
    """Ordered stakeholder nodes plus their relationships.

    Edge endpoints must be node ids and node ids must be unique. The graph
    builder guarantees both; GraphValidator checks them for graphs built any
    other way.
    """

    model_config = {"extra": "forbid"}

    nodes: list[StakeholderNode] = Field(
        default_factory=list,
        description="Stakeholder nodes in insertion order",
    )

    edges: list[RelationshipEdge] = Field(
        default_factory=list,
        description="Relationship edges in source order",
    )

    def node_ids(self) -> list[str]:
        """Return node ids in graph order."""
        return [node.id for node in self.nodes]

    def node_names(self) -> list[str]:
        """Return stakeholder names in graph order."""
        return [node.name for node in self.nodes]

    def get_node(self, node_id: str) -> StakeholderNode | None:
        """Look up a node by id.

        Args:
            node_id: Stakeholder identifier

        Returns:
            The node, or None when the id is not part of this graph
        """
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def degrees(self) -> dict[str, int]:
        """Count the edges incident to every node.

        An edge counts once for each node it touches, so a self-loop adds one
        to its node.

        Returns:
            Mapping of node id to degree, including zero-degree nodes
        """
        degrees = {node.id: 0 for node in self.nodes}
        for edge in self.edges:
            if edge.source in degrees:
                degrees[edge.source] += 1
            if edge.target in degrees and edge.target != edge.source:
                degrees[edge.target] += 1
        return degrees
