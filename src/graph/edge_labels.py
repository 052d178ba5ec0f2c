"""Curved edge paths and label anchors.

Edges are drawn as quadratic curves bowing away from the straight line
between their endpoints. Labels sit on the curve near its midpoint; when
several edges share the same pair of stakeholders, their labels (and
curves) are spread symmetrically along the normal so each stays readable.

All functions are pure and deterministic: the same endpoints, index and
total always produce the same geometry. They are meant to be re-evaluated
on every layout tick with the live positions.
"""

import math
from collections import defaultdict
from typing import NamedTuple, Sequence

from pydantic import BaseModel

from src.config import Config, get_config
from src.models.stakeholder_graph import RelationshipEdge


class Point(NamedTuple):
    x: float
    y: float


class EdgeGeometry(BaseModel):
    """Render geometry of one edge for one tick.

    Attributes:
        source: Source stakeholder id
        target: Target stakeholder id
        label: Relationship label
        index: Position among the edges sharing this stakeholder pair
        total: Number of edges sharing this stakeholder pair
        control: Control point of the quadratic curve
        path: SVG path data for the curve
        label_anchor: Where the label is centred
    """

    model_config = {"frozen": True}

    source: str
    target: str
    label: str
    index: int
    total: int
    control: Point
    path: str
    label_anchor: Point


def _normal(source: Point, target: Point) -> tuple[float, float, float]:
    """Unit normal (-dy, dx)/len and the edge length; zero normal for a zero-length edge."""
    dx = target.x - source.x
    dy = target.y - source.y
    length = math.sqrt(dx * dx + dy * dy)
    if length == 0:
        return 0.0, 0.0, 0.0
    return -dy / length, dx / length, length


def _offset_midpoint(source: Point, target: Point, offset: float) -> Point:
    nx, ny, _ = _normal(source, target)
    return Point(
        (source.x + target.x) / 2 + nx * offset,
        (source.y + target.y) / 2 + ny * offset,
    )


def parallel_offset(index: int, total: int, config: Config | None = None) -> float:
    """Perpendicular offset of the `index`-th of `total` parallel edges.

    Offsets are spaced by a base offset that grows with `total` (capped at
    `label_offset_max`), centred on zero, and pushed slightly further out in
    proportion to their size so crowded bundles fan out more.

    Args:
        index: Position of the edge within its bundle
        total: Size of the bundle
        config: Optional Config instance. If not provided, uses get_config()

    Returns:
        Signed offset along the edge normal; 0.0 when total <= 1
    """
    if total <= 1:
        return 0.0
    config = config or get_config()

    base_offset = min(config.label_offset_max, config.label_offset_min + total * config.label_offset_step)
    offset = (index - (total - 1) / 2) * base_offset
    offset += math.copysign(abs(offset) * config.label_spread_boost, offset)
    return offset


def curve_control_point(
    source: Point,
    target: Point,
    curvature: float | None = None,
    spread: float = 0.0,
) -> Point:
    """Control point of the quadratic curve for an edge.

    Args:
        source: Source position
        target: Target position
        curvature: Offset as a fraction of the edge length (Config.edge_curvature by default)
        spread: Extra absolute offset along the normal, used for parallel edges

    Returns:
        The midpoint moved along the normal by ``curvature * length + spread``
    """
    if curvature is None:
        curvature = get_config().edge_curvature
    _, _, length = _normal(source, target)
    return _offset_midpoint(source, target, length * curvature + spread)


def curve_path(source: Point, target: Point, control: Point) -> str:
    """SVG quadratic path from source to target through control."""
    return f"M{source.x},{source.y} Q{control.x},{control.y} {target.x},{target.y}"


def label_anchor(
    source: Point,
    target: Point,
    index: int,
    total: int,
    config: Config | None = None,
) -> Point:
    """Anchor point for an edge label.

    Args:
        source: Source position
        target: Target position
        index: Position of the edge among edges sharing its stakeholder pair
        total: Number of edges sharing the pair
        config: Optional Config instance. If not provided, uses get_config()

    Returns:
        The midpoint of the edge moved along its normal by
        ``label_curve_offset * length`` plus parallel_offset(), so the label
        sits near the drawn curve
    """
    config = config or get_config()
    _, _, length = _normal(source, target)
    return _offset_midpoint(
        source, target, length * config.label_curve_offset + parallel_offset(index, total, config)
    )


def place_edges(
    edges: Sequence[RelationshipEdge],
    positions: dict[str, tuple[float, float]],
    config: Config | None = None,
) -> list[EdgeGeometry]:
    """Compute curve and label geometry for every edge.

    Edges are bundled by unordered stakeholder pair and indexed in source
    order. The parallel spread is measured against the pair's canonical
    direction, so an A->B edge and a B->A edge in the same bundle end up on
    distinct sides instead of overlapping.

    Args:
        edges: Edges to place
        positions: Live node positions (id to (x, y)) from the current tick
        config: Optional Config instance. If not provided, uses get_config()

    Returns:
        One EdgeGeometry per edge, in edge order
    """
    config = config or get_config()

    bundles: dict[tuple[str, str], list[int]] = defaultdict(list)
    for position, edge in enumerate(edges):
        bundles[tuple(sorted((edge.source, edge.target)))].append(position)

    index_in_bundle: dict[int, tuple[int, int]] = {}
    for members in bundles.values():
        for index, position in enumerate(members):
            index_in_bundle[position] = (index, len(members))

    geometries = []
    for position, edge in enumerate(edges):
        source = Point(*positions[edge.source])
        target = Point(*positions[edge.target])
        index, total = index_in_bundle[position]

        # Reversed edges have a flipped normal, so flip the spread back
        direction = 1.0 if edge.source <= edge.target else -1.0
        spread = parallel_offset(index, total, config) * direction

        control = curve_control_point(source, target, config.edge_curvature, spread)
        _, _, length = _normal(source, target)
        anchor = _offset_midpoint(source, target, length * config.label_curve_offset + spread)

        geometries.append(
            EdgeGeometry(
                source=edge.source,
                target=edge.target,
                label=edge.label,
                index=index,
                total=total,
                control=control,
                path=curve_path(source, target, control),
                label_anchor=anchor,
            )
        )

    return geometries
