"""Tests for curved edge paths and label placement."""

import math

import pytest

from src.config import Config
from src.graph.edge_labels import (Point, curve_control_point, curve_path,
                                   label_anchor, parallel_offset, place_edges)
from src.models.stakeholder_graph import RelationshipEdge


@pytest.fixture
def label_config() -> Config:
    return Config(_env_file=None)


class TestParallelOffset:
    """Tests for parallel_offset."""

    @pytest.mark.parametrize("total", [0, 1])
    def test_single_edge_has_no_offset(self, label_config: Config, total: int) -> None:
        assert parallel_offset(0, total, label_config) == 0.0

    def test_three_edges_are_symmetric(self, label_config: Config) -> None:
        offsets = [parallel_offset(i, 3, label_config) for i in range(3)]

        assert offsets[1] == 0.0
        assert offsets[0] == -offsets[2]
        # base = min(60, 40 + 15) = 55, boosted by 30%
        assert offsets[2] == pytest.approx(55 * 1.3)

    def test_two_edges(self, label_config: Config) -> None:
        offsets = [parallel_offset(i, 2, label_config) for i in range(2)]

        # base = 50, offsets +-25 boosted by 30%
        assert offsets == pytest.approx([-32.5, 32.5])

    def test_base_offset_is_capped(self, label_config: Config) -> None:
        # base = min(60, 40 + 50) = 60
        assert parallel_offset(9, 10, label_config) == pytest.approx(4.5 * 60 * 1.3)

    def test_deterministic(self, label_config: Config) -> None:
        assert parallel_offset(3, 5, label_config) == parallel_offset(3, 5, label_config)


class TestCurveGeometry:
    """Tests for curve_control_point, curve_path and label_anchor."""

    def test_control_point_offset_along_normal(self) -> None:
        control = curve_control_point(Point(0, 0), Point(100, 0), curvature=0.2)

        # normal of a left-to-right edge is (0, 1)
        assert control == pytest.approx((50.0, 20.0))

    def test_reversed_edge_bends_the_other_way(self) -> None:
        control = curve_control_point(Point(100, 0), Point(0, 0), curvature=0.2)

        assert control == pytest.approx((50.0, -20.0))

    def test_control_point_with_spread(self) -> None:
        control = curve_control_point(Point(0, 0), Point(0, 100), curvature=0.2, spread=10)

        # normal of a downward edge is (-1, 0)
        assert control == pytest.approx((-30.0, 50.0))

    def test_zero_length_edge(self) -> None:
        control = curve_control_point(Point(5, 5), Point(5, 5), curvature=0.2, spread=10)

        assert control == (5.0, 5.0)

    def test_curvature_defaults_to_config(self) -> None:
        control = curve_control_point(Point(0, 0), Point(100, 0))

        assert control == pytest.approx((50.0, 20.0))

    def test_curve_path(self) -> None:
        path = curve_path(Point(0, 0), Point(100, 0), Point(50, 20))

        assert path == "M0,0 Q50,20 100,0"

    def test_single_label_sits_near_curve(self, label_config: Config) -> None:
        anchor = label_anchor(Point(0, 0), Point(100, 40), 0, 1, label_config)

        # midpoint (50, 20) moved by 0.15 * (-dy, dx)
        assert anchor == pytest.approx((44.0, 35.0))

    def test_single_label_between_curve_and_chord(self, label_config: Config) -> None:
        source, target = Point(0, 0), Point(100, 0)

        anchor = label_anchor(source, target, 0, 1, label_config)
        control = curve_control_point(source, target, label_config.edge_curvature)

        # the label stays between the chord and the control point
        assert anchor == pytest.approx((50.0, 15.0))
        assert 0.0 < anchor.y < control.y

    def test_zero_curve_offset_uses_midpoint(self) -> None:
        config = Config(_env_file=None, label_curve_offset=0.0)

        assert label_anchor(Point(0, 0), Point(100, 40), 0, 1, config) == (50.0, 20.0)

    def test_parallel_labels_symmetric_about_curve(self, label_config: Config) -> None:
        source, target = Point(0, 0), Point(0, 200)
        anchors = [label_anchor(source, target, i, 3, label_config) for i in range(3)]

        # normal of a downward edge is (-1, 0), curve term 0.15 * 200
        assert anchors[1] == pytest.approx((-30.0, 100.0))
        assert anchors[0].x + 30.0 == pytest.approx(-(anchors[2].x + 30.0))
        assert anchors[0].y == pytest.approx(100.0)
        assert anchors[2].y == pytest.approx(100.0)


class TestPlaceEdges:
    """Tests for place_edges."""

    def _positions(self) -> dict[str, tuple[float, float]]:
        return {"cfo": (0.0, 0.0), "ceo": (300.0, 0.0), "cto": (150.0, 200.0)}

    def test_one_geometry_per_edge_in_order(self, label_config: Config) -> None:
        edges = [
            RelationshipEdge(source="cfo", target="ceo", label="reports to"),
            RelationshipEdge(source="cto", target="ceo", label="reports to"),
        ]

        geometries = place_edges(edges, self._positions(), label_config)

        assert [(g.source, g.target) for g in geometries] == [("cfo", "ceo"), ("cto", "ceo")]
        assert all(g.total == 1 and g.index == 0 for g in geometries)

    def test_lone_edge_label_near_curve(self, label_config: Config) -> None:
        edges = [RelationshipEdge(source="cfo", target="ceo", label="reports to")]

        geometry = place_edges(edges, self._positions(), label_config)[0]

        assert geometry.label_anchor == pytest.approx((150.0, 45.0))
        assert geometry.control == pytest.approx((150.0, 60.0))
        assert geometry.path.startswith("M0.0,0.0 Q")

    def test_parallel_edges_are_indexed(self, label_config: Config) -> None:
        edges = [
            RelationshipEdge(source="cfo", target="ceo", label="reports to"),
            RelationshipEdge(source="cto", target="ceo", label="reports to"),
            RelationshipEdge(source="cfo", target="ceo", label="presents budget to"),
        ]

        geometries = place_edges(edges, self._positions(), label_config)

        assert [(g.index, g.total) for g in geometries] == [(0, 2), (0, 1), (1, 2)]
        assert geometries[0].label_anchor != geometries[2].label_anchor

    def test_opposite_directions_do_not_collide(self, label_config: Config) -> None:
        edges = [
            RelationshipEdge(source="cfo", target="ceo", label="reports to"),
            RelationshipEdge(source="ceo", target="cfo", label="delegates to"),
        ]

        first, second = place_edges(edges, self._positions(), label_config)

        assert first.label_anchor != second.label_anchor
        assert first.label_anchor.y == pytest.approx(-second.label_anchor.y)

    def test_recomputed_from_live_positions(self, label_config: Config) -> None:
        edges = [RelationshipEdge(source="cfo", target="ceo", label="reports to")]
        positions = self._positions()

        before = place_edges(edges, positions, label_config)[0]
        positions["ceo"] = (300.0, 300.0)
        after = place_edges(edges, positions, label_config)[0]

        assert after.label_anchor == pytest.approx((105.0, 195.0))
        assert before.label_anchor != after.label_anchor

    def test_no_edges(self, label_config: Config) -> None:
        assert place_edges([], {}, label_config) == []

    def test_self_loop_is_total(self, label_config: Config) -> None:
        edges = [RelationshipEdge(source="cfo", target="cfo", label="reviews")]

        geometry = place_edges(edges, self._positions(), label_config)[0]

        assert geometry.control == (0.0, 0.0)
        assert math.isfinite(geometry.label_anchor.x)
