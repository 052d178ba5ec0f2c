"""Force-directed layout for stakeholder graphs.

This module provides the ForceLayout engine, an iterative physics
simulation that assigns 2D coordinates to every node of a StakeholderGraph.
Each tick applies three forces at once:

- a link force pulling the endpoints of every edge toward a rest distance
- a many-body force pushing every pair of nodes apart
- a weak centring force pulling the layout toward the viewport centre

The simulation energy (alpha) decays every tick; once it drops below
`alpha_min` the simulation stops. Dragging a node pins it to the pointer and
re-heats the simulation until the drag ends.

The engine owns the node arena: tick() is the only writer of `x`/`y`. Drag
handlers only move the pin (`fx`/`fy`), which the next tick applies. After
every tick a fresh immutable LayoutSnapshot is pushed to tick listeners.

Example:
    ```python
    layout = ForceLayout(graph, width=1280, height=720)
    layout.add_tick_listener(lambda snapshot: print(snapshot.positions))
    layout.settle()
    ```
"""

import asyncio
import logging
import math
import random
from typing import Callable

from pydantic import BaseModel, Field

from src.config import Config, get_config
from src.models.stakeholder_graph import StakeholderGraph, StakeholderNode

logger = logging.getLogger(__name__)

TickListener = Callable[["LayoutSnapshot"], None]

# Squared distance below which repulsion stops growing
DISTANCE_MIN2 = 1.0


class LayoutSnapshot(BaseModel):
    """Immutable view of the node positions after one tick.

    Attributes:
        tick: Number of ticks applied so far
        alpha: Simulation energy after the tick
        positions: Node id to (x, y)
        pinned: Ids of nodes currently pinned by a drag
    """

    model_config = {"frozen": True, "extra": "forbid"}

    tick: int = Field(..., ge=0)
    alpha: float
    positions: dict[str, tuple[float, float]]
    pinned: frozenset[str] = frozenset()


class ForceLayout:
    """Iterative force simulation over a StakeholderGraph.

    Graphs with fewer than three nodes get a fixed placement and never
    simulate: nothing for an empty graph, the centre for a single node, and a
    horizontal pair centred in the viewport for two nodes.

    Attributes:
        graph: Graph whose nodes are laid out (nodes are updated in place)
        width: Viewport width
        height: Viewport height
    """

    def __init__(
        self,
        graph: StakeholderGraph,
        width: float,
        height: float,
        config: Config | None = None,
    ) -> None:
        """Place nodes at their starting positions.

        Args:
            graph: Graph to lay out. Its nodes become the engine's arena.
            width: Viewport width
            height: Viewport height
            config: Optional Config instance. If not provided, uses get_config()
        """
        self._config = config or get_config()
        self.graph = graph
        self.width = float(width)
        self.height = float(height)

        self._nodes: dict[str, StakeholderNode] = {node.id: node for node in graph.nodes}
        self._velocity: dict[str, list[float]] = {node_id: [0.0, 0.0] for node_id in self._nodes}
        self._fixed_positions: dict[str, tuple[float, float]] = {}
        self._listeners: list[TickListener] = []
        self._active_drags: set[str] = set()
        self._random = random.Random(self._config.layout_seed)
        self._task: asyncio.Task | None = None
        self._tick_count = 0

        self._alpha = 1.0
        self._alpha_target = 0.0
        self._simulated = len(self._nodes) >= 3
        self._running = self._simulated
        self._stopped = False

        degrees = graph.degrees()
        self._link_strength: list[float] = []
        self._link_bias: list[float] = []
        for edge in graph.edges:
            source_degree = max(degrees.get(edge.source, 0), 1)
            target_degree = max(degrees.get(edge.target, 0), 1)
            self._link_strength.append(1.0 / min(source_degree, target_degree))
            self._link_bias.append(source_degree / (source_degree + target_degree))

        self._place_initial(degrees)

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2, self.height / 2

    @property
    def alpha(self) -> float:
        """Current simulation energy."""
        return self._alpha

    @property
    def is_running(self) -> bool:
        """Whether further ticks will move nodes."""
        return self._running

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def kinetic_energy(self) -> float:
        """Sum of 0.5 * |v|^2 over all nodes."""
        return sum(0.5 * (vx * vx + vy * vy) for vx, vy in self._velocity.values())

    def _place_initial(self, degrees: dict[str, int]) -> None:
        """Seed node positions.

        Two or fewer nodes get their final placement. Larger graphs start on
        a circle big enough to give every node `layout_min_spacing` of arc,
        with well connected nodes pulled toward the centre.
        """
        cx, cy = self.center
        nodes = self.graph.nodes
        count = len(nodes)

        if count == 1:
            self._fixed_positions[nodes[0].id] = (cx, cy)
        elif count == 2:
            half = self._config.layout_two_node_spacing / 2
            self._fixed_positions[nodes[0].id] = (cx - half, cy)
            self._fixed_positions[nodes[1].id] = (cx + half, cy)

        if not self._simulated:
            for node in nodes:
                node.x, node.y = self._fixed_positions[node.id]
            return

        base_radius = min(self.width, self.height) / 3
        circumference = count * self._config.layout_min_spacing
        dynamic_radius = max(base_radius, circumference / (2 * math.pi))

        for index, node in enumerate(nodes):
            angle = index * 2 * math.pi / count
            radius = dynamic_radius - degrees.get(node.id, 0) * self._config.layout_degree_radius_step
            radius = max(radius, self._config.layout_node_radius)
            node.x = cx + radius * math.cos(angle)
            node.y = cy + radius * math.sin(angle)

    def _jiggle(self) -> float:
        return (self._random.random() - 0.5) * 1e-6

    def add_tick_listener(self, listener: TickListener) -> None:
        """Register a callback invoked with a new LayoutSnapshot after every tick."""
        self._listeners.append(listener)

    def remove_tick_listener(self, listener: TickListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def snapshot(self) -> LayoutSnapshot:
        """Build an immutable snapshot of the current positions."""
        return LayoutSnapshot(
            tick=self._tick_count,
            alpha=self._alpha,
            positions={node.id: (node.x, node.y) for node in self.graph.nodes},
            pinned=frozenset(node.id for node in self.graph.nodes if node.is_pinned),
        )

    def tick(self) -> LayoutSnapshot:
        """Advance the simulation by one step and notify listeners.

        Returns:
            Snapshot of the positions after the step
        """
        if self._simulated:
            if self._running:
                self._step()
        else:
            for node in self.graph.nodes:
                if node.is_pinned:
                    node.x, node.y = node.fx, node.fy
                else:
                    node.x, node.y = self._fixed_positions[node.id]

        self._tick_count += 1
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot

    def _step(self) -> None:
        self._alpha += (self._alpha_target - self._alpha) * self._config.layout_alpha_decay

        self._apply_link_force()
        self._apply_charge_force()
        self._apply_center_force()

        retained = 1.0 - self._config.layout_velocity_decay
        for node_id, node in self._nodes.items():
            velocity = self._velocity[node_id]
            if node.is_pinned:
                node.x, node.y = node.fx, node.fy
                velocity[0] = velocity[1] = 0.0
                continue
            velocity[0] *= retained
            velocity[1] *= retained
            node.x += velocity[0]
            node.y += velocity[1]

        if self._alpha < self._config.layout_alpha_min:
            self._running = False
            logger.debug(f"Layout cooled after {self._tick_count + 1} ticks")

    def _apply_link_force(self) -> None:
        distance = self._config.layout_link_distance
        for index, edge in enumerate(self.graph.edges):
            if edge.source == edge.target:
                continue
            source = self._nodes[edge.source]
            target = self._nodes[edge.target]
            source_velocity = self._velocity[edge.source]
            target_velocity = self._velocity[edge.target]

            dx = target.x + target_velocity[0] - source.x - source_velocity[0]
            dy = target.y + target_velocity[1] - source.y - source_velocity[1]
            if dx == 0:
                dx = self._jiggle()
            if dy == 0:
                dy = self._jiggle()
            length = math.sqrt(dx * dx + dy * dy)
            scale = (length - distance) / length * self._alpha * self._link_strength[index]
            dx *= scale
            dy *= scale

            bias = self._link_bias[index]
            target_velocity[0] -= dx * bias
            target_velocity[1] -= dy * bias
            source_velocity[0] += dx * (1 - bias)
            source_velocity[1] += dy * (1 - bias)

    def _apply_charge_force(self) -> None:
        strength = self._config.layout_charge_strength * self._alpha
        nodes = list(self._nodes.values())
        for node in nodes:
            velocity = self._velocity[node.id]
            for other in nodes:
                if other is node:
                    continue
                dx = other.x - node.x
                dy = other.y - node.y
                if dx == 0:
                    dx = self._jiggle()
                if dy == 0:
                    dy = self._jiggle()
                length2 = dx * dx + dy * dy
                if length2 < DISTANCE_MIN2:
                    length2 = math.sqrt(DISTANCE_MIN2 * length2)
                weight = strength / length2
                velocity[0] += dx * weight
                velocity[1] += dy * weight

    def _apply_center_force(self) -> None:
        cx, cy = self.center
        count = len(self._nodes)
        mean_x = sum(node.x for node in self._nodes.values()) / count
        mean_y = sum(node.y for node in self._nodes.values()) / count
        shift_x = (mean_x - cx) * self._config.layout_center_strength
        shift_y = (mean_y - cy) * self._config.layout_center_strength
        for node in self._nodes.values():
            node.x -= shift_x
            node.y -= shift_y

    def settle(self, max_ticks: int = 1000) -> LayoutSnapshot:
        """Tick synchronously until the simulation cools or max_ticks is hit.

        Args:
            max_ticks: Upper bound on ticks, needed while a drag keeps the
                simulation heated

        Returns:
            Snapshot after the last tick
        """
        snapshot = self.tick()
        ticks = 1
        while self._running and ticks < max_ticks:
            snapshot = self.tick()
            ticks += 1
        return snapshot

    def restart(self) -> None:
        """Resume ticking after the simulation cooled. Does nothing once stopped."""
        if not self._simulated or self._stopped:
            return
        self._running = True
        self.start()

    def start(self) -> None:
        """Tick in a background task on the running event loop.

        Does nothing outside an event loop or after stop(); callers then
        drive tick() or settle() themselves.
        """
        if self._stopped:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        if self._task is not None and not self._task.done():
            return
        self._task = loop.create_task(self.run())

    async def run(self) -> None:
        """Tick every `layout_tick_interval` seconds until stopped or cooled."""
        self.tick()
        while self._running:
            await asyncio.sleep(self._config.layout_tick_interval)
            if not self._running:
                break
            self.tick()

    def stop(self) -> None:
        """Stop ticking for good. Positions stay where they are and drags no longer restart it."""
        self._stopped = True
        self._running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def start_drag(self, node_id: str) -> None:
        """Pin a node at its current position and heat the simulation.

        Args:
            node_id: Node being dragged

        Ignored after stop().

        Raises:
            KeyError: If the node is not part of this layout
        """
        node = self._nodes[node_id]
        if self._stopped:
            return
        if not self._active_drags:
            self._alpha_target = self._config.layout_drag_alpha_target
            self.restart()
        self._active_drags.add(node_id)
        node.fx, node.fy = node.x, node.y
        if not self._simulated:
            self.tick()

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        """Move the pin of a dragged node to the pointer position."""
        node = self._nodes[node_id]
        if node_id not in self._active_drags:
            return
        node.fx, node.fy = float(x), float(y)
        if not self._simulated and not self._stopped:
            self.tick()

    def end_drag(self, node_id: str) -> None:
        """Release a dragged node and let the simulation cool."""
        node = self._nodes[node_id]
        self._active_drags.discard(node_id)
        node.fx = node.fy = None
        if not self._active_drags:
            self._alpha_target = 0.0
        if not self._simulated and not self._stopped:
            self.tick()
