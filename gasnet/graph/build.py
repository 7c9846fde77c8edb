"""Derive working graphs from registry state.

Each query builds its own graph from the current registry snapshot and drops
it afterwards. All modes contain every station as a node, including isolated
ones, in ascending station id order; connections are visited in creation order.
"""

from __future__ import annotations

from gasnet.algorithms.base import GraphMode
from gasnet.algorithms.policy import capacity_of, weight_of
from gasnet.graph.strict_multidigraph import StrictMultiDiGraph
from gasnet.logging import get_logger
from gasnet.model.registry import Registry

LOGGER = get_logger(__name__)


def reverse_key(pipe_id: int) -> str:
    """Key of the residual arc paired with the forward arc of ``pipe_id``."""
    return f"{pipe_id}_rev"


def build_graph(registry: Registry, mode: GraphMode) -> StrictMultiDiGraph:
    """Create a StrictMultiDiGraph for the given traversal intent.

    Args:
        registry: Source of stations, pipes and connections. Not modified.
        mode: ``TOPOLOGY`` adds one plain arc per connection; ``FLOW`` adds a
            forward arc with ``capacity``/``flow`` and a paired reverse arc of
            zero capacity; ``PATH`` adds one arc with ``cost``.

    Raises:
        ValueError: If ``mode`` is not a :class:`GraphMode` value.

    Returns:
        StrictMultiDiGraph: Arcs are keyed by pipe id (reverse residual arcs
        by :func:`reverse_key`) and carry ``pipe_id`` as an attribute.
    """
    mode = GraphMode(mode)
    graph = StrictMultiDiGraph()
    for station_id in sorted(registry.stations):
        graph.add_node(station_id)

    for conn in registry.connections:
        src, dst = conn.endpoints
        pipe = registry.get_pipe(conn.pipe_id)

        if mode == GraphMode.TOPOLOGY:
            graph.add_edge(src, dst, key=pipe.id, pipe_id=pipe.id)
        elif mode == GraphMode.FLOW:
            rev = reverse_key(pipe.id)
            graph.add_edge(
                src,
                dst,
                key=pipe.id,
                pipe_id=pipe.id,
                capacity=capacity_of(pipe),
                flow=0.0,
                pair=rev,
                reverse=False,
            )
            graph.add_edge(
                dst,
                src,
                key=rev,
                pipe_id=pipe.id,
                capacity=0.0,
                flow=0.0,
                pair=pipe.id,
                reverse=True,
            )
        else:
            graph.add_edge(src, dst, key=pipe.id, pipe_id=pipe.id, cost=weight_of(pipe))

    LOGGER.debug(
        "Built %s graph: %d nodes, %d arcs",
        mode.name,
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    return graph
