"""Topological ordering of stations (Kahn's algorithm)."""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List

from gasnet.errors import CycleDetectedError
from gasnet.graph.strict_multidigraph import NodeID, StrictMultiDiGraph
from gasnet.logging import get_logger

LOGGER = get_logger(__name__)


def topological_order(graph: StrictMultiDiGraph) -> List[NodeID]:
    """Order all nodes so every arc points from an earlier node to a later one.

    Zero in-degree nodes are queued in graph node order (ascending station id
    for graphs from ``build_graph``) and released first in, first out; a node
    becomes ready the moment its last incoming arc is consumed. Parallel arcs
    each count towards in-degree.

    Args:
        graph: Directed graph; only its structure is read.

    Returns:
        List of every node exactly once.

    Raises:
        CycleDetectedError: If the graph has a cycle. No partial order is
            returned; the error carries the nodes that could not be ordered.
    """
    in_degree: Dict[NodeID, int] = {node: 0 for node in graph.nodes}
    for _, dst in graph.edges():
        in_degree[dst] += 1

    ready: Deque[NodeID] = deque(node for node, deg in in_degree.items() if deg == 0)
    order: List[NodeID] = []

    while ready:
        node = ready.popleft()
        order.append(node)
        for _, neighbor, _ in graph.out_edges(node, keys=True):
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                ready.append(neighbor)

    if len(order) != len(in_degree):
        remaining = set(in_degree) - set(order)
        LOGGER.debug("Topological sort stopped with %d unordered nodes", len(remaining))
        raise CycleDetectedError(remaining)  # type: ignore[arg-type]

    return order
