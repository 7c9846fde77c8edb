"""Shortest-path-first (SPF) computation with Dijkstra's algorithm.

Works on PATH-mode graphs whose arcs carry a non-negative ``cost``. Arcs of
pipes under repair cost :data:`~gasnet.algorithms.base.UNREACHABLE`; since a
distance only changes on strict improvement and every distance starts at
UNREACHABLE, such an arc can never place its head node on a path.

Notes:
    The heap holds ``(distance, node)`` tuples, so among equal distances the
    smaller node id is settled first. Improved distances are pushed again and
    stale heap entries are skipped when popped.
"""

from __future__ import annotations

from heapq import heappop, heappush
from typing import Dict, List, Optional, Tuple

from gasnet.algorithms.base import UNREACHABLE, Cost
from gasnet.algorithms.types import PathResult
from gasnet.errors import NoPathFoundError
from gasnet.graph.strict_multidigraph import EdgeID, NodeID, StrictMultiDiGraph
from gasnet.logging import get_logger

LOGGER = get_logger(__name__)

# Predecessor record: node -> (previous node, arc key used), None for the source
Pred = Dict[NodeID, Optional[Tuple[NodeID, EdgeID]]]


def spf(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    dst_node: Optional[NodeID] = None,
    cost_attr: str = "cost",
) -> Tuple[Dict[NodeID, Cost], Pred]:
    """Run Dijkstra from ``src_node``.

    Among parallel arcs between the same pair of nodes the cheapest one is
    used (the first one on ties).

    Args:
        graph: Directed graph with a numeric ``cost_attr`` on each arc.
        src_node: Source node.
        dst_node: Optional destination. When given, the search stops as soon
            as the destination is settled, and the destination is not expanded.
        cost_attr: Name of the arc weight attribute.

    Returns:
        A tuple of (costs, pred):
          - costs: Distance from ``src_node`` for every node of the graph;
            UNREACHABLE for nodes without a finite path.
          - pred: For each node with a finite distance, the ``(previous node,
            arc key)`` it was last improved through; None for the source.

    Raises:
        KeyError: If ``src_node`` is not in the graph.
    """
    outgoing_adjacencies = graph._adj  # type: ignore[attr-defined]
    if src_node not in outgoing_adjacencies:
        raise KeyError(f"Source node '{src_node}' is not in the graph.")

    costs: Dict[NodeID, Cost] = {node: UNREACHABLE for node in graph.nodes}
    costs[src_node] = 0.0
    pred: Pred = {src_node: None}
    settled = set()
    min_pq: List[Tuple[Cost, NodeID]] = [(0.0, src_node)]

    while min_pq:
        current_cost, node_id = heappop(min_pq)
        if node_id in settled or current_cost > costs[node_id]:
            continue
        settled.add(node_id)

        if node_id == dst_node:
            break

        for neighbor_id, edges_map in outgoing_adjacencies[node_id].items():
            min_edge_cost: Optional[Cost] = None
            selected_edge: Optional[EdgeID] = None
            for e_id, e_attr in edges_map.items():
                edge_cost = e_attr[cost_attr]
                if min_edge_cost is None or edge_cost < min_edge_cost:
                    min_edge_cost = edge_cost
                    selected_edge = e_id

            if min_edge_cost is None:
                continue

            new_cost = current_cost + min_edge_cost
            if new_cost < costs[neighbor_id]:
                costs[neighbor_id] = new_cost
                pred[neighbor_id] = (node_id, selected_edge)
                heappush(min_pq, (new_cost, neighbor_id))

    return costs, pred


def shortest_path(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    dst_node: NodeID,
    cost_attr: str = "cost",
) -> PathResult:
    """Return the minimum-weight path from ``src_node`` to ``dst_node``.

    The path is rebuilt by walking predecessors back from ``dst_node`` and
    reversing. Its cost is the distance computed by :func:`spf`, which equals
    the sum of the traversed arc weights taken in path order.

    Raises:
        KeyError: If ``src_node`` is not in the graph.
        NoPathFoundError: If ``dst_node`` has no finite-weight route.
    """
    costs, pred = spf(graph, src_node, dst_node, cost_attr=cost_attr)
    if costs.get(dst_node, UNREACHABLE) == UNREACHABLE:
        LOGGER.debug("No finite path from %s to %s", src_node, dst_node)
        raise NoPathFoundError(src_node, dst_node)  # type: ignore[arg-type]

    stations: List[NodeID] = [dst_node]
    pipes: List[EdgeID] = []
    node = dst_node
    while (step := pred[node]) is not None:
        node, e_id = step
        stations.append(node)
        pipes.append(e_id)
    stations.reverse()
    pipes.reverse()

    return PathResult(cost=costs[dst_node], stations=tuple(stations), pipes=tuple(pipes))
