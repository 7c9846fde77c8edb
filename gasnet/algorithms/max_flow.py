"""Maximum-flow computation via BFS augmenting paths (Edmonds-Karp).

Works on FLOW-mode graphs from :func:`gasnet.graph.build.build_graph`: every
forward arc carries ``capacity`` and ``flow`` and names its zero-capacity
reverse partner in ``pair``. Pushing flow over an arc subtracts the same
amount from its partner, which is what lets later augmenting paths cancel
earlier decisions.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Literal, Optional, Set, Tuple, Union, overload

from gasnet.algorithms.base import MIN_CAP
from gasnet.algorithms.types import Edge, FlowSummary
from gasnet.graph.strict_multidigraph import (
    AttrDict,
    EdgeID,
    NodeID,
    StrictMultiDiGraph,
)
from gasnet.logging import get_logger

LOGGER = get_logger(__name__)

# Predecessor record for BFS: node -> (previous node, arc key used)
Pred = Dict[NodeID, Optional[Tuple[NodeID, EdgeID]]]


def _residual(attr: AttrDict) -> float:
    return attr["capacity"] - attr["flow"]


def _bfs_residual(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    dst_node: Optional[NodeID],
    tolerance: float,
) -> Pred:
    """Breadth-first search over arcs with residual capacity above ``tolerance``.

    Neighbors are explored in adjacency insertion order. Stops as soon as
    ``dst_node`` is labelled; with ``dst_node=None`` labels everything
    reachable.
    """
    outgoing_adjacencies = graph._adj  # type: ignore[attr-defined]
    pred: Pred = {src_node: None}
    queue = deque([src_node])
    while queue:
        node_id = queue.popleft()
        for neighbor_id, edges_map in outgoing_adjacencies[node_id].items():
            if neighbor_id in pred:
                continue
            for e_id, e_attr in edges_map.items():
                if _residual(e_attr) > tolerance:
                    pred[neighbor_id] = (node_id, e_id)
                    if neighbor_id == dst_node:
                        return pred
                    queue.append(neighbor_id)
                    break
    return pred


def _path_arcs(pred: Pred, src_node: NodeID, dst_node: NodeID) -> List[EdgeID]:
    arcs: List[EdgeID] = []
    node = dst_node
    while node != src_node:
        step = pred[node]
        assert step is not None
        node, e_id = step
        arcs.append(e_id)
    arcs.reverse()
    return arcs


def _build_summary(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    total_flow: float,
    tolerance: float,
) -> FlowSummary:
    reachable: Set[NodeID] = set(_bfs_residual(graph, src_node, None, tolerance))
    edge_flow: Dict[Edge, float] = {}
    residual_cap: Dict[Edge, float] = {}
    min_cut: List[Edge] = []
    for u, v, e_id, attr in graph.get_edges().values():
        if attr.get("reverse"):
            continue
        edge = (u, v, e_id)
        edge_flow[edge] = attr["flow"]
        residual_cap[edge] = _residual(attr)
        if u in reachable and v not in reachable:
            min_cut.append(edge)
    return FlowSummary(
        total_flow=total_flow,
        edge_flow=edge_flow,
        residual_cap=residual_cap,
        reachable=frozenset(reachable),
        min_cut=tuple(min_cut),
    )


@overload
def calc_max_flow(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    dst_node: NodeID,
    *,
    return_summary: Literal[False] = False,
    copy_graph: bool = True,
    tolerance: float = MIN_CAP,
) -> float: ...


@overload
def calc_max_flow(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    dst_node: NodeID,
    *,
    return_summary: Literal[True],
    copy_graph: bool = True,
    tolerance: float = MIN_CAP,
) -> Tuple[float, FlowSummary]: ...


def calc_max_flow(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    dst_node: NodeID,
    *,
    return_summary: bool = False,
    copy_graph: bool = True,
    tolerance: float = MIN_CAP,
) -> Union[float, Tuple[float, FlowSummary]]:
    """Compute the maximum flow from ``src_node`` to ``dst_node``.

    Repeatedly finds the shortest (fewest arcs) augmenting path by BFS over
    arcs whose residual capacity exceeds ``tolerance``, pushes the path's
    bottleneck along it, and stops when the sink is no longer reachable.
    Capacities and flows are real-valued.

    Args:
        graph: FLOW-mode graph (arcs with ``capacity``, ``flow`` and ``pair``).
        src_node: Source node.
        dst_node: Sink node.
        return_summary: If True, also return a :class:`FlowSummary`.
        copy_graph: If True, work on a copy so ``graph`` keeps zero flows.
        tolerance: Residual capacity at or below this value counts as exhausted.

    Returns:
        Total flow (0.0 when the sink is unreachable), or
        ``(total_flow, FlowSummary)`` when ``return_summary`` is set.

    Raises:
        KeyError: If either node is not in the graph.

    Examples:
        >>> g = StrictMultiDiGraph()
        >>> for n in (1, 2):
        ...     g.add_node(n)
        >>> g.add_edge(1, 2, key=7, capacity=100.0, flow=0.0, pair="7_rev")
        7
        >>> g.add_edge(2, 1, key="7_rev", capacity=0.0, flow=0.0, pair=7)
        '7_rev'
        >>> calc_max_flow(g, 1, 2)
        100.0
    """
    if src_node not in graph:
        raise KeyError(f"Source node '{src_node}' is not in the graph.")
    if dst_node not in graph:
        raise KeyError(f"Destination node '{dst_node}' is not in the graph.")

    flow_graph = graph.copy() if copy_graph else graph
    total_flow = 0.0

    # Degenerate case (s == t): conservation forces the only feasible flow to 0
    if src_node != dst_node:
        while True:
            pred = _bfs_residual(flow_graph, src_node, dst_node, tolerance)
            if dst_node not in pred:
                break

            arcs = _path_arcs(pred, src_node, dst_node)
            bottleneck = min(_residual(flow_graph.get_edge_attr(e)) for e in arcs)
            for e_id in arcs:
                attr = flow_graph.get_edge_attr(e_id)
                attr["flow"] += bottleneck
                flow_graph.get_edge_attr(attr["pair"])["flow"] -= bottleneck

            total_flow += bottleneck
            LOGGER.debug(
                "Augmented %s over %d arcs (total %s)", bottleneck, len(arcs), total_flow
            )

    if return_summary:
        return total_flow, _build_summary(flow_graph, src_node, total_flow, tolerance)
    return total_flow
