"""Types and data structures for algorithm results.

Defines immutable result containers returned by the flow and path solvers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Hashable, Tuple

from gasnet.algorithms.base import Cost

# Arc identifier tuple: (source_node, destination_node, edge_key)
Edge = Tuple[Hashable, Hashable, Hashable]


@dataclass(frozen=True)
class FlowSummary:
    """Summary of a max-flow computation.

    Only forward arcs (one per connection) are reported; residual reverse arcs
    are an artifact of the algorithm.

    Attributes:
        total_flow: Maximum flow value achieved.
        edge_flow: Flow per forward arc, indexed by ``(src, dst, pipe_id)``.
        residual_cap: Remaining capacity per forward arc.
        reachable: Nodes reachable from the source in the final residual graph.
        min_cut: Forward arcs leaving ``reachable``; their capacities sum to
            ``total_flow``.
    """

    total_flow: float
    edge_flow: Dict[Edge, float]
    residual_cap: Dict[Edge, float]
    reachable: FrozenSet[Hashable]
    min_cut: Tuple[Edge, ...]


@dataclass(frozen=True)
class PathResult:
    """A shortest path between two stations.

    Attributes:
        cost: Total weight (kilometers) of the path.
        stations: Station ids from start to end.
        pipes: Ids of the pipes traversed, one per hop.
    """

    cost: Cost
    stations: Tuple[Hashable, ...]
    pipes: Tuple[Hashable, ...]

    def __len__(self) -> int:
        """Return the number of hops."""
        return len(self.pipes)
