"""AnalysisContext: the query surface of the network graph engine.

Every query validates its station ids against the registry, derives the
graph it needs with :func:`~gasnet.graph.build.build_graph`, runs the
solver, and discards the graph. Nothing is cached between queries, so results
always reflect the registry at call time. The registry is never modified.

Usage:
    from gasnet import Registry, analyze

    reg = Registry()
    ...
    ctx = analyze(reg)
    order = ctx.topological_order()
    flow = ctx.max_flow(1, 3)
    path = ctx.shortest_path(1, 3)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from gasnet.algorithms.base import GraphMode
from gasnet.algorithms.max_flow import calc_max_flow
from gasnet.algorithms.spf import shortest_path
from gasnet.algorithms.topo import topological_order
from gasnet.algorithms.types import FlowSummary, PathResult
from gasnet.config import ENGINE_CONFIG
from gasnet.errors import InvalidRequestError
from gasnet.graph.build import build_graph
from gasnet.logging import get_logger
from gasnet.model.registry import Registry

LOGGER = get_logger(__name__)


@dataclass
class AnalysisContext:
    """Runs topology, flow and path queries against a registry.

    Attributes:
        registry: The registry queried (read-only use).
        tolerance: Residual capacity threshold for max flow.
    """

    registry: Registry
    tolerance: float = field(default_factory=lambda: ENGINE_CONFIG.flow_tolerance)

    def _check_pair(self, first_id: int, second_id: int) -> None:
        """Validate a (source, sink) style request.

        Raises:
            UnknownStationError: If either id is absent (first id checked first).
            InvalidRequestError: If both ids are equal.
        """
        self.registry.get_station(first_id)
        self.registry.get_station(second_id)
        if first_id == second_id:
            raise InvalidRequestError(
                f"Start and end must be different stations (got {first_id} twice)."
            )

    def topological_order(self) -> List[int]:
        """Order all stations so that every connection points forward.

        Stations without incoming connections are released in ascending id
        order; an empty registry yields an empty list.

        Raises:
            CycleDetectedError: If the connections form a cycle.
        """
        graph = build_graph(self.registry, GraphMode.TOPOLOGY)
        order = topological_order(graph)
        LOGGER.info("Topological order over %d stations computed", len(order))
        return order  # type: ignore[return-value]

    def max_flow(self, source_id: int, sink_id: int) -> float:
        """Return the maximum flow from ``source_id`` to ``sink_id``.

        Disconnected stations yield 0.0.

        Raises:
            UnknownStationError: If either station does not exist.
            InvalidRequestError: If ``source_id == sink_id``.
        """
        return self.max_flow_summary(source_id, sink_id).total_flow

    def max_flow_summary(self, source_id: int, sink_id: int) -> FlowSummary:
        """Return max flow together with per-pipe flows and the minimum cut.

        Raises:
            UnknownStationError: If either station does not exist.
            InvalidRequestError: If ``source_id == sink_id``.
        """
        self._check_pair(source_id, sink_id)
        graph = build_graph(self.registry, GraphMode.FLOW)
        total, summary = calc_max_flow(
            graph,
            source_id,
            sink_id,
            return_summary=True,
            copy_graph=False,
            tolerance=self.tolerance,
        )
        LOGGER.info("Max flow %d -> %d = %s", source_id, sink_id, total)
        return summary

    def shortest_path(self, start_id: int, end_id: int) -> PathResult:
        """Return the shortest path by pipe length from ``start_id`` to ``end_id``.

        Pipes under repair are never used.

        Raises:
            UnknownStationError: If either station does not exist.
            InvalidRequestError: If ``start_id == end_id``.
            NoPathFoundError: If no finite-length route exists.
        """
        self._check_pair(start_id, end_id)
        graph = build_graph(self.registry, GraphMode.PATH)
        result = shortest_path(graph, start_id, end_id)
        LOGGER.info(
            "Shortest path %d -> %d: %s km over %d pipes",
            start_id,
            end_id,
            result.cost,
            len(result),
        )
        return result


def analyze(registry: Registry) -> AnalysisContext:
    """Create an analysis context bound to ``registry``."""
    return AnalysisContext(registry)
