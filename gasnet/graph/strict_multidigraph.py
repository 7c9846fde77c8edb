"""Strict multi-directed graph with explicit edge keys and validation.

`StrictMultiDiGraph` extends `networkx.MultiDiGraph` to enforce explicit node
management and unique edge identifiers. Graph builders key edges by the id of
the pipe that backs them, so every arc of a derived graph can be traced back to
a registry entity.
"""

from __future__ import annotations

from pickle import dumps, loads
from typing import Any, Dict, Hashable, List, Tuple

import networkx as nx

NodeID = Hashable
EdgeID = Hashable
AttrDict = Dict[str, Any]
EdgeTuple = Tuple[NodeID, NodeID, EdgeID, AttrDict]


class StrictMultiDiGraph(nx.MultiDiGraph):
    """A multi-directed graph with strict rules and unique edge keys.

    This class enforces:
      - No automatic creation of missing nodes when adding an edge.
      - No duplicate nodes (raises ValueError on duplicates).
      - Every edge has a caller-supplied key, unique across the whole graph.
      - Looking up a non-existent edge key raises ValueError.

    Inherits from:
        networkx.MultiDiGraph
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize a StrictMultiDiGraph.

        Attributes:
            _edges: Map edge key to ``(source_node, target_node, edge_key, attribute_dict)``.
        """
        super().__init__(*args, **kwargs)
        self._edges: Dict[EdgeID, EdgeTuple] = {}

    def copy(self, as_view: bool = False, pickle: bool = True) -> StrictMultiDiGraph:
        """Create a copy of this graph.

        By default, use pickle-based deep copying. If ``pickle=False``,
        call the parent class's copy, which supports views.
        """
        if not pickle:
            return super().copy(as_view=as_view)  # type: ignore[return-value]
        return loads(dumps(self))

    #
    # Node management
    #
    def add_node(self, node_for_adding: NodeID, **attr: Any) -> None:
        """Add a single node, disallowing duplicates.

        Raises:
            ValueError: If the node already exists in the graph.
        """
        if node_for_adding in self:
            raise ValueError(f"Node '{node_for_adding}' already exists in this graph.")
        super().add_node(node_for_adding, **attr)

    #
    # Edge management
    #
    def add_edge(  # pyright: ignore[reportIncompatibleMethodOverride]
        self,
        u_for_edge: NodeID,
        v_for_edge: NodeID,
        key: EdgeID,
        **attr: Any,
    ) -> EdgeID:
        """Add a directed edge from u_for_edge to v_for_edge under ``key``.

        Nodes are not created automatically.

        Args:
            u_for_edge: The source node. Must exist in the graph.
            v_for_edge: The target node. Must exist in the graph.
            key: The edge key. Must not already be in use anywhere in the graph.
            **attr: Arbitrary edge attributes.

        Returns:
            EdgeID: The key of the new edge.

        Raises:
            ValueError: If either node does not exist, or if the key is already in use.
        """
        if u_for_edge not in self:
            raise ValueError(f"Source node '{u_for_edge}' does not exist.")
        if v_for_edge not in self:
            raise ValueError(f"Target node '{v_for_edge}' does not exist.")
        if key is None:
            raise ValueError("Edge key is required.")
        if key in self._edges:
            raise ValueError(f"Edge with id '{key}' already exists.")

        super().add_edge(u_for_edge, v_for_edge, key=key, **attr)
        self._edges[key] = (
            u_for_edge,
            v_for_edge,
            key,
            self[u_for_edge][v_for_edge][key],  # pyright: ignore[reportArgumentType]
        )
        return key

    #
    # Convenience methods
    #
    def get_edges(self) -> Dict[EdgeID, EdgeTuple]:
        """Return all edges by key as ``(source, target, key, attributes)``."""
        return self._edges

    def get_edge(self, key: EdgeID) -> EdgeTuple:
        """Return the ``(source, target, key, attributes)`` tuple of an edge.

        Raises:
            ValueError: If no edge with this key is found.
        """
        if key not in self._edges:
            raise ValueError(f"Edge with id='{key}' not found.")
        return self._edges[key]

    def get_edge_attr(self, key: EdgeID) -> AttrDict:
        """Return the live attribute dictionary of an edge.

        Raises:
            ValueError: If no edge with this key is found.
        """
        return self.get_edge(key)[3]

    def has_edge_by_id(self, key: EdgeID) -> bool:
        return key in self._edges

    def edges_between(self, u: NodeID, v: NodeID) -> List[EdgeID]:
        """List all edge keys from node u to node v (empty if none)."""
        if u not in self.succ or v not in self.succ[u]:
            return []
        return list(self.succ[u][v].keys())
