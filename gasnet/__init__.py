"""gasnet: gas-transport network modeling and analysis.

gasnet models pipes and compressor stations joined into a directed network
and answers capacity and connectivity queries on it.

Primary API:
    Registry - Owner of pipes, stations and connections
    analyze() - Create an analysis context for network queries
    AnalysisContext - topological_order(), max_flow(), shortest_path()

Example:
    from gasnet import Registry, analyze

    reg = Registry()
    a = reg.add_station("A", 4, 4, 1)
    b = reg.add_station("B", 4, 3, 1)
    pipe = reg.add_pipe("A-B", 10.0, 500)
    reg.connect(a.id, b.id, pipe_id=pipe.id)

    analyze(reg).max_flow(a.id, b.id)       # 100.0
    analyze(reg).shortest_path(a.id, b.id)  # PathResult(cost=10.0, ...)
"""

from __future__ import annotations

from gasnet import cli, logging
from gasnet._version import __version__
from gasnet.algorithms.base import UNREACHABLE, GraphMode
from gasnet.algorithms.policy import capacity_of, weight_of
from gasnet.algorithms.types import FlowSummary, PathResult
from gasnet.analysis import AnalysisContext, analyze
from gasnet.errors import (
    CycleDetectedError,
    GasNetError,
    IntegrityError,
    InvalidRequestError,
    NoAvailablePipeError,
    NoPathFoundError,
    StorageError,
    UnknownConnectionError,
    UnknownPipeError,
    UnknownStationError,
    ValidationError,
)
from gasnet.graph.build import build_graph
from gasnet.model.entities import CompressorStation, Connection, Diameter, Pipe
from gasnet.model.registry import Registry

__all__ = [
    # Version
    "__version__",
    # Model
    "Registry",
    "Pipe",
    "CompressorStation",
    "Connection",
    "Diameter",
    # Analysis (primary API)
    "analyze",
    "AnalysisContext",
    "build_graph",
    "GraphMode",
    "capacity_of",
    "weight_of",
    "UNREACHABLE",
    # Results
    "FlowSummary",
    "PathResult",
    # Errors
    "GasNetError",
    "UnknownStationError",
    "UnknownPipeError",
    "UnknownConnectionError",
    "InvalidRequestError",
    "ValidationError",
    "IntegrityError",
    "NoAvailablePipeError",
    "CycleDetectedError",
    "NoPathFoundError",
    "StorageError",
    # Utilities
    "cli",
    "logging",
]
