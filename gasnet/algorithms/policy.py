"""Capacity and weight policy for pipes.

Pure functions that turn a pipe's diameter and repair state into the numbers
the graph algorithms work with. Both flow and shortest-path graph builders go
through here so the two views of a pipe never disagree.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from gasnet.algorithms.base import UNREACHABLE
from gasnet.model.entities import Diameter, Pipe

#: Flow capacity by diameter, in transport units.
CAPACITY_BY_DIAMETER: Mapping[Diameter, float] = MappingProxyType(
    {
        Diameter.MM_500: 100.0,
        Diameter.MM_700: 300.0,
        Diameter.MM_1000: 700.0,
        Diameter.MM_1400: 1200.0,
    }
)

#: Capacity of a pipe whose diameter is outside :class:`Diameter`.
UNKNOWN_DIAMETER_CAPACITY = 0.0


def capacity_of(pipe: Pipe) -> float:
    """Return the flow capacity of ``pipe``.

    A pipe under repair carries nothing. Otherwise the capacity comes from
    :data:`CAPACITY_BY_DIAMETER`; a diameter outside the table yields
    :data:`UNKNOWN_DIAMETER_CAPACITY`.
    """
    if pipe.under_repair:
        return 0.0
    # IntEnum members hash like their int values, so plain ints look up fine
    return CAPACITY_BY_DIAMETER.get(pipe.diameter, UNKNOWN_DIAMETER_CAPACITY)  # type: ignore[call-overload]


def weight_of(pipe: Pipe) -> float:
    """Return the shortest-path weight of ``pipe``: its length, or UNREACHABLE under repair."""
    if pipe.under_repair:
        return UNREACHABLE
    return float(pipe.length)
