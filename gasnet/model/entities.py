"""Domain entities of the gas-transport network: Pipe, CompressorStation, Connection.

Entities are immutable values. The :class:`~gasnet.model.registry.Registry`
owns them and replaces an entity with an updated copy on every edit, so a
reference obtained from a read accessor can never change registry state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple


class Diameter(IntEnum):
    """Standard pipe diameters in millimeters. No other value is valid."""

    MM_500 = 500
    MM_700 = 700
    MM_1000 = 1000
    MM_1400 = 1400

    @classmethod
    def values(cls) -> Tuple[int, ...]:
        """Return the allowed diameters in ascending order."""
        return tuple(int(d) for d in cls)


@dataclass(frozen=True)
class Pipe:
    """A pipe segment that can back at most one connection.

    Attributes:
        id (int): Unique positive id, assigned sequentially and never reused.
        name (str): Free-text name.
        length (float): Length in kilometers.
        diameter (int): Diameter in millimeters, one of :class:`Diameter`.
        under_repair (bool): Whether the pipe is out of service for repair.
        in_use (bool): True exactly while the pipe backs a connection.
    """

    id: int
    name: str
    length: float
    diameter: int
    under_repair: bool = False
    in_use: bool = False

    @property
    def is_available(self) -> bool:
        """Whether the pipe can be used for a new connection."""
        return not self.under_repair and not self.in_use


@dataclass(frozen=True)
class CompressorStation:
    """A compressor station: a node of the transport graph.

    Attributes:
        id (int): Unique positive id, assigned sequentially and never reused.
        name (str): Free-text name.
        total_workshops (int): Number of workshops at the station.
        working_workshops (int): Workshops currently operating.
        station_class (int): Classification; not used by any algorithm.
    """

    id: int
    name: str
    total_workshops: int
    working_workshops: int
    station_class: int

    @property
    def idle_percent(self) -> float:
        """Share of workshops that are not working, in percent."""
        if self.total_workshops <= 0:
            return 0.0
        idle = self.total_workshops - self.working_workshops
        return idle * 100.0 / self.total_workshops


@dataclass(frozen=True)
class Connection:
    """A directed edge from one station to another, backed by one pipe.

    Attributes:
        pipe_id (int): Id of the backing pipe.
        from_station_id (int): Id of the upstream station.
        to_station_id (int): Id of the downstream station.
    """

    pipe_id: int
    from_station_id: int
    to_station_id: int

    @property
    def endpoints(self) -> Tuple[int, int]:
        """Return the ordered ``(from, to)`` station pair."""
        return (self.from_station_id, self.to_station_id)
