"""Domain registry: the single owner of pipes, stations and connections.

The :class:`Registry` holds the current entity collections, hands out
sequential ids, and enforces the referential rules between entities. The
analysis engine reads it through the read-only accessors and never mutates it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from gasnet.errors import (
    IntegrityError,
    NoAvailablePipeError,
    UnknownConnectionError,
    UnknownPipeError,
    UnknownStationError,
    ValidationError,
)
from gasnet.logging import get_logger
from gasnet.model.entities import CompressorStation, Connection, Diameter, Pipe

LOGGER = get_logger(__name__)


def validate_name(name: str) -> None:
    """Check that ``name`` is a single-line string.

    Raises:
        ValidationError: If ``name`` is not a string or contains a line break.
    """
    if not isinstance(name, str):
        raise ValidationError(f"Name must be a string, got {name!r}.")
    if "\n" in name or "\r" in name:
        raise ValidationError(f"Name cannot contain a line break: {name!r}.")


def validate_pipe_fields(length: float, diameter: int) -> None:
    """Check pipe geometry against the domain rules.

    Raises:
        ValidationError: If ``length`` is not a positive finite number or
            ``diameter`` is not one of :class:`Diameter`.
    """
    if isinstance(length, bool) or not isinstance(length, (int, float)):
        raise ValidationError(f"Pipe length must be a number, got {length!r}.")
    if not math.isfinite(length) or length <= 0:
        raise ValidationError(f"Pipe length must be positive, got {length}.")
    if isinstance(diameter, bool) or diameter not in Diameter.values():
        allowed = ", ".join(str(d) for d in Diameter.values())
        raise ValidationError(
            f"Pipe diameter must be one of {allowed} mm, got {diameter!r}."
        )


def validate_station_fields(
    total_workshops: int, working_workshops: int, station_class: int
) -> None:
    """Check station workshop counts and class against the domain rules.

    Raises:
        ValidationError: On a non-positive total or class, or a working count
            outside ``[0, total_workshops]``.
    """
    for label, value in (
        ("total_workshops", total_workshops),
        ("working_workshops", working_workshops),
        ("station_class", station_class),
    ):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{label} must be an integer, got {value!r}.")
    if total_workshops <= 0:
        raise ValidationError(
            f"total_workshops must be positive, got {total_workshops}."
        )
    if not 0 <= working_workshops <= total_workshops:
        raise ValidationError(
            f"working_workshops must be between 0 and {total_workshops}, "
            f"got {working_workshops}."
        )
    if station_class <= 0:
        raise ValidationError(f"station_class must be positive, got {station_class}.")


@dataclass
class Registry:
    """Container for the pipes, stations and connections of one network.

    Ids are assigned sequentially starting at 1 and are never reused, even
    after deletion. Connections are kept in creation order; that order is the
    order in which graph builders visit them.

    Attributes:
        next_pipe_id (int): Id the next added pipe will receive.
        next_station_id (int): Id the next added station will receive.
    """

    next_pipe_id: int = field(default=1, init=False)
    next_station_id: int = field(default=1, init=False)
    _pipes: Dict[int, Pipe] = field(default_factory=dict, init=False, repr=False)
    _stations: Dict[int, CompressorStation] = field(
        default_factory=dict, init=False, repr=False
    )
    _connections: Dict[Tuple[int, int], Connection] = field(
        default_factory=dict, init=False, repr=False
    )

    @classmethod
    def from_entities(
        cls,
        pipes: Iterable[Pipe],
        stations: Iterable[CompressorStation],
        connections: Iterable[Connection],
        next_pipe_id: Optional[int] = None,
        next_station_id: Optional[int] = None,
    ) -> Registry:
        """Rebuild a registry from previously stored entities.

        When the id counters are omitted they continue after the largest id
        present. The result is checked with :meth:`validate`.

        Raises:
            IntegrityError: On duplicate ids or pairs, or any broken invariant.
            ValidationError: If an entity field is outside its domain.
        """
        registry = cls()
        for pipe in pipes:
            if pipe.id in registry._pipes:
                raise IntegrityError(f"Duplicate pipe id {pipe.id}.")
            registry._pipes[pipe.id] = pipe
        for station in stations:
            if station.id in registry._stations:
                raise IntegrityError(f"Duplicate station id {station.id}.")
            registry._stations[station.id] = station
        for conn in connections:
            if conn.endpoints in registry._connections:
                raise IntegrityError(
                    f"Duplicate connection from station {conn.from_station_id} "
                    f"to station {conn.to_station_id}."
                )
            registry._connections[conn.endpoints] = conn

        registry.next_pipe_id = (
            next_pipe_id if next_pipe_id is not None else max(registry._pipes, default=0) + 1
        )
        registry.next_station_id = (
            next_station_id
            if next_station_id is not None
            else max(registry._stations, default=0) + 1
        )
        registry.validate()
        return registry

    #
    # Read accessors
    #
    @property
    def pipes(self) -> Mapping[int, Pipe]:
        """Read-only mapping of pipe id to pipe."""
        return MappingProxyType(self._pipes)

    @property
    def stations(self) -> Mapping[int, CompressorStation]:
        """Read-only mapping of station id to station."""
        return MappingProxyType(self._stations)

    @property
    def connections(self) -> Tuple[Connection, ...]:
        """All connections in creation order."""
        return tuple(self._connections.values())

    def get_pipe(self, pipe_id: int) -> Pipe:
        """Return the pipe with ``pipe_id``.

        Raises:
            UnknownPipeError: If no such pipe exists.
        """
        try:
            return self._pipes[pipe_id]
        except KeyError:
            raise UnknownPipeError(pipe_id) from None

    def get_station(self, station_id: int) -> CompressorStation:
        """Return the station with ``station_id``.

        Raises:
            UnknownStationError: If no such station exists.
        """
        try:
            return self._stations[station_id]
        except KeyError:
            raise UnknownStationError(station_id) from None

    def has_station(self, station_id: int) -> bool:
        return station_id in self._stations

    def find_connection(
        self, from_station_id: int, to_station_id: int
    ) -> Optional[Connection]:
        """Return the connection for the ordered pair, or None."""
        return self._connections.get((from_station_id, to_station_id))

    def connections_of_station(self, station_id: int) -> Tuple[Connection, ...]:
        """Connections that start or end at ``station_id``."""
        return tuple(
            conn
            for conn in self._connections.values()
            if station_id in conn.endpoints
        )

    def connection_for_pipe(self, pipe_id: int) -> Optional[Connection]:
        """Return the connection backed by ``pipe_id``, or None."""
        for conn in self._connections.values():
            if conn.pipe_id == pipe_id:
                return conn
        return None

    def find_available_pipe(self, diameter: int) -> Optional[Pipe]:
        """Return the lowest-id pipe of ``diameter`` that is free and not under repair."""
        for pipe_id in sorted(self._pipes):
            pipe = self._pipes[pipe_id]
            if pipe.diameter == diameter and pipe.is_available:
                return pipe
        return None

    #
    # Pipe management
    #
    def add_pipe(
        self,
        name: str,
        length: float,
        diameter: int,
        under_repair: bool = False,
    ) -> Pipe:
        """Create a pipe with the next sequential id.

        Raises:
            ValidationError: If the name, length or diameter is invalid.
        """
        validate_name(name)
        validate_pipe_fields(length, diameter)
        pipe = Pipe(
            id=self.next_pipe_id,
            name=name,
            length=float(length),
            diameter=int(diameter),
            under_repair=bool(under_repair),
        )
        self._pipes[pipe.id] = pipe
        self.next_pipe_id += 1
        LOGGER.debug("Added pipe %d (%s, %s mm)", pipe.id, pipe.name, pipe.diameter)
        return pipe

    def edit_pipe(
        self,
        pipe_id: int,
        *,
        name: Optional[str] = None,
        length: Optional[float] = None,
        diameter: Optional[int] = None,
    ) -> Pipe:
        """Update the given fields of a pipe.

        The name can always be changed. Length and diameter are frozen while
        the pipe backs a connection.

        Raises:
            UnknownPipeError: If the pipe does not exist.
            IntegrityError: If geometry is edited on a pipe in use.
            ValidationError: If a new value is invalid.
        """
        pipe = self.get_pipe(pipe_id)
        if (length is not None or diameter is not None) and pipe.in_use:
            raise IntegrityError(
                f"Pipe {pipe_id} is used in the network; disconnect it before "
                "changing its length or diameter."
            )
        if name is not None:
            validate_name(name)
        new_length = pipe.length if length is None else length
        new_diameter = pipe.diameter if diameter is None else diameter
        validate_pipe_fields(new_length, new_diameter)
        updated = replace(
            pipe,
            name=pipe.name if name is None else name,
            length=float(new_length),
            diameter=int(new_diameter),
        )
        self._pipes[pipe_id] = updated
        LOGGER.debug("Edited pipe %d", pipe_id)
        return updated

    def set_pipe_repair(self, pipe_id: int, under_repair: bool) -> Pipe:
        """Put a pipe into or take it out of repair.

        Allowed while the pipe is in use: a repaired pipe stays connected but
        carries no flow and cannot be part of a path.
        """
        pipe = self.get_pipe(pipe_id)
        updated = replace(pipe, under_repair=bool(under_repair))
        self._pipes[pipe_id] = updated
        LOGGER.debug("Pipe %d under_repair=%s", pipe_id, updated.under_repair)
        return updated

    def delete_pipe(self, pipe_id: int) -> Pipe:
        """Remove a pipe that does not back any connection.

        Raises:
            UnknownPipeError: If the pipe does not exist.
            IntegrityError: If a connection references the pipe.
        """
        pipe = self.get_pipe(pipe_id)
        if self.connection_for_pipe(pipe_id) is not None:
            raise IntegrityError(
                f"Pipe {pipe_id} is used in the network; disconnect it first."
            )
        del self._pipes[pipe_id]
        LOGGER.debug("Deleted pipe %d", pipe_id)
        return pipe

    #
    # Station management
    #
    def add_station(
        self,
        name: str,
        total_workshops: int,
        working_workshops: int,
        station_class: int,
    ) -> CompressorStation:
        """Create a station with the next sequential id.

        Raises:
            ValidationError: If the name, a workshop count or the class is invalid.
        """
        validate_name(name)
        validate_station_fields(total_workshops, working_workshops, station_class)
        station = CompressorStation(
            id=self.next_station_id,
            name=name,
            total_workshops=total_workshops,
            working_workshops=working_workshops,
            station_class=station_class,
        )
        self._stations[station.id] = station
        self.next_station_id += 1
        LOGGER.debug("Added station %d (%s)", station.id, station.name)
        return station

    def edit_station(
        self,
        station_id: int,
        *,
        name: Optional[str] = None,
        total_workshops: Optional[int] = None,
        working_workshops: Optional[int] = None,
        station_class: Optional[int] = None,
    ) -> CompressorStation:
        """Update the given fields of a station.

        Raises:
            UnknownStationError: If the station does not exist.
            ValidationError: If the resulting field combination is invalid.
        """
        station = self.get_station(station_id)
        updated = replace(
            station,
            name=station.name if name is None else name,
            total_workshops=(
                station.total_workshops if total_workshops is None else total_workshops
            ),
            working_workshops=(
                station.working_workshops
                if working_workshops is None
                else working_workshops
            ),
            station_class=(
                station.station_class if station_class is None else station_class
            ),
        )
        validate_name(updated.name)
        validate_station_fields(
            updated.total_workshops, updated.working_workshops, updated.station_class
        )
        self._stations[station_id] = updated
        LOGGER.debug("Edited station %d", station_id)
        return updated

    def delete_station(self, station_id: int) -> CompressorStation:
        """Remove a station that is not an endpoint of any connection.

        Raises:
            UnknownStationError: If the station does not exist.
            IntegrityError: If a connection starts or ends at the station.
        """
        station = self.get_station(station_id)
        if self.connections_of_station(station_id):
            raise IntegrityError(
                f"Station {station_id} is used in the network; disconnect it first."
            )
        del self._stations[station_id]
        LOGGER.debug("Deleted station %d", station_id)
        return station

    #
    # Connection management
    #
    def connect(
        self,
        from_station_id: int,
        to_station_id: int,
        *,
        pipe_id: Optional[int] = None,
        diameter: Optional[int] = None,
    ) -> Connection:
        """Connect two stations with a directed edge backed by a pipe.

        Exactly one of ``pipe_id`` and ``diameter`` must be given. With
        ``diameter`` the lowest-id available pipe of that diameter is used.

        Raises:
            ValueError: If not exactly one of ``pipe_id``/``diameter`` is given.
            UnknownStationError: If either station does not exist.
            IntegrityError: On a self-loop, a duplicate pair, or a pipe in use.
            UnknownPipeError: If ``pipe_id`` does not exist.
            NoAvailablePipeError: If no free pipe of ``diameter`` exists.
        """
        if (pipe_id is None) == (diameter is None):
            raise ValueError("Specify exactly one of pipe_id or diameter.")

        self.get_station(from_station_id)
        self.get_station(to_station_id)
        if from_station_id == to_station_id:
            raise IntegrityError("A station cannot be connected to itself.")
        if (from_station_id, to_station_id) in self._connections:
            raise IntegrityError(
                f"Connection from station {from_station_id} to station "
                f"{to_station_id} already exists."
            )

        if pipe_id is not None:
            pipe = self.get_pipe(pipe_id)
            if pipe.in_use:
                raise IntegrityError(f"Pipe {pipe_id} is already in use.")
        else:
            found = self.find_available_pipe(diameter)  # type: ignore[arg-type]
            if found is None:
                raise NoAvailablePipeError(diameter)  # type: ignore[arg-type]
            pipe = found

        conn = Connection(pipe.id, from_station_id, to_station_id)
        self._pipes[pipe.id] = replace(pipe, in_use=True)
        self._connections[conn.endpoints] = conn
        LOGGER.debug(
            "Connected station %d -> %d via pipe %d",
            from_station_id,
            to_station_id,
            pipe.id,
        )
        return conn

    def disconnect(self, from_station_id: int, to_station_id: int) -> Connection:
        """Remove the connection for the ordered pair and release its pipe.

        Raises:
            UnknownConnectionError: If there is no such connection.
        """
        conn = self._connections.pop((from_station_id, to_station_id), None)
        if conn is None:
            raise UnknownConnectionError(from_station_id, to_station_id)
        pipe = self._pipes.get(conn.pipe_id)
        if pipe is not None:
            self._pipes[pipe.id] = replace(pipe, in_use=False)
        LOGGER.debug(
            "Disconnected station %d -> %d (pipe %d)",
            from_station_id,
            to_station_id,
            conn.pipe_id,
        )
        return conn

    #
    # Consistency
    #
    def validate(self) -> None:
        """Check every entity and cross-reference invariant.

        Raises:
            ValidationError: If an entity field is outside its domain.
            IntegrityError: On the first broken cross-reference.
        """
        for pipe_id, pipe in self._pipes.items():
            if pipe_id != pipe.id or pipe_id <= 0:
                raise IntegrityError(f"Invalid pipe id {pipe_id}.")
            if pipe_id >= self.next_pipe_id:
                raise IntegrityError(
                    f"Pipe id {pipe_id} is not below the next pipe id {self.next_pipe_id}."
                )
            validate_name(pipe.name)
            validate_pipe_fields(pipe.length, pipe.diameter)

        for station_id, station in self._stations.items():
            if station_id != station.id or station_id <= 0:
                raise IntegrityError(f"Invalid station id {station_id}.")
            if station_id >= self.next_station_id:
                raise IntegrityError(
                    f"Station id {station_id} is not below the next station id "
                    f"{self.next_station_id}."
                )
            validate_name(station.name)
            validate_station_fields(
                station.total_workshops,
                station.working_workshops,
                station.station_class,
            )

        backing: Dict[int, Connection] = {}
        for (src, dst), conn in self._connections.items():
            if (src, dst) != conn.endpoints:
                raise IntegrityError(f"Connection key mismatch for {conn}.")
            if src not in self._stations or dst not in self._stations:
                raise IntegrityError(
                    f"Connection {src} -> {dst} references a missing station."
                )
            if src == dst:
                raise IntegrityError(f"Connection {src} -> {dst} is a self-loop.")
            if conn.pipe_id not in self._pipes:
                raise IntegrityError(
                    f"Connection {src} -> {dst} references missing pipe {conn.pipe_id}."
                )
            if conn.pipe_id in backing:
                raise IntegrityError(
                    f"Pipe {conn.pipe_id} backs more than one connection."
                )
            backing[conn.pipe_id] = conn

        for pipe_id, pipe in self._pipes.items():
            if pipe.in_use != (pipe_id in backing):
                raise IntegrityError(
                    f"Pipe {pipe_id} has in_use={pipe.in_use} but is "
                    f"{'' if pipe_id in backing else 'not '}referenced by a connection."
                )
