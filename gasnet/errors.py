"""Exception types raised by the registry, the analysis engine and storage.

Every error derives from :class:`GasNetError` so callers at the I/O boundary
(the CLI) can report any library failure with a single ``except`` clause.
Lookup failures also derive from :class:`LookupError` and input/consistency
failures from :class:`ValueError`, matching how the standard library
classifies them.
"""

from __future__ import annotations

from typing import AbstractSet, Optional


class GasNetError(Exception):
    """Base class for all gasnet errors."""


class UnknownEntityError(GasNetError, LookupError):
    """An id does not refer to an existing registry entity.

    Attributes:
        entity_id: The id that could not be resolved.
    """

    kind = "Entity"

    def __init__(self, entity_id: int, message: Optional[str] = None) -> None:
        self.entity_id = entity_id
        super().__init__(message or f"{self.kind} with id {entity_id} does not exist.")

    def __str__(self) -> str:
        # LookupError would otherwise repr() the message
        return str(self.args[0])


class UnknownStationError(UnknownEntityError):
    """Referenced station id is not in the registry."""

    kind = "Station"


class UnknownPipeError(UnknownEntityError):
    """Referenced pipe id is not in the registry."""

    kind = "Pipe"


class UnknownConnectionError(GasNetError, LookupError):
    """No connection exists for the given ordered station pair."""

    def __init__(self, from_station_id: int, to_station_id: int) -> None:
        self.from_station_id = from_station_id
        self.to_station_id = to_station_id
        super().__init__(
            f"No connection from station {from_station_id} to station {to_station_id}."
        )

    def __str__(self) -> str:
        return str(self.args[0])


class InvalidRequestError(GasNetError, ValueError):
    """Degenerate query, e.g. identical source and sink."""


class ValidationError(GasNetError, ValueError):
    """A field value is outside its allowed domain."""


class IntegrityError(GasNetError, ValueError):
    """A mutation or loaded state would break a registry invariant."""


class NoAvailablePipeError(IntegrityError):
    """No free pipe of the requested diameter exists."""

    def __init__(self, diameter: int) -> None:
        self.diameter = diameter
        super().__init__(f"No available pipe with diameter {diameter} mm.")


class CycleDetectedError(GasNetError):
    """The connection graph contains a cycle; no topological order exists.

    Attributes:
        remaining: Nodes that could not be ordered (each lies on, or
            downstream of, a cycle).
    """

    def __init__(self, remaining: AbstractSet[int]) -> None:
        self.remaining = frozenset(remaining)
        listed = ", ".join(str(n) for n in sorted(self.remaining))
        super().__init__(
            f"The network contains a cycle; unordered stations: {listed}."
        )


class NoPathFoundError(GasNetError):
    """No finite-weight route exists between two stations."""

    def __init__(self, start: int, end: int) -> None:
        self.start = start
        self.end = end
        super().__init__(f"No path from station {start} to station {end}.")


class StorageError(GasNetError, ValueError):
    """A stored registry file is malformed."""
