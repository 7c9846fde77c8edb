"""Persistence of a registry as a line-oriented text file or as YAML.

Text format, one value per line:

    next pipe id
    next station id
    pipe count, then per pipe: id, name, length, diameter, under_repair (0/1), in_use (0/1)
    station count, then per station: id, name, total, working, class
    connection count, then per connection: pipe id, from station id, to station id

YAML format (``.yaml``/``.yml`` files):

    next_ids: {pipe: 3, station: 4}
    pipes: [{id: 1, name: P1, length: 10.0, diameter: 500, under_repair: false, in_use: true}]
    stations: [{id: 1, name: A, total_workshops: 5, working_workshops: 4, station_class: 1}]
    connections: [{pipe_id: 1, from: 1, to: 2}]

Loading always validates the rebuilt registry; any problem surfaces as
:class:`~gasnet.errors.StorageError`.
"""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

import yaml

from gasnet.config import ENGINE_CONFIG
from gasnet.errors import IntegrityError, StorageError, ValidationError
from gasnet.logging import get_logger
from gasnet.model.entities import CompressorStation, Connection, Pipe
from gasnet.model.registry import Registry

LOGGER = get_logger(__name__)

T = TypeVar("T")

YAML_SUFFIXES = (".yaml", ".yml")

PIPE_FLAGS = ("under_repair", "in_use")


#
# Text format
#
def dumps_registry(registry: Registry) -> str:
    """Serialize ``registry`` to the line-oriented text format.

    Names never contain line breaks; the registry rejects them.
    """
    lines: List[str] = [str(registry.next_pipe_id), str(registry.next_station_id)]

    pipes = list(registry.pipes.values())
    lines.append(str(len(pipes)))
    for pipe in pipes:
        lines.extend(
            [
                str(pipe.id),
                pipe.name,
                repr(float(pipe.length)),
                str(pipe.diameter),
                str(int(pipe.under_repair)),
                str(int(pipe.in_use)),
            ]
        )

    stations = list(registry.stations.values())
    lines.append(str(len(stations)))
    for station in stations:
        lines.extend(
            [
                str(station.id),
                station.name,
                str(station.total_workshops),
                str(station.working_workshops),
                str(station.station_class),
            ]
        )

    connections = registry.connections
    lines.append(str(len(connections)))
    for conn in connections:
        lines.extend(
            [str(conn.pipe_id), str(conn.from_station_id), str(conn.to_station_id)]
        )

    return "\n".join(lines) + "\n"


def _split_lines(text: str) -> List[str]:
    # Only "\n" (optionally preceded by "\r") ends a line; names may hold
    # other characters that str.splitlines() would treat as breaks.
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


class _LineReader:
    """Sequential reader that reports the line number on parse errors."""

    def __init__(self, text: str) -> None:
        self._lines: Iterator[str] = iter(_split_lines(text))
        self.lineno = 0

    def raw(self, what: str) -> str:
        try:
            line = next(self._lines)
        except StopIteration:
            raise StorageError(
                f"Unexpected end of data after line {self.lineno}; expected {what}."
            ) from None
        self.lineno += 1
        return line

    def parse(self, what: str, convert: Callable[[str], T]) -> T:
        line = self.raw(what)
        try:
            return convert(line.strip())
        except ValueError:
            raise StorageError(
                f"Line {self.lineno}: expected {what}, got {line!r}."
            ) from None

    def flag(self, what: str) -> bool:
        value = self.parse(what, int)
        if value not in (0, 1):
            raise StorageError(f"Line {self.lineno}: {what} must be 0 or 1, got {value}.")
        return bool(value)

    def count(self, what: str) -> int:
        value = self.parse(what, int)
        if value < 0:
            raise StorageError(f"Line {self.lineno}: {what} cannot be negative.")
        return value


def loads_registry(text: str) -> Registry:
    """Rebuild a registry from the text format.

    Raises:
        StorageError: On malformed or inconsistent data.
    """
    reader = _LineReader(text)
    next_pipe_id = reader.parse("next pipe id", int)
    next_station_id = reader.parse("next station id", int)

    pipes: List[Pipe] = []
    for _ in range(reader.count("pipe count")):
        pipes.append(
            Pipe(
                id=reader.parse("pipe id", int),
                name=reader.raw("pipe name"),
                length=reader.parse("pipe length", float),
                diameter=reader.parse("pipe diameter", int),
                under_repair=reader.flag("pipe repair flag"),
                in_use=reader.flag("pipe in-use flag"),
            )
        )

    stations: List[CompressorStation] = []
    for _ in range(reader.count("station count")):
        stations.append(
            CompressorStation(
                id=reader.parse("station id", int),
                name=reader.raw("station name"),
                total_workshops=reader.parse("total workshops", int),
                working_workshops=reader.parse("working workshops", int),
                station_class=reader.parse("station class", int),
            )
        )

    connections: List[Connection] = []
    for _ in range(reader.count("connection count")):
        connections.append(
            Connection(
                pipe_id=reader.parse("connection pipe id", int),
                from_station_id=reader.parse("connection source id", int),
                to_station_id=reader.parse("connection target id", int),
            )
        )

    return _rebuild(pipes, stations, connections, next_pipe_id, next_station_id)


def _rebuild(
    pipes: List[Pipe],
    stations: List[CompressorStation],
    connections: List[Connection],
    next_pipe_id: Optional[int],
    next_station_id: Optional[int],
) -> Registry:
    try:
        return Registry.from_entities(
            pipes, stations, connections, next_pipe_id, next_station_id
        )
    except (IntegrityError, ValidationError) as exc:
        raise StorageError(f"Inconsistent registry data: {exc}") from exc


#
# YAML format
#
def registry_to_dict(registry: Registry) -> Dict[str, Any]:
    """Return a plain-data representation suitable for YAML or JSON."""
    return {
        "next_ids": {
            "pipe": registry.next_pipe_id,
            "station": registry.next_station_id,
        },
        "pipes": [asdict(pipe) for pipe in registry.pipes.values()],
        "stations": [asdict(station) for station in registry.stations.values()],
        "connections": [
            {
                "pipe_id": conn.pipe_id,
                "from": conn.from_station_id,
                "to": conn.to_station_id,
            }
            for conn in registry.connections
        ],
    }


def _section(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    entries = data.get(key) or []
    if not isinstance(entries, list):
        raise StorageError(f"'{key}' must be a list")
    for entry in entries:
        if not isinstance(entry, dict):
            raise StorageError(f"Each entry of '{key}' must be a mapping")
    return entries


def _build_entity(factory: Callable[..., T], fields: Dict[str, Any], where: str) -> T:
    try:
        return factory(**fields)
    except TypeError as exc:
        raise StorageError(f"Invalid {where} entry {fields!r}: {exc}") from exc


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_fields(
    entry: Dict[str, Any],
    where: str,
    ints: Tuple[str, ...] = (),
    bools: Tuple[str, ...] = (),
) -> Dict[str, Any]:
    """Reject present fields whose YAML type cannot be stored in a registry."""
    for key in ints:
        if key in entry and not _is_int(entry[key]):
            raise StorageError(
                f"Invalid {where} entry {entry!r}: '{key}' must be an integer"
            )
    for key in bools:
        if key in entry and not isinstance(entry[key], bool):
            raise StorageError(
                f"Invalid {where} entry {entry!r}: '{key}' must be true or false"
            )
    return entry


def registry_from_dict(data: Dict[str, Any]) -> Registry:
    """Rebuild a registry from :func:`registry_to_dict` output.

    ``next_ids`` is optional; missing counters continue after the largest id.

    Raises:
        StorageError: On malformed or inconsistent data.
    """
    if not isinstance(data, dict):
        raise StorageError("Registry data must be a mapping at top-level.")

    allowed = {"next_ids", "pipes", "stations", "connections"}
    for key in data:
        if key not in allowed:
            raise StorageError(f"Unrecognized top-level key '{key}'")

    next_ids = data.get("next_ids") or {}
    if not isinstance(next_ids, dict):
        raise StorageError("'next_ids' must be a mapping")
    for key in ("pipe", "station"):
        if next_ids.get(key) is not None and not _is_int(next_ids[key]):
            raise StorageError(f"'next_ids.{key}' must be an integer")

    pipes = [
        _build_entity(
            Pipe,
            _check_fields(e, "pipe", ints=("id",), bools=PIPE_FLAGS),
            "pipe",
        )
        for e in _section(data, "pipes")
    ]
    stations = [
        _build_entity(
            CompressorStation,
            _check_fields(e, "station", ints=("id",)),
            "station",
        )
        for e in _section(data, "stations")
    ]
    connections: List[Connection] = []
    for entry in _section(data, "connections"):
        missing = {"pipe_id", "from", "to"} - set(entry)
        if missing:
            raise StorageError(
                f"Connection entry {entry!r} is missing {', '.join(sorted(missing))}"
            )
        _check_fields(entry, "connection", ints=("pipe_id", "from", "to"))
        connections.append(Connection(entry["pipe_id"], entry["from"], entry["to"]))

    return _rebuild(
        pipes, stations, connections, next_ids.get("pipe"), next_ids.get("station")
    )


def dump_registry_yaml(registry: Registry) -> str:
    return yaml.safe_dump(registry_to_dict(registry), sort_keys=False)


def load_registry_yaml(yaml_str: str) -> Registry:
    """Parse a YAML string produced by :func:`dump_registry_yaml`.

    Raises:
        StorageError: On YAML syntax errors or invalid registry data.
    """
    try:
        data = yaml.safe_load(yaml_str)
    except yaml.YAMLError as exc:
        raise StorageError(f"Invalid YAML: {exc}") from exc
    if data is None:
        data = {}
    return registry_from_dict(data)


#
# Files
#
def _is_yaml(path: Path) -> bool:
    return path.suffix.lower() in YAML_SUFFIXES


def save_registry(
    registry: Registry, path: Union[str, Path], encoding: Optional[str] = None
) -> Path:
    """Write ``registry`` to ``path``; YAML for ``.yaml``/``.yml``, text otherwise.

    Raises:
        StorageError: If the registry cannot be encoded or the file written.
    """
    path = Path(path)
    text = dump_registry_yaml(registry) if _is_yaml(path) else dumps_registry(registry)
    try:
        path.write_text(text, encoding=encoding or ENGINE_CONFIG.data_encoding)
    except (OSError, UnicodeError) as exc:
        raise StorageError(f"Cannot write {path}: {exc}") from exc
    LOGGER.debug("Saved registry to %s", path)
    return path


def load_registry(path: Union[str, Path], encoding: Optional[str] = None) -> Registry:
    """Read a registry written by :func:`save_registry`.

    Raises:
        StorageError: If the file cannot be read or decoded, or holds malformed
            or inconsistent data.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding=encoding or ENGINE_CONFIG.data_encoding)
    except (OSError, UnicodeError) as exc:
        raise StorageError(f"Cannot read {path}: {exc}") from exc
    registry = load_registry_yaml(text) if _is_yaml(path) else loads_registry(text)
    LOGGER.debug(
        "Loaded registry from %s: %d pipes, %d stations, %d connections",
        path,
        len(registry.pipes),
        len(registry.stations),
        len(registry.connections),
    )
    return registry
