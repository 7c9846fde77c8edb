"""Command-line interface for gasnet.

Each invocation loads the registry file given by ``--data`` (an empty
network when the file does not exist yet), runs one command, and writes the
file back if the command changed anything. Changes and flow calculations are
appended to the action journal.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from gasnet.algorithms.policy import capacity_of
from gasnet.analysis import analyze
from gasnet.config import ENGINE_CONFIG
from gasnet.errors import GasNetError, NoAvailablePipeError
from gasnet.io import load_registry, save_registry
from gasnet.journal import ActionJournal
from gasnet.logging import get_logger, level_for_flags, set_global_log_level
from gasnet.model.entities import Diameter
from gasnet.model.registry import Registry

logger = get_logger(__name__)


def _format_table(
    headers: List[str],
    rows: List[List[Any]],
    min_width: int = 4,
) -> str:
    """Format data as a simple ASCII table.

    Args:
        headers: Column headers
        rows: Data rows
        min_width: Minimum column width

    Returns:
        Formatted table string
    """
    if not rows:
        return ""

    all_data = [headers] + [[str(item) for item in row] for row in rows]
    col_widths = []
    for col_idx in range(len(headers)):
        max_width = max(len(str(row[col_idx])) for row in all_data)
        col_widths.append(max(max_width, min_width))

    def format_row(row_data: List[str]) -> str:
        return "   " + " | ".join(
            f"{str(item):<{col_widths[i]}}" for i, item in enumerate(row_data)
        )

    lines = [format_row(all_data[0])]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    for row in all_data[1:]:
        lines.append(format_row(row))
    return "\n".join(lines)


def _format_number(value: float) -> str:
    """Return a number with up to three decimals, trailing zeros trimmed.

    Examples:
        100.0 -> "100"; 12.5 -> "12.5"; 1234.5678 -> "1,234.568".
    """
    s = f"{value:,.3f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def _station_label(registry: Registry, station_id: int) -> str:
    station = registry.stations.get(station_id)
    name = station.name if station is not None else "N/A"
    return f"{station_id} ({name})"


#
# Commands. Each returns True when it changed the registry.
#
def _cmd_add_pipe(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    pipe = registry.add_pipe(args.name, args.length, args.diameter, args.repair)
    journal.record("Added pipe ID: %d", pipe.id)
    print(f"Pipe added. ID: {pipe.id}")
    return True


def _cmd_add_station(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    station = registry.add_station(
        args.name, args.total, args.working, args.station_class
    )
    journal.record("Added station ID: %d", station.id)
    print(f"Station added. ID: {station.id}")
    return True


def _cmd_edit_pipe(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    pipe = registry.edit_pipe(
        args.id, name=args.name, length=args.length, diameter=args.diameter
    )
    journal.record("Edited pipe ID: %d", pipe.id)
    print(f"Pipe {pipe.id} updated.")
    return True


def _cmd_repair_pipe(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    pipe = registry.set_pipe_repair(args.id, not args.done)
    state = "under repair" if pipe.under_repair else "back in service"
    journal.record("Pipe ID: %d %s", pipe.id, state)
    print(f"Pipe {pipe.id} is {state}.")
    return True


def _cmd_edit_station(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    station = registry.edit_station(
        args.id,
        name=args.name,
        total_workshops=args.total,
        working_workshops=args.working,
        station_class=args.station_class,
    )
    journal.record("Edited station ID: %d", station.id)
    print(f"Station {station.id} updated.")
    return True


def _cmd_delete_pipe(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    registry.delete_pipe(args.id)
    journal.record("Deleted pipe ID: %d", args.id)
    print(f"Pipe {args.id} deleted.")
    return True


def _cmd_delete_station(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    registry.delete_station(args.id)
    journal.record("Deleted station ID: %d", args.id)
    print(f"Station {args.id} deleted.")
    return True


def _cmd_connect(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    if args.pipe is not None:
        conn = registry.connect(args.source, args.target, pipe_id=args.pipe)
    else:
        try:
            conn = registry.connect(args.source, args.target, diameter=args.diameter)
        except NoAvailablePipeError:
            if args.create is None:
                raise
            name = args.pipe_name or f"pipe {args.source}-{args.target}"
            pipe = registry.add_pipe(name, args.create, args.diameter)
            conn = registry.connect(args.source, args.target, pipe_id=pipe.id)
            journal.record("Added pipe ID: %d", pipe.id)
            print(f"No free {args.diameter} mm pipe; created pipe {pipe.id}.")

    journal.record(
        "Connected station %d -> station %d (pipe ID: %d)",
        conn.from_station_id,
        conn.to_station_id,
        conn.pipe_id,
    )
    print(
        f"Stations connected: {conn.from_station_id} -> {conn.to_station_id} "
        f"(pipe {conn.pipe_id})."
    )
    return True


def _cmd_disconnect(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    conn = registry.disconnect(args.source, args.target)
    journal.record(
        "Disconnected station %d -> station %d", conn.from_station_id, conn.to_station_id
    )
    print(f"Connection {conn.from_station_id} -> {conn.to_station_id} removed.")
    return True


def _cmd_show(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    print("\nPipes")
    pipe_rows = [
        [
            p.id,
            p.name,
            _format_number(p.length),
            p.diameter,
            _yes_no(p.under_repair),
            _yes_no(p.in_use),
            _format_number(capacity_of(p)),
        ]
        for p in registry.pipes.values()
    ]
    print(
        _format_table(
            ["ID", "Name", "Length km", "Diameter mm", "Repair", "In use", "Capacity"],
            pipe_rows,
        )
        or "   No pipes."
    )

    print("\nStations")
    station_rows = [
        [
            s.id,
            s.name,
            f"{s.working_workshops}/{s.total_workshops}",
            f"{_format_number(s.idle_percent)}%",
            s.station_class,
        ]
        for s in registry.stations.values()
    ]
    print(
        _format_table(["ID", "Name", "Workshops", "Idle", "Class"], station_rows)
        or "   No stations."
    )
    return False


def _cmd_network(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    print("\nConnections")
    rows = [
        [
            _station_label(registry, c.from_station_id),
            _station_label(registry, c.to_station_id),
            c.pipe_id,
        ]
        for c in registry.connections
    ]
    print(_format_table(["From", "To", "Pipe"], rows) or "   The network is empty.")
    return False


def _cmd_topo(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    order = analyze(registry).topological_order()
    print("\nTopological order")
    if not order:
        print("   No stations.")
    for position, station_id in enumerate(order, start=1):
        print(f"   {position}. {_station_label(registry, station_id)}")
    return False


def _cmd_max_flow(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    summary = analyze(registry).max_flow_summary(args.source, args.sink)
    journal.record(
        "Max flow: station %d -> station %d = %s",
        args.source,
        args.sink,
        _format_number(summary.total_flow),
    )
    print(f"\nMax flow from station {args.source} to station {args.sink}")
    print(f"   {_format_number(summary.total_flow)} units")
    if args.detail:
        rows = [
            [
                f"{u} -> {v}",
                key,
                _format_number(flow),
                _format_number(summary.residual_cap[(u, v, key)]),
            ]
            for (u, v, key), flow in summary.edge_flow.items()
        ]
        print(_format_table(["Arc", "Pipe", "Flow", "Residual"], rows))
        cut = ", ".join(f"pipe {key} ({u} -> {v})" for u, v, key in summary.min_cut)
        print(f"   Min cut: {cut or 'none'}")
    return False


def _cmd_shortest_path(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    result = analyze(registry).shortest_path(args.start, args.end)
    print(f"\nShortest path from station {args.start} to station {args.end}")
    print(f"   Total length: {_format_number(result.cost)} km")
    route = " -> ".join(_station_label(registry, s) for s in result.stations)
    print(f"   Route: {route}")
    return False


def _cmd_export(
    registry: Registry, args: argparse.Namespace, journal: ActionJournal
) -> bool:
    path = save_registry(registry, args.output)
    journal.record("Saved network to file: %s", path)
    print(f"Network saved to {path}")
    return False


COMMANDS: Dict[str, Callable[[Registry, argparse.Namespace, ActionJournal], bool]] = {
    "add-pipe": _cmd_add_pipe,
    "add-station": _cmd_add_station,
    "edit-pipe": _cmd_edit_pipe,
    "repair-pipe": _cmd_repair_pipe,
    "edit-station": _cmd_edit_station,
    "delete-pipe": _cmd_delete_pipe,
    "delete-station": _cmd_delete_station,
    "connect": _cmd_connect,
    "disconnect": _cmd_disconnect,
    "show": _cmd_show,
    "network": _cmd_network,
    "topo": _cmd_topo,
    "max-flow": _cmd_max_flow,
    "shortest-path": _cmd_shortest_path,
    "export": _cmd_export,
}


def _load_or_create(path: Path) -> Registry:
    if not path.exists():
        logger.info("Data file %s not found; starting an empty network", path)
        return Registry()
    return load_registry(path)


def _run_command(args: argparse.Namespace) -> None:
    data_path: Path = args.data
    journal = ActionJournal(args.journal, enabled=not args.no_journal)
    try:
        registry = _load_or_create(data_path)
        # Held journal records are written only after the save succeeds
        journal.hold()
        changed = COMMANDS[args.command](registry, args, journal)
        if changed:
            save_registry(registry, data_path)
        journal.commit()
    finally:
        journal.close()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gasnet",
        description="Edit and analyze a gas-transport network.",
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )
    parser.add_argument(
        "--data",
        "-d",
        type=Path,
        default=Path(ENGINE_CONFIG.data_path),
        help="Network file (.yaml/.yml for YAML, anything else for text). "
        f"Default: {ENGINE_CONFIG.data_path}",
    )
    parser.add_argument(
        "--journal",
        type=Path,
        default=Path(ENGINE_CONFIG.journal_path),
        help=f"Action journal file. Default: {ENGINE_CONFIG.journal_path}",
    )
    parser.add_argument(
        "--no-journal",
        action="store_true",
        help="Do not append to the action journal",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="COMMAND",
    )

    diameters = list(Diameter.values())

    p = subparsers.add_parser("add-pipe", help="Add a pipe")
    p.add_argument("--name", required=True)
    p.add_argument("--length", type=float, required=True, help="Length in km")
    p.add_argument("--diameter", type=int, required=True, choices=diameters)
    p.add_argument("--repair", action="store_true", help="Mark as under repair")

    p = subparsers.add_parser("add-station", help="Add a compressor station")
    p.add_argument("--name", required=True)
    p.add_argument("--total", type=int, required=True, help="Total workshops")
    p.add_argument("--working", type=int, required=True, help="Working workshops")
    p.add_argument("--class", dest="station_class", type=int, required=True)

    p = subparsers.add_parser("edit-pipe", help="Edit a pipe")
    p.add_argument("id", type=int)
    p.add_argument("--name")
    p.add_argument("--length", type=float)
    p.add_argument("--diameter", type=int, choices=diameters)

    p = subparsers.add_parser("repair-pipe", help="Put a pipe under repair")
    p.add_argument("id", type=int)
    p.add_argument(
        "--done", action="store_true", help="Take the pipe out of repair instead"
    )

    p = subparsers.add_parser("edit-station", help="Edit a compressor station")
    p.add_argument("id", type=int)
    p.add_argument("--name")
    p.add_argument("--total", type=int)
    p.add_argument("--working", type=int)
    p.add_argument("--class", dest="station_class", type=int)

    p = subparsers.add_parser("delete-pipe", help="Delete an unused pipe")
    p.add_argument("id", type=int)

    p = subparsers.add_parser("delete-station", help="Delete an unconnected station")
    p.add_argument("id", type=int)

    p = subparsers.add_parser("connect", help="Connect two stations with a pipe")
    p.add_argument("source", type=int, help="Upstream station id")
    p.add_argument("target", type=int, help="Downstream station id")
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument("--pipe", type=int, help="Use this pipe id")
    group.add_argument(
        "--diameter", type=int, choices=diameters, help="Use a free pipe of this size"
    )
    p.add_argument(
        "--create",
        type=float,
        metavar="LENGTH",
        help="With --diameter: create a pipe of this length if none is free",
    )
    p.add_argument("--pipe-name", help="Name for a pipe created by --create")

    p = subparsers.add_parser("disconnect", help="Remove a connection")
    p.add_argument("source", type=int)
    p.add_argument("target", type=int)

    subparsers.add_parser("show", help="List pipes and stations")
    subparsers.add_parser("network", help="List connections")
    subparsers.add_parser("topo", help="Topological order of stations")

    p = subparsers.add_parser("max-flow", help="Maximum flow between two stations")
    p.add_argument("source", type=int)
    p.add_argument("sink", type=int)
    p.add_argument(
        "--detail", action="store_true", help="Show per-pipe flow and the min cut"
    )

    p = subparsers.add_parser("shortest-path", help="Shortest path between two stations")
    p.add_argument("start", type=int)
    p.add_argument("end", type=int)

    p = subparsers.add_parser("export", help="Save the network to another file")
    p.add_argument("output", type=Path, help="Target file (.yaml/.yml for YAML)")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``gasnet`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = _build_parser()

    effective_args = sys.argv[1:] if argv is None else argv

    # If no arguments are provided, show help and exit cleanly
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.command == "connect" and args.diameter is None:
        if args.create is not None or args.pipe_name is not None:
            parser.error("connect: --create and --pipe-name require --diameter")

    set_global_log_level(level_for_flags(args.verbose, args.quiet))
    logger.debug("Debug logging enabled")

    try:
        _run_command(args)
    except GasNetError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
