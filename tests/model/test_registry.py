"""Tests for Registry: id assignment, edits, connections and validation."""

from __future__ import annotations

import math

import pytest

from gasnet.errors import (
    IntegrityError,
    NoAvailablePipeError,
    UnknownConnectionError,
    UnknownPipeError,
    UnknownStationError,
    ValidationError,
)
from gasnet.model.entities import CompressorStation, Connection, Pipe
from gasnet.model.registry import (
    Registry,
    validate_name,
    validate_pipe_fields,
    validate_station_fields,
)


class TestFieldValidation:
    @pytest.mark.parametrize("length", [0, -1.0, math.inf, math.nan, "10", True])
    def test_bad_length(self, length):
        with pytest.raises(ValidationError):
            validate_pipe_fields(length, 500)

    @pytest.mark.parametrize("diameter", [0, 600, 1200, True])
    def test_bad_diameter(self, diameter):
        with pytest.raises(ValidationError, match="diameter"):
            validate_pipe_fields(10.0, diameter)

    def test_integer_length_accepted(self):
        validate_pipe_fields(3, 1400)

    @pytest.mark.parametrize(
        "total,working,station_class",
        [(0, 0, 1), (3, 4, 1), (3, -1, 1), (3, 2, 0), (3.0, 2, 1), (3, False, 1)],
    )
    def test_bad_station_fields(self, total, working, station_class):
        with pytest.raises(ValidationError):
            validate_station_fields(total, working, station_class)

    def test_working_may_equal_total_or_zero(self):
        validate_station_fields(3, 3, 1)
        validate_station_fields(3, 0, 1)

    @pytest.mark.parametrize("name", ["a\nb", "a\rb", "trailing\n", 5, None])
    def test_bad_name(self, name):
        with pytest.raises(ValidationError, match="Name"):
            validate_name(name)

    @pytest.mark.parametrize(
        "name", ["", "  spaced  ", "tab\there", "form\x0cfeed", "line\u2028sep"]
    )
    def test_single_line_names_accepted(self, name):
        validate_name(name)

    def test_multi_line_names_rejected_on_add(self, empty_registry):
        with pytest.raises(ValidationError, match="line break"):
            empty_registry.add_pipe("a\nb", 1.0, 500)
        with pytest.raises(ValidationError, match="line break"):
            empty_registry.add_station("a\rb", 1, 1, 1)
        assert not empty_registry.pipes and not empty_registry.stations
        assert (empty_registry.next_pipe_id, empty_registry.next_station_id) == (1, 1)

    def test_multi_line_names_rejected_on_edit(self, line_registry):
        with pytest.raises(ValidationError, match="line break"):
            line_registry.edit_pipe(1, name="a\nb")
        with pytest.raises(ValidationError, match="line break"):
            line_registry.edit_station(2, name="a\r\nb")
        assert line_registry.get_pipe(1).name == "A-B"
        assert line_registry.get_station(2).name == "B"


class TestIds:
    def test_sequential_from_one(self, empty_registry):
        p1 = empty_registry.add_pipe("a", 1.0, 500)
        p2 = empty_registry.add_pipe("b", 1.0, 700)
        s1 = empty_registry.add_station("A", 1, 1, 1)
        assert (p1.id, p2.id, s1.id) == (1, 2, 1)
        assert empty_registry.next_pipe_id == 3
        assert empty_registry.next_station_id == 2

    def test_ids_not_reused_after_delete(self, empty_registry):
        empty_registry.add_pipe("a", 1.0, 500)
        empty_registry.delete_pipe(1)
        assert empty_registry.add_pipe("b", 1.0, 500).id == 2

        empty_registry.add_station("A", 1, 1, 1)
        empty_registry.delete_station(1)
        assert empty_registry.add_station("B", 1, 1, 1).id == 2

    def test_failed_add_does_not_consume_id(self, empty_registry):
        with pytest.raises(ValidationError):
            empty_registry.add_pipe("bad", -5.0, 500)
        assert empty_registry.add_pipe("ok", 5.0, 500).id == 1


class TestReadAccess:
    def test_mappings_are_read_only(self, line_registry):
        with pytest.raises(TypeError):
            line_registry.pipes[99] = Pipe(99, "x", 1.0, 500)  # type: ignore[index]
        with pytest.raises(TypeError):
            del line_registry.stations[1]  # type: ignore[attr-defined]

    def test_connections_in_creation_order(self, line_registry):
        assert [c.endpoints for c in line_registry.connections] == [(1, 2), (2, 3)]

    def test_lookups(self, line_registry):
        assert line_registry.get_pipe(2).name == "B-C"
        assert line_registry.get_station(3).name == "C"
        assert line_registry.has_station(1)
        assert not line_registry.has_station(9)
        assert line_registry.find_connection(1, 2) == Connection(1, 1, 2)
        assert line_registry.find_connection(2, 1) is None
        assert line_registry.connection_for_pipe(2) == Connection(2, 2, 3)
        assert [c.pipe_id for c in line_registry.connections_of_station(2)] == [1, 2]

    def test_unknown_ids(self, line_registry):
        with pytest.raises(UnknownPipeError) as exc_info:
            line_registry.get_pipe(42)
        assert exc_info.value.entity_id == 42
        assert str(exc_info.value) == "Pipe with id 42 does not exist."
        with pytest.raises(UnknownStationError):
            line_registry.get_station(42)

    def test_unknown_errors_are_lookup_errors(self, line_registry):
        with pytest.raises(LookupError):
            line_registry.get_station(0)


class TestPipeEdits:
    def test_edit_free_pipe(self, empty_registry):
        empty_registry.add_pipe("old", 1.0, 500)
        pipe = empty_registry.edit_pipe(1, name="new", length=2, diameter=1000)
        assert pipe == Pipe(1, "new", 2.0, 1000)
        assert empty_registry.get_pipe(1) is pipe

    def test_edit_invalid_value_leaves_pipe_unchanged(self, empty_registry):
        original = empty_registry.add_pipe("p", 1.0, 500)
        with pytest.raises(ValidationError):
            empty_registry.edit_pipe(1, diameter=650)
        assert empty_registry.get_pipe(1) == original

    def test_geometry_frozen_while_in_use(self, line_registry):
        with pytest.raises(IntegrityError, match="disconnect"):
            line_registry.edit_pipe(1, length=20.0)
        with pytest.raises(IntegrityError):
            line_registry.edit_pipe(1, diameter=1400)
        assert line_registry.edit_pipe(1, name="renamed").name == "renamed"

    def test_repair_toggle_keeps_connection(self, line_registry):
        pipe = line_registry.set_pipe_repair(1, True)
        assert pipe.under_repair and pipe.in_use
        assert line_registry.find_connection(1, 2) is not None
        assert not line_registry.set_pipe_repair(1, False).under_repair

    def test_delete_pipe_in_use(self, line_registry):
        with pytest.raises(IntegrityError):
            line_registry.delete_pipe(1)
        line_registry.disconnect(1, 2)
        assert line_registry.delete_pipe(1).id == 1
        assert 1 not in line_registry.pipes

    def test_delete_unknown_pipe(self, empty_registry):
        with pytest.raises(UnknownPipeError):
            empty_registry.delete_pipe(1)


class TestStationEdits:
    def test_edit_station_partial(self, line_registry):
        station = line_registry.edit_station(2, working_workshops=6)
        assert station == CompressorStation(2, "B", 6, 6, 2)

    def test_edit_station_checks_combination(self, line_registry):
        with pytest.raises(ValidationError):
            line_registry.edit_station(2, total_workshops=3)
        assert line_registry.get_station(2).total_workshops == 6

    def test_delete_connected_station(self, line_registry):
        for station_id in (1, 2, 3):
            with pytest.raises(IntegrityError):
                line_registry.delete_station(station_id)

    def test_delete_isolated_station(self, line_registry):
        isolated = line_registry.add_station("D", 1, 0, 1)
        line_registry.delete_station(isolated.id)
        assert not line_registry.has_station(isolated.id)


class TestConnect:
    def test_connect_marks_pipe_in_use(self, line_registry):
        assert line_registry.get_pipe(1).in_use
        assert line_registry.get_pipe(2).in_use

    def test_requires_exactly_one_selector(self, line_registry):
        with pytest.raises(ValueError):
            line_registry.connect(1, 3)
        with pytest.raises(ValueError):
            line_registry.connect(1, 3, pipe_id=1, diameter=500)

    def test_unknown_station_checked_first(self, line_registry):
        with pytest.raises(UnknownStationError):
            line_registry.connect(9, 9, pipe_id=1)

    def test_self_loop(self, line_registry):
        pipe = line_registry.add_pipe("loop", 1.0, 500)
        with pytest.raises(IntegrityError, match="itself"):
            line_registry.connect(1, 1, pipe_id=pipe.id)
        assert not line_registry.get_pipe(pipe.id).in_use

    def test_duplicate_pair(self, line_registry):
        pipe = line_registry.add_pipe("dup", 1.0, 500)
        with pytest.raises(IntegrityError, match="already exists"):
            line_registry.connect(1, 2, pipe_id=pipe.id)

    def test_reverse_pair_is_distinct(self, line_registry):
        pipe = line_registry.add_pipe("back", 1.0, 500)
        conn = line_registry.connect(2, 1, pipe_id=pipe.id)
        assert conn.endpoints == (2, 1)
        assert len(line_registry.connections) == 3

    def test_pipe_in_use(self, line_registry):
        with pytest.raises(IntegrityError, match="in use"):
            line_registry.connect(1, 3, pipe_id=2)

    def test_unknown_pipe(self, line_registry):
        with pytest.raises(UnknownPipeError):
            line_registry.connect(1, 3, pipe_id=99)

    def test_by_diameter_uses_lowest_available_id(self, line_registry):
        line_registry.add_pipe("repaired", 1.0, 1000, under_repair=True)  # id 3
        line_registry.add_pipe("second", 1.0, 1000)  # id 4
        line_registry.add_pipe("third", 1.0, 1000)  # id 5
        conn = line_registry.connect(1, 3, diameter=1000)
        assert conn.pipe_id == 4

    def test_by_diameter_none_available(self, line_registry):
        with pytest.raises(NoAvailablePipeError) as exc_info:
            line_registry.connect(1, 3, diameter=500)
        assert exc_info.value.diameter == 500
        assert isinstance(exc_info.value, IntegrityError)

    def test_explicit_pipe_may_be_under_repair(self, line_registry):
        pipe = line_registry.add_pipe("r", 1.0, 500, under_repair=True)
        conn = line_registry.connect(1, 3, pipe_id=pipe.id)
        assert line_registry.get_pipe(conn.pipe_id).in_use

    def test_disconnect_releases_pipe(self, line_registry):
        conn = line_registry.disconnect(1, 2)
        assert conn == Connection(1, 1, 2)
        assert not line_registry.get_pipe(1).in_use
        assert line_registry.find_connection(1, 2) is None
        assert line_registry.connect(1, 2, diameter=500).pipe_id == 1

    def test_disconnect_unknown(self, line_registry):
        with pytest.raises(UnknownConnectionError) as exc_info:
            line_registry.disconnect(2, 1)
        assert (exc_info.value.from_station_id, exc_info.value.to_station_id) == (2, 1)


class TestFromEntities:
    def test_rebuild_and_counters(self, line_registry):
        rebuilt = Registry.from_entities(
            line_registry.pipes.values(),
            line_registry.stations.values(),
            line_registry.connections,
        )
        assert dict(rebuilt.pipes) == dict(line_registry.pipes)
        assert rebuilt.connections == line_registry.connections
        assert rebuilt.next_pipe_id == 3
        assert rebuilt.next_station_id == 4

    def test_explicit_counters_kept(self):
        reg = Registry.from_entities([Pipe(2, "p", 1.0, 500)], [], [], 10, 5)
        assert (reg.next_pipe_id, reg.next_station_id) == (10, 5)

    def test_counter_not_above_ids(self):
        with pytest.raises(IntegrityError):
            Registry.from_entities([Pipe(4, "p", 1.0, 500)], [], [], next_pipe_id=4)

    def test_duplicate_ids(self):
        with pytest.raises(IntegrityError, match="Duplicate pipe"):
            Registry.from_entities(
                [Pipe(1, "a", 1.0, 500), Pipe(1, "b", 1.0, 500)], [], []
            )

    def test_in_use_must_match_connections(self):
        stations = [CompressorStation(1, "A", 1, 1, 1), CompressorStation(2, "B", 1, 1, 1)]
        with pytest.raises(IntegrityError, match="in_use"):
            Registry.from_entities([Pipe(1, "p", 1.0, 500)], stations, [Connection(1, 1, 2)])
        with pytest.raises(IntegrityError, match="in_use"):
            Registry.from_entities([Pipe(1, "p", 1.0, 500, in_use=True)], stations, [])

    def test_dangling_references(self):
        stations = [CompressorStation(1, "A", 1, 1, 1)]
        with pytest.raises(IntegrityError, match="missing station"):
            Registry.from_entities(
                [Pipe(1, "p", 1.0, 500, in_use=True)], stations, [Connection(1, 1, 2)]
            )

    def test_one_connection_per_pipe(self):
        stations = [CompressorStation(i, str(i), 1, 1, 1) for i in (1, 2, 3)]
        with pytest.raises(IntegrityError, match="more than one"):
            Registry.from_entities(
                [Pipe(1, "p", 1.0, 500, in_use=True)],
                stations,
                [Connection(1, 1, 2), Connection(1, 2, 3)],
            )

    def test_invalid_fields(self):
        with pytest.raises(ValidationError):
            Registry.from_entities([Pipe(1, "p", 1.0, 650)], [], [])

    def test_multi_line_names(self):
        with pytest.raises(ValidationError, match="line break"):
            Registry.from_entities([Pipe(1, "two\nlines", 1.0, 500)], [], [])
        with pytest.raises(ValidationError, match="line break"):
            Registry.from_entities([], [CompressorStation(1, "two\rlines", 1, 1, 1)], [])

    def test_fixture_registries_validate(self, line_registry, cycle_registry):
        line_registry.validate()
        cycle_registry.validate()
