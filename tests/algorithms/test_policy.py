"""Tests for diameter capacities and pipe weights."""

from __future__ import annotations

import math

import pytest

from gasnet.algorithms.base import UNREACHABLE
from gasnet.algorithms.policy import CAPACITY_BY_DIAMETER, capacity_of, weight_of
from gasnet.model.entities import Diameter, Pipe


@pytest.mark.parametrize(
    "diameter,expected",
    [(500, 100.0), (700, 300.0), (1000, 700.0), (1400, 1200.0)],
)
def test_capacity_by_diameter(diameter, expected):
    assert capacity_of(Pipe(1, "p", 12.0, diameter)) == expected


def test_capacity_table_covers_every_diameter():
    assert set(CAPACITY_BY_DIAMETER) == set(Diameter)
    with pytest.raises(TypeError):
        CAPACITY_BY_DIAMETER[Diameter.MM_500] = 1.0  # type: ignore[index]


def test_capacity_zero_under_repair():
    assert capacity_of(Pipe(1, "p", 12.0, 1400, under_repair=True)) == 0.0


def test_capacity_unknown_diameter_is_zero():
    assert capacity_of(Pipe(1, "p", 12.0, 900)) == 0.0


def test_capacity_ignores_length_and_in_use():
    short = Pipe(1, "p", 0.5, 700)
    long_used = Pipe(2, "q", 500.0, 700, in_use=True)
    assert capacity_of(short) == capacity_of(long_used)


def test_weight_is_length():
    assert weight_of(Pipe(1, "p", 12.5, 500)) == 12.5
    assert isinstance(weight_of(Pipe(1, "p", 3, 500)), float)


def test_weight_unreachable_under_repair():
    assert weight_of(Pipe(1, "p", 12.5, 500, under_repair=True)) == UNREACHABLE
    assert math.isinf(UNREACHABLE)
