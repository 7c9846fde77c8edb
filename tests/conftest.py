"""Shared registry fixtures.

Fixtures build small networks through the public Registry API so that the
ids they produce are the ones a user would get.
"""

from __future__ import annotations

import pytest

from gasnet.model.registry import Registry


@pytest.fixture
def empty_registry() -> Registry:
    return Registry()


@pytest.fixture
def line_registry() -> Registry:
    """A -> B over a 500 mm, 10 km pipe and B -> C over a 700 mm, 5 km pipe.

    Station ids 1, 2, 3 and pipe ids 1, 2.
    """
    reg = Registry()
    a = reg.add_station("A", 4, 4, 1)
    b = reg.add_station("B", 6, 5, 2)
    c = reg.add_station("C", 3, 1, 1)
    p1 = reg.add_pipe("A-B", 10.0, 500)
    p2 = reg.add_pipe("B-C", 5.0, 700)
    reg.connect(a.id, b.id, pipe_id=p1.id)
    reg.connect(b.id, c.id, pipe_id=p2.id)
    return reg


@pytest.fixture
def cycle_registry(line_registry: Registry) -> Registry:
    """The line network closed into a cycle by C -> A (pipe 3)."""
    pipe = line_registry.add_pipe("C-A", 7.0, 1000)
    line_registry.connect(3, 1, pipe_id=pipe.id)
    return line_registry


@pytest.fixture
def diamond_registry() -> Registry:
    """Four stations with two routes from 1 to 4 and a cross link 2 -> 3.

    Capacities: 1->2 700, 1->3 100, 2->3 300, 2->4 100, 3->4 1200.
    Lengths: 1->2 4, 1->3 9, 2->3 2, 2->4 8, 3->4 1.
    Max flow 1 -> 4 is 500 with min cut {1->3, 2->3, 2->4}; the shortest
    path 1 -> 4 is 1 -> 2 -> 3 -> 4 with length 7.
    """
    reg = Registry()
    for name in ("S1", "S2", "S3", "S4"):
        reg.add_station(name, 2, 2, 1)
    for (src, dst), (length, diameter) in {
        (1, 2): (4.0, 1000),
        (1, 3): (9.0, 500),
        (2, 3): (2.0, 700),
        (2, 4): (8.0, 500),
        (3, 4): (1.0, 1400),
    }.items():
        pipe = reg.add_pipe(f"{src}-{dst}", length, diameter)
        reg.connect(src, dst, pipe_id=pipe.id)
    return reg
