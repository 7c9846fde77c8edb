from __future__ import annotations

import math
from enum import IntEnum
from typing import Union

#: Represents numeric cost in the network (pipe length in kilometers).
Cost = Union[int, float]

#: Weight of an arc that must never be part of a path (pipe under repair).
#: Adding any finite distance to it stays infinite, so it can never improve
#: a tentative distance.
UNREACHABLE: float = math.inf

#: Default tolerance below which residual capacity is treated as exhausted.
MIN_CAP = 1e-10


class GraphMode(IntEnum):
    """Intent of a derived graph, selecting which arcs and attributes it carries."""

    #: One unweighted arc per connection (topological ordering).
    TOPOLOGY = 1
    #: Forward arc with capacity plus paired zero-capacity reverse arc (max flow).
    FLOW = 2
    #: One arc per connection weighted by pipe length (shortest path).
    PATH = 3
