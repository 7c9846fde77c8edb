"""Domain model: entities and the registry that owns them."""

from gasnet.model.entities import CompressorStation, Connection, Diameter, Pipe
from gasnet.model.registry import Registry

__all__ = ["CompressorStation", "Connection", "Diameter", "Pipe", "Registry"]
