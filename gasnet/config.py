"""Configuration classes for gasnet components."""

from dataclasses import dataclass


@dataclass
class EngineConfig:
    """Defaults shared by the analysis engine, storage and the CLI."""

    # Residual capacity at or below this value is treated as saturated
    flow_tolerance: float = 1e-10

    # Append-only action journal written by the CLI
    journal_path: str = "log.txt"
    journal_encoding: str = "utf-8"

    # Encoding of flat-text and YAML registry files
    data_encoding: str = "utf-8"

    # Registry file used by the CLI when --data is not given
    data_path: str = "network.txt"


# Global configuration instance
ENGINE_CONFIG = EngineConfig()
