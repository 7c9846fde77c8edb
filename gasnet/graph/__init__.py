"""Graph primitives and builders.

This package provides the strict multi-directed graph type `StrictMultiDiGraph`
and `build_graph`, which derives topology, flow and path graphs from a registry.
"""
