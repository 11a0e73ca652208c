"""Dependency graphs, impact propagation and symbol-aware graph analysis."""

from .import_graph_builder import (
    DependencyGraphBuilder, DependencyGraphs, DependencyGraph, ReverseDependencyGraph,
    build_dependency_graph, build_reverse_dependency_graph
)
from .impact_propagator import EffectInfo, EffectReport, calculate_effect, group_by_level
from .symbol_graph import (
    SymbolGraph, build_reverse_dependency_graph_with_symbols, build_cross_file_symbol_reference_map
)

__all__ = [
    "DependencyGraphBuilder", "DependencyGraphs", "DependencyGraph", "ReverseDependencyGraph",
    "build_dependency_graph", "build_reverse_dependency_graph",
    "EffectInfo", "EffectReport", "calculate_effect", "group_by_level",
    "SymbolGraph", "build_reverse_dependency_graph_with_symbols", "build_cross_file_symbol_reference_map",
]
