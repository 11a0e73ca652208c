"""Blastradius - which files and symbols a change set affects."""

__version__ = "0.1.0"

from .config import ScanConfiguration, ScanOptions
from .parsers import AnalyzerRegistry, create_default_registry
from .analyzers import (
    DependencyGraphBuilder, DependencyGraphs, EffectInfo, SymbolGraph,
    build_cross_file_symbol_reference_map, build_dependency_graph, build_reverse_dependency_graph,
    build_reverse_dependency_graph_with_symbols, calculate_effect
)
from .core import (
    FileChange, build_enhanced_effect_from_changes, extract_relevant_snippets,
    find_affected_symbols_from_diff
)

__all__ = [
    "ScanConfiguration", "ScanOptions",
    "AnalyzerRegistry", "create_default_registry",
    "DependencyGraphBuilder", "DependencyGraphs", "EffectInfo", "SymbolGraph",
    "build_cross_file_symbol_reference_map", "build_dependency_graph", "build_reverse_dependency_graph",
    "build_reverse_dependency_graph_with_symbols", "calculate_effect",
    "FileChange", "build_enhanced_effect_from_changes", "extract_relevant_snippets",
    "find_affected_symbols_from_diff",
]
