"""Symbol-aware dependency graphs: per-file symbols and cross-file references."""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set, Union

from ..config import ScanConfiguration, ScanOptions
from ..parsers.registry import AnalyzerRegistry, create_default_registry
from ..parsers.symbols import Reference, Symbol, names_match
from .import_graph_builder import DependencyGraphBuilder, ReverseDependencyGraph, read_source

logger = logging.getLogger(__name__)


@dataclass
class SymbolGraph:
    """Reverse dependency graph plus the symbols and references of its files."""
    graph: ReverseDependencyGraph
    symbols_by_file: Dict[str, List[Symbol]] = field(default_factory=dict)
    references: List[Reference] = field(default_factory=list)

    @property
    def files(self) -> List[str]:
        """Every file named by the graph, as key or as dependent."""
        files: Set[str] = set(self.graph)
        for dependents in self.graph.values():
            files.update(dependents)
        return sorted(files)


def build_reverse_dependency_graph_with_symbols(entry: Union[str, Iterable[str]],
                                                options: Optional[ScanOptions] = None,
                                                registry: Optional[AnalyzerRegistry] = None,
                                                config: Optional[ScanConfiguration] = None,
                                                builder: Optional[DependencyGraphBuilder] = None) -> SymbolGraph:
    """Build the reverse graph, then extract symbols and references for each file.

    A caller-supplied builder is used for the scan and keeps its graph
    afterwards, so cycles can be read from it without scanning again.
    """
    options = options or ScanOptions()
    registry = registry or create_default_registry()
    builder = builder or DependencyGraphBuilder(config, registry)
    result = SymbolGraph(graph=builder.build_reverse_dependency_graph(entry))
    if not options.uses_tree_sitter:
        return result

    for file_path in result.files:
        if not os.path.isfile(file_path):
            continue
        analyzer = registry.get_analyzer_for_file(file_path)
        if analyzer is None:
            continue
        if options.languages and analyzer.language not in options.languages:
            continue
        content = read_source(file_path)
        if content is None:
            continue
        result.symbols_by_file[file_path] = analyzer.extract_symbols(file_path, content)
        result.references.extend(analyzer.extract_references(file_path, content))

    logger.debug(
        "Extracted %d symbols and %d references from %d files",
        sum(len(s) for s in result.symbols_by_file.values()), len(result.references),
        len(result.symbols_by_file),
    )
    return result


def build_cross_file_symbol_reference_map(graph: Mapping[str, Set[str]],
                                          symbols_by_file: Mapping[str, List[Symbol]],
                                          references: List[Reference]) -> Dict[str, List[Reference]]:
    """Map ``"<abs path>::<symbol name>"`` to the references that can reach the symbol.

    A reference qualifies when its name matches the symbol and it sits in the
    defining file or in one of that file's direct dependents. Symbols without
    any qualifying reference get no key.
    """
    by_short_name: Dict[str, List[Reference]] = {}
    for ref in references:
        short = ref.symbol.name.rsplit('::', 1)[-1].rsplit('.', 1)[-1]
        by_short_name.setdefault(short, []).append(ref)

    ref_map: Dict[str, List[Reference]] = {}
    for file_path in sorted(symbols_by_file):
        scope = {file_path} | set(graph.get(file_path, ()))
        for symbol in symbols_by_file[file_path]:
            matched = [
                ref for ref in by_short_name.get(symbol.short_name, [])
                if ref.referrer.file_path in scope and names_match(ref.symbol.name, symbol)
            ]
            if not matched:
                continue
            # Overloads share a key
            bucket = ref_map.setdefault(f"{file_path}::{symbol.name}", [])
            for ref in matched:
                if ref not in bucket:
                    bucket.append(ref)
    return ref_map
