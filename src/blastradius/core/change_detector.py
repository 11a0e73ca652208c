"""Diff-driven detection of affected symbols and the snippets a reviewer needs."""

import logging
import os
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from ..analyzers.impact_propagator import EffectInfo, calculate_effect
from ..analyzers.import_graph_builder import DependencyGraphBuilder, read_source
from ..analyzers.symbol_graph import build_reverse_dependency_graph_with_symbols
from ..config import ScanConfiguration, ScanOptions
from ..parsers.registry import AnalyzerRegistry, create_default_registry
from ..parsers.symbols import AffectedSymbol, LineRange, Reference, Snippet, Symbol, names_match
from ..parsers.tree_sitter_parser import TreeSitterAnalyzer

logger = logging.getLogger(__name__)


@dataclass
class ChangedSpan:
    """Lines that differ between two texts, on each side of the change."""
    before: LineRange
    after: LineRange


def compute_changed_span(before: str, after: str) -> Optional[ChangedSpan]:
    """Trim the common line prefix and suffix; None when the texts are equal.

    Either side may come back inverted (end before start): the after side
    for a pure deletion, the before side for a pure insertion.
    """
    if before == after:
        return None
    before_lines = before.split('\n')
    after_lines = after.split('\n')

    prefix = 0
    limit = min(len(before_lines), len(after_lines))
    while prefix < limit and before_lines[prefix] == after_lines[prefix]:
        prefix += 1

    suffix = 0
    while suffix < limit - prefix and before_lines[-1 - suffix] == after_lines[-1 - suffix]:
        suffix += 1

    return ChangedSpan(
        before=LineRange(prefix + 1, len(before_lines) - suffix),
        after=LineRange(prefix + 1, len(after_lines) - suffix),
    )


def _symbol_key(symbol: Symbol) -> Tuple[str, str, Optional[str]]:
    return symbol.name, symbol.kind, symbol.parent


def find_affected_symbols_from_diff(file_path: str, before: str, after: str,
                                    analyzer: TreeSitterAnalyzer) -> List[AffectedSymbol]:
    """Symbols whose definitions overlap the changed lines, with their references.

    Symbols new in ``after`` are reported as added. Symbols of ``before`` that
    sat in the changed region and no longer exist are reported as deleted.
    """
    span = compute_changed_span(before, after)
    if span is None:
        return []

    affected = []
    if span.after.end_line >= span.after.start_line:
        affected = analyzer.find_affected_symbols(file_path, after, span.after)
    before_symbols = analyzer.extract_symbols(file_path, before)
    before_keys = {_symbol_key(s) for s in before_symbols}
    after_keys = {_symbol_key(s) for s in analyzer.extract_symbols(file_path, after)}

    for item in affected:
        if _symbol_key(item.symbol) not in before_keys:
            item.change_type = 'added'

    if span.before.end_line >= span.before.start_line:
        before_lines = before.split('\n')
        for symbol in before_symbols:
            if symbol.range.overlaps(span.before) and _symbol_key(symbol) not in after_keys:
                affected.append(AffectedSymbol(
                    symbol=symbol,
                    change_type='deleted',
                    change_lines=LineRange(span.before.start_line, span.before.end_line),
                    definition=analyzer.definition_snippet(symbol, before_lines),
                ))

    references = analyzer.extract_references(file_path, after)
    for item in affected:
        item.referenced_by = [ref for ref in references if names_match(ref.symbol.name, item.symbol)]
    return affected


def _absolute(path: str, root_directory: str) -> str:
    return os.path.normpath(path if os.path.isabs(path) else os.path.join(root_directory, path))


def reachable_files(source: str, reverse_graph: Mapping[str, Set[str]], depth: int) -> Set[str]:
    """Files at most ``depth`` reverse edges away from source (source included)."""
    reached = {source}
    queue = deque([(source, 0)])
    while queue:
        file_path, level = queue.popleft()
        if level >= depth:
            continue
        for dependent in reverse_graph.get(file_path, ()):
            if dependent not in reached:
                reached.add(dependent)
                queue.append((dependent, level + 1))
    return reached


def _definition(item: AffectedSymbol, file_path: str) -> Optional[Snippet]:
    if item.definition is not None:
        return item.definition
    content = read_source(file_path)
    if content is None:
        return None
    lines = content.split('\n')
    start, end = item.symbol.range.start_line, item.symbol.range.end_line
    return Snippet(
        file_path=item.symbol.file_path,
        kind='block',
        name=item.symbol.name,
        start_line=start,
        end_line=end,
        code='\n'.join(lines[start - 1:end]),
        symbols_used=(item.symbol,),
        reason=f"definition of {item.symbol.kind} {item.symbol.name}",
    )


def extract_relevant_snippets(affected: List[AffectedSymbol], reverse_graph: Mapping[str, Set[str]],
                              references: List[Reference], depth: int = 1,
                              root_directory: Optional[str] = None) -> List[Snippet]:
    """Definitions of affected symbols plus the call sites that can see them.

    A reference counts when its name matches the affected symbol and its file
    is within ``depth`` reverse edges of the symbol's file. Snippets are
    unique by (file, start line, end line); the first one wins.
    """
    root_directory = os.path.abspath(root_directory or os.getcwd())
    snippets: Dict[Tuple[str, int, int], Snippet] = {}

    def add(snippet: Snippet) -> None:
        key = (_absolute(snippet.file_path, root_directory), snippet.start_line, snippet.end_line)
        snippets.setdefault(key, snippet)

    for item in affected:
        source = _absolute(item.symbol.file_path, root_directory)
        reached = reachable_files(source, reverse_graph, depth)

        definition = _definition(item, source)
        if definition is not None:
            add(definition)

        for ref in list(references) + item.referenced_by:
            if not names_match(ref.symbol.name, item.symbol):
                continue
            if _absolute(ref.referrer.file_path, root_directory) not in reached:
                continue
            add(replace(
                ref.context,
                symbols_used=(item.symbol,),
                reason=ref.context.reason or f"{ref.referrer.kind} of {item.symbol.name}",
            ))

    return list(snippets.values())


@dataclass
class FileChange:
    """Before/after text of one changed file."""
    file_path: str
    before: str
    after: str


@dataclass
class EnhancedEffectInfo(EffectInfo):
    """EffectInfo plus what changed inside the file and what to read."""
    symbols: List[Symbol] = field(default_factory=list)
    affected_symbols: List[AffectedSymbol] = field(default_factory=list)
    snippets: List[Snippet] = field(default_factory=list)


@dataclass
class EnhancedEffectReport:
    """Per-file enhanced effects and the flattened symbol/snippet lists."""
    files: Dict[str, EnhancedEffectInfo]
    affected_symbols: List[AffectedSymbol]
    snippets: List[Snippet]


def build_enhanced_effect_from_changes(entry: Union[str, Iterable[str]],
                                       changes: Iterable[FileChange],
                                       options: Optional[ScanOptions] = None,
                                       registry: Optional[AnalyzerRegistry] = None,
                                       config: Optional[ScanConfiguration] = None,
                                       builder: Optional[DependencyGraphBuilder] = None) -> EnhancedEffectReport:
    """Effect report for a change set, with affected symbols and reviewer snippets."""
    options = options or ScanOptions()
    config = config or ScanConfiguration()
    registry = registry or create_default_registry()
    root = config.root_directory

    symbol_graph = build_reverse_dependency_graph_with_symbols(entry, options, registry, config, builder)
    changes = [replace(c, file_path=_absolute(c.file_path, root)) for c in changes]
    effect = calculate_effect({c.file_path for c in changes}, symbol_graph.graph)

    affected: List[AffectedSymbol] = []
    if options.include_symbols:
        for change in changes:
            analyzer = registry.get_analyzer_for_file(change.file_path)
            if analyzer is None:
                logger.debug("No analyzer for %s, skipping symbol diff", change.file_path)
                continue
            affected.extend(find_affected_symbols_from_diff(change.file_path, change.before, change.after, analyzer))

    snippets: List[Snippet] = []
    if options.include_snippets and affected:
        snippets = extract_relevant_snippets(
            affected, symbol_graph.graph, symbol_graph.references, options.snippet_depth, root
        )

    files = {}
    for file_path, info in effect.items():
        files[file_path] = EnhancedEffectInfo(
            level=info.level,
            is_modified=info.is_modified,
            dependencies=list(info.dependencies),
            symbols=symbol_graph.symbols_by_file.get(file_path, []),
            affected_symbols=[a for a in affected if a.symbol.file_path == file_path],
            snippets=[s for s in snippets if _absolute(s.file_path, root) == file_path],
        )
    return EnhancedEffectReport(files=files, affected_symbols=affected, snippets=snippets)
