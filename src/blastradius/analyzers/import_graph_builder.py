"""Dependency Graph Builder - Builds forward/reverse file graphs from import sites."""

import logging
import os
from collections import deque
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Deque, Dict, Iterable, List, Optional, Set, Union

import networkx as nx

from ..config import LANGUAGE_FAMILY, ScanConfiguration, detect_language, is_vendor_path
from ..integrations.auto_imports import ComponentResolver, create_component_resolver, load_auto_imports
from ..integrations.tsconfig import load_path_aliases
from ..integrations.vue import is_nuxt_project, is_vue_project, parse_sfc, template_components
from ..parsers.registry import AnalyzerRegistry, create_default_registry
from ..resolvers import ImportResolver, create_resolvers, probe_module

logger = logging.getLogger(__name__)

DependencyGraph = Dict[str, Set[str]]
ReverseDependencyGraph = Dict[str, Set[str]]


@dataclass
class DependencyGraphs:
    """Forward (dependent -> dependencies) and reverse (dependency -> dependents) graphs."""
    forward: DependencyGraph
    reverse: ReverseDependencyGraph


def read_source(file_path: str) -> Optional[str]:
    """Read a source file, or None (with a warning) when it cannot be read."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", file_path, e)
        return None


class DependencyGraphBuilder:
    """Walks imports from entry files with a FIFO worklist.

    Edges go dependent -> dependency in ``self.graph`` (a networkx DiGraph
    keyed by absolute path). Every scanned file is a node, even when it has
    no resolvable imports.
    """

    def __init__(self, config: Optional[ScanConfiguration] = None,
                 registry: Optional[AnalyzerRegistry] = None):
        self.config = config or ScanConfiguration()
        self.registry = registry or create_default_registry()
        self.root_directory = self.config.root_directory
        self.graph = nx.DiGraph()
        self._resolvers: Optional[Dict[str, ImportResolver]] = None

    @property
    def resolvers(self) -> Dict[str, ImportResolver]:
        if self._resolvers is None:
            is_nuxt = is_nuxt_project(self.root_directory)
            self._resolvers = create_resolvers(
                self.root_directory,
                aliases=load_path_aliases(self.root_directory, is_nuxt),
                auto_imports=load_auto_imports(self.root_directory),
            )
        return self._resolvers

    @property
    def framework_expansion(self) -> bool:
        if self.config.enable_framework_expansion is not None:
            return self.config.enable_framework_expansion
        return is_vue_project(self.root_directory)

    # Entry handling

    def normalize_entry(self, entry: str) -> Optional[str]:
        """Absolute path for an entry given absolute, root-relative or under the root's name."""
        if os.path.isabs(entry) and os.path.exists(entry):
            return os.path.normpath(entry)
        candidate = os.path.join(self.root_directory, entry)
        if os.path.exists(candidate):
            return os.path.normpath(candidate)
        marker = os.path.basename(self.root_directory) + os.sep
        index = entry.find(marker)
        if index >= 0:
            rebased = os.path.join(self.root_directory, entry[index + len(marker):])
            if os.path.exists(rebased):
                return os.path.normpath(rebased)
        logger.warning("Entry %s does not exist under %s", entry, self.root_directory)
        return None

    def collect_entry_files(self, entries: Iterable[str]) -> List[str]:
        """Expand entries into source files; directories are walked recursively."""
        files = set()
        for entry in entries:
            path = self.normalize_entry(entry)
            if path is None:
                continue
            if os.path.isfile(path):
                if detect_language(path) is not None:
                    files.add(path)
                continue
            for dirpath, dirnames, filenames in os.walk(path):
                dirnames[:] = sorted(
                    d for d in dirnames
                    if not d.startswith('.') and d not in self.config.vendor_markers
                )
                for name in filenames:
                    file_path = os.path.join(dirpath, name)
                    if self.config.accepts(file_path):
                        files.add(file_path)
        return sorted(files)

    # Scanning

    def scan_dependencies(self, entries: Union[str, Iterable[str]]) -> Dict[str, List[str]]:
        """Dependency map keyed by root-relative path, values sorted and unique."""
        visited = self._scan(entries)
        return {
            self._relative(file_path): sorted({self._relative(dep) for dep in self.graph.successors(file_path)})
            for file_path in sorted(visited, key=self._relative)
        }

    def build_dependency_graph(self, entry: Union[str, Iterable[str]]) -> DependencyGraphs:
        """Forward and reverse graphs keyed by absolute path."""
        self._scan(entry)
        forward: DependencyGraph = {node: set(self.graph.successors(node)) for node in self.graph.nodes}
        reverse: ReverseDependencyGraph = {node: set() for node in self.graph.nodes}
        for dependent, dependency in self.graph.edges:
            reverse[dependency].add(dependent)
        return DependencyGraphs(forward=forward, reverse=reverse)

    def build_reverse_dependency_graph(self, entry: Union[str, Iterable[str]]) -> ReverseDependencyGraph:
        return self.build_dependency_graph(entry).reverse

    def find_cycles(self) -> List[List[str]]:
        """Import cycles of the last scan, each rotated to start at its smallest path."""
        cycles = []
        try:
            for cycle in nx.simple_cycles(self.graph):
                start = cycle.index(min(cycle))
                cycles.append(cycle[start:] + cycle[:start])
        except nx.NetworkXError as e:
            logger.warning("Cycle detection failed: %s", e)
        return sorted(cycles)

    def _scan(self, entries: Union[str, Iterable[str]]) -> Set[str]:
        if isinstance(entries, str):
            entries = [entries]
        self.graph = nx.DiGraph()
        visited: Set[str] = set()
        queue: Deque[str] = deque(self.collect_entry_files(entries))
        self._run_worklist(queue, visited)
        if self.framework_expansion:
            self._expand_frameworks(visited)
        logger.debug("Scanned %d files, %d edges", len(visited), self.graph.number_of_edges())
        return visited

    def _run_worklist(self, queue: Deque[str], visited: Set[str]) -> None:
        while queue:
            file_path = queue.popleft()
            if file_path in visited:
                continue
            visited.add(file_path)
            self.graph.add_node(file_path)
            for dep in self._file_dependencies(file_path):
                if self._add_edge(file_path, dep) and dep not in visited:
                    queue.append(dep)

    def _add_edge(self, file_path: str, dep: str) -> bool:
        if dep == file_path or is_vendor_path(self._relative(dep), self.config.vendor_markers):
            return False
        self.graph.add_edge(file_path, dep)
        return True

    def _file_dependencies(self, file_path: str) -> List[str]:
        language = detect_language(file_path)
        if language is None or language == 'vue':
            # SFCs are handled by framework expansion
            return []
        analyzer = self.registry.get_analyzer(language)
        if analyzer is None:
            logger.debug("No analyzer registered for %s", language)
            return []
        content = read_source(file_path)
        if content is None:
            return []
        resolver = self.resolvers[LANGUAGE_FAMILY[language]]
        sites = analyzer.extract_imports(file_path, content)
        return resolver.resolve_file(sites, file_path, content)

    # Framework expansion

    def _expand_frameworks(self, visited: Set[str]) -> None:
        """Link .vue files to their template components and script imports.

        Runs as a bounded fixed point: newly linked files are scanned by the
        worklist, which may in turn reach more .vue files.
        """
        component_resolver = create_component_resolver(self.root_directory)
        script_resolver = self.resolvers['jsts']
        expanded: Set[str] = set()
        for _ in range(self.config.max_expansion_passes):
            pending = sorted(f for f in visited if f.endswith('.vue') and f not in expanded)
            if not pending:
                return
            expanded.update(pending)

            results: Dict[str, List[str]] = {}
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                future_to_file = {
                    executor.submit(self._scan_vue_file, f, component_resolver, script_resolver): f
                    for f in pending
                }
                for future in as_completed(future_to_file):
                    results[future_to_file[future]] = future.result()

            queue: Deque[str] = deque()
            for file_path in pending:
                for dep in results[file_path]:
                    if self._add_edge(file_path, dep) and dep not in visited:
                        queue.append(dep)
            if not queue:
                return
            self._run_worklist(queue, visited)

        logger.warning("Framework expansion stopped after %d passes", self.config.max_expansion_passes)

    def _scan_vue_file(self, file_path: str, component_resolver: ComponentResolver,
                       script_resolver: ImportResolver) -> List[str]:
        """Dependencies of one SFC. Runs on a worker thread and touches no shared state."""
        content = read_source(file_path)
        if content is None:
            return []

        descriptor = parse_sfc(content)
        deps = []
        for tag in template_components(descriptor.template):
            target = component_resolver(tag)
            found = probe_module(target) if target else None
            if found:
                deps.append(found)

        for block in descriptor.scripts:
            analyzer = self.registry.get_analyzer(block.language)
            if analyzer is None:
                continue
            sites = analyzer.extract_imports(file_path, block.content)
            deps.extend(script_resolver.resolve_file(sites, file_path, block.content))
        return deps

    def _relative(self, file_path: str) -> str:
        return os.path.relpath(file_path, self.root_directory)


def build_dependency_graph(entry: Union[str, Iterable[str]], config: Optional[ScanConfiguration] = None,
                           registry: Optional[AnalyzerRegistry] = None) -> DependencyGraphs:
    """Scan from an entry file or directory and return both graph directions."""
    return DependencyGraphBuilder(config, registry).build_dependency_graph(entry)


def build_reverse_dependency_graph(entry: Union[str, Iterable[str]], config: Optional[ScanConfiguration] = None,
                                   registry: Optional[AnalyzerRegistry] = None) -> ReverseDependencyGraph:
    return DependencyGraphBuilder(config, registry).build_reverse_dependency_graph(entry)
