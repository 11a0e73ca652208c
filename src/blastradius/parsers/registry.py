"""Analyzer registry: language id -> syntax analyzer."""

from typing import Dict, List, Optional

from ..config import detect_language
from .cpp import CppAnalyzer
from .go import GoAnalyzer
from .java import JavaAnalyzer
from .javascript import JavaScriptAnalyzer
from .python import PythonAnalyzer
from .tree_sitter_parser import TreeSitterAnalyzer


class AnalyzerRegistry:
    """Lookup table of analyzers keyed by lowercase language id."""

    def __init__(self):
        self._analyzers: Dict[str, TreeSitterAnalyzer] = {}

    def register(self, analyzer: TreeSitterAnalyzer) -> None:
        """Register an analyzer, replacing any previous one for its language."""
        self._analyzers[analyzer.language.lower()] = analyzer

    def get_analyzer(self, language: str) -> Optional[TreeSitterAnalyzer]:
        if not language:
            return None
        return self._analyzers.get(language.lower())

    def get_analyzers(self) -> List[TreeSitterAnalyzer]:
        """All analyzers, highest priority first."""
        return sorted(self._analyzers.values(), key=lambda a: a.priority, reverse=True)

    def get_analyzer_for_file(self, file_path: str) -> Optional[TreeSitterAnalyzer]:
        language = detect_language(file_path)
        return self.get_analyzer(language) if language else None

    def __contains__(self, language: str) -> bool:
        return self.get_analyzer(language) is not None

    def __len__(self) -> int:
        return len(self._analyzers)


def create_default_registry() -> AnalyzerRegistry:
    """Build a registry holding every built-in analyzer."""
    registry = AnalyzerRegistry()
    for language in ('javascript', 'jsx', 'typescript', 'tsx'):
        registry.register(JavaScriptAnalyzer(language))
    registry.register(PythonAnalyzer('python'))
    registry.register(JavaAnalyzer('java'))
    registry.register(GoAnalyzer('go'))
    registry.register(CppAnalyzer('cpp'))
    return registry
