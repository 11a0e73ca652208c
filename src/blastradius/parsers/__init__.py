"""Language analyzers built on tree-sitter."""

from .symbols import (
    AffectedSymbol, ImportSite, LineRange, Reference, Referrer, Snippet, Symbol, names_match
)
from .grammars import load_grammar
from .tree_sitter_parser import TreeSitterAnalyzer
from .javascript import JavaScriptAnalyzer
from .python import PythonAnalyzer
from .java import JavaAnalyzer
from .go import GoAnalyzer, needs_structural_fallback
from .cpp import CppAnalyzer
from .registry import AnalyzerRegistry, create_default_registry

__all__ = [
    "AffectedSymbol", "ImportSite", "LineRange", "Reference", "Referrer", "Snippet", "Symbol",
    "names_match",
    "load_grammar",
    "TreeSitterAnalyzer", "JavaScriptAnalyzer", "PythonAnalyzer", "JavaAnalyzer",
    "GoAnalyzer", "CppAnalyzer", "needs_structural_fallback",
    "AnalyzerRegistry", "create_default_registry",
]
