"""Lazy, memoized loading of tree-sitter grammars."""

import importlib
import logging
from functools import lru_cache
from typing import Dict, Optional, Tuple

from tree_sitter import Language, Parser, Tree

logger = logging.getLogger(__name__)

# Language id -> (grammar module, function returning the language capsule)
GRAMMAR_MODULES: Dict[str, Tuple[str, str]] = {
    'javascript': ('tree_sitter_javascript', 'language'),
    'jsx': ('tree_sitter_javascript', 'language'),
    'typescript': ('tree_sitter_typescript', 'language_typescript'),
    'tsx': ('tree_sitter_typescript', 'language_tsx'),
    'python': ('tree_sitter_python', 'language'),
    'java': ('tree_sitter_java', 'language'),
    'go': ('tree_sitter_go', 'language'),
    'cpp': ('tree_sitter_cpp', 'language'),
}

ALIASES: Dict[str, str] = {
    'js': 'javascript',
    'ts': 'typescript',
    'c++': 'cpp',
    'py': 'python',
    'golang': 'go',
}


def canonical_language(language: str) -> str:
    key = language.lower()
    return ALIASES.get(key, key)


@lru_cache(maxsize=None)
def load_grammar(language: str) -> Optional[Language]:
    """Load the tree-sitter grammar for a language, or None if unavailable.

    The result is memoized per language, so each grammar package is imported
    at most once per process. Failures are logged once and cached as None.
    """
    key = canonical_language(language)
    spec = GRAMMAR_MODULES.get(key)
    if spec is None:
        logger.warning("No tree-sitter grammar registered for language '%s'", language)
        return None

    module_name, func_name = spec
    try:
        module = importlib.import_module(module_name)
        return Language(getattr(module, func_name)())
    except ImportError:
        logger.warning(
            "Grammar package '%s' not installed for language '%s'. Install with: pip install %s",
            module_name, key, module_name.replace('_', '-'),
        )
    except (AttributeError, TypeError, ValueError) as e:
        logger.warning("Could not load tree-sitter grammar for %s: %s", key, e)
    return None


def parse_source(content: str, language: str) -> Optional[Tree]:
    """Parse text with a fresh parser for the language's grammar."""
    grammar = load_grammar(language)
    if grammar is None:
        return None
    parser = Parser(grammar)
    return parser.parse(bytes(content, 'utf8'))
