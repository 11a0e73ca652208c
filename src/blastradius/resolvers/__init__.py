"""Per-language import resolvers."""

from typing import Dict, Optional

from ..integrations.tsconfig import PathAliases
from .base import ImportResolver, existing_file
from .cpp import CppResolver
from .go import GoResolver
from .java import JavaResolver
from .javascript import JavaScriptResolver, probe_module
from .python import PythonResolver


def create_resolvers(root_directory: str, aliases: Optional[PathAliases] = None,
                     auto_imports: Optional[Dict[str, str]] = None) -> Dict[str, ImportResolver]:
    """One resolver per language family (see config.LANGUAGE_FAMILY)."""
    return {
        'jsts': JavaScriptResolver(root_directory, aliases, auto_imports),
        'python': PythonResolver(root_directory),
        'java': JavaResolver(root_directory),
        'go': GoResolver(root_directory),
        'cpp': CppResolver(root_directory),
    }


__all__ = [
    "ImportResolver", "existing_file", "create_resolvers", "probe_module",
    "JavaScriptResolver", "PythonResolver", "JavaResolver", "GoResolver", "CppResolver",
]
