"""Configuration for dependency scanning and impact analysis."""

import os
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple

# Extensions probed when a JS/TS specifier omits one, in priority order
JS_EXTENSIONS: Tuple[str, ...] = ('.ts', '.tsx', '.js', '.jsx', '.mjs', '.cjs', '.vue')

LANGUAGE_BY_EXTENSION: Dict[str, str] = {
    # JavaScript/TypeScript
    '.js': 'javascript',
    '.mjs': 'javascript',
    '.cjs': 'javascript',
    '.jsx': 'jsx',
    '.ts': 'typescript',
    '.mts': 'typescript',
    '.cts': 'typescript',
    '.tsx': 'tsx',

    # Component templates
    '.vue': 'vue',

    # Python
    '.py': 'python',
    '.pyi': 'python',

    # Java
    '.java': 'java',

    # Go
    '.go': 'go',

    # C/C++
    '.c': 'cpp',
    '.cc': 'cpp',
    '.cpp': 'cpp',
    '.cxx': 'cpp',
    '.h': 'cpp',
    '.hh': 'cpp',
    '.hpp': 'cpp',
    '.hxx': 'cpp',
}

# Language families sharing one grammar and one import resolver
LANGUAGE_FAMILY: Dict[str, str] = {
    'javascript': 'jsts',
    'jsx': 'jsts',
    'typescript': 'jsts',
    'tsx': 'jsts',
    'vue': 'jsts',
    'python': 'python',
    'java': 'java',
    'go': 'go',
    'cpp': 'cpp',
}

# Which families a scan mode walks when expanding directories
MODE_FAMILIES: Dict[str, FrozenSet[str]] = {
    'auto': frozenset({'jsts', 'python', 'java', 'go', 'cpp'}),
    'jsts': frozenset({'jsts'}),
    'python': frozenset({'python'}),
    'java': frozenset({'java'}),
    'go': frozenset({'go'}),
    'cpp': frozenset({'cpp'}),
}

VENDOR_MARKERS: Tuple[str, ...] = ('node_modules', 'vendor', 'third_party', 'bower_components')


def detect_language(file_path: str) -> Optional[str]:
    """Return the language id for a file based on its extension."""
    _, ext = os.path.splitext(file_path)
    return LANGUAGE_BY_EXTENSION.get(ext.lower())


def is_vendor_path(file_path: str, markers: Tuple[str, ...] = VENDOR_MARKERS) -> bool:
    """Check whether a path lies inside a vendor/third-party directory."""
    normalized = file_path.replace('\\', '/')
    return any(f"/{marker}/" in f"/{normalized}" for marker in markers)


@dataclass
class ScanConfiguration:
    """Configuration for building dependency graphs."""
    root_directory: str = ""
    mode: str = 'auto'  # one of MODE_FAMILIES
    max_workers: Optional[int] = None  # fan-out for per-file framework scanning
    max_expansion_passes: int = 10  # bound on framework-driven re-scans
    enable_framework_expansion: Optional[bool] = None  # None = detect from project
    vendor_markers: Tuple[str, ...] = VENDOR_MARKERS

    def __post_init__(self):
        self.root_directory = os.path.abspath(self.root_directory or os.getcwd())
        if self.mode not in MODE_FAMILIES:
            raise ValueError(f"Unknown scan mode: {self.mode}")
        if self.max_workers is None:
            self.max_workers = min(8, os.cpu_count() or 4)

    @property
    def families(self) -> FrozenSet[str]:
        return MODE_FAMILIES[self.mode]

    def accepts(self, file_path: str) -> bool:
        """Return True if a file belongs to a language family this mode scans."""
        language = detect_language(file_path)
        if language is None:
            return False
        return LANGUAGE_FAMILY.get(language) in self.families


@dataclass
class ScanOptions:
    """Options for symbol-aware scans."""
    analyzer: str = 'auto'  # 'auto', 'tree-sitter' or 'none'
    include_symbols: bool = True
    include_snippets: bool = True
    snippet_depth: int = 1
    languages: Optional[FrozenSet[str]] = field(default=None)

    @property
    def uses_tree_sitter(self) -> bool:
        return self.analyzer != 'none' and self.include_symbols
