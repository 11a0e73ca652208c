"""Auto-import and component declaration files (unplugin / Nuxt generated d.ts)."""

import logging
import os
import re
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

DECLARATION_FILES = (
    '.nuxt/auto-imports.d.ts',
    '.nuxt/components.d.ts',
    'auto-imports.d.ts',
    'components.d.ts',
    'src/auto-imports.d.ts',
    'src/components.d.ts',
)

AUTO_IMPORT_PATTERN = re.compile(r"(?:const|function)\s+(\w+):\s*typeof\s+import\('([^']+)'\)")
COMPONENT_PATTERN = re.compile(r"(\w+):\s*typeof\s+import\('([^']+)'\)\['default'\]")
_CAMEL_BOUNDARY = re.compile(r'([a-z])([A-Z])')

ComponentResolver = Callable[[str], Optional[str]]


def find_declaration_files(root_directory: str, suffix: str = '.d.ts') -> List[str]:
    """Existing generated declaration files, in lookup order."""
    files = []
    for relative in DECLARATION_FILES:
        path = os.path.join(root_directory, relative)
        if relative.endswith(suffix) and os.path.isfile(path):
            files.append(path)
    return files


def kebab_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub(r'\1-\2', name).lower()


def _read(path: str) -> str:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read declaration file %s: %s", path, e)
        return ''


def parse_auto_imports(file_path: str) -> Dict[str, str]:
    """Map each auto-imported name to the absolute (extensionless) module path."""
    base = os.path.dirname(file_path)
    return {
        name: os.path.normpath(os.path.join(base, target))
        for name, target in AUTO_IMPORT_PATTERN.findall(_read(file_path))
    }


def parse_components(file_path: str) -> Dict[str, str]:
    """Map component names (PascalCase and kebab-case) to absolute paths."""
    base = os.path.dirname(file_path)
    components = {}
    for name, target in COMPONENT_PATTERN.findall(_read(file_path)):
        path = os.path.normpath(os.path.join(base, target))
        components[name] = path
        components[kebab_case(name)] = path
    return components


def load_auto_imports(root_directory: Optional[str] = None) -> Dict[str, str]:
    """Merged auto-import map; earlier declaration files take precedence."""
    root_directory = os.path.abspath(root_directory or os.getcwd())
    merged: Dict[str, str] = {}
    for path in find_declaration_files(root_directory, 'auto-imports.d.ts'):
        for name, target in parse_auto_imports(path).items():
            merged.setdefault(name, target)
    if merged:
        logger.debug("Loaded %d auto-imports", len(merged))
    return merged


def create_component_resolver(root_directory: Optional[str] = None) -> ComponentResolver:
    """Build a name -> component file lookup from components.d.ts files."""
    root_directory = os.path.abspath(root_directory or os.getcwd())
    merged: Dict[str, str] = {}
    for path in find_declaration_files(root_directory, 'components.d.ts'):
        for name, target in parse_components(path).items():
            merged.setdefault(name, target)

    def resolve(name: str) -> Optional[str]:
        return merged.get(name)

    return resolve
