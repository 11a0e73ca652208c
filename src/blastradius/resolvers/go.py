"""Go import resolution through relative paths and go.mod module prefixes."""

import logging
import os
import re
from typing import Dict, List, Optional, Tuple

from ..parsers.symbols import ImportSite
from .base import ImportResolver, existing_file

logger = logging.getLogger(__name__)

_MODULE_LINE = re.compile(r'^\s*module\s+(\S+)', re.MULTILINE)


def package_files(target: str) -> List[str]:
    """Every .go file of a package directory, or the file itself."""
    if os.path.isdir(target):
        return [
            os.path.abspath(os.path.join(target, name))
            for name in sorted(os.listdir(target))
            if name.endswith('.go') and os.path.isfile(os.path.join(target, name))
        ]
    found = existing_file(target) or existing_file(target + '.go')
    return [found] if found else []


class GoResolver(ImportResolver):
    """Resolver for Go import specs."""

    def __init__(self, root_directory: str = ""):
        super().__init__(root_directory)
        self._modules: Dict[str, Optional[Tuple[str, str]]] = {}

    def resolve(self, site: ImportSite, current_file: str) -> List[str]:
        specifier = site.specifier
        if specifier.startswith('./') or specifier.startswith('../'):
            return package_files(os.path.normpath(os.path.join(os.path.dirname(current_file), specifier)))

        module = self.find_module(os.path.dirname(os.path.abspath(current_file)))
        if module is None:
            return []
        module_dir, module_path = module
        if specifier == module_path:
            return package_files(module_dir)
        if specifier.startswith(module_path + '/'):
            rest = specifier[len(module_path) + 1:]
            return package_files(os.path.join(module_dir, *rest.split('/')))
        return []

    def find_module(self, directory: str) -> Optional[Tuple[str, str]]:
        """(module directory, module path) of the nearest go.mod at or above a directory."""
        if directory in self._modules:
            return self._modules[directory]

        result = None
        go_mod = os.path.join(directory, 'go.mod')
        if os.path.isfile(go_mod):
            result = self._read_module(go_mod)
        if result is None:
            parent = os.path.dirname(directory)
            inside_root = directory != self.root_directory and directory.startswith(self.root_directory)
            if parent != directory and inside_root:
                result = self.find_module(parent)

        self._modules[directory] = result
        return result

    def _read_module(self, go_mod: str) -> Optional[Tuple[str, str]]:
        try:
            with open(go_mod, 'r', encoding='utf-8') as f:
                match = _MODULE_LINE.search(f.read())
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", go_mod, e)
            return None
        if match is None:
            return None
        return os.path.dirname(go_mod), match.group(1)
