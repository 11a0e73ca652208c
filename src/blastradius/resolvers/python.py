"""Python module resolution."""

import os
from typing import List

from ..parsers.symbols import ImportSite
from .base import ImportResolver, existing_file, unique

SOURCE_ROOTS = ('src', 'lib')


def module_candidates(target: str, names=()) -> List[str]:
    """Existing files for a module path, plus ``from X import name`` submodules."""
    found = []
    for path in (target + '.py', os.path.join(target, '__init__.py')):
        hit = existing_file(path)
        if hit:
            found.append(hit)
    for name in names:
        if name == '*':
            continue
        sub = os.path.join(target, name)
        for path in (sub + '.py', os.path.join(sub, '__init__.py')):
            hit = existing_file(path)
            if hit:
                found.append(hit)
    return unique(found)


class PythonResolver(ImportResolver):
    """Resolver for ``import x.y`` and ``from .x import y`` statements."""

    def resolve(self, site: ImportSite, current_file: str) -> List[str]:
        specifier = site.specifier
        names = site.names if site.kind == 'from_import' else ()

        if specifier.startswith('.'):
            dots = len(specifier) - len(specifier.lstrip('.'))
            base = os.path.dirname(os.path.abspath(current_file))
            for _ in range(dots - 1):
                base = os.path.dirname(base)
            tail = specifier[dots:]
            target = os.path.join(base, *tail.split('.')) if tail else base
            return module_candidates(target, names)

        parts = specifier.split('.')
        for root in self._search_roots(current_file):
            found = module_candidates(os.path.join(root, *parts), names)
            if found:
                return found
        return []

    def _search_roots(self, current_file: str) -> List[str]:
        roots = [self.root_directory]
        roots.extend(os.path.join(self.root_directory, name) for name in SOURCE_ROOTS)
        roots.append(os.path.dirname(os.path.abspath(current_file)))
        return unique(roots)
