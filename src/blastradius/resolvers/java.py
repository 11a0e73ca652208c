"""Java import resolution over the project root and Maven/Gradle source roots."""

import os
from typing import List, Optional

from ..config import VENDOR_MARKERS
from ..parsers.symbols import ImportSite
from .base import ImportResolver, existing_file, unique

MAIN_SOURCE_ROOT = os.path.join('src', 'main', 'java')
_SKIPPED_DIRS = set(VENDOR_MARKERS) | {'build', 'target', 'out'}


class JavaResolver(ImportResolver):
    """Resolver for ``import a.b.C``, ``import a.b.*`` and static imports."""

    def __init__(self, root_directory: str = ""):
        super().__init__(root_directory)
        self._source_roots: Optional[List[str]] = None

    @property
    def source_roots(self) -> List[str]:
        """Project root followed by every src/main/java directory found under it."""
        if self._source_roots is None:
            roots = [self.root_directory]
            for dirpath, dirnames, _ in os.walk(self.root_directory):
                dirnames[:] = sorted(d for d in dirnames if not d.startswith('.') and d not in _SKIPPED_DIRS)
                if dirpath.endswith(os.sep + MAIN_SOURCE_ROOT):
                    roots.append(dirpath)
                    # Packages below a source root are not roots themselves
                    dirnames[:] = []
            self._source_roots = unique(roots)
        return self._source_roots

    def resolve(self, site: ImportSite, current_file: str) -> List[str]:
        specifier = site.specifier
        static = site.kind == 'static_import'

        if specifier.endswith('.*'):
            package = specifier[:-2]
            files = self._package_files(package)
            if files or not static:
                return files
            # import static a.b.C.* names members of class C
            specifier = package

        parts = specifier.split('.')
        if not static:
            found = self._class_file(parts)
            return [found] if found else []

        for end in range(len(parts), 0, -1):
            found = self._class_file(parts[:end])
            if found:
                return [found]
        return []

    def _class_file(self, parts: List[str]) -> Optional[str]:
        for root in self.source_roots:
            found = existing_file(os.path.join(root, *parts) + '.java')
            if found:
                return found
        return None

    def _package_files(self, package: str) -> List[str]:
        files = []
        for root in self.source_roots:
            directory = os.path.join(root, *package.split('.'))
            if not os.path.isdir(directory):
                continue
            for name in sorted(os.listdir(directory)):
                if name.endswith('.java'):
                    found = existing_file(os.path.join(directory, name))
                    if found:
                        files.append(found)
        return unique(files)
