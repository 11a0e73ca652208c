"""C/C++ local include resolution."""

import os
from typing import List

from ..parsers.symbols import ImportSite
from .base import ImportResolver, existing_file


class CppResolver(ImportResolver):
    """Resolves ``#include "..."``; system includes are never followed."""

    def include_dirs(self, current_file: str) -> List[str]:
        return [
            os.path.dirname(os.path.abspath(current_file)),
            self.root_directory,
            os.path.join(self.root_directory, 'include'),
            os.path.join(self.root_directory, 'src'),
        ]

    def resolve(self, site: ImportSite, current_file: str) -> List[str]:
        if site.kind == 'system_include':
            return []
        for directory in self.include_dirs(current_file):
            found = existing_file(os.path.join(directory, site.specifier))
            if found:
                return [os.path.normpath(found)]
        return []
