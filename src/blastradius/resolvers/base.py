"""Common behaviour of the per-language import resolvers."""

import logging
import os
from typing import Iterable, List, Optional

from ..parsers.symbols import ImportSite

logger = logging.getLogger(__name__)


def existing_file(path: str) -> Optional[str]:
    """Return the absolute path if it names an existing regular file."""
    return os.path.abspath(path) if os.path.isfile(path) else None


def unique(paths: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping first-seen order."""
    seen = []
    for path in paths:
        if path not in seen:
            seen.append(path)
    return seen


class ImportResolver:
    """Turns import sites of one language family into existing files.

    Resolvers never raise: a specifier that cannot be resolved produces
    no files and a debug log line.
    """

    def __init__(self, root_directory: str = ""):
        self.root_directory = os.path.abspath(root_directory or os.getcwd())

    def resolve(self, site: ImportSite, current_file: str) -> List[str]:
        raise NotImplementedError

    def resolve_file(self, sites: List[ImportSite], current_file: str, content: str) -> List[str]:
        """Resolve every import site of a file."""
        resolved = []
        for site in sites:
            targets = self.resolve(site, current_file)
            if not targets:
                logger.debug("Unresolved import '%s' in %s:%d", site.specifier, current_file, site.line)
            resolved.extend(targets)
        return unique(resolved)
