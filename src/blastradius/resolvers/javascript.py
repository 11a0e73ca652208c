"""JavaScript/TypeScript module resolution (relative, path aliases, auto-imports)."""

import os
import re
from typing import Dict, List, Optional

from ..config import JS_EXTENSIONS
from ..integrations.tsconfig import PathAliases
from ..parsers.symbols import ImportSite
from .base import ImportResolver, existing_file, unique

# Compiled output extensions that may stand for a TypeScript source
_SOURCE_FOR_OUTPUT = {
    '.js': ('.ts', '.tsx'),
    '.jsx': ('.tsx',),
    '.mjs': ('.mts',),
    '.cjs': ('.cts',),
}

# Strings, template literals and comments in one pass, so a marker inside
# one of them never starts another
_NON_CODE = re.compile(
    r'''(['"])(?:(?!\1)[^\\\n]|\\.)*\1'''
    r'''|`(?:[^`\\]|\\.)*`'''
    r'''|//[^\n]*|/\*[\s\S]*?\*/'''
)
_IDENTIFIER = re.compile(r'\b(\w+)\b')


def probe_module(base: str) -> Optional[str]:
    """Resolve a module path the way bundlers do: file, extensions, then index."""
    found = existing_file(base)
    if found:
        return found

    stem, ext = os.path.splitext(base)
    for source_ext in _SOURCE_FOR_OUTPUT.get(ext, ()):
        found = existing_file(stem + source_ext)
        if found:
            return found

    for ext in JS_EXTENSIONS:
        found = existing_file(base + ext)
        if found:
            return found

    if os.path.isdir(base):
        for ext in JS_EXTENSIONS:
            found = existing_file(os.path.join(base, f"index{ext}"))
            if found:
                return found
    return None


def code_identifiers(content: str) -> List[str]:
    """Identifiers outside comments, strings and template literals, first-seen order."""
    text = _NON_CODE.sub(' ', content)
    return unique(_IDENTIFIER.findall(text))


class JavaScriptResolver(ImportResolver):
    """Resolver for javascript, jsx, typescript, tsx and vue script imports."""

    def __init__(self, root_directory: str = "", aliases: Optional[PathAliases] = None,
                 auto_imports: Optional[Dict[str, str]] = None):
        super().__init__(root_directory)
        self.aliases = aliases or PathAliases(base_url=self.root_directory)
        self.auto_imports = auto_imports or {}

    def resolve(self, site: ImportSite, current_file: str) -> List[str]:
        return self.resolve_specifier(site.specifier, current_file)

    def resolve_specifier(self, specifier: str, current_file: str) -> List[str]:
        if specifier.startswith('.'):
            found = probe_module(os.path.normpath(os.path.join(os.path.dirname(current_file), specifier)))
            return [found] if found else []

        for candidate in self.aliases.match(specifier):
            found = probe_module(candidate)
            if found:
                return [found]
        return []

    def resolve_file(self, sites: List[ImportSite], current_file: str, content: str) -> List[str]:
        resolved = super().resolve_file(sites, current_file, content)
        if self.auto_imports and not current_file.endswith('.d.ts'):
            resolved.extend(self.auto_import_dependencies(content))
        return unique(resolved)

    def auto_import_dependencies(self, content: str) -> List[str]:
        """Files providing identifiers the code uses without importing them."""
        deps = []
        for name in code_identifiers(content):
            target = self.auto_imports.get(name)
            if target:
                found = probe_module(target)
                if found:
                    deps.append(found)
        return unique(deps)
