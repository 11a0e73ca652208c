"""Tree-sitter based code analysis shared by every language analyzer."""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence

from tree_sitter import Node, Tree

from .grammars import canonical_language, parse_source
from .symbols import (
    AffectedSymbol, ImportSite, LineRange, Reference, Referrer, Snippet, Symbol
)

logger = logging.getLogger(__name__)

_SNIPPET_KIND_BY_SYMBOL_KIND = {
    'function': 'function',
    'method': 'method',
    'class': 'class',
    'interface': 'class',
    'type': 'class',
}


def node_text(node: Optional[Node]) -> str:
    """Decode the source text of a node."""
    if node is None or node.text is None:
        return ''
    return node.text.decode('utf8', errors='replace')


def walk(root: Node) -> Iterator[Node]:
    """Yield named nodes depth-first in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.named_children))


def first_descendant(root: Optional[Node], types: Sequence[str]) -> Optional[Node]:
    """Find the first node (breadth-first) whose type is in types."""
    if root is None:
        return None
    queue = [root]
    while queue:
        node = queue.pop(0)
        if node.type in types:
            return node
        queue.extend(node.named_children)
    return None


def find_ancestor(node: Node, types: Sequence[str]) -> Optional[Node]:
    parent = node.parent
    while parent is not None:
        if parent.type in types:
            return parent
        parent = parent.parent
    return None


def strip_quotes(text: str) -> str:
    """Remove surrounding quote characters from a string literal."""
    text = text.strip()
    if len(text) >= 2 and text[0] in '\'"`<' and text[-1] in '\'"`>':
        return text[1:-1]
    return text


@dataclass
class WalkContext:
    """Per-call state threaded through a tree walk."""
    file_path: str
    lines: List[str]

    def code(self, start_line: int, end_line: int) -> str:
        return '\n'.join(self.lines[start_line - 1:end_line])


class TreeSitterAnalyzer:
    """Base analyzer: parses text and walks the tree for one language.

    Subclasses describe the language's tree shapes through the
    ``_symbols_for_node``, ``_references_for_node`` and ``_imports_for_node``
    hooks. The analyzer keeps no per-call state, so one instance can be
    shared across threads.
    """

    # Node types that start a declaration; used to find the enclosing
    # function/class of a reference site
    declaration_types: Sequence[str] = ()

    def __init__(self, language: str, priority: int = 100):
        self.language = language
        self.priority = priority
        self.grammar_language = canonical_language(language)

    def __repr__(self):
        return f"{type(self).__name__}(language={self.language!r}, priority={self.priority})"

    def parse(self, content: str) -> Optional[Tree]:
        """Parse content, returning None when the grammar is unavailable."""
        return parse_source(content, self.grammar_language)

    def extract_symbols(self, file_path: str, content: str) -> List[Symbol]:
        """Extract declared symbols from source text."""
        tree = self.parse(content)
        if tree is None:
            return []

        symbols = []
        for node in walk(tree.root_node):
            symbols.extend(self._symbols_for_node(node, file_path))
        return symbols

    def extract_references(self, file_path: str, content: str) -> List[Reference]:
        """Extract call, element-usage and inheritance references."""
        tree = self.parse(content)
        if tree is None:
            return []

        ctx = WalkContext(file_path=file_path, lines=content.split('\n'))
        refs = []
        for node in walk(tree.root_node):
            refs.extend(self._references_for_node(node, ctx))
        refs.extend(self._file_references(tree, ctx, refs))
        return refs

    def extract_imports(self, file_path: str, content: str) -> List[ImportSite]:
        """Extract raw import/include specifiers."""
        tree = self.parse(content)
        if tree is None:
            return []

        sites = []
        for node in walk(tree.root_node):
            sites.extend(self._imports_for_node(node))
        return sites

    def find_affected_symbols(self, file_path: str, content: str,
                              changed_lines: LineRange) -> List[AffectedSymbol]:
        """Return every symbol whose range overlaps the changed lines."""
        lines = content.split('\n')
        affected = []
        for symbol in self.extract_symbols(file_path, content):
            if symbol.range.overlaps(changed_lines):
                affected.append(AffectedSymbol(
                    symbol=symbol,
                    change_type='modified',
                    change_lines=LineRange(changed_lines.start_line, changed_lines.end_line),
                    definition=self.definition_snippet(symbol, lines),
                ))
        return affected

    def extract_code_snippet(self, file_path: str, content: str, start_line: int,
                             end_line: int, context_lines: int = 0) -> Snippet:
        """Materialize the text between two lines, clamped to the file."""
        lines = content.split('\n')
        start = max(1, start_line - context_lines)
        end = min(len(lines), end_line + context_lines)
        return Snippet(
            file_path=file_path,
            kind='block',
            start_line=start,
            end_line=end,
            code='\n'.join(lines[start - 1:end]),
        )

    # Hooks implemented per language

    def _symbols_for_node(self, node: Node, file_path: str) -> Iterable[Symbol]:
        return ()

    def _references_for_node(self, node: Node, ctx: WalkContext) -> Iterable[Reference]:
        return ()

    def _imports_for_node(self, node: Node) -> Iterable[ImportSite]:
        return ()

    def _file_references(self, tree: Tree, ctx: WalkContext,
                         refs: List[Reference]) -> Iterable[Reference]:
        """Whole-file references computed after the walk (e.g. structural typing)."""
        return ()

    # Helpers for subclasses

    def _symbol(self, name: str, kind: str, node: Node, file_path: str,
                parent: Optional[str] = None) -> Symbol:
        if parent is None and '::' in name:
            parent = name[:name.rindex('::')]
        return Symbol(
            name=name,
            kind=kind,
            file_path=file_path,
            range=LineRange.from_node(node),
            language=self.language,
            parent=parent,
        )

    def _reference(self, name: str, symbol_kind: str, name_node: Node, ctx: WalkContext,
                   referrer_kind: str = 'call', site: Optional[Node] = None) -> Reference:
        site = site or name_node
        return Reference(
            symbol=Symbol(
                name=name,
                kind=symbol_kind,
                file_path=ctx.file_path,
                range=LineRange.from_node(name_node),
                language=self.language,
            ),
            referrer=Referrer(
                file_path=ctx.file_path,
                line=site.start_point[0] + 1,
                column=site.start_point[1],
                kind=referrer_kind,
            ),
            context=self._context_snippet(site, ctx),
        )

    def _context_snippet(self, site: Node, ctx: WalkContext) -> Snippet:
        """Snippet for the declaration enclosing a site, or the site itself."""
        enclosing = site if site.type in self.declaration_types else None
        if enclosing is None and self.declaration_types:
            enclosing = find_ancestor(site, self.declaration_types)
        while enclosing is not None:
            for symbol in self._symbols_for_node(enclosing, ctx.file_path):
                start, end = symbol.range.start_line, symbol.range.end_line
                return Snippet(
                    file_path=ctx.file_path,
                    kind=_SNIPPET_KIND_BY_SYMBOL_KIND.get(symbol.kind, 'block'),
                    name=symbol.name,
                    start_line=start,
                    end_line=end,
                    code=ctx.code(start, end),
                )
            # e.g. a variable declarator that does not hold a function
            enclosing = find_ancestor(enclosing, self.declaration_types)

        start = site.start_point[0] + 1
        end = site.end_point[0] + 1
        return Snippet(
            file_path=ctx.file_path,
            kind='statement',
            start_line=start,
            end_line=end,
            code=ctx.code(start, end),
        )

    def definition_snippet(self, symbol: Symbol, lines: List[str]) -> Snippet:
        """Snippet holding a symbol's whole declaration, taken from the given lines."""
        start, end = symbol.range.start_line, symbol.range.end_line
        return Snippet(
            file_path=symbol.file_path,
            kind=_SNIPPET_KIND_BY_SYMBOL_KIND.get(symbol.kind, 'block'),
            name=symbol.name,
            start_line=start,
            end_line=end,
            code='\n'.join(lines[start - 1:end]),
            symbols_used=(symbol,),
            reason=f"definition of {symbol.kind} {symbol.name}",
        )
