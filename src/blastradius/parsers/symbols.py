"""Symbols, references and snippets produced by the syntax analyzers."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

SYMBOL_KINDS = ('function', 'class', 'method', 'variable', 'import', 'export', 'interface', 'type')
REFERENCE_KINDS = ('call', 'reference', 'import', 'inherit')
SNIPPET_KINDS = ('function', 'class', 'method', 'block', 'statement')
CHANGE_TYPES = ('added', 'modified', 'deleted')


@dataclass(frozen=True)
class LineRange:
    """Source range with 1-indexed inclusive lines and 0-indexed columns."""
    start_line: int
    end_line: int
    start_column: int = 0
    end_column: int = 0

    def overlaps(self, other: 'LineRange') -> bool:
        return not (self.end_line < other.start_line or self.start_line > other.end_line)

    @classmethod
    def from_node(cls, node) -> 'LineRange':
        """Build a range from a tree-sitter node."""
        return cls(
            start_line=node.start_point[0] + 1,
            end_line=node.end_point[0] + 1,
            start_column=node.start_point[1],
            end_column=node.end_point[1],
        )


@dataclass(frozen=True)
class Symbol:
    """A declaration found in a single file."""
    name: str
    kind: str  # one of SYMBOL_KINDS
    file_path: str
    range: LineRange
    language: str
    parent: Optional[str] = None

    @property
    def short_name(self) -> str:
        """Name without namespace/class qualification (``N::foo`` -> ``foo``)."""
        return self.name.rsplit('::', 1)[-1].rsplit('.', 1)[-1]


@dataclass(frozen=True)
class Snippet:
    """A slice of source text a reviewer should look at."""
    file_path: str
    kind: str  # one of SNIPPET_KINDS
    start_line: int
    end_line: int
    code: str
    name: Optional[str] = None
    symbols_used: Tuple[Symbol, ...] = ()
    reason: Optional[str] = None


@dataclass(frozen=True)
class Referrer:
    """The site that refers to a symbol."""
    file_path: str
    line: int
    column: int
    kind: str  # one of REFERENCE_KINDS


@dataclass(frozen=True)
class Reference:
    """A call, element usage or inheritance clause pointing at a symbol."""
    symbol: Symbol
    referrer: Referrer
    context: Snippet


@dataclass
class AffectedSymbol:
    """A symbol whose definition overlaps a changed line span."""
    symbol: Symbol
    change_type: str  # one of CHANGE_TYPES
    change_lines: LineRange
    referenced_by: List[Reference] = field(default_factory=list)
    definition: Optional[Snippet] = None


@dataclass(frozen=True)
class ImportSite:
    """A raw import/include/require specifier found in a file."""
    specifier: str
    line: int
    names: Tuple[str, ...] = ()
    kind: str = 'import'  # import, export, require, dynamic, include, system_include


def names_match(reference_name: str, symbol: Symbol) -> bool:
    """Check whether a reference name points at the given symbol."""
    if reference_name == symbol.name:
        return True
    short = reference_name.rsplit('::', 1)[-1].rsplit('.', 1)[-1]
    return short == symbol.short_name
