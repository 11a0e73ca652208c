"""JavaScript/TypeScript/JSX/TSX analyzer (one grammar family)."""

from typing import Iterable, Optional

from tree_sitter import Node

from .symbols import ImportSite, Reference, Symbol
from .tree_sitter_parser import TreeSitterAnalyzer, WalkContext, find_ancestor, node_text, strip_quotes

FUNCTION_VALUE_TYPES = ('arrow_function', 'function_expression', 'function', 'generator_function')
CLASS_TYPES = ('class_declaration', 'abstract_class_declaration', 'class')


def expression_name(node: Optional[Node]) -> Optional[str]:
    """Best-effort simple name of an identifier-like or member expression."""
    if node is None:
        return None
    if node.type in ('identifier', 'type_identifier', 'property_identifier',
                     'private_property_identifier', 'jsx_identifier', 'shorthand_property_identifier'):
        return node_text(node)
    if node.type == 'member_expression':
        return expression_name(node.child_by_field_name('property'))
    if node.type in ('nested_identifier', 'nested_type_identifier'):
        name = node.child_by_field_name('name')
        if name is None and node.named_children:
            name = node.named_children[-1]
        return expression_name(name)
    if node.type == 'generic_type':
        name = node.child_by_field_name('name')
        if name is None and node.named_children:
            name = node.named_children[0]
        return expression_name(name)
    return None


class JavaScriptAnalyzer(TreeSitterAnalyzer):
    """Analyzer for javascript, jsx, typescript and tsx sources."""

    declaration_types = (
        'function_declaration', 'generator_function_declaration', 'variable_declarator',
        'method_definition', 'class_declaration', 'abstract_class_declaration',
        'public_field_definition', 'field_definition',
    )

    def _symbols_for_node(self, node: Node, file_path: str) -> Iterable[Symbol]:
        t = node.type
        if t in ('function_declaration', 'generator_function_declaration'):
            name = node.child_by_field_name('name')
            if name is not None:
                yield self._symbol(node_text(name), 'function', node, file_path)

        elif t == 'variable_declarator':
            name = node.child_by_field_name('name')
            value = node.child_by_field_name('value')
            if name is not None and name.type == 'identifier' and value is not None \
                    and value.type in FUNCTION_VALUE_TYPES:
                yield self._symbol(node_text(name), 'function', node, file_path)

        elif t in ('class_declaration', 'abstract_class_declaration'):
            name = node.child_by_field_name('name')
            if name is not None:
                yield self._symbol(node_text(name), 'class', node, file_path)

        elif t == 'method_definition':
            name = node.child_by_field_name('name')
            if name is not None:
                yield self._symbol(node_text(name), 'method', node, file_path,
                                   parent=self._class_name(node))

        elif t in ('public_field_definition', 'field_definition'):
            # Class fields holding arrow functions behave like methods
            name = node.child_by_field_name('name') or node.child_by_field_name('property')
            value = node.child_by_field_name('value')
            if name is not None and value is not None and value.type in FUNCTION_VALUE_TYPES:
                yield self._symbol(node_text(name), 'method', node, file_path,
                                   parent=self._class_name(node))

        elif t == 'interface_declaration':
            name = node.child_by_field_name('name')
            if name is not None:
                yield self._symbol(node_text(name), 'interface', node, file_path)

        elif t == 'type_alias_declaration':
            name = node.child_by_field_name('name')
            if name is not None:
                yield self._symbol(node_text(name), 'type', node, file_path)

    def _class_name(self, node: Node) -> Optional[str]:
        cls = find_ancestor(node, CLASS_TYPES)
        if cls is None:
            return None
        name = cls.child_by_field_name('name')
        return node_text(name) if name is not None else None

    def _references_for_node(self, node: Node, ctx: WalkContext) -> Iterable[Reference]:
        t = node.type
        if t == 'call_expression':
            callee = node.child_by_field_name('function')
            name = expression_name(callee)
            if name and name != 'require':
                yield self._reference(name, 'function', callee, ctx, 'call', site=node)

        elif t == 'new_expression':
            ctor = node.child_by_field_name('constructor')
            name = expression_name(ctor)
            if name:
                yield self._reference(name, 'class', ctor, ctx, 'call', site=node)

        elif t in ('jsx_opening_element', 'jsx_self_closing_element'):
            tag = node.child_by_field_name('name')
            name = expression_name(tag)
            # Lowercase tags are intrinsic elements (div, span, ...)
            if name and (name[0].isupper() or tag.type != 'identifier'):
                yield self._reference(name, 'function', tag, ctx, 'reference', site=node)

        elif t in ('class_declaration', 'abstract_class_declaration', 'class'):
            for heritage in node.named_children:
                if heritage.type == 'class_heritage':
                    yield from self._heritage_references(heritage, node, ctx)

        elif t == 'interface_declaration':
            for child in node.named_children:
                if child.type == 'extends_type_clause':
                    for base in child.named_children:
                        name = expression_name(base)
                        if name:
                            yield self._reference(name, 'interface', base, ctx, 'inherit', site=node)

    def _heritage_references(self, heritage: Node, cls: Node, ctx: WalkContext) -> Iterable[Reference]:
        for clause in heritage.named_children:
            if clause.type == 'extends_clause':
                bases, kind = clause.named_children, 'class'
            elif clause.type == 'implements_clause':
                bases, kind = clause.named_children, 'interface'
            else:
                # JavaScript grammar: the extended expression hangs off class_heritage
                bases, kind = [clause], 'class'
            for base in bases:
                name = expression_name(base)
                if name:
                    yield self._reference(name, kind, base, ctx, 'inherit', site=cls)

    def _imports_for_node(self, node: Node) -> Iterable[ImportSite]:
        t = node.type
        if t in ('import_statement', 'export_statement'):
            source = node.child_by_field_name('source')
            if source is not None and source.type == 'string':
                yield ImportSite(
                    specifier=strip_quotes(node_text(source)),
                    line=node.start_point[0] + 1,
                    names=tuple(self._imported_names(node)),
                    kind='import' if t == 'import_statement' else 'export',
                )

        elif t == 'call_expression':
            callee = node.child_by_field_name('function')
            args = node.child_by_field_name('arguments')
            if callee is None or args is None or not args.named_children:
                return
            first = args.named_children[0]
            if first.type != 'string':
                return
            if callee.type == 'identifier' and node_text(callee) == 'require':
                yield ImportSite(strip_quotes(node_text(first)), node.start_point[0] + 1, kind='require')
            elif callee.type == 'import':
                yield ImportSite(strip_quotes(node_text(first)), node.start_point[0] + 1, kind='dynamic')

    def _imported_names(self, node: Node) -> Iterable[str]:
        for child in node.named_children:
            if child.type != 'import_clause':
                continue
            for part in child.named_children:
                if part.type == 'identifier':
                    yield node_text(part)
                elif part.type == 'named_imports':
                    for spec in part.named_children:
                        name = spec.child_by_field_name('name')
                        if name is not None:
                            yield node_text(name)
