"""Python analyzer."""

from typing import Iterable, Optional

from tree_sitter import Node

from .symbols import ImportSite, Reference, Symbol
from .tree_sitter_parser import TreeSitterAnalyzer, WalkContext, node_text


def _simple_name(node: Optional[Node]) -> Optional[str]:
    if node is None:
        return None
    if node.type == 'identifier':
        return node_text(node)
    if node.type == 'attribute':
        return _simple_name(node.child_by_field_name('attribute'))
    return None


def _dotted(node: Optional[Node]) -> Optional[str]:
    if node is None:
        return None
    if node.type == 'aliased_import':
        return _dotted(node.child_by_field_name('name'))
    if node.type in ('dotted_name', 'relative_import', 'identifier'):
        return node_text(node)
    return None


class PythonAnalyzer(TreeSitterAnalyzer):
    """Analyzer for Python sources."""

    declaration_types = ('function_definition', 'class_definition')

    def _symbols_for_node(self, node: Node, file_path: str) -> Iterable[Symbol]:
        if node.type == 'function_definition':
            name = node.child_by_field_name('name')
            if name is None:
                return
            owner = self._owning_class(node)
            if owner is not None:
                yield self._symbol(node_text(name), 'method', node, file_path,
                                   parent=node_text(owner.child_by_field_name('name')))
            else:
                yield self._symbol(node_text(name), 'function', node, file_path)

        elif node.type == 'class_definition':
            name = node.child_by_field_name('name')
            if name is not None:
                yield self._symbol(node_text(name), 'class', node, file_path)

    def _owning_class(self, node: Node) -> Optional[Node]:
        """Class whose body directly holds this function (decorators allowed)."""
        parent = node.parent
        if parent is not None and parent.type == 'decorated_definition':
            parent = parent.parent
        if parent is not None and parent.type == 'block':
            owner = parent.parent
            if owner is not None and owner.type == 'class_definition':
                return owner
        return None

    def _references_for_node(self, node: Node, ctx: WalkContext) -> Iterable[Reference]:
        if node.type == 'call':
            callee = node.child_by_field_name('function')
            name = _simple_name(callee)
            if name:
                yield self._reference(name, 'function', callee, ctx, 'call', site=node)

        elif node.type == 'class_definition':
            bases = node.child_by_field_name('superclasses')
            if bases is None:
                return
            for base in bases.named_children:
                name = _simple_name(base)
                if name:
                    yield self._reference(name, 'class', base, ctx, 'inherit', site=node)

    def _imports_for_node(self, node: Node) -> Iterable[ImportSite]:
        line = node.start_point[0] + 1
        if node.type == 'import_statement':
            for target in node.children_by_field_name('name'):
                module = _dotted(target)
                if module:
                    yield ImportSite(specifier=module, line=line, kind='import')

        elif node.type == 'import_from_statement':
            module = _dotted(node.child_by_field_name('module_name'))
            if not module:
                return
            names = tuple(
                name for name in (_dotted(n) for n in node.children_by_field_name('name')) if name
            )
            yield ImportSite(specifier=module, line=line, names=names, kind='from_import')
