"""C/C++ analyzer."""

from typing import Iterable, Optional

from tree_sitter import Node

from .symbols import ImportSite, Reference, Symbol
from .tree_sitter_parser import TreeSitterAnalyzer, WalkContext, find_ancestor, node_text, strip_quotes

NAME_TYPES = ('identifier', 'qualified_identifier', 'field_identifier', 'destructor_name', 'operator_name')
CLASS_TYPES = ('class_specifier', 'struct_specifier')


def declarator_name(node: Optional[Node]) -> Optional[Node]:
    """Follow a declarator chain (function/pointer/reference) down to its name."""
    while node is not None and node.type not in NAME_TYPES:
        inner = node.child_by_field_name('declarator')
        if inner is None:
            inner = next((c for c in node.named_children if 'declarator' in c.type or c.type in NAME_TYPES), None)
        node = inner
    return node


def _callee_name(callee: Optional[Node]) -> Optional[str]:
    if callee is None:
        return None
    if callee.type in ('identifier', 'qualified_identifier'):
        return node_text(callee)
    if callee.type == 'field_expression':
        field = callee.child_by_field_name('field')
        return node_text(field) if field is not None else None
    if callee.type == 'template_function':
        return _callee_name(callee.child_by_field_name('name'))
    return None


class CppAnalyzer(TreeSitterAnalyzer):
    """Analyzer for C and C++ sources."""

    declaration_types = ('function_definition',) + CLASS_TYPES

    def _symbols_for_node(self, node: Node, file_path: str) -> Iterable[Symbol]:
        if node.type == 'function_definition':
            name = declarator_name(node.child_by_field_name('declarator'))
            if name is None:
                return
            text = node_text(name)
            if '::' in text:
                yield self._symbol(text, 'method', node, file_path)
                return
            owner = self._owning_class(node)
            if owner is not None:
                yield self._symbol(text, 'method', node, file_path, parent=owner)
            else:
                yield self._symbol(text, 'function', node, file_path)

        elif node.type in CLASS_TYPES:
            name = node.child_by_field_name('name')
            if name is not None and node.child_by_field_name('body') is not None:
                yield self._symbol(node_text(name), 'class', node, file_path)

    def _owning_class(self, node: Node) -> Optional[str]:
        if node.parent is None or node.parent.type != 'field_declaration_list':
            return None
        cls = find_ancestor(node, CLASS_TYPES)
        name = cls.child_by_field_name('name') if cls is not None else None
        return node_text(name) if name is not None else None

    def _references_for_node(self, node: Node, ctx: WalkContext) -> Iterable[Reference]:
        if node.type == 'call_expression':
            callee = node.child_by_field_name('function')
            name = _callee_name(callee)
            if name:
                yield self._reference(name, 'function', callee, ctx, 'call', site=node)

        elif node.type in CLASS_TYPES:
            for clause in node.named_children:
                if clause.type != 'base_class_clause':
                    continue
                for base in clause.named_children:
                    if base.type in ('type_identifier', 'qualified_identifier'):
                        name = node_text(base)
                    elif base.type == 'template_type':
                        name = node_text(base.child_by_field_name('name'))
                    else:
                        continue
                    if name:
                        yield self._reference(name, 'class', base, ctx, 'inherit', site=node)

    def _imports_for_node(self, node: Node) -> Iterable[ImportSite]:
        if node.type != 'preproc_include':
            return
        path = node.child_by_field_name('path')
        if path is None:
            return
        kind = 'system_include' if path.type == 'system_lib_string' else 'include'
        yield ImportSite(specifier=strip_quotes(node_text(path)), line=node.start_point[0] + 1, kind=kind)
