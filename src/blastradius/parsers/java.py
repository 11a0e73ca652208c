"""Java analyzer, including implicit interface implementation detection."""

from typing import Dict, Iterable, List, Optional, Set, Tuple

from tree_sitter import Node, Tree

from .symbols import ImportSite, Reference, Symbol
from .tree_sitter_parser import (
    TreeSitterAnalyzer, WalkContext, find_ancestor, first_descendant, node_text, walk
)

TYPE_DECLARATIONS = ('class_declaration', 'interface_declaration', 'enum_declaration', 'record_declaration')
CONCRETE_TYPES = ('class_declaration', 'enum_declaration', 'record_declaration')


def type_name(node: Optional[Node]) -> Optional[str]:
    """Simple name of a Java type node (generic arguments dropped)."""
    if node is None:
        return None
    if node.type in ('type_identifier', 'identifier', 'scoped_type_identifier'):
        return node_text(node)
    if node.type == 'generic_type' and node.named_children:
        return type_name(node.named_children[0])
    found = first_descendant(node, ('type_identifier', 'scoped_type_identifier'))
    return node_text(found) if found is not None and found is not node else None


def _type_list(node: Optional[Node]) -> List[Node]:
    """Flatten super_interfaces/extends_interfaces/superclass wrappers into type nodes."""
    if node is None:
        return []
    types = []
    for child in node.named_children:
        if child.type == 'type_list':
            types.extend(child.named_children)
        else:
            types.append(child)
    return types


def _body_method_names(body: Optional[Node]) -> Set[str]:
    names = set()
    if body is None:
        return names
    for member in body.named_children:
        if member.type == 'enum_body_declarations':
            names |= _body_method_names(member)
        elif member.type == 'method_declaration':
            name = member.child_by_field_name('name')
            if name is not None:
                names.add(node_text(name))
    return names


class JavaAnalyzer(TreeSitterAnalyzer):
    """Analyzer for Java sources."""

    declaration_types = TYPE_DECLARATIONS + ('method_declaration', 'constructor_declaration')

    def _symbols_for_node(self, node: Node, file_path: str) -> Iterable[Symbol]:
        t = node.type
        if t in CONCRETE_TYPES or t == 'interface_declaration':
            name = node.child_by_field_name('name')
            if name is not None:
                kind = 'interface' if t == 'interface_declaration' else 'class'
                yield self._symbol(node_text(name), kind, node, file_path)

        elif t in ('method_declaration', 'constructor_declaration'):
            name = node.child_by_field_name('name')
            if name is not None:
                owner = find_ancestor(node, TYPE_DECLARATIONS)
                parent = node_text(owner.child_by_field_name('name')) if owner is not None else None
                yield self._symbol(node_text(name), 'method', node, file_path, parent=parent or None)

    def _references_for_node(self, node: Node, ctx: WalkContext) -> Iterable[Reference]:
        t = node.type
        if t == 'method_invocation':
            name = node.child_by_field_name('name')
            if name is not None:
                yield self._reference(node_text(name), 'method', name, ctx, 'call', site=node)

        elif t == 'object_creation_expression':
            created = node.child_by_field_name('type')
            name = type_name(created)
            if name:
                yield self._reference(name, 'class', created, ctx, 'call', site=node)

        elif t in TYPE_DECLARATIONS:
            for base, kind in self._declared_supertypes(node):
                name = type_name(base)
                if name:
                    yield self._reference(name, kind, base, ctx, 'inherit', site=node)

    def _declared_supertypes(self, node: Node) -> List[Tuple[Node, str]]:
        """Explicit extends/implements clauses of a type declaration."""
        supertypes = []
        for base in _type_list(node.child_by_field_name('superclass')):
            supertypes.append((base, 'class'))
        for base in _type_list(node.child_by_field_name('interfaces')):
            supertypes.append((base, 'interface'))
        if node.type == 'interface_declaration':
            for child in node.named_children:
                if child.type == 'extends_interfaces':
                    supertypes.extend((base, 'interface') for base in _type_list(child))
        return supertypes

    def _file_references(self, tree: Tree, ctx: WalkContext,
                         refs: List[Reference]) -> Iterable[Reference]:
        """Structural matches: a class whose methods cover an interface's methods."""
        interfaces: Dict[str, Set[str]] = {}
        concrete: List[Tuple[str, Node, Set[str], Set[str]]] = []

        for node in walk(tree.root_node):
            if node.type not in TYPE_DECLARATIONS:
                continue
            name = node.child_by_field_name('name')
            if name is None:
                continue
            methods = _body_method_names(node.child_by_field_name('body'))
            if node.type == 'interface_declaration':
                interfaces[node_text(name)] = methods
            else:
                declared = {type_name(base) for base, _ in self._declared_supertypes(node)}
                concrete.append((node_text(name), node, methods, declared))

        for cls_name, cls_node, methods, declared in concrete:
            for iface_name, iface_methods in interfaces.items():
                if not iface_methods or iface_name in declared or iface_name == cls_name:
                    continue
                if iface_methods <= methods:
                    yield self._reference(iface_name, 'interface', cls_node.child_by_field_name('name'),
                                          ctx, 'inherit', site=cls_node)

    def _imports_for_node(self, node: Node) -> Iterable[ImportSite]:
        if node.type != 'import_declaration':
            return
        path = None
        wildcard = False
        static = False
        for child in node.children:
            if child.type in ('scoped_identifier', 'identifier'):
                path = node_text(child)
            elif child.type == 'asterisk':
                wildcard = True
            elif child.type == 'static':
                static = True
        if path:
            yield ImportSite(
                specifier=f"{path}.*" if wildcard else path,
                line=node.start_point[0] + 1,
                kind='static_import' if static else 'import',
            )
