"""Go analyzer with structural (implicit) interface detection."""

import logging
import re
from typing import Dict, Iterable, List, Optional, Set

from tree_sitter import Node, Tree

from .symbols import ImportSite, LineRange, Reference, Referrer, Snippet, Symbol
from .tree_sitter_parser import (
    TreeSitterAnalyzer, WalkContext, first_descendant, node_text, strip_quotes, walk
)

logger = logging.getLogger(__name__)

INTERFACE_PATTERN = re.compile(r'type\s+([A-Za-z_]\w*)\s+interface\s*\{([\s\S]*?)\}')
RECEIVER_PATTERN = re.compile(
    r'func\s*\(\s*(?:[A-Za-z_]\w*\s+)?\*?([A-Za-z_]\w*)\s*\)\s*([A-Za-z_]\w*)\s*\('
)
INTERFACE_METHOD_PATTERN = re.compile(r'^\s*([A-Z_]\w*)\s*\(', re.MULTILINE | re.IGNORECASE)

INTERFACE_METHOD_TYPES = ('method_elem', 'method_spec')


def receiver_type(method: Node) -> Optional[Node]:
    """Type identifier of a method's receiver, with any pointer stripped."""
    return first_descendant(method.child_by_field_name('receiver'), ('type_identifier',))


def needs_structural_fallback(refs: List[Reference]) -> bool:
    """The text heuristic runs only when the tree pass found no inheritance."""
    return all(ref.referrer.kind != 'inherit' for ref in refs)


class GoAnalyzer(TreeSitterAnalyzer):
    """Analyzer for Go sources."""

    declaration_types = ('function_declaration', 'method_declaration', 'type_spec')

    def _symbols_for_node(self, node: Node, file_path: str) -> Iterable[Symbol]:
        t = node.type
        if t == 'function_declaration':
            name = node.child_by_field_name('name')
            if name is not None:
                yield self._symbol(node_text(name), 'function', node, file_path)

        elif t == 'method_declaration':
            name = node.child_by_field_name('name')
            if name is not None:
                receiver = receiver_type(node)
                yield self._symbol(node_text(name), 'method', node, file_path,
                                   parent=node_text(receiver) if receiver is not None else None)

        elif t == 'type_spec':
            name = node.child_by_field_name('name')
            body = node.child_by_field_name('type')
            if name is None:
                return
            if body is not None and body.type == 'struct_type':
                kind = 'class'
            elif body is not None and body.type == 'interface_type':
                kind = 'interface'
            else:
                kind = 'type'
            yield self._symbol(node_text(name), kind, node, file_path)

    def _references_for_node(self, node: Node, ctx: WalkContext) -> Iterable[Reference]:
        if node.type != 'call_expression':
            return
        callee = node.child_by_field_name('function')
        if callee is None:
            return
        if callee.type == 'identifier':
            yield self._reference(node_text(callee), 'function', callee, ctx, 'call', site=node)
        elif callee.type == 'selector_expression':
            field = callee.child_by_field_name('field')
            if field is not None:
                yield self._reference(node_text(field), 'method', field, ctx, 'call', site=node)

    def _file_references(self, tree: Tree, ctx: WalkContext,
                         refs: List[Reference]) -> Iterable[Reference]:
        structural = list(self._structural_references(tree, ctx))
        if needs_structural_fallback(refs + structural):
            structural = list(self._text_structural_references(ctx))
            if structural:
                logger.debug("Structural interface matches in %s found by text scan", ctx.file_path)
        return structural

    def _structural_references(self, tree: Tree, ctx: WalkContext) -> Iterable[Reference]:
        interfaces: Dict[str, Set[str]] = {}
        type_specs: Dict[str, Node] = {}
        methods: Dict[str, Set[str]] = {}
        first_method: Dict[str, Node] = {}

        for node in walk(tree.root_node):
            if node.type == 'type_spec':
                name = node.child_by_field_name('name')
                body = node.child_by_field_name('type')
                if name is None:
                    continue
                if body is not None and body.type == 'interface_type':
                    interfaces[node_text(name)] = {
                        node_text(elem.child_by_field_name('name'))
                        for elem in body.named_children
                        if elem.type in INTERFACE_METHOD_TYPES and elem.child_by_field_name('name') is not None
                    }
                else:
                    type_specs[node_text(name)] = node

            elif node.type == 'method_declaration':
                receiver = receiver_type(node)
                name = node.child_by_field_name('name')
                if receiver is None or name is None:
                    continue
                owner = node_text(receiver)
                methods.setdefault(owner, set()).add(node_text(name))
                first_method.setdefault(owner, node)

        for owner, method_names in methods.items():
            site = type_specs.get(owner) or first_method[owner]
            name_node = site.child_by_field_name('name') or site
            for iface_name, iface_methods in interfaces.items():
                if iface_methods and iface_methods <= method_names:
                    yield self._reference(iface_name, 'interface', name_node, ctx, 'inherit', site=site)

    def _text_structural_references(self, ctx: WalkContext) -> Iterable[Reference]:
        """Regex scan used when the tree pass yields no inheritance."""
        text = '\n'.join(ctx.lines)
        interfaces: Dict[str, Set[str]] = {}
        for match in INTERFACE_PATTERN.finditer(text):
            names = set(INTERFACE_METHOD_PATTERN.findall(match.group(2)))
            if names:
                interfaces[match.group(1)] = names

        receivers: Dict[str, Set[str]] = {}
        sites: Dict[str, int] = {}
        for match in RECEIVER_PATTERN.finditer(text):
            receivers.setdefault(match.group(1), set()).add(match.group(2))
            sites.setdefault(match.group(1), match.start())

        for owner, method_names in receivers.items():
            for iface_name, iface_methods in interfaces.items():
                if iface_methods <= method_names:
                    yield self._text_reference(iface_name, text, sites[owner], ctx)

    def _text_reference(self, iface_name: str, text: str, offset: int, ctx: WalkContext) -> Reference:
        line = text.count('\n', 0, offset) + 1
        column = offset - (text.rfind('\n', 0, offset) + 1)
        return Reference(
            symbol=Symbol(
                name=iface_name,
                kind='interface',
                file_path=ctx.file_path,
                range=LineRange(line, line, column, column),
                language=self.language,
            ),
            referrer=Referrer(file_path=ctx.file_path, line=line, column=column, kind='inherit'),
            context=Snippet(
                file_path=ctx.file_path,
                kind='statement',
                start_line=line,
                end_line=line,
                code=ctx.code(line, line),
            ),
        )

    def _imports_for_node(self, node: Node) -> Iterable[ImportSite]:
        if node.type != 'import_spec':
            return
        path = node.child_by_field_name('path')
        if path is not None:
            yield ImportSite(specifier=strip_quotes(node_text(path)), line=node.start_point[0] + 1)
