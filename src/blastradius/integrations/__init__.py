"""Project-level collaborators: git, compiler configs, auto-imports and Vue."""

from .auto_imports import ComponentResolver, create_component_resolver, load_auto_imports
from .tsconfig import PathAliases, load_path_aliases, parse_jsonc
from .vue import SfcDescriptor, is_nuxt_project, is_vue_project, parse_sfc, template_components

__all__ = [
    "ComponentResolver", "create_component_resolver", "load_auto_imports",
    "PathAliases", "load_path_aliases", "parse_jsonc",
    "SfcDescriptor", "is_nuxt_project", "is_vue_project", "parse_sfc", "template_components",
]
