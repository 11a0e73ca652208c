"""tsconfig/jsconfig path-alias loading and matching."""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

import _jsonnet

logger = logging.getLogger(__name__)

CONFIG_FILES = ('tsconfig.json', 'jsconfig.json')
NUXT_CONFIG_FILE = os.path.join('.nuxt', 'tsconfig.json')


def parse_jsonc(text: str, source: str = "<config>") -> Any:
    """Parse JSON that may contain comments and trailing commas.

    Any JSON document is also a Jsonnet document, and Jsonnet accepts both
    comment styles and trailing commas, so the text is evaluated as Jsonnet
    and its JSON output is decoded.
    """
    try:
        result = _jsonnet.evaluate_snippet(source, text)
    except RuntimeError as e:
        raise ValueError(f"Invalid config {source}: {e}") from e
    return json.loads(result)


@dataclass
class PathAliases:
    """Compiler path mappings resolved to absolute directories."""
    base_url: str
    paths: Dict[str, List[str]] = field(default_factory=dict)

    def match(self, specifier: str) -> List[str]:
        """Candidate absolute paths (without extension probing) for a specifier.

        Exact patterns win over wildcard ones; among wildcard patterns the
        longest prefix wins. A bare specifier always falls back to the base
        URL, the way the compiler treats an implicit ``*`` mapping.
        """
        if specifier in self.paths:
            return [self._join(target) for target in self.paths[specifier]]

        best = None
        best_prefix = -1
        for pattern in self.paths:
            if pattern.count('*') != 1:
                continue
            prefix, suffix = pattern.split('*')
            if specifier.startswith(prefix) and specifier.endswith(suffix) \
                    and len(specifier) >= len(prefix) + len(suffix) and len(prefix) > best_prefix:
                best, best_prefix = pattern, len(prefix)

        if best is not None:
            prefix, suffix = best.split('*')
            captured = specifier[len(prefix):len(specifier) - len(suffix)]
            return [self._join(target.replace('*', captured)) for target in self.paths[best]]

        return [self._join(specifier)]

    def _join(self, target: str) -> str:
        return os.path.normpath(os.path.join(self.base_url, target))


def find_config_file(root_directory: str, is_nuxt: bool = False) -> Optional[str]:
    """Locate the compiler config a project uses for path aliases."""
    candidates = list(CONFIG_FILES)
    if is_nuxt:
        candidates.insert(0, NUXT_CONFIG_FILE)
    for name in candidates:
        path = os.path.join(root_directory, name)
        if os.path.isfile(path):
            return path
    return None


def load_path_aliases(root_directory: Optional[str] = None, is_nuxt: bool = False) -> PathAliases:
    """Read baseUrl/paths from tsconfig.json or jsconfig.json, following extends."""
    root_directory = os.path.abspath(root_directory or os.getcwd())
    config_path = find_config_file(root_directory, is_nuxt)
    if config_path is None:
        return PathAliases(base_url=root_directory)

    options = _load_compiler_options(config_path, root_directory, set())
    base_url = options.get('baseUrl') or root_directory
    paths_base = options.get('_paths_base') or base_url
    paths = {}
    for pattern, targets in (options.get('paths') or {}).items():
        if isinstance(targets, list):
            paths[pattern] = [
                os.path.relpath(os.path.join(paths_base, t), base_url) for t in targets if isinstance(t, str)
            ]
    logger.debug("Loaded %d path aliases from %s", len(paths), config_path)
    return PathAliases(base_url=base_url, paths=paths)


def _load_compiler_options(config_path: str, root_directory: str, seen: Set[str]) -> Dict[str, Any]:
    """Merged compilerOptions with baseUrl made absolute."""
    config_path = os.path.abspath(config_path)
    if config_path in seen:
        return {}
    seen.add(config_path)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = parse_jsonc(f.read(), config_path)
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s: %s", config_path, e)
        return {}
    if not isinstance(config, dict):
        return {}

    merged: Dict[str, Any] = {}
    extends = config.get('extends')
    for parent in ([extends] if isinstance(extends, str) else extends or []):
        parent_path = _resolve_extends(parent, os.path.dirname(config_path), root_directory)
        if parent_path is not None:
            merged.update(_load_compiler_options(parent_path, root_directory, seen))

    options = config.get('compilerOptions') or {}
    config_dir = os.path.dirname(config_path)
    if isinstance(options.get('baseUrl'), str):
        merged['baseUrl'] = os.path.normpath(os.path.join(config_dir, options['baseUrl']))
    if isinstance(options.get('paths'), dict):
        merged['paths'] = options['paths']
        # Without baseUrl, paths are relative to the config that declares them
        merged['_paths_base'] = merged.get('baseUrl') or config_dir
    return merged


def _resolve_extends(name: str, config_dir: str, root_directory: str) -> Optional[str]:
    if name.startswith('.') or os.path.isabs(name):
        candidates = [os.path.join(config_dir, name)]
    else:
        candidates = [os.path.join(root_directory, 'node_modules', name)]
    for candidate in candidates:
        for path in (candidate, candidate + '.json', os.path.join(candidate, 'tsconfig.json')):
            if os.path.isfile(path):
                return path
    logger.debug("Could not resolve extended config '%s'", name)
    return None
