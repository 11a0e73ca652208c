"""Vue single-file component support: project detection and SFC scanning."""

import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)

VUE_PACKAGES = ('vue', 'nuxt', 'vitepress', '@slidev/cli')
NUXT_CONFIG_FILES = ('nuxt.config.ts', 'nuxt.config.js')

_HTML_COMMENT = re.compile(r'<!--[\s\S]*?-->')
# Greedy so nested <template v-slot> blocks stay inside the root template
_TEMPLATE_BLOCK = re.compile(r'<template\b[^>]*>([\s\S]*)</template>')
_SCRIPT_BLOCK = re.compile(r'<script\b([^>]*)>([\s\S]*?)</script>')
_LANG_ATTR = re.compile(r'''\blang\s*=\s*["']?(\w+)''')
_TAG = re.compile(r'<([A-Za-z][\w.-]*)')

_SCRIPT_LANGUAGES = {'ts': 'typescript', 'tsx': 'tsx', 'jsx': 'jsx', 'js': 'javascript'}


@dataclass
class ScriptBlock:
    """A <script> or <script setup> block of an SFC."""
    content: str
    language: str = 'javascript'


@dataclass
class SfcDescriptor:
    """The template and script blocks of a .vue file."""
    template: Optional[str] = None
    scripts: List[ScriptBlock] = field(default_factory=list)


def parse_sfc(content: str) -> SfcDescriptor:
    content = _HTML_COMMENT.sub('', content)
    descriptor = SfcDescriptor()

    for match in _SCRIPT_BLOCK.finditer(content):
        lang = _LANG_ATTR.search(match.group(1))
        language = _SCRIPT_LANGUAGES.get(lang.group(1).lower(), 'javascript') if lang else 'javascript'
        descriptor.scripts.append(ScriptBlock(content=match.group(2), language=language))

    without_scripts = _SCRIPT_BLOCK.sub('', content)
    template = _TEMPLATE_BLOCK.search(without_scripts)
    if template:
        descriptor.template = template.group(1)
    return descriptor


def template_components(template: Optional[str]) -> List[str]:
    """Component tags used in a template, in first-use order.

    Components are tags with an uppercase letter or a dash; plain lowercase
    tags are HTML elements.
    """
    if not template:
        return []
    seen = []
    for tag in _TAG.findall(template):
        if (any(c.isupper() for c in tag) or '-' in tag) and tag not in seen:
            seen.append(tag)
    return seen


def _package_declares(root_directory: str) -> bool:
    path = os.path.join(root_directory, 'package.json')
    try:
        with open(path, 'r', encoding='utf-8') as f:
            manifest = json.load(f)
    except (OSError, ValueError):
        return False
    if not isinstance(manifest, dict):
        return False
    for section in ('dependencies', 'devDependencies', 'peerDependencies'):
        deps = manifest.get(section) or {}
        if any(name in deps for name in VUE_PACKAGES):
            return True
    return False


def is_vue_project(root_directory: Optional[str] = None) -> bool:
    """True when the project depends on a Vue ecosystem package."""
    root_directory = os.path.abspath(root_directory or os.getcwd())
    if _package_declares(root_directory):
        return True
    return any(
        os.path.isfile(os.path.join(root_directory, 'node_modules', name, 'package.json'))
        for name in VUE_PACKAGES
    )


def is_nuxt_project(root_directory: Optional[str] = None) -> bool:
    root_directory = os.path.abspath(root_directory or os.getcwd())
    return any(os.path.isfile(os.path.join(root_directory, name)) for name in NUXT_CONFIG_FILES)
