"""Pytest configuration and fixtures for blastradius tests."""

from pathlib import Path
from typing import Callable, Dict

import pytest

from blastradius.config import ScanConfiguration
from blastradius.parsers.registry import AnalyzerRegistry, create_default_registry
from blastradius.parsers.symbols import LineRange, Reference, Referrer, Snippet, Symbol


def write_project(root: Path, files: Dict[str, str]) -> Path:
    """Write a {relative path: content} mapping below root."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Factory writing project files into a temporary root."""
    def make(files: Dict[str, str]) -> Path:
        return write_project(tmp_path, files)
    return make


@pytest.fixture
def registry() -> AnalyzerRegistry:
    return create_default_registry()


# Grammar packages are optional at test time; tests that parse source skip
# when the grammar they need is not installed.

@pytest.fixture
def typescript():
    pytest.importorskip("tree_sitter_typescript")


@pytest.fixture
def python_grammar():
    pytest.importorskip("tree_sitter_python")


@pytest.fixture
def java():
    pytest.importorskip("tree_sitter_java")


@pytest.fixture
def go():
    pytest.importorskip("tree_sitter_go")


@pytest.fixture
def cpp():
    pytest.importorskip("tree_sitter_cpp")


BASIC_PROJECT = {
    "main.ts": (
        "import { add } from './utils/math';\n"
        "import { Header } from './components/Header';\n"
        "\n"
        "export function main() {\n"
        "  return Header() + add(1, 2);\n"
        "}\n"
    ),
    "components/Header.ts": (
        "import { Button } from './Button';\n"
        "\n"
        "export function Header() {\n"
        "  return Button();\n"
        "}\n"
    ),
    "components/Button.ts": (
        "import { add } from '../utils/math';\n"
        "\n"
        "export function Button() {\n"
        "  return add(2, 3);\n"
        "}\n"
    ),
    "utils/math.ts": (
        "export function add(a: number, b: number): number {\n"
        "  return a + b;\n"
        "}\n"
    ),
}

DIFF_BEFORE = (
    "export function foo() {\n"
    "  return 1;\n"
    "}\n"
    "\n"
    "export function bar() {\n"
    "  return 2;\n"
    "}\n"
)

DIFF_AFTER = DIFF_BEFORE.replace("return 1;", "return 42;")

DIFF_PROJECT = {
    "a.ts": DIFF_AFTER,
    "c.ts": (
        "import { foo } from './a';\n"
        "\n"
        "export function useFoo() {\n"
        "  return foo();\n"
        "}\n"
    ),
}


@pytest.fixture
def basic_project(make_project) -> Path:
    """main.ts -> utils/math.ts and main.ts -> Header.ts -> Button.ts -> utils/math.ts."""
    return make_project(BASIC_PROJECT)


@pytest.fixture
def diff_project(make_project) -> Path:
    """a.ts exports foo and bar, c.ts calls foo."""
    return make_project(DIFF_PROJECT)


@pytest.fixture
def config_for() -> Callable[..., ScanConfiguration]:
    def make(root: Path, **kwargs) -> ScanConfiguration:
        return ScanConfiguration(root_directory=str(root), **kwargs)
    return make


@pytest.fixture
def make_reference() -> Callable[..., Reference]:
    """Factory for references without parsing any source."""
    def make(name: str, file_path: str, line: int = 1, kind: str = 'call') -> Reference:
        return Reference(
            symbol=Symbol(name=name, kind='function', file_path=file_path,
                          range=LineRange(line, line), language='typescript'),
            referrer=Referrer(file_path=file_path, line=line, column=0, kind=kind),
            context=Snippet(file_path=file_path, kind='statement', start_line=line,
                            end_line=line, code=f"{name}()"),
        )
    return make
