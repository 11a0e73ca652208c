"""Tests for the dependency graph builder."""

import os

import pytest

from blastradius.analyzers.import_graph_builder import (
    DependencyGraphBuilder, build_dependency_graph, build_reverse_dependency_graph
)
from blastradius.analyzers.impact_propagator import calculate_effect


def _builder(root, config_for, **kwargs):
    return DependencyGraphBuilder(config_for(root, **kwargs))


@pytest.mark.usefixtures("typescript")
class TestJavaScriptProject:

    def test_scan_basic_project(self, basic_project, config_for):
        deps = _builder(basic_project, config_for).scan_dependencies("main.ts")
        assert deps == {
            "components/Button.ts": ["utils/math.ts"],
            "components/Header.ts": ["components/Button.ts"],
            "main.ts": ["components/Header.ts", "utils/math.ts"],
            "utils/math.ts": [],
        }

    def test_reverse_graph_levels(self, basic_project, config_for):
        reverse = build_reverse_dependency_graph("main.ts", config_for(basic_project))
        math = str(basic_project / "utils/math.ts")
        assert reverse[math] == {str(basic_project / "main.ts"), str(basic_project / "components/Button.ts")}
        assert reverse[str(basic_project / "main.ts")] == set()

        report = calculate_effect({math}, reverse)
        levels = {os.path.relpath(path, basic_project): info.level for path, info in report.items()}
        assert levels == {
            "utils/math.ts": 0,
            "components/Button.ts": 1,
            "main.ts": 1,
            "components/Header.ts": 2,
        }

    def test_forward_and_reverse_agree(self, basic_project, config_for):
        graphs = build_dependency_graph("main.ts", config_for(basic_project))
        forward_edges = {(a, b) for a, deps in graphs.forward.items() for b in deps}
        reverse_edges = {(a, b) for b, dependents in graphs.reverse.items() for a in dependents}
        assert forward_edges == reverse_edges
        assert set(graphs.forward) == set(graphs.reverse)

    def test_directory_entry(self, basic_project, config_for):
        deps = _builder(basic_project, config_for).scan_dependencies("components")
        assert sorted(deps) == ["components/Button.ts", "components/Header.ts", "utils/math.ts"]

    def test_entry_variants(self, basic_project, config_for):
        builder = _builder(basic_project, config_for)
        main = str(basic_project / "main.ts")
        assert builder.normalize_entry(main) == main
        assert builder.normalize_entry("main.ts") == main
        assert builder.normalize_entry(os.path.join("checkout", basic_project.name, "main.ts")) == main
        assert builder.normalize_entry("missing.ts") is None
        assert builder.scan_dependencies("missing.ts") == {}

    def test_tsconfig_alias(self, make_project, config_for):
        root = make_project({
            "tsconfig.json": '{"compilerOptions": {"baseUrl": ".", "paths": {"@/*": ["src/*"]}}}',
            "src/main.ts": "import { add } from '@/utils/math';\nadd(1, 2);\n",
            "src/utils/math.ts": "export const add = (a, b) => a + b;\n",
        })
        deps = _builder(root, config_for).scan_dependencies("src/main.ts")
        assert deps["src/main.ts"] == ["src/utils/math.ts"]

    def test_cycles_terminate(self, make_project, config_for):
        root = make_project({
            "a.ts": "import { b } from './b';\nexport const a = 1;\n",
            "b.ts": "import { a } from './a';\nexport const b = 2;\n",
        })
        builder = _builder(root, config_for)
        deps = builder.scan_dependencies("a.ts")
        assert deps == {"a.ts": ["b.ts"], "b.ts": ["a.ts"]}
        assert builder.find_cycles() == [[str(root / "a.ts"), str(root / "b.ts")]]

        report = calculate_effect({str(root / "a.ts")}, builder.build_reverse_dependency_graph("a.ts"))
        assert report[str(root / "a.ts")].level == 0
        assert report[str(root / "b.ts")].level == 1

    def test_no_self_edges(self, make_project, config_for):
        root = make_project({"a.ts": "import { x } from './a';\nexport const x = 1;\n"})
        builder = _builder(root, config_for)
        assert builder.scan_dependencies("a.ts") == {"a.ts": []}
        assert builder.find_cycles() == []

    def test_vendor_files_excluded(self, make_project, config_for):
        root = make_project({
            "main.ts": "import lib from './node_modules/lib/index';\nimport { u } from './util';\n",
            "node_modules/lib/index.ts": "export default 1;\n",
            "util.ts": "export const u = 1;\n",
        })
        deps = _builder(root, config_for).scan_dependencies("main.ts")
        assert deps == {"main.ts": ["util.ts"], "util.ts": []}

    def test_scan_is_deterministic(self, basic_project, config_for):
        first = _builder(basic_project, config_for).scan_dependencies(".")
        second = _builder(basic_project, config_for).scan_dependencies(".")
        assert first == second
        assert list(first) == sorted(first)

    def test_auto_imports_create_edges(self, make_project, config_for):
        root = make_project({
            "auto-imports.d.ts": "declare global {\n  const useCounter: typeof import('./composables/useCounter')['useCounter']\n}\n",
            "app.ts": "export const total = useCounter();\n",
            "composables/useCounter.ts": "export function useCounter() { return 1; }\n",
        })
        deps = _builder(root, config_for).scan_dependencies("app.ts")
        assert deps["app.ts"] == ["composables/useCounter.ts"]


@pytest.mark.usefixtures("typescript")
class TestVueExpansion:

    FILES = {
        "package.json": '{"dependencies": {"vue": "^3.4.0"}}',
        "components.d.ts": (
            "declare module 'vue' {\n"
            "  export interface GlobalComponents {\n"
            "    MyButton: typeof import('./components/MyButton.vue')['default']\n"
            "  }\n"
            "}\n"
        ),
        "main.ts": "import App from './App.vue';\nexport default App;\n",
        "App.vue": (
            "<template>\n  <MyButton />\n</template>\n\n"
            "<script setup lang=\"ts\">\nimport { helper } from './helper'\nhelper()\n</script>\n"
        ),
        "components/MyButton.vue": "<template><button>ok</button></template>\n",
        "helper.ts": "export function helper() {}\n",
    }

    def test_template_and_script_edges(self, make_project, config_for):
        root = make_project(self.FILES)
        deps = _builder(root, config_for).scan_dependencies("main.ts")
        assert deps == {
            "App.vue": ["components/MyButton.vue", "helper.ts"],
            "components/MyButton.vue": [],
            "helper.ts": [],
            "main.ts": ["App.vue"],
        }

    def test_expansion_can_be_disabled(self, make_project, config_for):
        root = make_project(self.FILES)
        deps = _builder(root, config_for, enable_framework_expansion=False).scan_dependencies("main.ts")
        assert deps == {"App.vue": [], "main.ts": ["App.vue"]}

    def test_expansion_passes_are_bounded(self, make_project, config_for, caplog):
        root = make_project({
            "package.json": '{"dependencies": {"vue": "^3.4.0"}}',
            "components.d.ts": (
                "declare module 'vue' {\n"
                "  export interface GlobalComponents {\n"
                "    PageB: typeof import('./PageB.vue')['default']\n"
                "    PageC: typeof import('./PageC.vue')['default']\n"
                "  }\n"
                "}\n"
            ),
            "main.ts": "import A from './PageA.vue';\nexport default A;\n",
            "PageA.vue": "<template><PageB /></template>\n",
            "PageB.vue": "<template><PageC /></template>\n",
            "PageC.vue": "<template><p>end</p></template>\n",
        })
        deps = _builder(root, config_for, max_expansion_passes=1).scan_dependencies("main.ts")
        # PageB is reached in the only pass but never expanded itself
        assert deps == {"PageA.vue": ["PageB.vue"], "PageB.vue": [], "main.ts": ["PageA.vue"]}
        assert "Framework expansion stopped after 1 passes" in caplog.text


@pytest.mark.usefixtures("java")
def test_java_wildcard_import(make_project, config_for):
    root = make_project({
        "Main.java": (
            "import pkg.*;\n\n"
            "public class Main {\n"
            "    A a = new A();\n"
            "    C c = new C();\n"
            "}\n"
        ),
        "pkg/A.java": "package pkg;\npublic class A {}\n",
        "pkg/C.java": "package pkg;\npublic class C {}\n",
    })
    deps = _builder(root, config_for).scan_dependencies("Main.java")
    assert deps["Main.java"] == ["pkg/A.java", "pkg/C.java"]


@pytest.mark.usefixtures("python_grammar")
def test_python_project_and_mode_filter(make_project, config_for):
    root = make_project({
        "app/__init__.py": "",
        "app/main.py": "from .models import User\n",
        "app/models.py": "import os\n\nclass User:\n    pass\n",
        "web/index.ts": "export const x = 1;\n",
    })
    deps = _builder(root, config_for, mode="python").scan_dependencies(".")
    assert deps == {
        "app/__init__.py": [],
        "app/main.py": ["app/models.py"],
        "app/models.py": [],
    }


@pytest.mark.usefixtures("go")
def test_go_module_imports(make_project, config_for):
    root = make_project({
        "go.mod": "module example.com/app\n",
        "main.go": 'package main\n\nimport "example.com/app/util"\n\nfunc main() { util.Run() }\n',
        "util/run.go": "package util\n\nfunc Run() {}\n",
    })
    deps = _builder(root, config_for).scan_dependencies("main.go")
    assert deps["main.go"] == ["util/run.go"]


@pytest.mark.usefixtures("cpp")
def test_cpp_includes(make_project, config_for):
    root = make_project({
        "src/main.cpp": '#include <vector>\n#include "util.h"\nint main() { return 0; }\n',
        "include/util.h": "int helper();\n",
    })
    deps = _builder(root, config_for).scan_dependencies("src/main.cpp")
    assert deps == {"include/util.h": [], "src/main.cpp": ["include/util.h"]}


@pytest.mark.usefixtures("typescript")
def test_undecodable_file_keeps_empty_entry(make_project, config_for, caplog):
    root = make_project({"main.ts": "import { b } from './b';\nb();\n"})
    (root / "b.ts").write_bytes(b"\xff\xfe\x00export const b = 1;\n")

    deps = _builder(root, config_for).scan_dependencies("main.ts")
    assert deps == {"b.ts": [], "main.ts": ["b.ts"]}
    assert "Could not read" in caplog.text
