"""Tests for diff-driven symbol detection, snippet extraction and enhanced effects."""

import pytest

from blastradius.analyzers.import_graph_builder import DependencyGraphBuilder
from blastradius.analyzers.symbol_graph import (
    build_cross_file_symbol_reference_map, build_reverse_dependency_graph_with_symbols
)
from blastradius.config import ScanOptions
from blastradius.core.change_detector import (
    FileChange, build_enhanced_effect_from_changes, compute_changed_span, extract_relevant_snippets,
    find_affected_symbols_from_diff, reachable_files
)
from blastradius.parsers.symbols import LineRange, Symbol

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


class TestChangedSpan:

    def test_single_line_change(self):
        span = compute_changed_span("a\nb\nc", "a\nB\nc")
        assert span.before == LineRange(2, 2)
        assert span.after == LineRange(2, 2)

    def test_insertion(self):
        span = compute_changed_span("a\nc", "a\nb\nc")
        assert span.after == LineRange(2, 2)
        # Nothing was replaced on the before side
        assert span.before.end_line < span.before.start_line

    def test_no_change(self):
        assert compute_changed_span("a\nb", "a\nb") is None

    def test_pure_deletion(self):
        span = compute_changed_span("a\nb\nc", "a\nc")
        assert span.before == LineRange(2, 2)
        assert span.after.end_line < span.after.start_line

    def test_added_file(self):
        span = compute_changed_span("", "x\ny\n")
        assert span.after == LineRange(1, 2)


def test_reachable_files_respects_depth():
    reverse = {"a": {"b"}, "b": {"c"}, "c": {"a"}}
    assert reachable_files("a", reverse, 0) == {"a"}
    assert reachable_files("a", reverse, 1) == {"a", "b"}
    assert reachable_files("a", reverse, 5) == {"a", "b", "c"}


def test_cross_file_reference_map(make_reference):
    foo = Symbol("foo", "function", "/p/a.ts", LineRange(1, 3), "typescript")
    bar = Symbol("bar", "function", "/p/a.ts", LineRange(5, 7), "typescript")
    in_dependent = make_reference("foo", "/p/c.ts", line=4)
    member_call = make_reference("api.foo", "/p/a.ts", line=9)
    out_of_scope = make_reference("foo", "/p/z.ts", line=2)

    ref_map = build_cross_file_symbol_reference_map(
        {"/p/a.ts": {"/p/c.ts"}},
        {"/p/a.ts": [foo, bar]},
        [in_dependent, member_call, out_of_scope],
    )
    assert list(ref_map) == ["/p/a.ts::foo"]
    assert ref_map["/p/a.ts::foo"] == [in_dependent, member_call]


@pytest.mark.usefixtures("typescript")
class TestAffectedSymbols:

    def test_body_change_hits_only_enclosing_function(self, registry):
        analyzer = registry.get_analyzer("typescript")
        affected = find_affected_symbols_from_diff("a.ts", DIFF_BEFORE, DIFF_AFTER, analyzer)
        assert [(a.symbol.name, a.change_type) for a in affected] == [("foo", "modified")]
        assert affected[0].change_lines == LineRange(2, 2)
        assert "return 42;" in affected[0].definition.code

    def test_identical_text_has_no_affected_symbols(self, registry):
        analyzer = registry.get_analyzer("typescript")
        assert find_affected_symbols_from_diff("a.ts", DIFF_BEFORE, DIFF_BEFORE, analyzer) == []

    def test_renamed_function_is_added_and_deleted(self, registry):
        analyzer = registry.get_analyzer("typescript")
        after = DIFF_BEFORE.replace("function bar() {\n  return 2;", "function baz() {\n  return 3;")
        affected = find_affected_symbols_from_diff("a.ts", DIFF_BEFORE, after, analyzer)
        assert sorted((a.symbol.name, a.change_type) for a in affected) == [("bar", "deleted"), ("baz", "added")]
        deleted = next(a for a in affected if a.change_type == "deleted")
        assert "return 2;" in deleted.definition.code

    def test_removed_function_is_deleted(self, registry):
        analyzer = registry.get_analyzer("typescript")
        after = "export function foo() {\n  return 1;\n}\n"
        affected = find_affected_symbols_from_diff("a.ts", DIFF_BEFORE, after, analyzer)
        assert [(a.symbol.name, a.change_type) for a in affected] == [("bar", "deleted")]
        assert affected[0].change_lines == LineRange(5, 8)
        assert "return 2;" in affected[0].definition.code

    def test_references_in_same_file_are_attached(self, registry):
        analyzer = registry.get_analyzer("typescript")
        before = "function foo() {\n  return 1;\n}\n\nfoo();\n"
        after = before.replace("return 1;", "return 2;")
        affected = find_affected_symbols_from_diff("a.ts", before, after, analyzer)
        assert [ref.referrer.line for ref in affected[0].referenced_by] == [5]


@pytest.mark.usefixtures("typescript")
class TestSnippets:

    def test_definition_and_call_site(self, diff_project, registry):
        analyzer = registry.get_analyzer("typescript")
        a, c = str(diff_project / "a.ts"), str(diff_project / "c.ts")
        affected = find_affected_symbols_from_diff(a, DIFF_BEFORE, DIFF_AFTER, analyzer)
        references = analyzer.extract_references(c, (diff_project / "c.ts").read_text())

        snippets = extract_relevant_snippets(affected, {a: {c}, c: set()}, references, depth=1,
                                             root_directory=str(diff_project))
        assert {s.file_path for s in snippets} == {a, c}
        call_site = next(s for s in snippets if s.file_path == c)
        assert call_site.name == "useFoo"
        assert call_site.symbols_used[0].name == "foo"
        assert call_site.reason == "call of foo"

    def test_depth_limits_call_sites(self, make_project, registry):
        root = make_project({
            "a.ts": DIFF_AFTER,
            "c.ts": "import { foo } from './a';\nexport const c = () => foo();\n",
            "d.ts": "import { c } from './c';\nexport function d() {\n  return foo() + c();\n}\n",
        })
        analyzer = registry.get_analyzer("typescript")
        a, c, d = (str(root / name) for name in ("a.ts", "c.ts", "d.ts"))
        affected = find_affected_symbols_from_diff(a, DIFF_BEFORE, DIFF_AFTER, analyzer)
        references = []
        for path in (c, d):
            references.extend(analyzer.extract_references(path, (root / path).read_text()))
        reverse = {a: {c}, c: {d}, d: set()}

        shallow = extract_relevant_snippets(affected, reverse, references, depth=1, root_directory=str(root))
        deep = extract_relevant_snippets(affected, reverse, references, depth=2, root_directory=str(root))
        assert {s.file_path for s in shallow} == {a, c}
        assert {s.file_path for s in deep} == {a, c, d}

    def test_snippets_are_unique(self, diff_project, registry):
        analyzer = registry.get_analyzer("typescript")
        a, c = str(diff_project / "a.ts"), str(diff_project / "c.ts")
        affected = find_affected_symbols_from_diff(a, DIFF_BEFORE, DIFF_AFTER, analyzer)
        references = analyzer.extract_references(c, (diff_project / "c.ts").read_text())

        snippets = extract_relevant_snippets(affected, {a: {c}}, references + references,
                                             root_directory=str(diff_project))
        keys = [(s.file_path, s.start_line, s.end_line) for s in snippets]
        assert len(keys) == len(set(keys)) == 2


@pytest.mark.usefixtures("typescript")
class TestSymbolGraph:

    def test_symbols_and_references_collected(self, diff_project, config_for):
        result = build_reverse_dependency_graph_with_symbols("c.ts", config=config_for(diff_project))
        a, c = str(diff_project / "a.ts"), str(diff_project / "c.ts")
        assert result.graph[a] == {c}
        assert [s.name for s in result.symbols_by_file[a]] == ["foo", "bar"]
        assert any(r.symbol.name == "foo" and r.referrer.file_path == c for r in result.references)

        ref_map = build_cross_file_symbol_reference_map(result.graph, result.symbols_by_file, result.references)
        assert f"{a}::foo" in ref_map
        assert f"{a}::bar" not in ref_map

    def test_symbols_can_be_disabled(self, diff_project, config_for):
        result = build_reverse_dependency_graph_with_symbols(
            "c.ts", ScanOptions(analyzer="none"), config=config_for(diff_project)
        )
        assert result.symbols_by_file == {}
        assert result.references == []
        assert result.files == sorted([str(diff_project / "a.ts"), str(diff_project / "c.ts")])


@pytest.mark.usefixtures("typescript")
def test_enhanced_effect_from_changes(diff_project, config_for):
    report = build_enhanced_effect_from_changes(
        ".", [FileChange("a.ts", DIFF_BEFORE, DIFF_AFTER)], config=config_for(diff_project)
    )
    a, c = str(diff_project / "a.ts"), str(diff_project / "c.ts")

    assert report.files[a].level == 0
    assert report.files[c].level == 1
    assert report.files[c].dependencies == [a]
    assert [s.name for s in report.files[a].symbols] == ["foo", "bar"]
    assert [item.symbol.name for item in report.affected_symbols] == ["foo"]
    assert [item.symbol.name for item in report.files[a].affected_symbols] == ["foo"]
    assert {s.file_path for s in report.snippets} == {a, c}
    assert [s.name for s in report.files[c].snippets] == ["useFoo"]


@pytest.mark.usefixtures("typescript")
def test_enhanced_effect_without_snippets(diff_project, config_for):
    report = build_enhanced_effect_from_changes(
        "c.ts", [FileChange(str(diff_project / "a.ts"), DIFF_BEFORE, DIFF_AFTER)],
        ScanOptions(include_snippets=False), config=config_for(diff_project),
    )
    assert report.snippets == []
    assert [item.symbol.name for item in report.affected_symbols] == ["foo"]


@pytest.mark.usefixtures("typescript")
def test_enhanced_effect_scans_with_given_builder(diff_project, config_for):
    builder = DependencyGraphBuilder(config_for(diff_project))
    build_enhanced_effect_from_changes(
        ".", [FileChange("a.ts", DIFF_BEFORE, DIFF_AFTER)], config=builder.config, builder=builder,
    )
    a, c = str(diff_project / "a.ts"), str(diff_project / "c.ts")
    assert set(builder.graph.edges) == {(c, a)}
    assert builder.find_cycles() == []
