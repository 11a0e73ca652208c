"""Tests for impact level propagation."""

from blastradius.analyzers.impact_propagator import calculate_effect, group_by_level


def test_basic_levels():
    reverse = {
        "math.ts": {"main.ts", "Button.ts"},
        "Button.ts": {"Header.ts"},
        "Header.ts": {"main.ts"},
        "main.ts": set(),
    }
    report = calculate_effect({"math.ts"}, reverse)

    assert report["math.ts"].level == 0
    assert report["math.ts"].is_modified
    assert report["math.ts"].dependencies == []
    assert report["Button.ts"].level == 1
    assert report["Button.ts"].dependencies == ["math.ts"]
    assert report["main.ts"].level == 1
    assert report["Header.ts"].level == 2
    assert not report["Header.ts"].is_modified
    # Header.ts at level 2 is a deeper parent of main.ts, so it is not recorded
    assert report["main.ts"].dependencies == ["math.ts"]


def test_modified_file_missing_from_graph():
    report = calculate_effect({"ghost.ts"}, {})
    assert list(report) == ["ghost.ts"]
    assert report["ghost.ts"].level == 0


def test_every_equal_level_parent_is_recorded():
    reverse = {"x.ts": {"z.ts"}, "y.ts": {"z.ts"}}
    report = calculate_effect({"x.ts", "y.ts"}, reverse)
    assert report["z.ts"].level == 1
    assert report["z.ts"].dependencies == ["x.ts", "y.ts"]


def test_cycle_terminates():
    reverse = {"a.ts": {"b.ts"}, "b.ts": {"c.ts"}, "c.ts": {"a.ts"}}
    report = calculate_effect({"a.ts"}, reverse)
    assert {path: info.level for path, info in report.items()} == {"a.ts": 0, "b.ts": 1, "c.ts": 2}
    assert report["a.ts"].dependencies == []


def test_modified_files_stay_at_level_zero():
    reverse = {"a.ts": {"b.ts"}, "b.ts": set()}
    report = calculate_effect({"a.ts", "b.ts"}, reverse)
    assert report["b.ts"].level == 0
    assert report["b.ts"].is_modified


def test_group_by_level():
    reverse = {"a.ts": {"c.ts", "b.ts"}, "b.ts": {"d.ts"}}
    levels = group_by_level(calculate_effect({"a.ts"}, reverse))
    assert levels == {0: ["a.ts"], 1: ["b.ts", "c.ts"], 2: ["d.ts"]}
