"""Impact Propagator - Levels every file by its distance from a modified file."""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, List, Mapping, Set, Tuple


@dataclass
class EffectInfo:
    """How a file is affected by a change set."""
    level: int
    is_modified: bool
    dependencies: List[str] = field(default_factory=list)


EffectReport = Dict[str, EffectInfo]


def calculate_effect(modified_files: Iterable[str],
                     reverse_graph: Mapping[str, Set[str]]) -> EffectReport:
    """Multi-source BFS over the reverse graph.

    Modified files sit at level 0. A dependent first reached from a file at
    level ``n`` gets level ``n + 1``; later parents at a level no deeper than
    that are appended to its dependencies without changing the level. A file
    enters the queue only when it first enters the report, so cycles end.
    """
    report: EffectReport = {}
    queue: Deque[Tuple[str, int]] = deque()

    for file_path in sorted(modified_files):
        if file_path in report:
            continue
        report[file_path] = EffectInfo(level=0, is_modified=True)
        if file_path in reverse_graph:
            queue.append((file_path, 0))

    while queue:
        file_path, level = queue.popleft()
        for dependent in sorted(reverse_graph.get(file_path, ())):
            next_level = level + 1
            info = report.get(dependent)
            if info is None:
                report[dependent] = EffectInfo(level=next_level, is_modified=False, dependencies=[file_path])
                queue.append((dependent, next_level))
            elif info.level >= next_level:
                info.dependencies.append(file_path)

    return report


def group_by_level(report: EffectReport) -> Dict[int, List[str]]:
    """Files of a report grouped by level, each group sorted."""
    levels: Dict[int, List[str]] = {}
    for file_path, info in report.items():
        levels.setdefault(info.level, []).append(file_path)
    return {level: sorted(files) for level, files in sorted(levels.items())}
