"""Command-line interface for the blastradius tool."""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table
from rich.traceback import install

from .analyzers.impact_propagator import EffectInfo, calculate_effect, group_by_level
from .analyzers.import_graph_builder import DependencyGraphBuilder
from .config import MODE_FAMILIES, ScanConfiguration, ScanOptions
from .core.change_detector import EnhancedEffectReport, FileChange, build_enhanced_effect_from_changes
from .integrations.git_changes import get_staged_changes, get_staged_files
from .parsers.registry import create_default_registry
from .parsers.symbols import AffectedSymbol, Snippet

# Set up rich error handling
install()
console = Console()

_SYNTAX_LEXERS = {
    '.ts': 'typescript', '.tsx': 'tsx', '.js': 'javascript', '.jsx': 'jsx', '.vue': 'html',
    '.py': 'python', '.java': 'java', '.go': 'go',
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    if verbose:
        logging.getLogger("blastradius").setLevel(logging.DEBUG)


@click.command()
@click.argument('entry', type=click.Path())
@click.option('--root-dir', type=click.Path(exists=True, file_okay=False),
              help='Project root used for resolution (default: current directory)')
@click.option('--mode', type=click.Choice(sorted(MODE_FAMILIES)), default='auto',
              help='Language families to scan when ENTRY is a directory')
@click.option('--symbols', is_flag=True, help='Report affected symbols and reviewer snippets from the staged diff')
@click.option('--depth', type=int, default=1, help='Reverse-dependency depth for snippet extraction')
@click.option('--format', '-f', 'output_format', type=click.Choice(['text', 'json']), default='text',
              help='Output format')
@click.option('--output', '-o', type=click.Path(), help='Write the report to a file')
@click.option('--max-level', type=int, default=5, help='Hide impact levels deeper than this')
@click.option('--cycles', is_flag=True, help='List import cycles found while scanning')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def main(entry, root_dir, mode, symbols, depth, output_format, output, max_level, cycles, verbose):
    """Show which files (and symbols) are affected by the staged changes.

    ENTRY is the project entry file or directory the dependency graph is
    built from, relative to the project root.

    USAGE:
        blastradius src/main.ts                 # Leveled impact report
        blastradius src --symbols --depth 2     # Plus affected symbols and snippets
        blastradius src --format json           # JSON output
    """
    _configure_logging(verbose)
    root = os.path.abspath(root_dir or os.getcwd())
    if not os.path.exists(os.path.join(root, entry)):
        raise click.BadParameter(f"Entry path does not exist: {os.path.join(root, entry)}", param_hint='ENTRY')

    try:
        config = ScanConfiguration(root_directory=root, mode=mode)
        registry = create_default_registry()

        changes = get_staged_changes(root) if symbols else []
        staged = {path for path, _, _ in changes} if symbols else get_staged_files(root)
        if not staged:
            console.print("✅ No modified files in the staging area, no need to analyze.")
            return

        builder = DependencyGraphBuilder(config, registry)
        enhanced: Optional[EnhancedEffectReport] = None
        if symbols:
            enhanced = build_enhanced_effect_from_changes(
                entry,
                [FileChange(path, before, after) for path, before, after in changes],
                ScanOptions(snippet_depth=depth),
                registry,
                config,
                builder,
            )
            report: Dict[str, EffectInfo] = dict(enhanced.files)
        else:
            with console.status("[bold green]📊 Building dependency graph...[/bold green]"):
                reverse_graph = builder.build_reverse_dependency_graph(entry)
            report = calculate_effect(staged, reverse_graph)
        found_cycles = builder.find_cycles() if cycles else []

        if output_format == 'json':
            data = json.dumps(_report_data(root, report, enhanced, found_cycles if cycles else None), indent=2)
            if output:
                Path(output).write_text(data)
                console.print(f"📄 Results saved to {output}")
            else:
                click.echo(data)
        else:
            _display_report(root, report, max_level)
            if enhanced is not None:
                _display_symbols(root, enhanced.affected_symbols, enhanced.snippets)
            if cycles:
                _display_cycles(root, found_cycles)

    except Exception as e:
        console.print(f"[red]❌ Error:[/red] {str(e)}")
        raise click.Abort()


def _rel(root: str, path: str) -> str:
    return os.path.relpath(path, root) if os.path.isabs(path) else path


def _snippet_data(root: str, snippet: Snippet) -> dict:
    return {
        'file': _rel(root, snippet.file_path),
        'kind': snippet.kind,
        'name': snippet.name,
        'start_line': snippet.start_line,
        'end_line': snippet.end_line,
        'reason': snippet.reason,
        'code': snippet.code,
    }


def _affected_data(root: str, item: AffectedSymbol) -> dict:
    return {
        'name': item.symbol.name,
        'kind': item.symbol.kind,
        'file': _rel(root, item.symbol.file_path),
        'change_type': item.change_type,
        'start_line': item.symbol.range.start_line,
        'end_line': item.symbol.range.end_line,
        'referenced_by': [
            {'file': _rel(root, ref.referrer.file_path), 'line': ref.referrer.line, 'kind': ref.referrer.kind}
            for ref in item.referenced_by
        ],
    }


def _report_data(root: str, report: Dict[str, EffectInfo], enhanced: Optional[EnhancedEffectReport],
                 cycles: Optional[List[List[str]]]) -> dict:
    data = {
        'root': root,
        'files': {
            _rel(root, path): {
                'level': info.level,
                'is_modified': info.is_modified,
                'dependencies': [_rel(root, dep) for dep in info.dependencies],
            }
            for path, info in sorted(report.items(), key=lambda item: (item[1].level, item[0]))
        },
    }
    if enhanced is not None:
        data['affected_symbols'] = [_affected_data(root, item) for item in enhanced.affected_symbols]
        data['snippets'] = [_snippet_data(root, snippet) for snippet in enhanced.snippets]
    if cycles is not None:
        data['cycles'] = [[_rel(root, path) for path in cycle] for cycle in cycles]
    return data


def _display_report(root: str, report: Dict[str, EffectInfo], max_level: int) -> None:
    """Leveled impact report."""
    levels = group_by_level(report)
    if list(levels) == [0]:
        console.print("✅ No dependency found.")
        return

    console.print("\n[bold]--- Dependency Impact Analysis Report ---[/bold]")
    for level, files in levels.items():
        if level > max_level:
            continue
        if level == 0:
            console.print(f"\n🔴 [bold]LEVEL 0: Modified source files ({len(files)})[/bold]")
        else:
            marker = '🟠' if level == 1 else '🔵'
            console.print(f"\n{marker} [bold]LEVEL {level}: Indirect impact ({len(files)})[/bold]")
        for path in files:
            console.print(f"  - {_rel(root, path)}")
    console.print("\n✅ [bold]--- Report End ---[/bold]")


def _display_symbols(root: str, affected: List[AffectedSymbol], snippets: List[Snippet]) -> None:
    if not affected:
        console.print("\nℹ️  No affected symbols in the staged changes.")
        return

    console.print("\n🎯 [bold]Affected Symbols[/bold]")
    table = Table()
    table.add_column("Symbol", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("Change", style="yellow")
    table.add_column("File")
    table.add_column("Lines")
    table.add_column("Refs", justify="right")
    for item in affected:
        table.add_row(
            item.symbol.name,
            item.symbol.kind,
            item.change_type,
            _rel(root, item.symbol.file_path),
            f"{item.symbol.range.start_line}-{item.symbol.range.end_line}",
            str(len(item.referenced_by)),
        )
    console.print(table)

    if snippets:
        console.print(f"\n🔍 [bold]Code to review ({len(snippets)} snippets)[/bold]")
    for snippet in snippets:
        title = f"{_rel(root, snippet.file_path)}:{snippet.start_line}-{snippet.end_line}"
        console.print(f"\n[bold]{title}[/bold] [dim]{snippet.reason or ''}[/dim]")
        lexer = _SYNTAX_LEXERS.get(os.path.splitext(snippet.file_path)[1].lower(), 'cpp')
        console.print(Syntax(snippet.code, lexer, line_numbers=True, start_line=snippet.start_line))


def _display_cycles(root: str, cycles: List[List[str]]) -> None:
    if not cycles:
        console.print("\n✅ No import cycles found.")
        return
    console.print(f"\n🔁 [bold]Import cycles ({len(cycles)})[/bold]")
    for cycle in cycles:
        console.print("  • " + " → ".join(_rel(root, path) for path in cycle + cycle[:1]))


if __name__ == '__main__':
    main()
