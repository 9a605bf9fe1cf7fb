"""Rich-powered console output for bundlescope."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from bundlescope import __version__
from bundlescope.analysis.compare import BundleComparison, MatchType, Verdict
from bundlescope.analysis.engine import BundleAnalysis
from bundlescope.graph.models import ChunkSummary, ChunkType, ImportSource, InclusionStep

_TYPE_STYLE = {ChunkType.INITIAL: "red", ChunkType.LAZY: "magenta"}
_VERDICT_STYLE = {Verdict.POSITIVE: "green", Verdict.MIXED: "yellow", Verdict.NEGATIVE: "red"}


def format_bytes(num: int) -> str:
    """Binary units; B and KB as whole numbers, MB and GB with three decimals."""
    if not num:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    value = float(num)
    unit = 0
    while abs(value) >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    decimals = 0 if unit < 2 else 3
    return f"{value:.{decimals}f} {units[unit]}"


def format_delta(num: int) -> str:
    sign = "+" if num > 0 else "-" if num < 0 else ""
    return f"{sign}{format_bytes(abs(num))}"


class Console:
    """Terminal output for bundlescope using Rich."""

    def __init__(self, max_rows: int = 25) -> None:
        self.console = RichConsole()
        self.max_rows = max_rows

    def banner(self) -> None:
        self.console.print(
            Panel(
                f"[bold cyan]bundlescope[/bold cyan] [dim]v{__version__}[/dim]\n"
                "[dim]What ships on page load, and why[/dim]",
                border_style="cyan",
                padding=(1, 2),
            )
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def show_summary(self, analysis: BundleAnalysis, stats: dict) -> None:
        """Display the initial/lazy split in a table."""
        summary = analysis.initial_summary
        table = Table(title="Bundle Summary", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right", style="cyan")

        table.add_row("Entry output", summary.entry_output)
        if analysis.initial_chunk is not None:
            table.add_row("Entry point", analysis.initial_chunk.entry_point)
        table.add_row("Initial chunks", str(len(summary.initial.outputs)))
        table.add_row("Initial size", format_bytes(summary.initial.total_bytes))
        table.add_row("Lazy chunks", str(len(summary.lazy.outputs)))
        table.add_row("Lazy size", format_bytes(summary.lazy.total_bytes))
        table.add_section()
        table.add_row("Inputs", str(stats.get("inputs", 0)))
        table.add_row("Outputs", str(stats.get("outputs", 0)))
        table.add_row("External imports", str(stats.get("external_imports", 0)))

        for kind, count in sorted(stats.get("edge_kinds", {}).items(), key=lambda x: -x[1]):
            table.add_row(f"  {kind} edges", str(count))

        self.console.print(table)

    def show_chunks(self, chunks: list[ChunkSummary], analysis: BundleAnalysis) -> None:
        table = Table(title=f"Chunks ({len(chunks)})", border_style="cyan")
        table.add_column("Type")
        table.add_column("Output", style="bold")
        table.add_column("Size", justify="right")
        table.add_column("Inputs", justify="right")
        table.add_column("Entry point", style="dim")

        for chunk in chunks[: self.max_rows]:
            kind = analysis.initial_summary.chunk_type_of(chunk.output_file)
            style = _TYPE_STYLE[kind]
            table.add_row(
                f"[{style}]{kind.value}[/{style}]",
                chunk.output_file,
                format_bytes(chunk.bytes),
                str(len(chunk.included_inputs)),
                chunk.entry_point,
            )
        self.console.print(table)
        if len(chunks) > self.max_rows:
            self.console.print(f"[dim]... {len(chunks) - self.max_rows} more[/dim]")

    def show_inclusion_path(self, steps: list[InclusionStep], target: str) -> None:
        """Display the import chain as a nested tree ending at the target."""
        if not steps:
            self.warning(f"No inclusion path found for '{target}'")
            return

        tree = Tree("[bold cyan]entry[/bold cyan]")
        node = tree
        for step in steps:
            style = _TYPE_STYLE[step.importer_chunk_type]
            marker = " [yellow](dynamic)[/yellow]" if step.is_dynamic_import else ""
            node = node.add(
                f"[bold]{step.file}[/bold] [{style}]{step.importer_chunk_type.value}[/{style}]\n"
                f"[dim]imports[/dim] '{step.import_statement}'{marker}"
            )
        node.add(f"[bold green]{target}[/bold green]")
        self.console.print(tree)

    def show_import_sources(self, sources: list[ImportSource], target: str) -> None:
        if not sources:
            self.warning(f"Nothing imports '{target}'")
            return

        self.info(f"{len(sources)} importer(s) of '{target}':")
        for src in sources:
            style = _TYPE_STYLE[src.chunk_type]
            chunk = ""
            if src.chunk_output_file:
                chunk = f" [dim]in {src.chunk_output_file} ({format_bytes(src.chunk_size or 0)})[/dim]"
            marker = " [yellow](dynamic)[/yellow]" if src.is_dynamic_import else ""
            self.console.print(
                f"  [{style}]{src.chunk_type.value:>7}[/{style}] [bold]{src.importer}[/bold]"
                f" '{src.import_statement}'{marker}{chunk}"
            )

    def show_comparison(self, comparison: BundleComparison, left: str, right: str) -> None:
        m = comparison.metrics
        table = Table(title="Bundle Comparison", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column(left, justify="right")
        table.add_column(right, justify="right")
        table.add_column("Change", justify="right")

        table.add_row(
            "Total size", format_bytes(m.total_left), format_bytes(m.total_right),
            format_delta(comparison.total_delta),
        )
        table.add_row(
            "Initial size", format_bytes(m.initial_left), format_bytes(m.initial_right),
            format_delta(comparison.initial_delta),
        )
        table.add_row(
            "Chunks", str(m.chunks_left), str(m.chunks_right),
            f"{m.chunks_right - m.chunks_left:+d}",
        )
        self.console.print(table)

        for label, diff in (
            ("initial", comparison.initial_outputs),
            ("lazy", comparison.lazy_outputs),
        ):
            for path in diff.added:
                self.console.print(f"  [green]+[/green] {label} {path}")
            for path in diff.removed:
                self.console.print(f"  [red]-[/red] {label} {path}")

        chunks = comparison.chunks
        if chunks.matched:
            self.info(
                f"{len(chunks.matched)} chunk(s) matched across builds, "
                f"average similarity {chunks.average_score:.0f}%"
            )
        for match in chunks.matched:
            if not match.renamed and match.left.bytes == match.right.bytes:
                continue
            style = "green" if match.match_type == MatchType.GOOD else "yellow"
            self.console.print(
                f"  [{style}]~[/{style}] {match.left.output_file} -> {match.right.output_file} "
                f"[dim]{format_delta(match.right.bytes - match.left.bytes)}, "
                f"{match.match_type.value} match {match.score}%[/dim]"
            )
        for chunk in chunks.unmatched_left:
            self.console.print(f"  [red]-[/red] chunk {chunk.output_file} ({format_bytes(chunk.bytes)})")
        for chunk in chunks.unmatched_right:
            self.console.print(f"  [green]+[/green] chunk {chunk.output_file} ({format_bytes(chunk.bytes)})")

        style = _VERDICT_STYLE[comparison.score.verdict]
        self.console.print(
            Panel(
                f"[{style}]{comparison.score.verdict.value}[/{style}] "
                f"{comparison.score.describe()}",
                title="[bold]Verdict[/bold]",
                border_style=style,
            )
        )
