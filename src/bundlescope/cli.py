"""Command-line interface for bundlescope."""

from __future__ import annotations

import functools
import logging
import sys
from pathlib import Path

import click

from bundlescope import __version__
from bundlescope.config import (
    ProjectConfig,
    find_project_root,
    load_config,
    save_config,
    set_config_value,
)
from bundlescope.exceptions import BundleScopeError
from bundlescope.ui.console import Console

console = Console()


def _load_project_config() -> tuple[Path, ProjectConfig]:
    """Use the nearest .bundlescope project, or defaults for the working directory."""
    root = find_project_root() or Path.cwd()
    return root, load_config(root)


def _analyse_file(metafile: str, entry: str | None = None):
    from bundlescope.analysis.engine import analyse
    from bundlescope.parser.core import load_metafile

    _, config = _load_project_config()
    console.max_rows = config.display.max_rows
    graph = load_metafile(metafile)
    return analyse(graph, config.analysis, preferred_entry=entry)


def handle_errors(func):
    """Report bundlescope errors on the console and exit non-zero."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BundleScopeError as e:
            console.error(str(e))
            sys.exit(1)

    return wrapper


@click.group()
@click.version_option(version=__version__, prog_name="bundlescope")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def main(verbose: bool):
    """bundlescope - find out what ships on page load, and why."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("bundlescope").setLevel(logging.DEBUG if verbose else logging.WARNING)


@main.command()
@click.argument("metafile", type=click.Path(exists=True, dir_okay=False))
@click.option("--entry", "-e", default=None, help="Input path of the entry to prefer.")
@handle_errors
def summary(metafile: str, entry: str | None):
    """Show how much code loads initially versus lazily."""
    from bundlescope.graph.builder import BundleGraphBuilder

    analysis = _analyse_file(metafile, entry)
    console.banner()
    console.show_summary(analysis, BundleGraphBuilder(analysis.graph).get_stats())


@main.command()
@click.argument("metafile", type=click.Path(exists=True, dir_okay=False))
@click.option("--search", "-s", default="", help="Only chunks containing a matching file.")
@click.option("--initial/--no-initial", default=True, help="Include initial chunks.")
@click.option("--lazy/--no-lazy", default=True, help="Include lazy chunks.")
@handle_errors
def chunks(metafile: str, search: str, initial: bool, lazy: bool):
    """List chunks, largest first."""
    from bundlescope.analysis.chunks import filter_chunks

    analysis = _analyse_file(metafile)
    selected = filter_chunks(
        analysis.chunks,
        search,
        {"initial": initial, "lazy": lazy},
        analysis.initial_summary,
    )
    if not selected:
        console.warning("No chunks match")
        return
    console.show_chunks(selected, analysis)


@main.command()
@click.argument("metafile", type=click.Path(exists=True, dir_okay=False))
@click.argument("file")
@handle_errors
def why(metafile: str, file: str):
    """Explain why FILE is in the bundle: the shortest import chain from the entry."""
    analysis = _analyse_file(metafile)
    if file not in analysis.graph.inputs:
        console.error(f"'{file}' is not an input of this build")
        sys.exit(1)
    console.show_inclusion_path(analysis.inclusion_path(file), file)


@main.command()
@click.argument("metafile", type=click.Path(exists=True, dir_okay=False))
@click.argument("file")
@handle_errors
def importers(metafile: str, file: str):
    """List the files that import FILE directly."""
    analysis = _analyse_file(metafile)
    console.show_import_sources(analysis.import_sources(file), file)


@main.command()
@click.argument("metafile", type=click.Path(exists=True, dir_okay=False))
@click.argument("file")
@handle_errors
def locate(metafile: str, file: str):
    """Find the chunk that FILE ends up in."""
    analysis = _analyse_file(metafile)
    chunk = analysis.best_chunk(file)
    if chunk is None:
        console.warning(f"No chunk contains '{file}' or any of its imports")
        sys.exit(1)

    kind = analysis.initial_summary.chunk_type_of(chunk.output_file)
    how = "contains" if chunk.contains(file) else "contains an import of"
    console.success(f"{chunk.output_file} ({kind.value}) {how} '{file}'")
    for created in analysis.created_chunks(file):
        console.info(
            f"'{created.import_statement}' splits off {created.chunk.output_file}"
        )


@main.command()
@click.argument("left", type=click.Path(exists=True, dir_okay=False))
@click.argument("right", type=click.Path(exists=True, dir_okay=False))
@handle_errors
def compare(left: str, right: str):
    """Compare two builds (LEFT is before, RIGHT is after)."""
    from bundlescope.analysis.compare import compare_analyses

    result = compare_analyses(_analyse_file(left), _analyse_file(right))
    console.show_comparison(result, Path(left).name, Path(right).name)


@main.group()
def config():
    """View or modify configuration."""
    pass


@config.command("show")
@handle_errors
def config_show():
    """Show current configuration."""
    import json

    root, cfg = _load_project_config()
    console.info(f"Project root: {root}")
    console.console.print_json(json.dumps(cfg.model_dump()))


@config.command("set")
@click.argument("key")
@click.argument("value")
@handle_errors
def config_set(key: str, value: str):
    """Set a configuration value (e.g., analysis.preferred_entry src/main.ts)."""
    root, cfg = _load_project_config()
    try:
        cfg = set_config_value(cfg, key, value)
    except KeyError as e:
        console.error(str(e))
        sys.exit(1)

    save_config(root, cfg)
    console.success(f"Set {key} = {value}")


if __name__ == "__main__":
    main()
