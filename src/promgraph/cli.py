"""Command-line interface for promgraph."""

import glob
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from .catalog import load_rule_files
from .errors import PromgraphError
from .graph_builder import build_rule_graph
from .render import emit_graph

app = typer.Typer(
    name="promgraph",
    help="Dependency graphs for Prometheus recording and alerting rules"
)
console = Console(stderr=True)

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Send log records to stderr through rich, keeping stdout for the graph."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def expand_patterns(patterns: List[str]) -> List[str]:
    """Expand shell-style globs, keeping pattern order."""
    files = []
    for pattern in patterns:
        matches = sorted(glob.glob(pattern))
        if not matches:
            logger.warning("No files match %s", pattern)
            continue
        files.extend(matches)
    return files


@app.callback()
def main():
    """Dependency graphs for Prometheus recording and alerting rules."""
    load_dotenv(find_dotenv(usecwd=True))


@app.command()
def graph(
    patterns: List[str] = typer.Argument(
        ...,
        help="Rule files or glob patterns",
    ),
    output: str = typer.Option(
        "-",
        "--output", "-o",
        envvar="PROMGRAPH_OUTPUT",
        help="Output file for the DOT graph (use '-' for stdout)"
    ),
    image: Optional[Path] = typer.Option(
        None,
        "--image",
        envvar="PROMGRAPH_IMAGE",
        help="Also draw the graph to this image file"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        envvar="PROMGRAPH_VERBOSE",
        help="Log debug details"
    ),
):
    """Build the rule dependency graph and write it as DOT."""
    setup_logging(verbose)

    filenames = expand_patterns(patterns)
    logger.debug("Reading %d rule file(s)", len(filenames))

    try:
        groups = load_rule_files(filenames)
        rule_graph = build_rule_graph(groups)
    except PromgraphError as err:
        logger.error("Failed to parse rules, aborting.")
        console.print(str(err).rstrip("\n"), markup=False, highlight=False)
        raise typer.Exit(code=1)

    if output == "-":
        emit_graph(rule_graph, sys.stdout)
    else:
        try:
            sink = open(output, "w", encoding="utf-8")
        except OSError as err:
            logger.error("Failed to open output file %s: %s", output, err.strerror or err)
            raise typer.Exit(code=1)
        with sink:
            emit_graph(rule_graph, sink)
        logger.info("Wrote graph to %s", output)

    if image is not None:
        from .visualize import visualize_graph
        visualize_graph(rule_graph, image)


@app.command()
def version():
    """Show version information."""
    from . import __version__
    Console().print(f"[bold]promgraph[/bold] {__version__}")


if __name__ == "__main__":
    app()
