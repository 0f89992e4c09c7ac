"""
ncount: word and paragraph statistics for Markdown manuscripts, per heading.

Usage:
  ncount [OPTIONS] [PATHS]...

Examples:
  ncount chapters/
  ncount "drafts/*.md" --filter "^chapter 3" -v
  ncount book.md --rollup --csv stats.csv --json stats.json
"""

import logging
from pathlib import Path

import typer

from ncount.io.export import export_csv, export_json, render_table
from ncount.io.loader import build_tree, expand_paths

app = typer.Typer(help=__doc__, add_completion=False)


def setup_logging(verbose: int):
    """Set up logging based on verbosity level."""
    if verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:  # verbose >= 2
        level = logging.DEBUG

    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


@app.command()
def count(
    paths: list[str] = typer.Argument(
        None, help="Files, directories or glob patterns (default: current directory)"
    ),
    heading_filter: str = typer.Option(
        None,
        "--filter",
        "-f",
        envvar="NCOUNT_FILTER",
        help="Only report sections whose heading matches this regex (or substring)",
    ),
    rollup: bool = typer.Option(
        False, "--rollup", "-r", help="Show subtree totals for each heading"
    ),
    csv_out: Path = typer.Option(None, "--csv", help="Also write the table as CSV"),
    json_out: Path = typer.Option(
        None, "--json", help="Also write the per-section statistics as JSON"
    ),
    workers: int = typer.Option(
        None,
        "--workers",
        "-w",
        envvar="NCOUNT_PARSE_WORKERS",
        min=1,
        help="Parallel document parsers (default: CPU count)",
    ),
    progress: bool = typer.Option(
        False, "--progress/--no-progress", help="Show a progress bar while reading"
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    ),
) -> None:
    """Count words and paragraphs under every heading of the given documents."""
    setup_logging(verbose)

    files = expand_paths(paths or [])
    if not files:
        logging.error("No input documents found")
        raise typer.Exit(code=1)
    logging.info(f"Found {len(files)} documents")

    tree, failures = build_tree(files, workers=workers, progress=progress)
    if failures and len(failures) == len(files):
        logging.error("None of the input documents could be read")
        raise typer.Exit(code=1)

    if heading_filter:
        tree.filter_by_heading(heading_filter)

    typer.echo(render_table(tree, rollup=rollup))

    if csv_out is not None:
        export_csv(tree, csv_out, rollup=rollup)
        logging.info(f"Wrote {csv_out}")
    if json_out is not None:
        export_json(tree, json_out)
        logging.info(f"Wrote {json_out}")


if __name__ == "__main__":
    app()
