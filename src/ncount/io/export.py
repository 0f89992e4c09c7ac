from pathlib import Path
from typing import Union

import orjson
import polars as pl

from ncount.document import DocumentTree

HEADING_WIDTH = 50

FRAME_SCHEMA = {
    "level": pl.Int64,
    "heading": pl.String,
    "paragraphs": pl.Int64,
    "average": pl.Int64,
    "longest": pl.Int64,
    "words": pl.Int64,
}

# Column titles for the console table.
DISPLAY_COLUMNS = {
    "heading": "§",
    "paragraphs": "Count ¶",
    "average": "Avg ¶",
    "longest": "Long ¶",
    "words": "Words",
}


def format_heading(text: str | None, level: int = 1, width: int = HEADING_WIDTH) -> str:
    """
    Indent a heading by its level and shorten it when longer than `width`.

    A shortened heading keeps its first `width - 2` characters followed by
    "...", so it ends up one character over `width`.

    >>> format_heading("Short", level=2)
    '  Short'
    >>> format_heading("x" * 60, width=10)
    'xxxxxxxx...'
    """
    text = text or ""
    if len(text) > width:
        text = text[: width - 2] + "..."
    return "  " * max(level - 1, 0) + text


def stats_frame(tree: DocumentTree, rollup: bool = False) -> pl.DataFrame:
    """
    One row per section in document order (the synthetic root is left out).

    With `rollup` each row carries its whole subtree's totals instead of the
    paragraphs written directly under the heading.
    """
    records = []
    for row in tree.sections():
        if row.level == 0:
            continue
        stats = row.total_stats if rollup else row.own_stats
        records.append(
            {
                "level": row.level,
                "heading": row.heading,
                "paragraphs": stats.paragraph_count,
                "average": stats.average_paragraph,
                "longest": stats.longest_paragraph,
                "words": stats.word_count,
            }
        )
    return pl.DataFrame(records, schema=FRAME_SCHEMA)


def render_table(tree: DocumentTree, rollup: bool = False) -> str:
    """Format the per-section statistics plus a total row for the console."""
    df = stats_frame(tree, rollup=rollup)
    total = tree.overall_stats()
    total_row = pl.DataFrame(
        [
            {
                "level": 0,
                "heading": "Total",
                "paragraphs": total.paragraph_count,
                "average": total.average_paragraph,
                "longest": total.longest_paragraph,
                "words": total.word_count,
            }
        ],
        schema=FRAME_SCHEMA,
    )
    df = pl.concat([df, total_row])
    headings = [
        format_heading(text, level) for text, level in zip(df["heading"], df["level"])
    ]
    display = (
        df.with_columns(pl.Series("heading", headings, dtype=pl.String))
        .drop("level")
        .rename(DISPLAY_COLUMNS)
    )
    with pl.Config(
        tbl_rows=-1,
        tbl_hide_dataframe_shape=True,
        tbl_hide_column_data_types=True,
        tbl_formatting="ASCII_MARKDOWN",
        fmt_str_lengths=HEADING_WIDTH + 40,
    ):
        return str(display)


def export_csv(
    tree: DocumentTree, file_name: Union[str, Path], rollup: bool = False
) -> None:
    """Write `stats_frame(tree)` to CSV, creating parent directories as needed."""
    path = Path(file_name)
    path.parent.mkdir(parents=True, exist_ok=True)
    stats_frame(tree, rollup=rollup).write_csv(path)


def export_json(tree: DocumentTree, file_name: Union[str, Path]) -> None:
    """
    Write the sections, with own and subtree totals, as JSON.

    Sections are listed flat in document order; `level` gives the nesting.
    """
    path = Path(file_name)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "overall": tree.overall_stats().to_dict(),
        "sections": [
            {
                "level": row.level,
                "heading": row.heading,
                "stats": row.own_stats.to_dict(),
                "total": row.total_stats.to_dict(),
            }
            for row in tree.sections()
        ],
    }
    path.write_bytes(
        orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE)
    )
