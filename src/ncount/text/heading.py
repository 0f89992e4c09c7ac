from dataclasses import dataclass
from enum import Enum

_EMPHASIS = str.maketrans("", "", "*_")


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


class LineKind(Enum):
    HEADING = "heading"
    CONTENT = "content"
    SKIP = "skip"


def classify_line(line: str) -> LineKind:
    """
    Decide how a single line contributes to the document.

    Blank lines and footnote lines (``[^...``) are skipped outright; they do
    not open or close anything.

    >>> classify_line("## Methods")
    <LineKind.HEADING: 'heading'>
    >>> classify_line("  ")
    <LineKind.SKIP: 'skip'>
    >>> classify_line("[^3]: dangling")
    <LineKind.SKIP: 'skip'>
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("[^"):
        return LineKind.SKIP
    if stripped.startswith("#"):
        return LineKind.HEADING
    return LineKind.CONTENT


def parse_heading(line: str) -> Heading | None:
    """
    Parse a Markdown ATX heading.

    The level is the number of leading ``#`` characters. The text drops the
    markers, the surrounding whitespace and any ``*``/``_`` emphasis.

    >>> parse_heading("### *The* _Island_ ")
    Heading(level=3, text='The Island')
    >>> parse_heading("Not a heading") is None
    True
    """
    stripped = line.strip()
    if not stripped.startswith("#"):
        return None
    level = len(stripped) - len(stripped.lstrip("#"))
    text = stripped.lstrip("# \t").translate(_EMPHASIS).strip()
    return Heading(level=level, text=text)
