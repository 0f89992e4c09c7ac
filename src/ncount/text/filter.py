import logging
import re

# Openers that switch the scanner into the "inside" state, mapped to the
# marker that switches it back out.
_OPENER_RE = re.compile(r"<!--|<note")
_CLOSERS = {"<!--": "-->", "<note": ">"}

# Footnote definitions take the rest of their line; the newline itself stays.
_FOOTNOTE_RE = re.compile(r"(?m:^\[\^[^\[\]\n]+\]:.*$)|\[\^[^\[\]\n]+\]")


def strip_tags(text: str) -> str:
    """
    Remove HTML comments and inline ``<note ...>`` tags from `text`.

    Removed spans are replaced by nothing, so a comment spanning lines joins
    the text around it into one line. An opener without a closer discards
    the remainder of the text.

    >>> strip_tags("a <!-- b\\nc --> d")
    'a  d'
    >>> strip_tags("one <note to self>two")
    'one two'
    >>> strip_tags("kept <!-- never closed")
    'kept '
    """
    result: list[str] = []
    pos = 0
    end = len(text)
    while pos < end:
        m = _OPENER_RE.search(text, pos)
        if m is None:
            result.append(text[pos:])
            break
        result.append(text[pos : m.start()])
        closer = _CLOSERS[m.group(0)]
        close_idx = text.find(closer, m.end())
        if close_idx == -1:
            logging.debug(
                "Unterminated %r at offset %d; discarding %d trailing chars",
                m.group(0),
                m.start(),
                end - m.start(),
            )
            break
        pos = close_idx + len(closer)
    return "".join(result)


def strip_footnotes(text: str) -> str:
    """
    Delete footnote definitions (``[^label]: ...`` lines) and inline
    footnote references (``[^label]``).

    >>> strip_footnotes("Text[^1] here.\\n[^1]: The note.")
    'Text here.\\n'
    """
    return _FOOTNOTE_RE.sub("", text)


def filter_text(text: str) -> str:
    """Strip every non-countable span: comments, notes and footnotes."""
    return strip_footnotes(strip_tags(text))


class TextFilter:
    """Callable wrapper around `filter_text` for pipeline-style callers."""

    def filter(self, text: str) -> str:
        return filter_text(text)

    __call__ = filter
