import re
from collections.abc import Iterator

# A typed em dash. Single and double hyphens join compound words instead.
EM_DASH = "---"

_WORD_CHAR_RE = re.compile(r"[A-Za-z0-9]")


def split_words(text: str) -> Iterator[str]:
    """
    Yield the words of `text`.

    Whitespace separates chunks first; each chunk is then split at every
    ``---``. A piece is a word only if it holds at least one ASCII letter or
    digit, so stray punctuation left behind by the split is dropped.
    Apostrophes and colons never split (``don't``, ``3:45``).

    >>> list(split_words('"Wait---what?!" she said.'))
    ['"Wait', 'what?!"', 'she', 'said.']
    >>> list(split_words("a well-known -- thing"))
    ['a', 'well-known', 'thing']
    """
    for chunk in text.split():
        for piece in chunk.split(EM_DASH):
            if _WORD_CHAR_RE.search(piece):
                yield piece


def count_words(text: str) -> int:
    """
    Number of words in a line or paragraph.

    >>> count_words("don't stop at 3:45")
    4
    >>> count_words("wizened---hulk")
    2
    >>> count_words("   ")
    0
    """
    return sum(1 for _ in split_words(text))
