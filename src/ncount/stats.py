from collections.abc import Iterable
from dataclasses import dataclass
from functools import reduce


@dataclass(frozen=True)
class Stats:
    """
    Paragraph statistics for a section: total words, paragraph count and the
    length (in words) of the longest paragraph.

    Combination with ``+`` is associative and commutative, with ``Stats()`` as
    the identity, so totals do not depend on aggregation order.

    >>> Stats().with_paragraph(3) + Stats().with_paragraph(5).with_paragraph(7)
    Stats(word_count=15, paragraph_count=3, longest_paragraph=7)
    """

    word_count: int = 0
    paragraph_count: int = 0
    longest_paragraph: int = 0

    def with_paragraph(self, words: int) -> "Stats":
        """Return a copy with one more paragraph of `words` words."""
        return Stats(
            word_count=self.word_count + words,
            paragraph_count=self.paragraph_count + 1,
            longest_paragraph=max(self.longest_paragraph, words),
        )

    def __add__(self, other: "Stats") -> "Stats":
        if not isinstance(other, Stats):
            return NotImplemented
        return Stats(
            word_count=self.word_count + other.word_count,
            paragraph_count=self.paragraph_count + other.paragraph_count,
            longest_paragraph=max(self.longest_paragraph, other.longest_paragraph),
        )

    @classmethod
    def combine(cls, items: Iterable["Stats"]) -> "Stats":
        return reduce(lambda acc, s: acc + s, items, cls())

    @property
    def average_paragraph(self) -> int:
        """
        Mean paragraph length, rounded down; 0 for a section without paragraphs.

        >>> Stats(word_count=12, paragraph_count=5).average_paragraph
        2
        >>> Stats().average_paragraph
        0
        """
        if self.paragraph_count == 0:
            return 0
        return self.word_count // self.paragraph_count

    @property
    def is_empty(self) -> bool:
        return self.paragraph_count == 0

    def to_dict(self) -> dict[str, int]:
        return {
            "words": self.word_count,
            "paragraphs": self.paragraph_count,
            "longest": self.longest_paragraph,
            "average": self.average_paragraph,
        }
