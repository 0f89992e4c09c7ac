from ncount.document import (
    DocumentBuilder,
    DocumentNode,
    DocumentTree,
    Section,
    SectionRow,
    overall_stats,
    parse_sections,
)
from ncount.errors import DocumentReadError, NcountError
from ncount.stats import Stats
from ncount.text.filter import TextFilter, filter_text
from ncount.text.heading import Heading, parse_heading
from ncount.text.tokenizer import count_words, split_words


def count_document(raw_text: str, document_id: str = "document") -> DocumentTree:
    """
    Build a finished tree for a single in-memory document.

    >>> count_document("# A\\none two three").overall_stats().word_count
    3
    """
    builder = DocumentBuilder()
    builder.apply(document_id, raw_text)
    return builder.finalize()


__all__ = [
    "DocumentBuilder",
    "DocumentNode",
    "DocumentReadError",
    "DocumentTree",
    "Heading",
    "NcountError",
    "Section",
    "SectionRow",
    "Stats",
    "TextFilter",
    "count_document",
    "count_words",
    "filter_text",
    "overall_stats",
    "parse_heading",
    "parse_sections",
    "split_words",
]
