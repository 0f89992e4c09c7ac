import pytest

from ncount.document import DocumentBuilder, DocumentTree


@pytest.fixture
def novel_text() -> str:
    """Real text from a novel draft, with its em dashes typed as triple hyphens."""
    return (
        "Though the island was without paths, Grier tried never to follow the "
        "same path twice. Breathless, she paused for an moment on an outcrop of bald stone at the "
        "brow of a hill. Warmed by her run, she pulled off her hoodie and tied it around her waist, "
        "and she took another instant to get her bearings. There: the dead tree she had passed "
        "yesterday---a wizened hulk, stripped of bark and gray with age---waited there, pointing to "
        "the right. She had gone left yesterday."
    )


@pytest.fixture
def two_heading_text() -> str:
    return """# A

one two three

# B

one two three four five

one two three four five six seven
"""


@pytest.fixture
def two_heading_tree(two_heading_text) -> DocumentTree:
    builder = DocumentBuilder()
    builder.apply("sample.md", two_heading_text)
    return builder.finalize()


@pytest.fixture
def nested_tree() -> DocumentTree:
    """A part with two chapters, the second of which has notes below it."""
    text = """# Part One
part intro words

## Chapter 1
the first chapter

## Chapter 2
the second chapter text

### Notes
notes here
"""
    builder = DocumentBuilder()
    builder.apply("book.md", text)
    return builder.finalize()


@pytest.fixture
def corpus(tmp_path):
    """A small folder of chapter files, written out of order."""
    (tmp_path / "02-second.md").write_text(
        "# Chapter 2\n\nSecond chapter words.\n", encoding="utf-8"
    )
    (tmp_path / "01-first.md").write_text(
        "# Chapter 1\n\nFirst chapter has more words.\n\n"
        "<!-- an editor comment\nthat spans lines -->\n\nAnother paragraph.\n",
        encoding="utf-8",
    )
    (tmp_path / "03-notes.txt").write_text(
        "Loose notes without any heading.\n", encoding="utf-8"
    )
    return tmp_path
