import logging
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import Any, NamedTuple

from ncount.stats import Stats
from ncount.text.filter import filter_text
from ncount.text.heading import Heading, LineKind, classify_line, parse_heading
from ncount.text.tokenizer import count_words


@dataclass(eq=False)
class DocumentNode:
    level: int
    heading: Heading | None = None
    own_stats: Stats = field(default_factory=Stats)
    children: list["DocumentNode"] = field(default_factory=list)

    @property
    def heading_text(self) -> str | None:
        return self.heading.text if self.heading is not None else None

    @property
    def is_placeholder(self) -> bool:
        return self.heading is None and self.level > 0

    def last_child(self) -> "DocumentNode":
        """Return the open child one level down, synthesizing a placeholder if needed."""
        if not self.children:
            self.children.append(DocumentNode(level=self.level + 1))
        return self.children[-1]

    def copy(self) -> "DocumentNode":
        clones: dict[int, DocumentNode] = {}
        for n in reversed(list(walk(self))):
            clones[id(n)] = replace(n, children=[clones[id(c)] for c in n.children])
        return clones[id(self)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocumentNode):
            return NotImplemented
        pairs = [(self, other)]
        while pairs:
            a, b = pairs.pop()
            if (a.level, a.heading, a.own_stats) != (b.level, b.heading, b.own_stats):
                return False
            if len(a.children) != len(b.children):
                return False
            pairs.extend(zip(a.children, b.children))
        return True

    def __repr__(self) -> str:
        return (
            f"DocumentNode(level={self.level}, heading={self.heading_text!r}, "
            f"own_stats={self.own_stats}, children={len(self.children)})"
        )


@dataclass
class Section:
    """One heading's worth of a parsed document; `heading` is None for leading text."""

    heading: Heading | None
    stats: Stats = field(default_factory=Stats)


class SectionRow(NamedTuple):
    level: int
    heading: str | None
    own_stats: Stats
    total_stats: Stats


def parse_sections(text: str) -> list[Section]:
    """
    Split raw text into a flat list of sections in document order.

    The first section always holds the text preceding the first heading (and
    has no heading). Every non-empty content line counts as one paragraph.

    >>> [(s.heading and s.heading.text, s.stats.word_count)
    ...  for s in parse_sections("intro words\\n# A\\none two three")]
    [(None, 2), ('A', 3)]
    """
    sections = [Section(heading=None)]
    for line in filter_text(text).splitlines():
        kind = classify_line(line)
        if kind is LineKind.SKIP:
            continue
        if kind is LineKind.HEADING:
            sections.append(Section(heading=parse_heading(line)))
            continue
        words = count_words(line)
        if words:
            current = sections[-1]
            current.stats = current.stats.with_paragraph(words)
    return sections


# --- Aggregation ---


def walk(node: DocumentNode) -> Iterator[DocumentNode]:
    """Depth-first, pre-order traversal starting at (and including) `node`."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def overall_stats(node: DocumentNode) -> Stats:
    """Roll up the statistics of `node` and all of its descendants."""
    return Stats.combine(n.own_stats for n in walk(node))


def subtree_totals(node: DocumentNode) -> dict[int, Stats]:
    """Map ``id(n)`` to `overall_stats(n)` for every node, in one bottom-up pass."""
    totals: dict[int, Stats] = {}
    for n in reversed(list(walk(node))):
        totals[id(n)] = Stats.combine(
            [n.own_stats, *(totals[id(c)] for c in n.children)]
        )
    return totals


def iter_sections(node: DocumentNode) -> Iterator[SectionRow]:
    totals = subtree_totals(node)
    for n in walk(node):
        yield SectionRow(n.level, n.heading_text, n.own_stats, totals[id(n)])


# --- Heading filter ---


def heading_matcher(query: str) -> Callable[[str], bool]:
    """
    Build a case-insensitive predicate over heading text.

    The query is tried as a regular expression first; if it does not compile
    it is matched as a plain substring instead.

    >>> heading_matcher("^chap")("Chapter One")
    True
    >>> heading_matcher("(draft")("Notes (Draft 2)")
    True
    """
    try:
        pattern = re.compile(query, re.IGNORECASE)
    except re.error as e:
        logging.debug(f"Filter {query!r} is not a valid regex ({e}); using substring")
        needle = query.casefold()
        return lambda text: needle in text.casefold()
    return lambda text: pattern.search(text) is not None


def filter_node(
    node: DocumentNode, matches: Callable[[str], bool]
) -> DocumentNode | None:
    """
    Return a pruned copy of `node` keeping matching headings and their subtrees.

    A node kept only because a descendant matched becomes a structural
    placeholder: its own statistics are zeroed. Returns None when nothing
    under `node` matches.
    """
    # Pre-order, not descending below a match; then rebuild bottom-up.
    order: list[DocumentNode] = []
    matched: set[int] = set()
    stack = [node]
    while stack:
        current = stack.pop()
        order.append(current)
        if current.heading is not None and matches(current.heading.text):
            matched.add(id(current))
        else:
            stack.extend(reversed(current.children))

    kept: dict[int, DocumentNode] = {}
    for current in reversed(order):
        if id(current) in matched:
            kept[id(current)] = current.copy()
            continue
        children = [kept[id(c)] for c in current.children if id(c) in kept]
        if children:
            kept[id(current)] = DocumentNode(
                level=current.level,
                heading=current.heading,
                own_stats=Stats(),
                children=children,
            )
    return kept.get(id(node))


# --- Tree and builder ---


class DocumentTree:
    """An immutable-by-convention view over a finished document hierarchy."""

    def __init__(self, root: DocumentNode):
        self.root = root

    def overall_stats(self) -> Stats:
        return overall_stats(self.root)

    def walk(self) -> Iterator[DocumentNode]:
        return walk(self.root)

    def sections(self) -> Iterator[SectionRow]:
        """Yield (level, heading, own stats, subtree stats) for every node."""
        return iter_sections(self.root)

    def filtered_view(self, query: str) -> "DocumentTree":
        """Return a new tree reduced to headings matching `query`; self is untouched."""
        root = filter_node(self.root, heading_matcher(query))
        if root is None:
            root = DocumentNode(level=self.root.level, heading=self.root.heading)
        logging.debug(
            "Filter %r kept %d of %d nodes",
            query,
            sum(1 for _ in walk(root)),
            sum(1 for _ in self.walk()),
        )
        return DocumentTree(root)

    def filter_by_heading(self, query: str) -> None:
        """Destructive variant of `filtered_view`."""
        self.root = self.filtered_view(query).root

    def find(self, query: str) -> DocumentNode | None:
        """First node, in document order, whose heading matches `query`."""
        matches = heading_matcher(query)
        return next(
            (
                n
                for n in self.walk()
                if n.heading is not None and matches(n.heading.text)
            ),
            None,
        )

    def to_dict(self) -> dict[str, Any]:
        nodes = list(self.walk())
        totals = subtree_totals(self.root)
        dicts: dict[int, dict[str, Any]] = {}
        for n in reversed(nodes):
            dicts[id(n)] = {
                "level": n.level,
                "heading": n.heading_text,
                "stats": n.own_stats.to_dict(),
                "total": totals[id(n)].to_dict(),
                "children": [dicts[id(c)] for c in n.children],
            }
        return dicts[id(self.root)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocumentTree):
            return NotImplemented
        return self.root == other.root

    def __repr__(self) -> str:
        return f"DocumentTree(nodes={sum(1 for _ in self.walk())}, stats={self.overall_stats()})"


class DocumentBuilder:
    """
    Incrementally build a heading tree from one or more documents.

    Depth in the tree always equals heading level: skipped levels are filled
    with placeholder nodes. The path of open sections (the last child at each
    depth) carries over between documents, so a file that starts at ``##``
    continues under the previous file's ``#`` heading.

    >>> b = DocumentBuilder()
    >>> b.apply("notes.md", "# A\\nthree words here\\n# B\\nfive words are in here\\n")
    >>> b.finalize().overall_stats()
    Stats(word_count=8, paragraph_count=2, longest_paragraph=5)
    """

    def __init__(self):
        self.root: DocumentNode | None = DocumentNode(level=0)
        self.current_level = 0

    def _require_root(self) -> DocumentNode:
        if self.root is None:
            raise RuntimeError("DocumentBuilder has already been finalized")
        return self.root

    def new_node(self, level: int, heading: Heading | None = None) -> DocumentNode:
        """Open a new section at `level` below the currently open path."""
        if level < 1:
            raise ValueError(f"heading level must be positive, got {level}")
        node = self._require_root()
        while node.level < level - 1:
            node = node.last_child()
        child = DocumentNode(level=level, heading=heading)
        node.children.append(child)
        self.current_level = level
        return child

    def current_node(self) -> DocumentNode:
        """The most recently opened section (the root before any heading)."""
        node = self._require_root()
        while node.level < self.current_level:
            node = node.last_child()
        return node

    def apply_sections(self, document_id: str, sections: Iterable[Section]) -> None:
        """
        Insert an already-parsed document.

        Text before the first heading is filed under a level-1 node named
        `document_id`; a document without any heading always gets such a node.
        """
        self._require_root()
        sections = list(sections) or [Section(heading=None)]
        leading, rest = sections[0], sections[1:]
        if leading.heading is not None:
            leading, rest = Section(heading=None), sections
        if not leading.stats.is_empty or not rest:
            logging.debug(
                f"{document_id}: {leading.stats.paragraph_count} leading paragraphs "
                "filed under document name"
            )
            node = self.new_node(1, Heading(level=1, text=document_id))
            node.own_stats = node.own_stats + leading.stats
        for section in rest:
            assert section.heading is not None
            node = self.new_node(section.heading.level, section.heading)
            node.own_stats = node.own_stats + section.stats

    def apply(self, document_id: str, raw_text: str) -> None:
        """Parse `raw_text` and add it to the tree."""
        self.apply_sections(document_id, parse_sections(raw_text))

    def finalize(self) -> DocumentTree:
        root = self._require_root()
        self.root = None
        return DocumentTree(root)
