import logging

import pytest

from ncount.errors import DocumentReadError
from ncount.io.loader import (
    build_tree,
    expand_paths,
    load_documents,
    read_document,
    strip_front_matter,
)
from ncount.stats import Stats


@pytest.fixture(autouse=True)
def _thread_executor(monkeypatch):
    monkeypatch.delenv("NCOUNT_PARSE_USE_PROCESSES", raising=False)
    monkeypatch.delenv("NCOUNT_PARSE_WORKERS", raising=False)


def test_expand_directory_is_sorted_and_skips_hidden(corpus):
    (corpus / ".hidden.md").write_text("# Secret\n", encoding="utf-8")
    (corpus / "sub").mkdir()
    (corpus / "sub" / "deeper.md").write_text("# Deeper\n", encoding="utf-8")
    assert [p.name for p in expand_paths([corpus])] == [
        "01-first.md",
        "02-second.md",
        "03-notes.txt",
    ]


def test_expand_glob_and_file(corpus):
    paths = expand_paths([str(corpus / "*.md"), corpus / "03-notes.txt"])
    assert [p.name for p in paths] == ["01-first.md", "02-second.md", "03-notes.txt"]


def test_expand_deduplicates(corpus):
    paths = expand_paths([corpus, corpus / "01-first.md", str(corpus / "0*")])
    assert len(paths) == 3


def test_expand_missing_path_warns(tmp_path, caplog):
    caplog.set_level(logging.WARNING)
    assert expand_paths([tmp_path / "missing.md"]) == []
    assert "missing.md" in caplog.text


def test_strip_front_matter_mapping():
    meta, body = strip_front_matter(
        "---\ntitle: Dawn\ntags: [draft, one]\n---\n# Dawn\nIt was early.\n"
    )
    assert meta == {"title": "Dawn", "tags": ["draft", "one"]}
    assert body == "# Dawn\nIt was early.\n"


def test_strip_front_matter_keeps_non_mapping_blocks():
    text = "---\nJust a line of prose\n---\nbody\n"
    assert strip_front_matter(text) == (None, text)


def test_strip_front_matter_keeps_invalid_yaml():
    text = "---\nkey: [unclosed\n---\nbody\n"
    assert strip_front_matter(text) == (None, text)


def test_read_document_uses_front_matter_title(tmp_path):
    path = tmp_path / "chapter.md"
    path.write_text(
        "---\ntitle: The Crossing\nauthor: Someone Else\n---\nFour words of prose.\n",
        encoding="utf-8",
    )
    doc = read_document(path)
    assert doc.identifier == "The Crossing"
    assert doc.sections[0].stats == Stats(4, 1, 4)


def test_read_document_defaults_to_file_name(corpus):
    doc = read_document(corpus / "03-notes.txt")
    assert doc.identifier == "03-notes.txt"


def test_read_document_invalid_utf8(tmp_path):
    path = tmp_path / "binary.md"
    path.write_bytes(b"\xff\xfe\x00bad")
    with pytest.raises(DocumentReadError) as info:
        read_document(path)
    assert info.value.path == path
    assert isinstance(info.value.cause, UnicodeDecodeError)


def test_read_document_missing_file(tmp_path):
    with pytest.raises(DocumentReadError):
        read_document(tmp_path / "gone.md")


def test_load_documents_isolates_failures(corpus, caplog):
    bad = corpus / "00-bad.md"
    bad.write_bytes(b"\xff\xfe\x00bad")
    caplog.set_level(logging.WARNING)
    result = load_documents(expand_paths([corpus]), workers=2)
    assert [d.path.name for d in result.documents] == [
        "01-first.md",
        "02-second.md",
        "03-notes.txt",
    ]
    assert [p for p, _ in result.failures] == [bad]
    assert "00-bad.md" in caplog.text


def test_build_tree(corpus):
    tree, failures = build_tree(expand_paths([corpus]), workers=1)
    assert failures == []
    assert [c.heading_text for c in tree.root.children] == [
        "Chapter 1",
        "Chapter 2",
        "03-notes.txt",
    ]
    assert tree.root.children[0].own_stats == Stats(7, 2, 5)
    assert tree.overall_stats() == Stats(15, 4, 5)


def test_build_tree_is_independent_of_worker_count(corpus):
    paths = expand_paths([corpus])
    serial, _ = build_tree(paths, workers=1)
    parallel, _ = build_tree(list(reversed(paths)), workers=4)
    assert serial == parallel


def test_build_tree_with_processes(corpus, monkeypatch):
    monkeypatch.setenv("NCOUNT_PARSE_USE_PROCESSES", "1")
    (corpus / "00-bad.md").write_bytes(b"\xff\xfe\x00bad")
    tree, failures = build_tree(expand_paths([corpus]), workers=2)
    assert len(failures) == 1
    assert isinstance(failures[0][1], DocumentReadError)
    assert tree.overall_stats() == Stats(15, 4, 5)


def test_workers_from_environment(corpus, monkeypatch, caplog):
    monkeypatch.setenv("NCOUNT_PARSE_WORKERS", "2")
    caplog.set_level(logging.INFO)
    load_documents(expand_paths([corpus]))
    assert "with 2 ThreadPoolExecutor workers" in caplog.text
