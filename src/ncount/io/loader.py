import glob
import logging
import os
import re
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import yaml
from tqdm import tqdm

from ncount.document import DocumentBuilder, DocumentTree, Section, parse_sections
from ncount.errors import DocumentReadError

_YAML_FM_RE = re.compile(
    r"\A\s*---[ \t]*\n(?P<body>.*?)\n(?:---|\.\.\.)[ \t]*(?:\n|\Z)",
    re.S,
)

_GLOB_CHARS = frozenset("*?[")


@dataclass
class LoadedDocument:
    path: Path
    identifier: str
    sections: list[Section]


@dataclass
class LoadResult:
    documents: list[LoadedDocument] = field(default_factory=list)
    failures: list[tuple[Path, DocumentReadError]] = field(default_factory=list)


def expand_paths(candidates: Iterable[str | Path]) -> list[Path]:
    """
    Resolve command-line style inputs to a sorted list of files.

    Existing files are taken as is, directories contribute their regular
    non-hidden files (one level deep) and anything else is treated as a glob
    pattern. Sorting keeps the report order independent of directory
    enumeration order.
    """
    candidates = list(candidates) or ["."]
    found: set[Path] = set()
    for candidate in candidates:
        path = Path(candidate).expanduser()
        if path.is_file():
            found.add(path)
        elif path.is_dir():
            found.update(
                p for p in path.iterdir() if p.is_file() and not p.name.startswith(".")
            )
        elif _GLOB_CHARS & set(str(candidate)):
            matches = [Path(p) for p in glob.glob(str(path)) if Path(p).is_file()]
            logging.debug(f"Glob {candidate!r} matched {len(matches)} files")
            found.update(matches)
        else:
            logging.warning(f"No such file or directory: {candidate}")
    return sorted(found)


def strip_front_matter(text: str) -> tuple[dict[str, Any] | None, str]:
    """
    Split a leading YAML front-matter block from the body of `text`.

    Only a block that parses to a mapping counts as front matter; anything
    else between the rules is left in place and counted as text.

    >>> meta, body = strip_front_matter("---\\ntitle: Dawn\\n---\\nIt was early.\\n")
    >>> meta, body
    ({'title': 'Dawn'}, 'It was early.\\n')
    >>> strip_front_matter("No front matter.")
    (None, 'No front matter.')
    """
    m = _YAML_FM_RE.match(text)
    if not m:
        return None, text
    try:
        parsed = yaml.safe_load(m.group("body"))
    except yaml.YAMLError:
        logging.debug("Leading block is not YAML; keeping it as text", exc_info=True)
        return None, text
    if not isinstance(parsed, dict):
        return None, text
    return parsed, text[m.end() :]


def read_document(path: Path) -> LoadedDocument:
    """Read and parse one file. Raises DocumentReadError on I/O or decode failure."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentReadError(path, e) from e

    meta, body = strip_front_matter(text)
    identifier = path.name
    if meta and meta.get("title"):
        identifier = str(meta["title"]).strip() or identifier
    sections = parse_sections(body)
    logging.debug(f"Parsed {path}: {len(sections) - 1} headings")
    return LoadedDocument(path=path, identifier=identifier, sections=sections)


def _get_parse_executor(
    workers: int | None = None,
) -> tuple[type[ThreadPoolExecutor | ProcessPoolExecutor], int]:
    """
    Get the executor class and worker count for parsing documents.

    Environment overrides:
    - NCOUNT_PARSE_USE_PROCESSES=1: use ProcessPoolExecutor instead of threads.
    - NCOUNT_PARSE_WORKERS=N: number of workers (an explicit `workers` wins).
    """
    use_processes = os.getenv("NCOUNT_PARSE_USE_PROCESSES", "0").lower() in (
        "1",
        "true",
        "yes",
    )
    Executor = ProcessPoolExecutor if use_processes else ThreadPoolExecutor
    if workers is None:
        default_workers = os.cpu_count() or 4
        workers = int(os.getenv("NCOUNT_PARSE_WORKERS", str(default_workers)))
    return Executor, max(1, workers)


def _read_or_error(path: Path) -> LoadedDocument | DocumentReadError:
    # Errors are returned rather than raised so one bad file does not cancel
    # the rest of the batch.
    try:
        return read_document(path)
    except DocumentReadError as e:
        return e


def load_documents(
    paths: Iterable[Path], workers: int | None = None, progress: bool = False
) -> LoadResult:
    """
    Read and parse `paths`, in parallel when more than one worker is available.

    Documents come back sorted by path whatever order the workers finish in.
    """
    paths = sorted(paths)
    Executor, max_workers = _get_parse_executor(workers)
    max_workers = min(max_workers, len(paths)) or 1
    logging.info(
        f"Parsing {len(paths)} documents with {max_workers} {Executor.__name__} workers"
    )

    result = LoadResult()
    if max_workers == 1:
        _collect(result, paths, map(_read_or_error, paths), progress)
        return result

    with Executor(max_workers=max_workers) as executor:
        _collect(result, paths, executor.map(_read_or_error, paths), progress)
    return result


def _collect(result: LoadResult, paths, outcomes, progress: bool) -> None:
    for path, outcome in tqdm(
        zip(paths, outcomes),
        total=len(paths),
        desc="Reading",
        unit="doc",
        disable=not progress,
    ):
        if isinstance(outcome, DocumentReadError):
            logging.warning(str(outcome))
            result.failures.append((path, outcome))
        else:
            result.documents.append(outcome)


def build_tree(
    paths: Iterable[Path], workers: int | None = None, progress: bool = False
) -> tuple[DocumentTree, list[tuple[Path, DocumentReadError]]]:
    """Load `paths` and merge them, in path order, into a single tree."""
    result = load_documents(paths, workers=workers, progress=progress)
    builder = DocumentBuilder()
    for doc in result.documents:
        builder.apply_sections(doc.identifier, doc.sections)
    return builder.finalize(), result.failures
