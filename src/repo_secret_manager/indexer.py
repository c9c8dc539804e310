"""
Indexer: find which files contain which secrets.

Builds IndexEntry lists by literal substring search and folds them into the
catalogue's index, either replacing it outright (full rebuild) or merging a
scan of changed files into the previous index (incremental).

Incremental merge only ever adds or refreshes entries for files that
currently contain a hit, and prunes entries whose file no longer exists.
A file that stays in the index but no longer contains its secret keeps its
stale entry until the next full rebuild.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .catalogue import Catalogue, IndexEntry
from .config import IndexStats
from .patterns import matches
from .utils import read_text, relative_posix
from .walker import IgnoreTest, walk

logger = logging.getLogger(__name__)


def find_secret_ids(content: str, catalogue: Catalogue) -> list[str]:
    """Ids of every record whose value occurs in ``content``, in catalogue order."""
    return [record.id for record in catalogue if record.value and record.value in content]


def _candidates(
    targets: Iterable[Path] | None,
    search_path: Path,
    is_ignored: IgnoreTest | None,
) -> Iterable[Path]:
    if targets:
        return (Path(t) for t in targets)
    return walk(search_path, is_ignored)


def scan(
    catalogue: Catalogue,
    root: Path | str,
    targets: Iterable[Path] | None = None,
    search_path: Path | str | None = None,
    pattern: str | None = None,
    is_ignored: IgnoreTest | None = None,
    exclude: Iterable[Path] | None = None,
    stats: IndexStats | None = None,
) -> list[IndexEntry]:
    """
    Scan files for secret occurrences.

    Args:
        catalogue: Records to look for
        root: Repository root; emitted paths are relative to it
        targets: Explicit files to scan; when empty, walk ``search_path``
        search_path: Directory (or file) to walk; defaults to ``root``
        pattern: Optional base-name filter, e.g. ``(*.js|*.json)``
        is_ignored: Ignore predicate handed to the walker
        exclude: Files never scanned (the vault file)
        stats: Counters updated in place

    Returns:
        One IndexEntry per file with at least one hit
    """
    root = Path(root).resolve()
    search_path = Path(search_path).resolve() if search_path else root
    excluded = {Path(p).resolve() for p in (exclude or ())}
    stats = stats if stats is not None else IndexStats()

    entries: list[IndexEntry] = []
    seen: set[str] = set()

    for file_path in _candidates(targets, search_path, is_ignored):
        file_path = file_path.resolve()
        if file_path in excluded:
            continue

        stats.files_considered += 1

        if pattern and not matches(file_path.name, pattern):
            stats.files_skipped_pattern += 1
            continue

        try:
            content, _ = read_text(file_path)
        except OSError as e:
            stats.files_unreadable += 1
            logger.debug("Skipping %s: %s", file_path, e)
            continue

        secret_ids = find_secret_ids(content, catalogue)
        if not secret_ids:
            continue

        rel_path = relative_posix(file_path, root)
        if rel_path in seen:
            continue
        seen.add(rel_path)

        stats.files_with_secrets += 1
        entries.append(IndexEntry(path=rel_path, secret_ids=secret_ids))

    return entries


def normalize_entry_path(path: str, root: Path) -> str:
    """Rewrite a stored path (possibly absolute or backslashed) relative to root."""
    candidate = Path(path.replace("\\", "/"))
    if not candidate.is_absolute():
        candidate = root / candidate
    return relative_posix(candidate, root)


def merge_incremental(
    previous: list[IndexEntry] | None,
    fresh: list[IndexEntry],
    root: Path | str,
    stats: IndexStats | None = None,
) -> list[IndexEntry]:
    """
    Overlay fresh entries onto the previous index, keyed by path, then drop
    entries whose file no longer exists.
    """
    root = Path(root).resolve()
    merged: dict[str, IndexEntry] = {}

    for entry in previous or []:
        rel_path = normalize_entry_path(entry.path, root)
        merged[rel_path] = IndexEntry(path=rel_path, secret_ids=list(entry.secret_ids))

    for entry in fresh:
        merged[entry.path] = entry

    result = []
    for rel_path, entry in merged.items():
        if not (root / rel_path).exists():
            if stats is not None:
                stats.entries_dropped_missing += 1
            logger.debug("Dropping index entry for missing file %s", rel_path)
            continue
        if entry.secret_ids:
            result.append(entry)

    return result


def update_index(
    catalogue: Catalogue,
    root: Path | str,
    rebuild: bool = False,
    targets: Iterable[Path] | None = None,
    search_path: Path | str | None = None,
    pattern: str | None = None,
    is_ignored: IgnoreTest | None = None,
    exclude: Iterable[Path] | None = None,
) -> IndexStats:
    """
    Refresh ``catalogue.index`` in place.

    With ``rebuild`` the scan result replaces the index; otherwise it is
    merged into the previous index.
    """
    stats = IndexStats()
    fresh = scan(
        catalogue,
        root,
        targets=targets,
        search_path=search_path,
        pattern=pattern,
        is_ignored=is_ignored,
        exclude=exclude,
        stats=stats,
    )

    if rebuild:
        catalogue.set_index(fresh)
    else:
        catalogue.set_index(merge_incremental(catalogue.index, fresh, root, stats))

    logger.info("Indexed %d file(s) containing secrets", len(catalogue.index or []))
    return stats
