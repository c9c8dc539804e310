"""
Batch operations over a repository.

Each runner picks its candidate files (the index when one exists and no
explicit path is given, otherwise an ignore-aware walk), applies one
substitution per file and returns RunStats. The catalogue vault file is never
touched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

from .catalogue import Catalogue
from .config import IndexStats, RunStats
from .gitops import GitRepository, add_to_gitignore
from .indexer import update_index
from .substitution import (
    SiblingResult,
    decrypt_in_place,
    encrypt_in_place,
    is_redacted_file,
    redact,
    redacted_path,
    unredact,
)
from .utils import UnreadableFileError, relative_posix
from .walker import IgnoreTest, walk

logger = logging.getLogger(__name__)


class RepoContext:
    """
    Where an operation runs: repository root, vault file and git access.

    ``repo`` is optional so the engine can run on a plain directory; without
    it there is no ignore filtering beyond .git and no untracking.
    """

    def __init__(
        self,
        root: Path | str,
        vault_path: Path | str | None = None,
        repo: GitRepository | None = None,
    ):
        self.root = Path(root).resolve()
        self.vault_path = Path(vault_path).resolve() if vault_path else None
        self.repo = repo

    @property
    def is_ignored(self) -> IgnoreTest | None:
        return self.repo.is_ignored if self.repo is not None else None

    def relative(self, path: Path | str) -> str:
        return relative_posix(path, self.root)

    def is_vault(self, path: Path) -> bool:
        return self.vault_path is not None and path.resolve() == self.vault_path


def ensure_no_overlaps(catalogue: Catalogue, strict: bool) -> None:
    """In strict mode, refuse to run when one secret value contains another."""
    if not strict:
        return
    error = catalogue.check_overlaps()
    if error is not None:
        raise error


def uses_index(catalogue: Catalogue, target: Path | str | None, use_index: bool) -> bool:
    return use_index and target is None and catalogue.has_index


def _indexed_files(catalogue: Catalogue, ctx: RepoContext, stats: RunStats) -> Iterator[Path]:
    for entry in catalogue.index or []:
        path = ctx.root / entry.path
        if not path.is_file():
            stats.files_skipped += 1
            logger.debug("Indexed file no longer exists: %s", entry.path)
            continue
        yield path


def _walked_files(ctx: RepoContext, target: Path | str | None) -> Iterator[Path]:
    search_path = Path(target).resolve() if target else ctx.root
    for path in walk(search_path, ctx.is_ignored):
        if not ctx.is_vault(path):
            yield path


def candidate_files(
    catalogue: Catalogue,
    ctx: RepoContext,
    target: Path | str | None,
    use_index: bool,
    stats: RunStats,
) -> Iterator[Path]:
    if uses_index(catalogue, target, use_index):
        logger.info("Using index: %d indexed file(s)", len(catalogue.index or []))
        return _indexed_files(catalogue, ctx, stats)
    logger.info("Performing full directory scan of %s", target or ctx.root)
    return _walked_files(ctx, target)


def _run(
    files: Iterator[Path],
    action: Callable[[Path], bool],
    ctx: RepoContext,
    explicit: bool,
    stats: RunStats,
) -> RunStats:
    for path in files:
        stats.files_visited += 1
        try:
            changed = action(path)
        except UnreadableFileError as e:
            stats.files_skipped += 1
            logger.debug("Skipping %s: %s", path, e)
            continue
        except OSError as e:
            if explicit:
                raise
            stats.files_skipped += 1
            logger.warning("Could not process %s: %s", ctx.relative(path), e)
            continue

        if changed:
            stats.record_change(ctx.relative(path))
        else:
            stats.files_unchanged += 1
    return stats


def _is_single_file(target: Path | str | None) -> bool:
    return target is not None and Path(target).is_file()


def encrypt_files(
    catalogue: Catalogue,
    ctx: RepoContext,
    target: Path | str | None = None,
    use_index: bool = True,
    strict: bool = False,
) -> RunStats:
    """Replace secret values with placeholders in place."""
    ensure_no_overlaps(catalogue, strict)
    stats = RunStats()
    files = candidate_files(catalogue, ctx, target, use_index, stats)
    return _run(files, lambda p: encrypt_in_place(p, catalogue), ctx, _is_single_file(target), stats)


def decrypt_files(
    catalogue: Catalogue,
    ctx: RepoContext,
    target: Path | str | None = None,
    use_index: bool = True,
    strict: bool = False,
) -> RunStats:
    """Replace placeholders with secret values in place."""
    ensure_no_overlaps(catalogue, strict)
    stats = RunStats()
    files = candidate_files(catalogue, ctx, target, use_index, stats)
    return _run(files, lambda p: decrypt_in_place(p, catalogue), ctx, _is_single_file(target), stats)


def _sibling_run(
    files: Iterator[Path],
    action: Callable[[Path], SiblingResult | None],
    ctx: RepoContext,
    explicit: bool,
    stats: RunStats,
    on_written: Callable[[Path, RunStats], None] | None = None,
) -> RunStats:
    for path in files:
        stats.files_visited += 1
        try:
            result = action(path)
        except UnreadableFileError as e:
            stats.files_skipped += 1
            logger.debug("Skipping %s: %s", path, e)
            continue
        except OSError as e:
            if explicit:
                raise
            stats.files_skipped += 1
            logger.warning("Could not process %s: %s", ctx.relative(path), e)
            continue

        if result is None:
            stats.files_unchanged += 1
            continue

        sibling = ctx.relative(result.path)
        stats.sibling_results[sibling] = result.status
        if not result.changed:
            stats.files_unchanged += 1
            continue

        stats.record_change(sibling)
        if on_written is not None:
            on_written(path, stats)
    return stats


def redact_files(
    catalogue: Catalogue,
    ctx: RepoContext,
    target: Path | str | None = None,
    use_index: bool = True,
    update_gitignore: bool = True,
    untrack: bool = True,
    strict: bool = False,
) -> RunStats:
    """
    Write ``.redacted`` siblings for files containing secrets.

    Originals are left untouched. When a sibling is created or updated, the
    original is added to .gitignore and removed from the git index (kept on
    disk), unless disabled.
    """
    ensure_no_overlaps(catalogue, strict)
    stats = RunStats()
    files = (
        p for p in candidate_files(catalogue, ctx, target, use_index, stats)
        if not is_redacted_file(p)
    )

    def protect_original(original: Path, run: RunStats) -> None:
        if update_gitignore and add_to_gitignore(original, ctx.root):
            run.gitignore_updated = True
        if untrack and ctx.repo is not None and ctx.repo.untrack(original):
            run.files_untracked += 1

    return _sibling_run(
        files,
        lambda p: redact(p, catalogue),
        ctx,
        _is_single_file(target),
        stats,
        on_written=protect_original,
    )


def _redacted_candidates(
    catalogue: Catalogue,
    ctx: RepoContext,
    target: Path | str | None,
    use_index: bool,
    stats: RunStats,
) -> Iterator[Path]:
    if uses_index(catalogue, target, use_index):
        # Index entries name originals; map them to their redacted siblings
        for entry in catalogue.index or []:
            path = ctx.root / entry.path
            sibling = path if is_redacted_file(path) else redacted_path(path)
            if sibling.is_file():
                yield sibling
            else:
                stats.files_skipped += 1
        return

    for path in _walked_files(ctx, target):
        if is_redacted_file(path):
            yield path


def unredact_files(
    catalogue: Catalogue,
    ctx: RepoContext,
    target: Path | str | None = None,
    use_index: bool = True,
    strict: bool = False,
) -> RunStats:
    """Restore plaintext originals from ``.redacted`` siblings."""
    ensure_no_overlaps(catalogue, strict)
    stats = RunStats()
    files = _redacted_candidates(catalogue, ctx, target, use_index, stats)
    return _sibling_run(
        files, lambda p: unredact(p, catalogue), ctx, _is_single_file(target), stats
    )


def index_files(
    catalogue: Catalogue,
    ctx: RepoContext,
    target: Path | str | None = None,
    pattern: str | None = None,
    rebuild: bool = False,
) -> IndexStats:
    """
    Refresh the catalogue's file index.

    Without ``rebuild`` only git-changed files (plus exact .gitignore entries)
    are scanned and merged into the previous index. With ``rebuild`` the
    whole tree below ``target`` is scanned and replaces the index.
    """
    targets: list[Path] | None = None
    if not rebuild and ctx.repo is not None:
        search_path = Path(target).resolve() if target else ctx.root
        targets = [
            p for p in ctx.repo.changed_files()
            if not ctx.is_vault(p) and (p == search_path or search_path in p.parents)
        ]
        if not targets:
            logger.info("No git-modified or .gitignore-listed files found")

    exclude = [ctx.vault_path] if ctx.vault_path else None
    return update_index(
        catalogue,
        ctx.root,
        rebuild=rebuild,
        targets=targets,
        search_path=target,
        pattern=pattern,
        is_ignored=ctx.is_ignored,
        exclude=exclude,
    )

