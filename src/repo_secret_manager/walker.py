"""
Ignore-aware file walker.

Enumerates regular files below a root, delegating ignore decisions to a
callable (normally GitRepository.is_ignored). Ignored directories are pruned
rather than descended into.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Generator
from pathlib import Path

logger = logging.getLogger(__name__)

IgnoreTest = Callable[[Path], bool]

# Never descended into, regardless of ignore rules
ALWAYS_PRUNED_DIRS = {".git"}


def _never_ignored(_path: Path) -> bool:
    return False


def walk(
    root: Path | str,
    is_ignored: IgnoreTest | None = None,
) -> Generator[Path, None, None]:
    """
    Walk a directory tree and yield regular file paths, depth-first.

    Uses os.scandir over an explicit worklist. Symlinks are not followed.
    No ordering is guaranteed beyond what the directory listing returns.

    Args:
        root: Directory to walk (a regular file yields itself)
        is_ignored: Predicate; entries for which it returns True are skipped

    Yields:
        Absolute paths of regular files
    """
    is_ignored = is_ignored or _never_ignored
    root = Path(root).resolve()

    if root.is_file():
        yield root
        return

    dirs_to_process = [root]

    while dirs_to_process:
        current_dir = dirs_to_process.pop()

        try:
            with os.scandir(current_dir) as entries:
                entries_list = list(entries)
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", current_dir, e)
            continue

        dirs_to_add = []
        for entry in entries_list:
            entry_path = Path(entry.path)
            try:
                if entry.is_symlink():
                    continue

                if entry.is_dir(follow_symlinks=False):
                    if entry.name in ALWAYS_PRUNED_DIRS or is_ignored(entry_path):
                        continue
                    dirs_to_add.append(entry_path)

                elif entry.is_file(follow_symlinks=False):
                    if is_ignored(entry_path):
                        continue
                    yield entry_path

            except OSError as e:
                logger.debug("Skipping %s: %s", entry_path, e)
                continue

        # Reverse so pop() visits subdirectories in listing order
        dirs_to_process.extend(reversed(dirs_to_add))
