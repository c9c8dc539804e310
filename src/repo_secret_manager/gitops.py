"""
Git collaborator for repo-secret-manager.

Provides the three primitives the engine consumes (ignore test, changed
files, untrack) plus .gitignore editing, repository root discovery and the
pre-commit hook installer.

Uses Git as the source of truth for ignore decisions when available (via
`git check-ignore`), falling back to pathspec with GitWildMatchPattern for
directories that are not inside a repository.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

import git
import pathspec
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from pathspec.patterns import GitWildMatchPattern

from .config import (
    GITIGNORE_FILE,
    GITIGNORE_MARKER,
    HOOK_BACKUP_SUFFIX,
    HOOK_MARKER,
    PRE_COMMIT_HOOK,
    PRE_COMMIT_SCRIPT,
    HookStatus,
)
from .errors import GitError
from .utils import relative_posix

logger = logging.getLogger(__name__)


def find_git_root(start: Path | str | None = None) -> Path | None:
    """
    Find the root of a git repository.

    Walks up the directory tree looking for a .git entry.
    Returns None if no repository encloses ``start``.
    """
    current = Path(start or ".").resolve()
    if current.is_file():
        current = current.parent

    while True:
        if (current / ".git").exists():
            return current
        if current == current.parent:
            return None
        current = current.parent


class GitIgnoreParser:
    """
    Decides whether a path is ignored by .gitignore rules.

    With a repository, `git check-ignore` answers; without one (or if the
    command fails) the root and nested .gitignore files are matched with
    pathspec.
    """

    def __init__(self, root_path: Path, repo: git.Repo | None = None):
        """
        Initialize the parser.

        Args:
            root_path: Root directory of the repository
            repo: Open repository used for `git check-ignore`, if any
        """
        self.root_path = Path(root_path).resolve()
        self.repo = repo
        self._specs: dict[Path, pathspec.PathSpec] = {}
        self._git_ignore_cache: dict[str, bool] = {}

        if repo is None:
            self._load_gitignores()

    def _git_check_ignore(self, rel_path: str) -> bool | None:
        """
        Ask git whether a relative path is ignored.

        Returns:
            True if ignored, False if not ignored, None if git check failed
        """
        if rel_path in self._git_ignore_cache:
            return self._git_ignore_cache[rel_path]

        try:
            self.repo.git.check_ignore("-q", rel_path)
            is_ignored = True
        except GitCommandError as e:
            # Exit code 1 = not ignored, 128 = error
            if e.status != 1:
                logger.debug("git check-ignore failed for %s: %s", rel_path, e)
                return None
            is_ignored = False

        self._git_ignore_cache[rel_path] = is_ignored
        return is_ignored

    def _load_gitignores(self) -> None:
        """Load all .gitignore files below the root."""
        root_gitignore = self.root_path / GITIGNORE_FILE
        if root_gitignore.exists():
            self._load_gitignore_file(root_gitignore, self.root_path)

        for gitignore_path in self.root_path.rglob(GITIGNORE_FILE):
            if gitignore_path != root_gitignore:
                self._load_gitignore_file(gitignore_path, gitignore_path.parent)

    def _load_gitignore_file(self, gitignore_path: Path, base_path: Path) -> None:
        """Load a single .gitignore file using pathspec with GitWildMatchPattern."""
        try:
            with open(gitignore_path, encoding="utf-8", errors="replace") as f:
                patterns = f.read().splitlines()
        except OSError as e:
            logger.debug("Skipping unreadable %s: %s", gitignore_path, e)
            return

        patterns = [
            p.strip() for p in patterns
            if p.strip() and not p.strip().startswith("#")
        ]

        if patterns:
            self._specs[base_path] = pathspec.PathSpec.from_lines(
                GitWildMatchPattern,
                patterns
            )

    def is_ignored(self, file_path: Path) -> bool:
        """
        Check if a file or directory is ignored.

        Args:
            file_path: Absolute path (or path relative to the working directory)

        Returns:
            True if the path should be skipped
        """
        file_path = Path(file_path).resolve()
        try:
            rel_path = file_path.relative_to(self.root_path).as_posix()
        except ValueError:
            return False

        if rel_path == ".":
            return False

        is_dir = file_path.is_dir()
        query = rel_path + "/" if is_dir else rel_path

        if self.repo is not None:
            git_result = self._git_check_ignore(query)
            if git_result is not None:
                return git_result
            if not self._specs:
                self._load_gitignores()

        # Check each .gitignore from most specific to least
        for base_path, spec in sorted(
            self._specs.items(),
            key=lambda x: len(x[0].parts),
            reverse=True
        ):
            try:
                rel = file_path.relative_to(base_path).as_posix()
            except ValueError:
                continue

            if spec.match_file(rel):
                return True
            if is_dir and spec.match_file(rel + "/"):
                return True

        return False


class GitRepository:
    """Thin adapter over a git working tree."""

    def __init__(self, root: Path | str):
        try:
            self.repo = git.Repo(Path(root), search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise GitError(f"Not in a git repository: {root}") from e

        if self.repo.working_tree_dir is None:
            raise GitError(f"Bare repositories are not supported: {root}")

        self.root = Path(self.repo.working_tree_dir).resolve()
        self.ignore_parser = GitIgnoreParser(self.root, repo=self.repo)

    @classmethod
    def discover(cls, start: Path | str | None = None) -> GitRepository:
        root = find_git_root(start)
        if root is None:
            raise GitError(
                "Not in a git repository. This tool is designed to work within "
                "git repositories. Initialize one with: git init"
            )
        return cls(root)

    def relative(self, path: Path | str) -> str:
        return relative_posix(path, self.root)

    @property
    def hooks_dir(self) -> Path:
        return Path(self.repo.git_dir) / "hooks"

    def is_ignored(self, path: Path | str) -> bool:
        return self.ignore_parser.is_ignored(Path(path))

    def _diff_names(self, *args: str) -> list[str]:
        try:
            output = self.repo.git.diff("--name-only", "-z", *args)
        except GitCommandError as e:
            logger.debug("git diff %s failed: %s", " ".join(args), e)
            return []
        return [name for name in output.split("\0") if name.strip()]

    def changed_files(self) -> list[Path]:
        """
        Files worth re-indexing: staged and unstaged changes plus exact file
        paths listed in .gitignore.

        Returns absolute paths of existing regular files, deduplicated, in
        first-seen order.
        """
        candidates = [
            self.root / name
            for name in self._diff_names("HEAD") + self._diff_names("--cached")
        ]
        candidates.extend(self.gitignore_listed_files())

        seen: set[Path] = set()
        files: list[Path] = []
        for path in candidates:
            if path in seen:
                continue
            seen.add(path)
            if path.is_file():
                files.append(path)
        return files

    def gitignore_listed_files(self) -> list[Path]:
        """
        Exact file paths named in the root .gitignore.

        Wildcard patterns, directory entries, negations and comments are
        skipped, as are entries that do not name an existing file.
        """
        gitignore_path = self.root / GITIGNORE_FILE
        if not gitignore_path.exists():
            return []

        try:
            lines = gitignore_path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Could not read %s: %s", gitignore_path, e)
            return []

        files = []
        for line in lines:
            entry = line.strip()
            if not entry or entry.startswith("#") or entry.startswith("!"):
                continue
            if any(c in entry for c in "*?[") or entry.endswith("/"):
                continue

            file_path = self.root / entry.replace("\\", "/").lstrip("/")
            if file_path.is_file():
                files.append(file_path)

        return files

    def is_tracked(self, path: Path | str) -> bool:
        try:
            self.repo.git.ls_files("--error-unmatch", "--", self.relative(path))
        except GitCommandError:
            return False
        return True

    def untrack(self, path: Path | str) -> bool:
        """
        Remove a file from the git index, keeping it on disk.

        Returns:
            True if the file was tracked and is now untracked
        """
        if not self.is_tracked(path):
            return False
        self.repo.git.rm("--cached", "--quiet", "--", self.relative(path))
        logger.info("Untracked %s (file kept on disk)", self.relative(path))
        return True


def add_to_gitignore(path: Path | str, root: Path | str) -> bool:
    """
    Append a file's root-relative path to ``root``/.gitignore.

    The path is added, preceded by a marker comment, only if no uncommented
    line already equals it.

    Returns:
        True if .gitignore was changed
    """
    gitignore_path = Path(root) / GITIGNORE_FILE
    rel_path = relative_posix(path, root)

    content = ""
    if gitignore_path.exists():
        content = gitignore_path.read_text(encoding="utf-8")

    for line in content.split("\n"):
        entry = line.strip()
        if entry.startswith("#"):
            continue
        if entry == rel_path:
            return False

    separator = "\n" if content and not content.endswith("\n") else ""
    with open(gitignore_path, "w", encoding="utf-8", newline="") as f:
        f.write(f"{content}{separator}{GITIGNORE_MARKER}\n{rel_path}\n")

    logger.info("Added %s to %s", rel_path, GITIGNORE_FILE)
    return True


def install_pre_commit_hook(hooks_dir: Path | str) -> HookStatus:
    """
    Write a pre-commit hook that runs ``rsm check``.

    A hook already written by this tool is left alone. Any other existing
    hook is copied to ``pre-commit.backup`` first.

    Returns:
        INSTALLED, BACKED_UP or ALREADY_INSTALLED
    """
    hooks_dir = Path(hooks_dir)
    hooks_dir.mkdir(parents=True, exist_ok=True)
    hook_path = hooks_dir / PRE_COMMIT_HOOK

    status = HookStatus.INSTALLED
    if hook_path.exists():
        existing = hook_path.read_text(encoding="utf-8", errors="replace")
        if HOOK_MARKER in existing:
            return HookStatus.ALREADY_INSTALLED
        backup_path = hook_path.with_name(PRE_COMMIT_HOOK + HOOK_BACKUP_SUFFIX)
        shutil.copy2(hook_path, backup_path)
        logger.info("Backed up existing hook to %s", backup_path)
        status = HookStatus.BACKED_UP

    with open(hook_path, "w", encoding="utf-8", newline="\n") as f:
        f.write(PRE_COMMIT_SCRIPT)
    hook_path.chmod(0o755)
    return status


def remove_pre_commit_hook(hooks_dir: Path | str) -> HookStatus:
    """
    Remove the pre-commit hook written by install_pre_commit_hook.

    Hooks not written by this tool are never touched. A backup left by the
    install is moved back into place.

    Returns:
        REMOVED, RESTORED, NOT_FOUND or FOREIGN
    """
    hook_path = Path(hooks_dir) / PRE_COMMIT_HOOK
    if not hook_path.exists():
        return HookStatus.NOT_FOUND

    if HOOK_MARKER not in hook_path.read_text(encoding="utf-8", errors="replace"):
        return HookStatus.FOREIGN

    backup_path = hook_path.with_name(PRE_COMMIT_HOOK + HOOK_BACKUP_SUFFIX)
    if backup_path.exists():
        shutil.copy2(backup_path, hook_path)
        backup_path.unlink()
        return HookStatus.RESTORED

    hook_path.unlink()
    return HookStatus.REMOVED
