"""Tests for git integration and .gitignore editing."""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from repo_secret_manager.config import GITIGNORE_MARKER, HookStatus
from repo_secret_manager.errors import GitError
from repo_secret_manager.gitops import (
    GitIgnoreParser,
    GitRepository,
    add_to_gitignore,
    find_git_root,
    install_pre_commit_hook,
    remove_pre_commit_hook,
)

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git executable not available"
)


class TestAddToGitignore:
    """Tests for add_to_gitignore()."""

    def test_creates_gitignore_with_marker(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "cfg").mkdir()

            assert add_to_gitignore(root / "cfg" / "app.json", root) is True

            content = (root / ".gitignore").read_text()
            assert content == f"{GITIGNORE_MARKER}\ncfg/app.json\n"

    def test_idempotent(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            add_to_gitignore(root / "a.txt", root)
            first = (root / ".gitignore").read_text()

            assert add_to_gitignore(root / "a.txt", root) is False
            assert (root / ".gitignore").read_text() == first

    def test_commented_line_does_not_count(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / ".gitignore").write_text("#a.txt")

            assert add_to_gitignore(root / "a.txt", root) is True

            lines = (root / ".gitignore").read_text().splitlines()
            assert lines == ["#a.txt", GITIGNORE_MARKER, "a.txt"]


class TestGitIgnoreParserFallback:
    """Tests for pathspec matching without a repository."""

    def test_root_and_nested_gitignore(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / ".gitignore").write_text("*.log\nbuild/\n")
            (root / "sub").mkdir()
            (root / "sub" / ".gitignore").write_text("local.txt\n")
            (root / "build").mkdir()
            for name in ("app.log", "keep.txt", "sub/local.txt", "sub/other.txt"):
                (root / name).write_text("x")

            parser = GitIgnoreParser(root)

            assert parser.is_ignored(root / "app.log")
            assert parser.is_ignored(root / "build")
            assert parser.is_ignored(root / "sub" / "local.txt")
            assert not parser.is_ignored(root / "keep.txt")
            assert not parser.is_ignored(root / "sub" / "other.txt")

    def test_outside_root_not_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir, tempfile.TemporaryDirectory() as other:
            parser = GitIgnoreParser(Path(tmpdir))
            assert not parser.is_ignored(Path(other) / "x.txt")


class TestFindGitRoot:
    """Tests for find_git_root()."""

    def test_finds_marker_in_parent(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / ".git").mkdir()
            (root / "a" / "b").mkdir(parents=True)
            assert find_git_root(root / "a" / "b") == root

    def test_none_outside_repository(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            nested = Path(tmpdir).resolve() / "plain"
            nested.mkdir()
            root = find_git_root(nested)
            assert root is None or root not in (nested, nested.parent)


@requires_git
class TestGitRepository:
    """Tests for GitRepository against a real repository."""

    def test_not_a_repository(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(GitError):
                GitRepository(Path(tmpdir) / "missing")

    def test_discover_from_subdirectory(self, git_repo):
        root, _ = git_repo
        (root / "deep").mkdir()
        assert GitRepository.discover(root / "deep").root == root

    def test_is_ignored(self, git_repo):
        root, _ = git_repo
        (root / ".gitignore").write_text("secret.txt\nlogs/\n")
        (root / "secret.txt").write_text("x")
        (root / "logs").mkdir()
        (root / "public.txt").write_text("x")

        repo = GitRepository(root)

        assert repo.is_ignored(root / "secret.txt")
        assert repo.is_ignored(root / "logs")
        assert not repo.is_ignored(root / "public.txt")

    def test_changed_files(self, git_repo):
        root, repo = git_repo
        (root / "README.md").write_text("changed\n")
        (root / "staged.txt").write_text("new\n")
        repo.index.add(["staged.txt"])
        (root / ".gitignore").write_text("local.env\n*.log\nbuild/\n")
        (root / "local.env").write_text("KEY=1\n")
        (root / "untracked.txt").write_text("not reported\n")

        names = {p.name for p in GitRepository(root).changed_files()}

        assert names == {"README.md", "staged.txt", "local.env"}

    def test_gitignore_listed_files_only_exact_paths(self, git_repo):
        root, _ = git_repo
        (root / ".gitignore").write_text("# c\n!keep\n*.log\ndir/\nlisted.txt\nmissing.txt\n")
        (root / "listed.txt").write_text("x")

        files = GitRepository(root).gitignore_listed_files()

        assert files == [root / "listed.txt"]

    def test_untrack_keeps_file(self, git_repo):
        root, _ = git_repo
        repo = GitRepository(root)

        assert repo.is_tracked(root / "README.md")
        assert repo.untrack(root / "README.md") is True
        assert not repo.is_tracked(root / "README.md")
        assert (root / "README.md").exists()

    def test_untrack_untracked_file(self, git_repo):
        root, _ = git_repo
        (root / "new.txt").write_text("x")
        assert GitRepository(root).untrack(root / "new.txt") is False

    def test_hooks_dir(self, git_repo):
        root, _ = git_repo
        assert GitRepository(root).hooks_dir == root / ".git" / "hooks"


class TestPreCommitHook:
    """Tests for installing and removing the pre-commit hook."""

    def test_install_fresh(self, tmp_path):
        hooks = tmp_path / "hooks"

        assert install_pre_commit_hook(hooks) == HookStatus.INSTALLED

        hook = hooks / "pre-commit"
        assert "rsm check" in hook.read_text()
        assert os.access(hook, os.X_OK)
        assert not (hooks / "pre-commit.backup").exists()

    def test_install_twice(self, tmp_path):
        install_pre_commit_hook(tmp_path)
        before = (tmp_path / "pre-commit").read_text()

        assert install_pre_commit_hook(tmp_path) == HookStatus.ALREADY_INSTALLED
        assert (tmp_path / "pre-commit").read_text() == before
        assert not (tmp_path / "pre-commit.backup").exists()

    def test_install_backs_up_existing_hook(self, tmp_path):
        (tmp_path / "pre-commit").write_text("#!/bin/sh\nmake lint\n")

        assert install_pre_commit_hook(tmp_path) == HookStatus.BACKED_UP

        assert (tmp_path / "pre-commit.backup").read_text() == "#!/bin/sh\nmake lint\n"
        assert "rsm check" in (tmp_path / "pre-commit").read_text()

    def test_remove_restores_backup(self, tmp_path):
        (tmp_path / "pre-commit").write_text("#!/bin/sh\nmake lint\n")
        install_pre_commit_hook(tmp_path)

        assert remove_pre_commit_hook(tmp_path) == HookStatus.RESTORED

        assert (tmp_path / "pre-commit").read_text() == "#!/bin/sh\nmake lint\n"
        assert not (tmp_path / "pre-commit.backup").exists()

    def test_remove_without_backup(self, tmp_path):
        install_pre_commit_hook(tmp_path)

        assert remove_pre_commit_hook(tmp_path) == HookStatus.REMOVED
        assert not (tmp_path / "pre-commit").exists()

    def test_remove_leaves_foreign_hook(self, tmp_path):
        (tmp_path / "pre-commit").write_text("#!/bin/sh\nmake lint\n")

        assert remove_pre_commit_hook(tmp_path) == HookStatus.FOREIGN
        assert (tmp_path / "pre-commit").read_text() == "#!/bin/sh\nmake lint\n"

    def test_remove_missing(self, tmp_path):
        assert remove_pre_commit_hook(tmp_path) == HookStatus.NOT_FOUND
