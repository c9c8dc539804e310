"""Shared fixtures for repo-secret-manager tests."""

from pathlib import Path

import pytest

from repo_secret_manager.catalogue import Catalogue


@pytest.fixture
def catalogue():
    """Catalogue with one unnamed and one named secret."""
    cat = Catalogue()
    cat.add_record("s3cr3t").unwrap()
    cat.add_record("hunter2", name="db_password", description="Database").unwrap()
    return cat


@pytest.fixture
def git_repo(tmp_path):
    """An initialized git repository with a committed README."""
    import git

    repo = git.Repo.init(tmp_path)
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")

    (tmp_path / "README.md").write_text("# test\n")
    repo.index.add(["README.md"])
    repo.index.commit("initial")

    return Path(repo.working_tree_dir).resolve(), repo
