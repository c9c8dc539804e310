"""
Constants, defaults and run statistics for repo-secret-manager.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

# Default catalogue location, relative to the repository root
DEFAULT_VAULT_FILE = "repo-secret-manager.vault"

# Placeholder token delimiters: <!secret_{identifier}!>
PLACEHOLDER_PREFIX = "<!secret_"
PLACEHOLDER_SUFFIX = "!>"

# Infix inserted before the extension of redacted sibling files
REDACTED_INFIX = ".redacted"

# Display names must be safe to embed in a placeholder token
NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

GITIGNORE_FILE = ".gitignore"
GITIGNORE_MARKER = "# Added by repo-secret-manager (redacted version is stored in git)"

# Git pre-commit hook; HOOK_MARKER identifies a hook this tool wrote
PRE_COMMIT_HOOK = "pre-commit"
HOOK_BACKUP_SUFFIX = ".backup"
HOOK_MARKER = "repo-secret-manager"
PRE_COMMIT_SCRIPT = """#!/bin/sh
# Installed by repo-secret-manager: blocks commits that contain plaintext secrets.
# The vault password is read from $RSM_PASSWORD or a configured password_file.
# Bypass (not recommended): git commit --no-verify
exec rsm check
"""

# Environment variable consulted for the vault password
DEFAULT_PASSWORD_ENV = "RSM_PASSWORD"

# Vault blob format
VAULT_HEADER = "$RSMVAULT;1.0;FERNET-PBKDF2"
VAULT_KDF_ITERATIONS = 480_000
VAULT_SALT_BYTES = 16

# Ansible Vault AES256 blobs written by earlier releases; read-only
ANSIBLE_VAULT_PREFIX = "$ANSIBLE_VAULT;"
ANSIBLE_VAULT_CIPHER = "AES256"
ANSIBLE_KDF_ITERATIONS = 10_000

# CSV transfer format
CSV_HEADER = ["UUID", "Name", "Secret", "Description", "Created", "Placeholder"]


class SiblingStatus(str, Enum):
    """Outcome of writing a redacted/unredacted sibling file."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class HookStatus(str, Enum):
    """Outcome of installing or removing the pre-commit hook."""

    INSTALLED = "installed"
    BACKED_UP = "backed_up"
    ALREADY_INSTALLED = "already_installed"
    REMOVED = "removed"
    RESTORED = "restored"
    NOT_FOUND = "not_found"
    FOREIGN = "foreign"


@dataclass
class IndexStats:
    """Statistics from an indexing pass."""

    files_considered: int = 0
    files_skipped_pattern: int = 0
    files_unreadable: int = 0
    files_with_secrets: int = 0
    entries_dropped_missing: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary (sorted keys for stable output)."""
        return {
            "entries_dropped_missing": self.entries_dropped_missing,
            "files_considered": self.files_considered,
            "files_skipped_pattern": self.files_skipped_pattern,
            "files_unreadable": self.files_unreadable,
            "files_with_secrets": self.files_with_secrets,
        }


@dataclass
class RunStats:
    """Statistics from one encrypt/decrypt/redact/unredact pass."""

    files_visited: int = 0
    files_changed: int = 0
    files_unchanged: int = 0
    files_skipped: int = 0
    gitignore_updated: bool = False
    files_untracked: int = 0
    changed_paths: list[str] = field(default_factory=list)
    sibling_results: dict[str, SiblingStatus] = field(default_factory=dict)

    def record_change(self, rel_path: str) -> None:
        """Count a changed file."""
        self.files_changed += 1
        self.changed_paths.append(rel_path)
