"""
Error types for repo-secret-manager.
"""

from __future__ import annotations


class SecretManagerError(Exception):
    """Base class for all repo-secret-manager errors."""

    pass


class ValidationError(SecretManagerError):
    """A catalogue mutation would violate a uniqueness or format rule."""

    pass


class InvalidName(ValidationError):
    """Display name contains characters outside [A-Za-z0-9_-]."""

    pass


class DuplicateName(ValidationError):
    """Display name collides with another record's placeholder identifier."""

    pass


class DuplicateValue(ValidationError):
    """Secret value is already held by another record."""

    def __init__(self, message: str, existing_id: str | None = None):
        super().__init__(message)
        self.existing_id = existing_id


class NameAlreadySet(ValidationError):
    """Display names are immutable once assigned."""

    pass


class OverlappingValues(ValidationError):
    """Strict mode: one secret value is a substring of another."""

    pass


class NotFoundError(SecretManagerError):
    """Identifier resolves to no record."""

    pass


class ParseError(SecretManagerError):
    """Catalogue or CSV payload does not have the expected shape."""

    pass


class VaultError(SecretManagerError):
    """The vault blob could not be read, decrypted or written."""

    pass


class GitError(SecretManagerError):
    """A git repository is required but could not be used."""

    pass
