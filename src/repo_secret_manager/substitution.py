"""
Substitution engine: swap secret values and placeholders inside files.

Encrypt/decrypt rewrite a file in place. Redact/unredact leave the source
untouched and write a sibling (``name.redacted.ext`` <-> ``name.ext``).

Replacement is literal and walks records in catalogue order; when one
secret value is a substring of another, the earlier record wins.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .catalogue import Catalogue
from .config import REDACTED_INFIX, SiblingStatus
from .indexer import find_secret_ids
from .utils import read_text, write_text

logger = logging.getLogger(__name__)

Pairs = list[tuple[str, str]]


@dataclass
class SiblingResult:
    """Where a redact/unredact sibling was written and what happened to it."""

    path: Path
    status: SiblingStatus

    @property
    def changed(self) -> bool:
        return self.status != SiblingStatus.UNCHANGED


def substitute(content: str, pairs: Pairs) -> tuple[str, bool]:
    """
    Replace every occurrence of each source with its target, in order.

    Args:
        content: Text to rewrite
        pairs: (source, target) pairs, applied sequentially

    Returns:
        Tuple of (new_content, changed)
    """
    changed = False
    for source, target in pairs:
        if source and source in content:
            content = content.replace(source, target)
            changed = True
    return content, changed


def _rewrite_in_place(path: Path, pairs: Pairs) -> bool:
    content, encoding = read_text(path)
    new_content, changed = substitute(content, pairs)
    if changed:
        write_text(path, new_content, encoding)
    return changed


def encrypt_in_place(path: Path | str, catalogue: Catalogue) -> bool:
    """Replace secret values with placeholders. Returns True if the file changed."""
    return _rewrite_in_place(Path(path), catalogue.substitution_pairs())


def decrypt_in_place(path: Path | str, catalogue: Catalogue) -> bool:
    """Replace placeholders with secret values. Returns True if the file changed."""
    return _rewrite_in_place(Path(path), catalogue.substitution_pairs(reverse=True))


# ----------------------------------------------------------------------
# Sibling paths
# ----------------------------------------------------------------------


def is_redacted_file(path: Path | str) -> bool:
    name = os.path.basename(str(path))
    return f"{REDACTED_INFIX}." in name or name.endswith(REDACTED_INFIX)


def redacted_path(path: Path | str) -> Path:
    """``dir/name.ext`` -> ``dir/name.redacted.ext``; ``dir/name`` -> ``dir/name.redacted``."""
    path = Path(path)
    stem, ext = os.path.splitext(path.name)
    return path.with_name(f"{stem}{REDACTED_INFIX}{ext}")


def original_path(path: Path | str) -> Path:
    """Inverse of redacted_path. Paths without the infix come back unchanged."""
    path = Path(path)
    name = path.name
    if name.endswith(REDACTED_INFIX):
        return path.with_name(name[: -len(REDACTED_INFIX)])
    infix = f"{REDACTED_INFIX}."
    position = name.rfind(infix)
    if position == -1:
        return path
    return path.with_name(name[:position] + name[position + len(REDACTED_INFIX):])


def _write_sibling(source: Path, target: Path, pairs: Pairs) -> SiblingResult | None:
    content, encoding = read_text(source)
    new_content, changed = substitute(content, pairs)
    if not changed:
        return None

    if target.exists():
        try:
            existing, _ = read_text(target)
        except OSError:
            existing = None
        if existing == new_content:
            return SiblingResult(path=target, status=SiblingStatus.UNCHANGED)
        write_text(target, new_content, encoding)
        return SiblingResult(path=target, status=SiblingStatus.UPDATED)

    write_text(target, new_content, encoding)
    return SiblingResult(path=target, status=SiblingStatus.CREATED)


def redact(path: Path | str, catalogue: Catalogue) -> SiblingResult | None:
    """
    Write the placeholder version of a file next to it.

    The source file is never modified.

    Returns:
        SiblingResult for the redacted file, or None when no secret occurs
    """
    path = Path(path)
    return _write_sibling(path, redacted_path(path), catalogue.substitution_pairs())


def unredact(path: Path | str, catalogue: Catalogue) -> SiblingResult | None:
    """Write the plaintext version of a redacted file under its original name."""
    path = Path(path)
    return _write_sibling(
        path, original_path(path), catalogue.substitution_pairs(reverse=True)
    )


def find_plaintext_secrets(
    paths: Iterable[Path],
    catalogue: Catalogue,
) -> list[tuple[Path, list[str]]]:
    """
    Report files that still contain secret values.

    Unreadable or binary files are skipped.

    Returns:
        (path, record ids) for every file with at least one occurrence
    """
    findings = []
    for path in paths:
        try:
            content, _ = read_text(Path(path))
        except OSError as e:
            logger.debug("Skipping %s: %s", path, e)
            continue
        ids = find_secret_ids(content, catalogue)
        if ids:
            findings.append((Path(path), ids))
    return findings
