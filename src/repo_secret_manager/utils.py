"""
Utility functions for repo-secret-manager.

Includes encoding detection, byte-preserving text I/O, binary sniffing and
path normalization helpers.
"""

from __future__ import annotations

import os
from pathlib import Path

import chardet

_BOMS: list[tuple[bytes, str]] = [
    (b"\xef\xbb\xbf", "utf-8-sig"),
    (b"\xff\xfe", "utf-16-le"),
    (b"\xfe\xff", "utf-16-be"),
]


# Bytes handed to chardet when the content is not valid UTF-8
CHARDET_SAMPLE_SIZE = 65536


class UnreadableFileError(OSError):
    """A file exists but cannot be treated as text."""


def detect_encoding(data: bytes, sample_size: int = CHARDET_SAMPLE_SIZE) -> str:
    """
    Detect the encoding of a file's bytes.

    Strategy:
    1. Check for BOM markers first
    2. Try UTF-8 on all of ``data`` (most common for modern source files)
    3. Fall back to chardet on the first ``sample_size`` bytes

    UTF-8 validity is decided over the whole input. A sample cut in the
    middle of a multi-byte sequence would otherwise look like another
    encoding.

    Args:
        data: The file content
        sample_size: Bytes handed to chardet

    Returns:
        Detected encoding name (e.g., 'utf-8', 'latin-1')
    """
    if not data:
        return "utf-8"

    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return encoding

    try:
        data.decode("utf-8")
        return "utf-8"
    except UnicodeDecodeError:
        pass

    result = chardet.detect(data[:sample_size])
    encoding = result.get("encoding")

    if encoding is None:
        return "utf-8"

    encoding = encoding.lower()
    if encoding in ("ascii", "utf-8", "utf8"):
        return "utf-8"

    return encoding


def is_binary_content(sample: bytes) -> bool:
    """
    Check if a byte sample appears to be binary.

    Uses null byte detection, then character analysis for samples that are
    not valid UTF-8.
    """
    if not sample:
        return False

    if b"\x00" in sample:
        return True

    try:
        sample.decode("utf-8")
        return False
    except UnicodeDecodeError:
        pass

    # Text files typically have >70% printable ASCII
    printable_count = sum(
        1 for b in sample
        if 32 <= b <= 126 or b in (9, 10, 13) or b >= 128
    )

    return printable_count / len(sample) < 0.70


def read_text(file_path: Path) -> tuple[str, str]:
    """
    Read a file as text without altering any byte on a later write.

    Newline translation is disabled and decoding is strict, so that
    ``write_text(path, *read_text(path))`` reproduces the file exactly.

    Args:
        file_path: Path to the file

    Returns:
        Tuple of (content, encoding_used)

    Raises:
        UnreadableFileError: binary content or content not decodable as text
        OSError: the file cannot be opened
    """
    raw = Path(file_path).read_bytes()
    encoding = detect_encoding(raw)

    if not encoding.startswith("utf-16") and is_binary_content(raw[:8192]):
        raise UnreadableFileError(f"Binary file: {file_path}")

    try:
        return raw.decode(encoding), encoding
    except (UnicodeDecodeError, LookupError) as e:
        raise UnreadableFileError(f"Cannot decode {file_path} as {encoding}: {e}") from e


def write_text(file_path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write text with the given encoding and no newline translation."""
    with open(file_path, "w", encoding=encoding, newline="") as f:
        f.write(content)


def normalize_path(path: str) -> str:
    """Normalize a path for consistent comparison (use forward slashes)."""
    return path.replace("\\", "/")


def relative_posix(path: Path | str, root: Path | str) -> str:
    """
    Return ``path`` relative to ``root`` with forward slashes.

    Falls back to the normalized absolute path when ``path`` is outside ``root``.
    """
    try:
        rel = os.path.relpath(os.path.abspath(path), os.path.abspath(root))
    except ValueError:
        # Different drives on Windows
        return normalize_path(os.path.abspath(path))
    if rel.startswith(".."):
        return normalize_path(os.path.abspath(path))
    return normalize_path(rel)


def truncate_string(s: str, max_length: int, suffix: str = "...") -> str:
    """Truncate a string to max length, adding suffix if truncated."""
    if len(s) <= max_length:
        return s
    return s[:max_length - len(suffix)] + suffix
