"""
CSV export and import of catalogue records.

Columns: UUID, Name, Secret, Description, Created, Placeholder. The
placeholder column is informational and ignored on import.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .catalogue import Catalogue, ImportResult, SecretRecord
from .config import CSV_HEADER
from .errors import ParseError

logger = logging.getLogger(__name__)


@dataclass
class CsvImport:
    """Rows read from a CSV file, plus the line numbers that were skipped."""

    records: list[SecretRecord] = field(default_factory=list)
    skipped_lines: list[int] = field(default_factory=list)


def export_csv(catalogue: Catalogue) -> str:
    """Render every record as CSV text, header first."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for record in catalogue:
        writer.writerow([
            record.id,
            record.name or "",
            record.value,
            record.description or "",
            record.created or "",
            record.placeholder,
        ])
    return buffer.getvalue()


def write_csv(catalogue: Catalogue, path: Path | str) -> int:
    """Write the CSV export to ``path``. Returns the number of records written."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(export_csv(catalogue))
    return len(catalogue)


def parse_csv(text: str) -> CsvImport:
    """
    Parse CSV text produced by export_csv.

    Raises:
        ParseError: missing or unexpected header
    """
    reader = csv.reader(io.StringIO(text))
    header = next(reader, None)
    if header is None:
        raise ParseError("CSV file is empty")

    if [h.strip() for h in header] != CSV_HEADER:
        raise ParseError(
            f"Invalid CSV format. Expected header: {','.join(CSV_HEADER)}; "
            f"found: {','.join(header)}"
        )

    result = CsvImport()
    for row in reader:
        line = reader.line_num
        if not any(cell.strip() for cell in row):
            continue

        if len(row) != len(CSV_HEADER):
            logger.warning("Skipping line %d: expected %d columns, got %d", line, len(CSV_HEADER), len(row))
            result.skipped_lines.append(line)
            continue

        record_id, name, value, description, created, _placeholder = row
        if not record_id or not value:
            logger.warning("Skipping line %d: missing UUID or secret", line)
            result.skipped_lines.append(line)
            continue

        result.records.append(SecretRecord(
            id=record_id,
            value=value,
            name=name or None,
            description=description,
            created=created or None,
        ))

    return result


def import_csv(catalogue: Catalogue, path: Path | str) -> tuple[ImportResult, CsvImport]:
    """
    Merge records from a CSV file into the catalogue, overwriting by id.

    Returns:
        Tuple of (import_result, parsed_rows). The catalogue is unchanged
        when the result carries an error.
    """
    with open(path, encoding="utf-8", newline="") as f:
        parsed = parse_csv(f.read())

    if not parsed.records:
        return ImportResult(error=ParseError("No valid secrets found in CSV file")), parsed

    return catalogue.import_records(parsed.records), parsed
