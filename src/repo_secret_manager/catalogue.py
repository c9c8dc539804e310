"""
Secret catalogue: records, file index and payload (de)serialization.

The catalogue is the only mutable state an operation works on. It is built
from the decrypted vault payload, changed in memory, and written back once.

Mutating methods never raise for rule violations. They return a
CatalogueResult carrying either the affected record or the error, and leave
the catalogue untouched when an error is returned.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .config import NAME_PATTERN, PLACEHOLDER_PREFIX, PLACEHOLDER_SUFFIX
from .errors import (
    DuplicateName,
    DuplicateValue,
    InvalidName,
    NameAlreadySet,
    NotFoundError,
    OverlappingValues,
    ParseError,
    SecretManagerError,
    ValidationError,
)


def make_placeholder(identifier: str) -> str:
    """Wrap a placeholder identifier in the token delimiters."""
    return f"{PLACEHOLDER_PREFIX}{identifier}{PLACEHOLDER_SUFFIX}"


def new_record_id() -> str:
    """Random 128-bit identifier rendered as text."""
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """Current time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class SecretRecord:
    """One managed secret."""

    id: str
    value: str
    name: str | None = None
    description: str | None = None
    created: str | None = None

    @property
    def identifier(self) -> str:
        """Placeholder identifier: the display name if set, else the id."""
        return self.name or self.id

    @property
    def placeholder(self) -> str:
        return make_placeholder(self.identifier)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the vault payload shape."""
        result: dict[str, Any] = {"secret": self.value}
        if self.description is not None:
            result["description"] = self.description
        if self.created is not None:
            result["created"] = self.created
        if self.name:
            result["name"] = self.name
        return result

    @classmethod
    def from_payload(cls, record_id: str, data: Any) -> SecretRecord:
        """
        Build a record from either payload shape.

        Legacy payloads store the bare secret string; current payloads store
        an object with at least a ``secret`` field.
        """
        if isinstance(data, str):
            return cls(id=record_id, value=data)

        if not isinstance(data, dict):
            raise ParseError(f"Secret {record_id!r} is neither a string nor an object")

        value = data.get("secret")
        if not isinstance(value, str):
            raise ParseError(f"Secret {record_id!r} has no string 'secret' field")

        name = data.get("name") or None
        description = data.get("description")
        created = data.get("created")

        return cls(
            id=record_id,
            value=value,
            name=str(name) if name is not None else None,
            description=str(description) if description is not None else None,
            created=str(created) if created is not None else None,
        )


@dataclass
class IndexEntry:
    """A repository-relative file path and the ids of secrets found in it."""

    path: str
    secret_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "secretIds": list(self.secret_ids)}

    @classmethod
    def from_payload(cls, data: Any) -> IndexEntry:
        if not isinstance(data, dict):
            raise ParseError("Index entry is not an object")
        path = data.get("path")
        ids = data.get("secretIds", [])
        if not isinstance(path, str) or not isinstance(ids, list):
            raise ParseError("Index entry must have a string 'path' and a list 'secretIds'")
        return cls(path=path, secret_ids=[str(i) for i in ids])


@dataclass
class CatalogueResult:
    """Outcome of a catalogue mutation: the affected record or the error."""

    record: SecretRecord | None = None
    error: SecretManagerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> SecretRecord:
        """Return the record, raising the carried error if there is one."""
        if self.error is not None:
            raise self.error
        assert self.record is not None
        return self.record


@dataclass
class ImportResult:
    """Outcome of merging a batch of records into the catalogue."""

    imported: int = 0
    overwritten: int = 0
    error: SecretManagerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Catalogue:
    """
    Ordered collection of secret records plus the optional file index.

    Iteration order is insertion order. Substitution walks records in this
    order, which matters when one secret value is a substring of another.
    """

    def __init__(
        self,
        records: dict[str, SecretRecord] | None = None,
        index: list[IndexEntry] | None = None,
    ):
        self.records: dict[str, SecretRecord] = dict(records or {})
        self.index: list[IndexEntry] | None = index

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[SecretRecord]:
        return iter(list(self.records.values()))

    def __contains__(self, record_id: object) -> bool:
        return record_id in self.records

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @staticmethod
    def _is_current_shape(data: dict[str, Any]) -> bool:
        secrets = data.get("secrets")
        if not isinstance(secrets, dict):
            return False
        # A legacy record literally keyed "secrets" is an object with a
        # "secret" field; the current wrapper never is.
        return "secret" not in secrets and set(data) <= {"secrets", "index"}

    @classmethod
    def from_payload(cls, data: Any) -> Catalogue:
        """
        Build a catalogue from a decoded payload.

        Accepts ``{"secrets": {...}, "index": [...]}`` as well as the legacy
        bare ``{id: record-or-string}`` map, which loads with no index.
        """
        if not isinstance(data, dict):
            raise ParseError("Catalogue payload must be a JSON object")

        if cls._is_current_shape(data):
            secrets_raw = data["secrets"]
            index_raw = data.get("index")
        else:
            secrets_raw = data
            index_raw = None

        records = {
            str(record_id): SecretRecord.from_payload(str(record_id), raw)
            for record_id, raw in secrets_raw.items()
        }

        index: list[IndexEntry] | None = None
        if index_raw is not None:
            if not isinstance(index_raw, list):
                raise ParseError("Catalogue 'index' must be a list")
            # An entry without secret ids carries no information
            index = [
                entry for entry in (IndexEntry.from_payload(item) for item in index_raw)
                if entry.secret_ids
            ]

        return cls(records=records, index=index)

    @classmethod
    def from_json(cls, text: str) -> Catalogue:
        """Parse the plaintext vault payload. Empty text is an empty catalogue."""
        if not text.strip():
            return cls()
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Could not parse secrets payload: {e}") from e
        return cls.from_payload(data)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "secrets": {record.id: record.to_dict() for record in self.records.values()}
        }
        if self.index is not None:
            payload["index"] = [entry.to_dict() for entry in self.index]
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), indent=2, ensure_ascii=False)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_by_name(self, name: str) -> SecretRecord | None:
        for record in self.records.values():
            if record.name and record.name == name:
                return record
        return None

    def find_by_id(self, record_id: str) -> SecretRecord | None:
        return self.records.get(record_id)

    def find_by_identifier(self, identifier: str) -> SecretRecord | None:
        """Resolve a name or an id. A name match wins over an id match."""
        return self.find_by_name(identifier) or self.find_by_id(identifier)

    def find_by_value(self, value: str) -> SecretRecord | None:
        for record in self.records.values():
            if record.value == value:
                return record
        return None

    def resolve_placeholder(self, record_id: str) -> str:
        record = self.find_by_id(record_id)
        if record is None:
            raise NotFoundError(f"No secret with id {record_id!r}")
        return record.placeholder

    def display_name(self, record_id: str) -> str:
        """Name for a record id in listings; unknown ids are shown as-is."""
        record = self.find_by_id(record_id)
        return record.identifier if record else record_id

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_name(self, name: str, exclude_id: str | None = None) -> ValidationError | None:
        """Check a display name against the character class and uniqueness rules."""
        if not NAME_PATTERN.match(name):
            return InvalidName(
                "Name must contain only alphanumeric characters, underscores, or hyphens"
            )

        for record in self.records.values():
            if record.id == exclude_id:
                continue
            if record.name == name:
                return DuplicateName(f'A secret with name "{name}" already exists')
            if not record.name and record.id == name:
                return DuplicateName(f'"{name}" is already the placeholder identifier of another secret')

        return None

    def validate_value(self, value: str, exclude_id: str | None = None) -> ValidationError | None:
        if not value:
            return ValidationError("Secret value must not be empty")

        existing = self.find_by_value(value)
        if existing is not None and existing.id != exclude_id:
            return DuplicateValue(
                f"Secret already exists, use the existing placeholder: {existing.placeholder}",
                existing_id=existing.id,
            )
        return None

    def overlapping_values(self) -> list[tuple[SecretRecord, SecretRecord]]:
        """Pairs (inner, outer) where inner.value is a substring of outer.value."""
        pairs = []
        records = list(self.records.values())
        for inner in records:
            for outer in records:
                if inner.id != outer.id and inner.value and inner.value in outer.value:
                    pairs.append((inner, outer))
        return pairs

    def check_overlaps(self) -> OverlappingValues | None:
        pairs = self.overlapping_values()
        if not pairs:
            return None
        described = ", ".join(f"{a.identifier} in {b.identifier}" for a, b in pairs[:5])
        return OverlappingValues(f"Secret values overlap: {described}")

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_record(
        self,
        value: str,
        name: str | None = None,
        description: str | None = None,
    ) -> CatalogueResult:
        """Insert a new record after checking value and name uniqueness."""
        error = self.validate_value(value)
        if error is None and name:
            error = self.validate_name(name)
        if error is not None:
            return CatalogueResult(error=error)

        record = SecretRecord(
            id=new_record_id(),
            value=value,
            name=name or None,
            description=description or "",
            created=utc_timestamp(),
        )
        self.records[record.id] = record
        return CatalogueResult(record=record)

    def modify_record(
        self,
        identifier: str,
        value: str,
        description: str | None = None,
    ) -> CatalogueResult:
        """Replace a record's value (and optionally description), keeping id and name."""
        record = self.find_by_identifier(identifier)
        if record is None:
            return CatalogueResult(error=NotFoundError(f'No secret found with identifier "{identifier}"'))

        error = self.validate_value(value, exclude_id=record.id)
        if error is not None:
            return CatalogueResult(error=error)

        record.value = value
        if description is not None:
            record.description = description
        elif record.description is None:
            record.description = ""
        if record.created is None:
            record.created = utc_timestamp()
        return CatalogueResult(record=record)

    def assign_name(self, identifier: str, name: str) -> CatalogueResult:
        """Give an unnamed record a display name. Names never change once set."""
        record = self.find_by_identifier(identifier)
        if record is None:
            return CatalogueResult(error=NotFoundError(f'No secret found with identifier "{identifier}"'))
        if record.name:
            return CatalogueResult(error=NameAlreadySet(f'Secret already has the name "{record.name}"'))

        error = self.validate_name(name, exclude_id=record.id)
        if error is not None:
            return CatalogueResult(error=error)

        record.name = name
        return CatalogueResult(record=record)

    def delete_by_id(self, record_id: str) -> CatalogueResult:
        """Remove a record and prune its id from the index."""
        record = self.records.pop(record_id, None)
        if record is None:
            return CatalogueResult(error=NotFoundError(f"No secret with id {record_id!r}"))

        if self.index is not None:
            pruned = []
            for entry in self.index:
                ids = [i for i in entry.secret_ids if i != record_id]
                if ids:
                    pruned.append(IndexEntry(path=entry.path, secret_ids=ids))
            self.index = pruned

        return CatalogueResult(record=record)

    def delete(self, identifier: str) -> CatalogueResult:
        record = self.find_by_identifier(identifier)
        if record is None:
            return CatalogueResult(error=NotFoundError(f'No secret found with identifier "{identifier}"'))
        return self.delete_by_id(record.id)

    def import_records(self, incoming: list[SecretRecord]) -> ImportResult:
        """
        Merge records by id, overwriting existing ones.

        The merged catalogue is validated as a whole before anything is
        committed; on error the catalogue is unchanged.
        """
        merged = dict(self.records)
        overwritten = 0
        for record in incoming:
            if record.id in merged:
                overwritten += 1
            merged[record.id] = record

        candidate = Catalogue(records=merged)
        seen_values: dict[str, str] = {}
        for record in merged.values():
            if not record.value:
                return ImportResult(error=ValidationError(f"Secret {record.id} has an empty value"))
            if record.value in seen_values:
                return ImportResult(error=DuplicateValue(
                    f"Secrets {seen_values[record.value]} and {record.id} share the same value",
                    existing_id=seen_values[record.value],
                ))
            seen_values[record.value] = record.id
            if record.name:
                error = candidate.validate_name(record.name, exclude_id=record.id)
                if error is not None:
                    return ImportResult(error=error)

        self.records = merged
        return ImportResult(imported=len(incoming), overwritten=overwritten)

    # ------------------------------------------------------------------
    # Index helpers
    # ------------------------------------------------------------------

    @property
    def has_index(self) -> bool:
        return bool(self.index)

    def set_index(self, entries: list[IndexEntry]) -> None:
        self.index = [e for e in entries if e.secret_ids]

    def clear_index(self) -> int:
        """Drop the index. Returns the number of entries removed."""
        count = len(self.index or [])
        self.index = None
        return count

    def substitution_pairs(self, reverse: bool = False) -> list[tuple[str, str]]:
        """
        (source, target) pairs in catalogue order.

        Forward pairs map secret value to placeholder; reverse pairs map
        placeholder back to the value.
        """
        if reverse:
            return [(r.placeholder, r.value) for r in self.records.values()]
        return [(r.value, r.placeholder) for r in self.records.values()]
