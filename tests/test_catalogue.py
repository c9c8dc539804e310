"""Tests for the secret catalogue."""

import json

import pytest

from repo_secret_manager.catalogue import (
    Catalogue,
    IndexEntry,
    SecretRecord,
    make_placeholder,
)
from repo_secret_manager.errors import (
    DuplicateName,
    DuplicateValue,
    InvalidName,
    NameAlreadySet,
    NotFoundError,
    OverlappingValues,
    ParseError,
    ValidationError,
)


class TestAddRecord:
    """Tests for inserting records."""

    def test_add_unnamed_uses_id_placeholder(self):
        cat = Catalogue()
        record = cat.add_record("s3cr3t").unwrap()

        assert record.name is None
        assert record.placeholder == f"<!secret_{record.id}!>"
        assert record.created and record.created.endswith("Z")
        assert record.description == ""

    def test_add_named_uses_name_placeholder(self):
        cat = Catalogue()
        record = cat.add_record("s3cr3t", name="db_password").unwrap()

        assert record.placeholder == "<!secret_db_password!>"

    def test_ids_are_unique(self):
        cat = Catalogue()
        a = cat.add_record("one").unwrap()
        b = cat.add_record("two").unwrap()
        assert a.id != b.id

    def test_duplicate_value_rejected_and_catalogue_unchanged(self, catalogue):
        before = catalogue.to_json()

        result = catalogue.add_record("s3cr3t", name="other")

        assert not result.ok
        assert isinstance(result.error, DuplicateValue)
        assert catalogue.find_by_value("s3cr3t").placeholder in str(result.error)
        assert catalogue.to_json() == before

    def test_empty_value_rejected(self):
        cat = Catalogue()
        result = cat.add_record("")
        assert isinstance(result.error, ValidationError)
        assert len(cat) == 0

    def test_invalid_name_rejected(self):
        cat = Catalogue()
        result = cat.add_record("value", name="bad name!")
        assert isinstance(result.error, InvalidName)
        assert len(cat) == 0

    def test_duplicate_name_rejected(self, catalogue):
        result = catalogue.add_record("another", name="db_password")
        assert isinstance(result.error, DuplicateName)
        assert len(catalogue) == 2

    def test_name_colliding_with_unnamed_id_rejected(self):
        cat = Catalogue()
        unnamed = cat.add_record("value").unwrap()

        result = cat.add_record("other", name=unnamed.id)

        assert isinstance(result.error, DuplicateName)

    def test_unwrap_raises_carried_error(self):
        cat = Catalogue()
        with pytest.raises(InvalidName):
            cat.add_record("value", name="no spaces").unwrap()


class TestModifyAndName:
    """Tests for modify_record and assign_name."""

    def test_modify_keeps_id_and_name(self, catalogue):
        original = catalogue.find_by_name("db_password")

        record = catalogue.modify_record("db_password", "new-value").unwrap()

        assert record.id == original.id
        assert record.name == "db_password"
        assert record.value == "new-value"
        assert record.description == "Database"

    def test_modify_by_id(self, catalogue):
        unnamed = catalogue.find_by_value("s3cr3t")
        record = catalogue.modify_record(unnamed.id, "changed", "desc").unwrap()
        assert record.value == "changed"
        assert record.description == "desc"

    def test_modify_to_existing_value_rejected(self, catalogue):
        result = catalogue.modify_record("db_password", "s3cr3t")
        assert isinstance(result.error, DuplicateValue)
        assert catalogue.find_by_name("db_password").value == "hunter2"

    def test_modify_same_value_allowed(self, catalogue):
        assert catalogue.modify_record("db_password", "hunter2").ok

    def test_modify_unknown(self, catalogue):
        result = catalogue.modify_record("missing", "x")
        assert isinstance(result.error, NotFoundError)

    def test_assign_name(self, catalogue):
        unnamed = catalogue.find_by_value("s3cr3t")
        record = catalogue.assign_name(unnamed.id, "api_key").unwrap()
        assert record.id == unnamed.id
        assert record.placeholder == "<!secret_api_key!>"

    def test_assign_name_twice_rejected(self, catalogue):
        result = catalogue.assign_name("db_password", "renamed")
        assert isinstance(result.error, NameAlreadySet)
        assert catalogue.find_by_name("db_password") is not None


class TestLookup:
    """Tests for identifier resolution."""

    def test_name_takes_precedence_over_id(self):
        by_id = SecretRecord(id="shared", value="one")
        by_name = SecretRecord(id="other-id", value="two", name="shared")
        cat = Catalogue(records={by_id.id: by_id, by_name.id: by_name})

        assert cat.find_by_identifier("shared") is by_name

    def test_lookup_by_id(self, catalogue):
        unnamed = catalogue.find_by_value("s3cr3t")
        assert catalogue.find_by_identifier(unnamed.id) is unnamed

    def test_resolve_placeholder(self, catalogue):
        named = catalogue.find_by_name("db_password")
        assert catalogue.resolve_placeholder(named.id) == "<!secret_db_password!>"

    def test_resolve_placeholder_unknown(self, catalogue):
        with pytest.raises(NotFoundError):
            catalogue.resolve_placeholder("nope")

    def test_display_name_for_unknown_id(self, catalogue):
        assert catalogue.display_name("ghost") == "ghost"

    def test_make_placeholder(self):
        assert make_placeholder("abc") == "<!secret_abc!>"


class TestDelete:
    """Tests for delete and index pruning."""

    def test_delete_prunes_index(self, catalogue):
        unnamed = catalogue.find_by_value("s3cr3t")
        named = catalogue.find_by_name("db_password")
        catalogue.set_index([
            IndexEntry(path="a.txt", secret_ids=[unnamed.id]),
            IndexEntry(path="b.txt", secret_ids=[unnamed.id, named.id]),
        ])

        catalogue.delete(unnamed.id).unwrap()

        assert unnamed.id not in catalogue
        assert [e.path for e in catalogue.index] == ["b.txt"]
        assert catalogue.index[0].secret_ids == [named.id]

    def test_delete_by_name(self, catalogue):
        catalogue.delete("db_password").unwrap()
        assert catalogue.find_by_name("db_password") is None
        assert len(catalogue) == 1

    def test_delete_unknown(self, catalogue):
        result = catalogue.delete("missing")
        assert isinstance(result.error, NotFoundError)
        assert len(catalogue) == 2


class TestSerialization:
    """Tests for payload parsing and writing."""

    def test_current_shape_round_trip(self, catalogue):
        named = catalogue.find_by_name("db_password")
        catalogue.set_index([IndexEntry(path="cfg/app.json", secret_ids=[named.id])])

        loaded = Catalogue.from_json(catalogue.to_json())

        assert [r.id for r in loaded] == [r.id for r in catalogue]
        assert loaded.find_by_name("db_password").value == "hunter2"
        assert loaded.index[0].path == "cfg/app.json"

    def test_payload_shape(self, catalogue):
        payload = json.loads(catalogue.to_json())
        assert set(payload) == {"secrets"}
        named = catalogue.find_by_name("db_password")
        assert payload["secrets"][named.id]["secret"] == "hunter2"
        assert payload["secrets"][named.id]["name"] == "db_password"

    def test_index_written_with_secret_ids_key(self, catalogue):
        catalogue.set_index([IndexEntry(path="x", secret_ids=["1"])])
        payload = json.loads(catalogue.to_json())
        assert payload["index"] == [{"path": "x", "secretIds": ["1"]}]

    def test_legacy_string_map(self):
        cat = Catalogue.from_json('{"id-1": "plain", "id-2": {"secret": "obj", "name": "n"}}')

        assert cat.find_by_id("id-1").value == "plain"
        assert cat.find_by_id("id-1").placeholder == "<!secret_id-1!>"
        assert cat.find_by_name("n").value == "obj"
        assert cat.index is None

    def test_legacy_object_map(self):
        cat = Catalogue.from_json(
            '{"0b6f8c1e-4d2a-4f1e-9c3b-5a7d2e8f9a10": '
            '{"secret": "x", "name": "n", "description": "d", "created": "2024-01-01T00:00:00.000Z"}}'
        )

        record = cat.find_by_name("n")
        assert record.id == "0b6f8c1e-4d2a-4f1e-9c3b-5a7d2e8f9a10"
        assert record.value == "x"
        assert record.description == "d"
        assert record.placeholder == "<!secret_n!>"
        assert cat.index is None

    def test_legacy_record_keyed_secrets(self):
        # A legacy record whose id is literally "secrets" is not the wrapper
        cat = Catalogue.from_json('{"secrets": {"secret": "x"}}')

        assert cat.find_by_id("secrets").value == "x"
        assert len(cat) == 1

    def test_legacy_map_with_secrets_among_other_ids(self):
        cat = Catalogue.from_json('{"secrets": "a", "other": {"secret": "b"}}')
        assert [r.id for r in cat] == ["secrets", "other"]

    def test_empty_index_entries_pruned_on_load(self):
        cat = Catalogue.from_json(
            '{"secrets": {"a": {"secret": "x"}}, '
            '"index": [{"path": "f", "secretIds": []}, {"path": "g", "secretIds": ["a"]}]}'
        )

        assert [e.path for e in cat.index] == ["g"]
        assert json.loads(cat.to_json())["index"] == [{"path": "g", "secretIds": ["a"]}]

    def test_legacy_upgrades_on_write(self):
        cat = Catalogue.from_json('{"id-1": "plain"}')
        payload = json.loads(cat.to_json())
        assert payload == {"secrets": {"id-1": {"secret": "plain"}}}

    def test_empty_text_is_empty_catalogue(self):
        assert len(Catalogue.from_json("")) == 0

    def test_invalid_json(self):
        with pytest.raises(ParseError):
            Catalogue.from_json("{not json")

    def test_wrong_shape(self):
        with pytest.raises(ParseError):
            Catalogue.from_json('{"secrets": {"a": {"nosecret": 1}}}')

    def test_insertion_order_preserved(self):
        cat = Catalogue()
        values = ["c", "a", "b"]
        for value in values:
            cat.add_record(value).unwrap()
        loaded = Catalogue.from_json(cat.to_json())
        assert [r.value for r in loaded] == values


class TestImportRecords:
    """Tests for merging a batch of records."""

    def test_import_overwrites_by_id(self, catalogue):
        unnamed = catalogue.find_by_value("s3cr3t")
        incoming = [
            SecretRecord(id=unnamed.id, value="rotated"),
            SecretRecord(id="new-id", value="fresh", name="fresh_one"),
        ]

        result = catalogue.import_records(incoming)

        assert result.ok
        assert result.imported == 2
        assert result.overwritten == 1
        assert catalogue.find_by_id(unnamed.id).value == "rotated"
        assert catalogue.find_by_name("fresh_one").id == "new-id"

    def test_import_duplicate_value_leaves_catalogue_unchanged(self, catalogue):
        before = catalogue.to_json()
        result = catalogue.import_records([SecretRecord(id="x", value="hunter2")])
        assert isinstance(result.error, DuplicateValue)
        assert catalogue.to_json() == before

    def test_import_duplicate_name_rejected(self, catalogue):
        result = catalogue.import_records([SecretRecord(id="x", value="v", name="db_password")])
        assert isinstance(result.error, DuplicateName)


class TestOverlaps:
    """Tests for substring overlap detection."""

    def test_no_overlap(self, catalogue):
        assert catalogue.check_overlaps() is None

    def test_overlap_detected(self):
        cat = Catalogue()
        cat.add_record("abc").unwrap()
        cat.add_record("abcdef", name="long").unwrap()

        pairs = cat.overlapping_values()

        assert [(a.value, b.value) for a, b in pairs] == [("abc", "abcdef")]
        assert isinstance(cat.check_overlaps(), OverlappingValues)
