"""
Unit tests for the file-backed schema store and collection index.

Tests cover:
- Create / read / write / rename / list / discard
- Stray directories skipped by list
- Not-found and already-exists errors
- Malformed records
- Collection name validation
- Index reflects the store at call time
"""

import json
import os

import pytest

from resource_proxy.errors import (
    AlreadyExistsError,
    InvalidNameError,
    NotFoundError,
    StorageError,
)
from resource_proxy.schema import CONFIG_FILE, CollectionIndex, CollectionSchema, Property, SchemaStore


def _schema():
    return CollectionSchema(
        type="Collection",
        properties={
            "name": Property(name="name", type="string", type_label="string", order=0),
            "year": Property(name="year", type="number", type_label="number", required=True, order=1),
        },
    )


class TestSchemaStore:
    """Tests for SchemaStore."""

    def test_creates_root(self, resources_dir):
        """Missing resources root is created."""
        root = os.path.join(resources_dir, "nested", "resources")

        SchemaStore(root)

        assert os.path.isdir(root)

    def test_create_write_read(self, store):
        """A written record reads back identically."""
        store.create("companies_1")
        store.write("companies_1", _schema())

        assert store.read("companies_1") == _schema()

    def test_persisted_layout(self, store, resources_dir):
        """Record lives in <root>/<name>/config.json with no id."""
        store.create("companies_1")
        store.write("companies_1", _schema())

        with open(os.path.join(resources_dir, "companies_1", CONFIG_FILE)) as f:
            data = json.load(f)

        assert data["type"] == "Collection"
        assert "id" not in data
        assert data["properties"]["year"] == {
            "name": "year",
            "type": "number",
            "typeLabel": "number",
            "required": True,
            "id": "year",
            "order": 1,
        }

    def test_write_leaves_no_temp_files(self, store, resources_dir):
        """Only config.json remains after a write."""
        store.create("companies_1")
        store.write("companies_1", _schema())
        store.write("companies_1", CollectionSchema())

        assert os.listdir(os.path.join(resources_dir, "companies_1")) == [CONFIG_FILE]

    def test_create_existing_raises(self, store):
        """Creating an existing collection fails."""
        store.create("companies_1")

        with pytest.raises(AlreadyExistsError):
            store.create("companies_1")

    def test_read_missing_raises(self, store):
        """Reading an unknown collection fails with NotFoundError."""
        with pytest.raises(NotFoundError, match="not found"):
            store.read("nope")

    def test_read_created_but_unwritten_raises(self, store):
        """A folder without config.json is not readable."""
        store.create("empty_1")

        with pytest.raises(NotFoundError):
            store.read("empty_1")

    def test_read_malformed_json_raises(self, store, resources_dir):
        """Undecodable records surface as StorageError."""
        store.create("broken_1")
        with open(os.path.join(resources_dir, "broken_1", CONFIG_FILE), "w") as f:
            f.write("{not json")

        with pytest.raises(StorageError):
            store.read("broken_1")

    def test_read_property_without_type_raises(self, store, resources_dir):
        """Records with invalid properties surface as StorageError."""
        store.create("broken_1")
        with open(os.path.join(resources_dir, "broken_1", CONFIG_FILE), "w") as f:
            json.dump({"type": "Collection", "properties": {"a": {"order": 0}}}, f)

        with pytest.raises(StorageError, match="Malformed"):
            store.read("broken_1")

    def test_read_record_without_properties(self, store, resources_dir):
        """A record without a properties key reads as an empty property set."""
        store.create("bare_1")
        with open(os.path.join(resources_dir, "bare_1", CONFIG_FILE), "w") as f:
            json.dump({"type": "Collection"}, f)

        assert store.read("bare_1").properties == {}

    def test_rename(self, store):
        """Rename moves the record to the new key."""
        store.create("old_1")
        store.write("old_1", _schema())

        store.rename("old_1", "new_1")

        assert store.exists("new_1")
        assert not store.exists("old_1")
        assert store.read("new_1") == _schema()

    def test_rename_missing_raises(self, store):
        """Renaming an unknown collection fails."""
        with pytest.raises(NotFoundError):
            store.rename("old_1", "new_1")

    def test_rename_onto_existing_raises(self, store):
        """Renaming onto an existing collection fails."""
        store.create("old_1")
        store.create("new_1")

        with pytest.raises(AlreadyExistsError):
            store.rename("old_1", "new_1")

    def test_list(self, store, resources_dir):
        """List returns collection directories only."""
        for name in ("b_2", "a_1"):
            store.create(name)
            store.write(name, _schema())
        with open(os.path.join(resources_dir, "stray.txt"), "w") as f:
            f.write("x")

        assert store.list() == ["a_1", "b_2"]

    def test_list_skips_stray_directories(self, store, resources_dir):
        """Directories with invalid names or no record are not collections."""
        store.create("people_1")
        store.write("people_1", _schema())
        store.create("empty_1")
        os.mkdir(os.path.join(resources_dir, "lost+found"))
        os.mkdir(os.path.join(resources_dir, ".cache"))

        assert store.list() == ["people_1"]

    def test_discard(self, store):
        """Discard removes a collection directory and its contents."""
        store.create("people_1")
        store.write("people_1", _schema())

        store.discard("people_1")

        assert not store.exists("people_1")

    def test_discard_missing_is_noop(self, store):
        """Discarding an unknown collection does nothing."""
        store.discard("nope_1")

        assert store.list() == []

    @pytest.mark.parametrize("name", ["", "../etc", "a/b", ".hidden", "with space"])
    def test_invalid_names_rejected(self, store, name):
        """Names that could escape the root are rejected."""
        with pytest.raises(InvalidNameError):
            store.create(name)


class TestCollectionIndex:
    """Tests for CollectionIndex."""

    def test_reflects_store_at_call_time(self, store):
        """No caching: new collections show up immediately."""
        index = CollectionIndex(store)
        assert index.names() == []

        store.create("people_1")
        assert index.names() == []

        store.write("people_1", CollectionSchema())

        assert index.names() == ["people_1"]
        assert "people_1" in index
        assert len(index) == 1
