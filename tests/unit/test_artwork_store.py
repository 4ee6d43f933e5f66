"""Tests for artportfolio.api.artwork_store: JSON record store helpers.

Tests cover:
- Loading a missing, valid, or corrupt document.
- The create/update/delete record lifecycle and persisted order.
- Concurrent writers through the shared lock.
- Status filtering and pagination slicing.
"""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from artportfolio.api.artwork_store import (
    JsonArtworkStore,
    filter_artworks,
    paginate_artworks,
    utc_timestamp,
)
from artportfolio.api.errors import StoreError


def _fields(title: str = "Untitled", status: int = 1) -> dict:
    return {
        "title": title,
        "description": "desc",
        "category": "Painting",
        "origin": "Bandung",
        "artist": "Someone",
        "createdDate": "2024-02-02",
        "status": status,
        "image": "http://testserver/uploads/a.png",
    }


class TestLoading:
    """Test reading the document."""

    def test_missing_document_is_empty(self, store: JsonArtworkStore):
        assert store.read_all() == []

    def test_reads_existing_document(self, store: JsonArtworkStore, sample_artworks):
        records = store.read_all()
        assert [r["id"] for r in records] == [r["id"] for r in sample_artworks]

    def test_corrupt_document_raises(self, temp_dir: Path):
        data_file = temp_dir / "data.json"
        data_file.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreError):
            JsonArtworkStore(data_file).read_all()

    def test_non_array_document_raises(self, temp_dir: Path):
        data_file = temp_dir / "data.json"
        data_file.write_text('{"id": "x"}', encoding="utf-8")
        with pytest.raises(StoreError):
            JsonArtworkStore(data_file).read_all()

    def test_corrupt_document_is_not_overwritten(self, temp_dir: Path):
        """A failed read must not be followed by a write that loses data."""
        data_file = temp_dir / "data.json"
        data_file.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreError):
            JsonArtworkStore(data_file).create(_fields())
        assert data_file.read_text(encoding="utf-8") == "{not json"


class TestCreate:
    """Test record creation."""

    def test_assigns_id_and_timestamps(self, store: JsonArtworkStore):
        record = store.create(_fields())
        assert record["id"]
        assert record["createdAt"] == record["updatedAt"]
        assert record["createdAt"].endswith("Z")

    def test_caller_cannot_choose_id(self, store: JsonArtworkStore):
        record = store.create({**_fields(), "id": "chosen", "createdAt": "yesterday"})
        assert record["id"] != "chosen"
        assert record["createdAt"] != "yesterday"

    def test_persists_and_creates_parent_directory(self, store: JsonArtworkStore):
        record = store.create(_fields())
        assert store.data_file.exists()
        on_disk = json.loads(store.data_file.read_text(encoding="utf-8"))
        assert on_disk == [record]

    def test_insertion_order_preserved(self, store: JsonArtworkStore):
        first = store.create(_fields("first"))
        second = store.create(_fields("second"))
        third = store.create(_fields("third"))
        assert [r["id"] for r in store.read_all()] == [first["id"], second["id"], third["id"]]

    def test_ids_are_unique(self, store: JsonArtworkStore):
        ids = {store.create(_fields(str(i)))["id"] for i in range(20)}
        assert len(ids) == 20

    def test_find_round_trip(self, store: JsonArtworkStore):
        """A created record is found with the same fields."""
        fields = _fields("Round trip")
        record = store.create(fields)
        found = store.find_by_id(record["id"])
        assert {k: found[k] for k in fields} == fields

    def test_no_temp_files_left_behind(self, store: JsonArtworkStore):
        store.create(_fields())
        assert [p.name for p in store.data_file.parent.iterdir()] == [store.data_file.name]


class TestUpdate:
    """Test record updates."""

    def test_merges_fields(self, store: JsonArtworkStore):
        record = store.create(_fields("before"))
        updated = store.update(record["id"], {"title": "after"})
        assert updated["title"] == "after"
        assert updated["artist"] == "Someone"
        assert store.find_by_id(record["id"])["title"] == "after"

    def test_keeps_id_and_created_at(self, store: JsonArtworkStore):
        record = store.create(_fields())
        updated = store.update(record["id"], {"id": "other", "createdAt": "never"})
        assert updated["id"] == record["id"]
        assert updated["createdAt"] == record["createdAt"]

    def test_refreshes_updated_at(self, store: JsonArtworkStore, sample_artworks):
        updated = store.update("sample-1", {"title": "New"})
        assert updated["updatedAt"] != sample_artworks[0]["updatedAt"]
        assert updated["createdAt"] == sample_artworks[0]["createdAt"]

    def test_unknown_id_returns_none(self, store: JsonArtworkStore, sample_artworks):
        assert store.update("missing", {"title": "x"}) is None
        assert store.read_all() == sample_artworks

    def test_position_unchanged(self, store: JsonArtworkStore, sample_artworks):
        store.update("sample-5", {"title": "Moved?"})
        assert store.read_all()[4]["title"] == "Moved?"


class TestDelete:
    """Test record deletion."""

    def test_removes_record(self, store: JsonArtworkStore, sample_artworks):
        removed = store.delete("sample-3")
        assert removed["id"] == "sample-3"
        assert store.find_by_id("sample-3") is None
        assert len(store.read_all()) == 11

    def test_second_delete_returns_none(self, store: JsonArtworkStore, sample_artworks):
        store.delete("sample-3")
        assert store.delete("sample-3") is None


class TestConcurrency:
    """Test that the lock serialises read-modify-write cycles."""

    def test_parallel_creates_are_all_kept(self, store: JsonArtworkStore):
        with ThreadPoolExecutor(max_workers=8) as pool:
            created = list(pool.map(lambda i: store.create(_fields(f"parallel {i}")), range(25)))

        records = store.read_all()
        assert len(records) == 25
        assert {r["id"] for r in records} == {r["id"] for r in created}
        assert sorted(r["title"] for r in records) == sorted(f"parallel {i}" for i in range(25))

    def test_parallel_updates_and_deletes(self, store: JsonArtworkStore, sample_artworks):
        """Deleting odd records while renaming even ones loses neither kind of change."""

        def mutate(record: dict):
            number = int(record["id"].split("-")[1])
            if number % 2:
                return store.delete(record["id"])
            return store.update(record["id"], {"title": f"renamed {number}"})

        with ThreadPoolExecutor(max_workers=6) as pool:
            results = list(pool.map(mutate, sample_artworks))

        assert all(result is not None for result in results)
        remaining = store.read_all()
        assert [r["id"] for r in remaining] == [f"sample-{i}" for i in range(2, 13, 2)]
        assert all(r["title"].startswith("renamed ") for r in remaining)


class TestFilterArtworks:
    """Test filter_artworks."""

    def test_no_filter_returns_everything(self, sample_artworks):
        assert filter_artworks(sample_artworks) == sample_artworks

    def test_status_filter(self, sample_artworks):
        published = filter_artworks(sample_artworks, status=1)
        assert len(published) == 6
        assert all(r["status"] == 1 for r in published)

    def test_string_status_in_document_matches(self):
        records = [{"id": "a", "status": "1"}, {"id": "b", "status": 0}, {"id": "c"}]
        assert [r["id"] for r in filter_artworks(records, status=1)] == ["a"]


class TestPaginateArtworks:
    """Test paginate_artworks."""

    def test_second_page_of_five(self, sample_artworks):
        result = paginate_artworks(sample_artworks, page=2, limit=5)
        assert [r["title"] for r in result["data"]] == [f"Artwork {i}" for i in range(6, 11)]
        assert result["pagination"] == {"page": 2, "limit": 5, "total": 12, "pages": 3}

    def test_last_partial_page(self, sample_artworks):
        result = paginate_artworks(sample_artworks, page=3, limit=5)
        assert len(result["data"]) == 2

    def test_page_past_end_is_empty(self, sample_artworks):
        result = paginate_artworks(sample_artworks, page=9, limit=5)
        assert result["data"] == []
        assert result["pagination"]["page"] == 9

    def test_empty_collection(self):
        result = paginate_artworks([], page=1, limit=10)
        assert result["data"] == []
        assert result["pagination"]["pages"] == 0


def test_utc_timestamp_format():
    stamp = utc_timestamp()
    assert stamp.endswith("Z")
    assert len(stamp) == len("2024-01-01T00:00:00.000Z")
