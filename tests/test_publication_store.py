"""
Tests for the SQL publication store
"""
import pytest
from sqlalchemy import text

from bioexplorer.errors import PublicationSchemaError, PublicationStoreError
from bioexplorer.ingestion.publication_store import normalize_record


def record(**overrides):
    base = {
        "title": "Microgravity affects muscle atrophy",
        "abstract": "Rodents flown on the ISS lost muscle mass.",
        "authors": "Smith J",
        "summary": "Muscle loss in spaceflight",
        "url": "https://example.org/1",
    }
    base.update(overrides)
    return base


class TestNormalizeRecord:
    """Test schema normalization at the store boundary"""

    def test_accepts_canonical_record(self):
        assert normalize_record(record()) == record()

    def test_missing_optional_fields_become_empty(self):
        normalized = normalize_record({"title": "Only a title"})
        assert normalized == {
            "title": "Only a title",
            "abstract": "",
            "authors": "",
            "summary": "",
            "url": "",
        }

    def test_rejects_capitalized_legacy_fields(self):
        with pytest.raises(PublicationSchemaError, match="Title"):
            normalize_record({"Title": "Seed record", "Link": "https://example.org"})

    def test_rejects_missing_title(self):
        with pytest.raises(PublicationSchemaError):
            normalize_record({"abstract": "No title here"})

    def test_rejects_non_string_values(self):
        with pytest.raises(PublicationSchemaError, match="authors"):
            normalize_record(record(authors=["Smith", "Jones"]))


class TestPublicationStore:
    """Test CRUD operations against SQLite"""

    def test_add_assigns_unique_ids(self, store):
        first = store.add(record())
        second = store.add(record(title="Another"))

        assert first and second
        assert first != second

    def test_get_by_id_round_trip(self, store):
        publication_id = store.add(record())

        publication = store.get_by_id(publication_id)

        assert publication.id == publication_id
        assert publication.title == "Microgravity affects muscle atrophy"
        assert publication.authors == "Smith J"

    def test_get_by_id_missing_returns_none(self, store):
        assert store.get_by_id("does-not-exist") is None

    def test_get_all_and_count(self, store):
        store.add(record())
        store.add(record(title="Plant growth on the ISS"))

        assert len(store.get_all()) == 2
        assert store.count() == 2

    def test_bulk_add_rejects_incomplete_records(self, store):
        ids, rejected = store.bulk_add([
            record(),
            record(url=""),
            record(abstract="   "),
            record(title="Radiation and stem cells"),
        ])

        assert len(ids) == 2
        assert rejected == 2
        assert store.count() == 2

    def test_search_by_title_is_case_insensitive(self, store):
        store.add(record())
        store.add(record(title="Plant growth on the ISS"))

        results = store.search_by_title("MUSCLE")

        assert [p.title for p in results] == ["Microgravity affects muscle atrophy"]

    def test_search_by_abstract(self, store):
        store.add(record())
        store.add(record(title="Other", abstract="Arabidopsis roots bend"))

        results = store.search_by_abstract("arabidopsis")

        assert [p.title for p in results] == ["Other"]

    def test_blank_search_term_returns_nothing(self, store):
        store.add(record())
        assert store.search_by_title("   ") == []

    def test_unreadable_database_raises_store_error(self, store):
        with store.engine.begin() as conn:
            conn.execute(text("DROP TABLE publications"))

        with pytest.raises(PublicationStoreError, match="Failed to load publication 'p1'"):
            store.get_by_id("p1")
        with pytest.raises(PublicationStoreError):
            store.get_all()
