"""
Tests for the meditation catalog.
"""

from datetime import datetime

import pytest

from mindful.core.models import MeditationCategory, MeditationEntry
from mindful.services.catalog_service import CatalogStore


class TestCatalogStore:
    def test_loads_seed_catalog(self, catalog):
        assert len(catalog) == 28

    def test_add_persists(self, catalog, gateway):
        entry = catalog.add(MeditationEntry.create("My own", 420, category="custom"))

        reloaded = CatalogStore.load(gateway)
        assert reloaded.get(entry.entry_id) == entry

    def test_add_duplicate_id(self, catalog):
        existing = catalog.entries[0]
        with pytest.raises(ValueError):
            catalog.add(MeditationEntry.from_dict(existing.to_dict()))

    def test_update_and_delete(self, catalog):
        entry = catalog.entries[0]
        entry.title = "Renamed"

        assert catalog.update(entry)
        assert catalog.get(entry.entry_id).title == "Renamed"
        assert catalog.delete(entry.entry_id)
        assert catalog.get(entry.entry_id) is None
        assert not catalog.delete(entry.entry_id)

    def test_update_unknown(self, catalog):
        assert not catalog.update(MeditationEntry.create("Ghost", 60))

    def test_toggle_favorite(self, catalog):
        entry_id = catalog.entries[0].entry_id

        assert catalog.toggle_favorite(entry_id) is True
        assert catalog.favorites()[0].entry_id == entry_id
        assert catalog.toggle_favorite(entry_id) is False
        assert catalog.toggle_favorite("missing") is None

    def test_by_category(self, catalog):
        sleep = catalog.by_category(MeditationCategory.SLEEP)
        assert sleep
        assert all(e.category == "sleep" for e in sleep)

    def test_search_matches_title_and_description(self, catalog):
        assert [e.title for e in catalog.search("deep sleep")] == ["Deep Sleep"]
        assert catalog.search("waves")
        assert len(catalog.search("  ")) == 28

    def test_recently_used(self, catalog):
        first, second = catalog.entries[:2]
        catalog.record_completion(first.entry_id, 60, datetime(2024, 3, 9, 8, 0))
        catalog.record_completion(second.entry_id, 60, datetime(2024, 3, 10, 8, 0))

        assert [e.entry_id for e in catalog.recently_used()] == [second.entry_id, first.entry_id]

    def test_record_completion_unknown_entry(self, catalog):
        assert not catalog.record_completion("missing", 60)
