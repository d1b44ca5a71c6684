"""
Tests pour la conversion LibraryItem <-> enregistrement JSON.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from mediastack.core.value_objects import ItemStatus, MediaKind, ProviderFamily, ProviderRef
from mediastack.infrastructure.persistence.serialization import (
    item_from_record,
    item_to_record,
    items_from_records,
    provider_from_record,
)
from tests.fixtures.fakes import make_item


class TestItemRecord:
    def test_record_fields(self):
        item = make_item(
            "Breaking Bad",
            kind=MediaKind.TV,
            status=ItemStatus.IN_PROGRESS,
            date_finished=date(2024, 5, 1),
            auto_tags=("Drama",),
            provider=ProviderRef(ProviderFamily.TMDB, "1396", MediaKind.TV),
        )

        record = item_to_record(item)

        assert record["kind"] == "tv"
        assert record["status"] == "in_progress"
        assert record["date_finished"] == "2024-05-01"
        assert record["created_at"] == "2024-01-01T12:00:00+00:00"
        assert record["auto_tags"] == ["Drama"]
        assert record["provider"] == {"family": "tmdb", "id": "1396", "kind": "tv"}

    def test_record_reload_is_equal(self):
        item = make_item("Heat", rating=8.5, manual_tags=("Favori",), note="Pacino")
        assert item_from_record(item_to_record(item)) == item

    def test_values_are_clamped_on_load(self):
        item = item_from_record(
            {"title": " Heat ", "kind": "movie", "status": "completed", "rating": 42,
             "rewatch_count": -3, "manual_tags": ["a", "A"]}
        )
        assert item.title == "Heat"
        assert item.rating == 10.0
        assert item.rewatch_count == 0
        assert item.manual_tags == ("a",)
        assert item.id

    @pytest.mark.parametrize(
        "record",
        [
            {"title": "", "kind": "movie", "status": "planned"},
            {"title": "X", "kind": "podcast", "status": "planned"},
            {"title": "X", "kind": "movie", "status": "watching"},
        ],
    )
    def test_invalid_records_raise(self, record):
        with pytest.raises(ValueError):
            item_from_record(record)

    def test_invalid_records_are_skipped(self):
        items = items_from_records(
            [
                {"title": "Heat", "kind": "movie", "status": "planned"},
                {"title": "X", "kind": "podcast", "status": "planned"},
            ]
        )
        assert [i.title for i in items] == ["Heat"]

    def test_naive_created_at_is_read_as_utc(self):
        """Les anciennes sauvegardes sans fuseau sont lues en UTC."""
        item = item_from_record(
            {"title": "Heat", "kind": "movie", "status": "planned", "created_at": "2024-02-03T10:00:00"}
        )
        assert item.created_at == datetime(2024, 2, 3, 10, 0, tzinfo=timezone.utc)
        assert item.created_at.tzinfo is timezone.utc

    def test_offset_created_at_is_converted_to_utc(self):
        item = item_from_record(
            {"title": "Heat", "kind": "movie", "status": "planned", "created_at": "2024-02-03T12:00:00+02:00"}
        )
        assert item.created_at == datetime(2024, 2, 3, 10, 0, tzinfo=timezone.utc)
        assert item.created_at.utcoffset() == timedelta(0)


class TestProviderRecord:
    def test_incomplete_reference(self):
        assert provider_from_record({"family": "tmdb"}) is None
        assert provider_from_record(None) is None

    def test_unknown_family(self):
        assert provider_from_record({"family": "tvdb", "id": "1", "kind": "tv"}) is None
