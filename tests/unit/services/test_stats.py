"""
Tests pour compute_stats().
"""

from datetime import date, datetime

import pytest

from mediastack.core.value_objects import ItemStatus, MediaKind
from mediastack.services.stats import compute_stats
from tests.fixtures.fakes import make_item


def _items():
    return [
        make_item("Heat", runtime_minutes=170, rating=9, auto_tags=("Crime", "Drama"),
                  date_finished=date(2024, 4, 1), rewatch_count=2),
        make_item("Alien", runtime_minutes=117, rating=8, auto_tags=("Horror",),
                  date_finished=date(2024, 5, 1)),
        make_item("Hades", kind=MediaKind.GAME, runtime_minutes=3000, rating=10,
                  manual_tags=("drama",), created_at=datetime(2024, 4, 15)),
        make_item("Arcane", kind=MediaKind.TV, status=ItemStatus.IN_PROGRESS, auto_tags=("Animation",)),
    ]


class TestComputeStats:
    def test_counts(self):
        stats = compute_stats(_items())
        assert stats.total == 4
        assert stats.by_status[ItemStatus.COMPLETED] == 3
        assert stats.by_kind[MediaKind.MOVIE] == 2
        assert stats.total_rewatches == 2

    def test_completed_runtime(self):
        stats = compute_stats(_items())
        assert stats.completed_count == 3
        assert stats.completed_minutes == 3287
        assert stats.completed_hours == pytest.approx(54.8)

    def test_excluded_kinds(self):
        stats = compute_stats(_items(), exclude_kinds=[MediaKind.GAME])
        assert stats.completed_count == 2
        assert stats.completed_minutes == 287
        assert stats.average_runtime == pytest.approx(143.5)

    def test_average_rating_by_kind(self):
        stats = compute_stats(_items())
        assert stats.average_rating_by_kind[MediaKind.MOVIE] == pytest.approx(8.5)
        assert MediaKind.TV not in stats.average_rating_by_kind

    def test_top_tags_merge_case(self):
        stats = compute_stats(_items())
        assert stats.top_tags[0] == ("Drama", 2)

    def test_recent_completed_order(self):
        stats = compute_stats(_items())
        assert [i.title for i in stats.recent_completed] == ["Alien", "Hades", "Heat"]

    def test_empty(self):
        stats = compute_stats([])
        assert stats.total == 0
        assert stats.average_runtime is None
        assert stats.top_tags == []
