"""
Statistiques de bibliotheque.

Calcul pur a partir de la liste des elements : compteurs par statut et par
type, duree cumulee des elements termines, notes moyennes, tags frequents.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, time, timezone
from typing import Iterable, Optional

from mediastack.core.entities import LibraryItem
from mediastack.core.value_objects import ItemStatus, MediaKind
from mediastack.utils.constants import STATS_RECENT_COMPLETED, STATS_TOP_TAGS
from mediastack.utils.helpers import to_utc

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class LibraryStats:
    """Resume statistique de la bibliotheque."""

    total: int = 0
    by_status: dict[ItemStatus, int] = field(default_factory=dict)
    by_kind: dict[MediaKind, int] = field(default_factory=dict)
    completed_count: int = 0
    completed_minutes: int = 0
    average_runtime: Optional[float] = None
    average_rating_by_kind: dict[MediaKind, float] = field(default_factory=dict)
    top_tags: list[tuple[str, int]] = field(default_factory=list)
    recent_completed: list[LibraryItem] = field(default_factory=list)
    total_rewatches: int = 0

    @property
    def completed_hours(self) -> float:
        """Duree cumulee des elements termines, en heures."""
        return round(self.completed_minutes / 60, 1)


def _completion_key(item: LibraryItem) -> datetime:
    if item.date_finished is not None:
        return datetime.combine(item.date_finished, time.min, tzinfo=timezone.utc)
    return to_utc(item.created_at) or _OLDEST


def compute_stats(
    items: list[LibraryItem],
    exclude_kinds: Optional[Iterable[MediaKind]] = None,
) -> LibraryStats:
    """
    Calcule les statistiques.

    Args:
        items: Elements de la bibliotheque
        exclude_kinds: Types exclus du compteur et de la duree des elements termines

    Returns:
        LibraryStats
    """
    excluded = set(exclude_kinds or ())
    completed = [i for i in items if i.status is ItemStatus.COMPLETED]
    counted = [i for i in completed if i.kind not in excluded]
    timed = [i.runtime_minutes for i in counted if i.runtime_minutes]

    ratings: dict[MediaKind, list[float]] = defaultdict(list)
    for item in items:
        if item.rating is not None:
            ratings[item.kind].append(item.rating)

    tag_counts: Counter = Counter()
    labels: dict[str, str] = {}
    for item in items:
        for tag in item.tags:
            key = tag.lower()
            labels.setdefault(key, tag)
            tag_counts[key] += 1

    return LibraryStats(
        total=len(items),
        by_status=dict(Counter(i.status for i in items)),
        by_kind=dict(Counter(i.kind for i in items)),
        completed_count=len(counted),
        completed_minutes=sum(timed),
        average_runtime=round(sum(timed) / len(timed), 1) if timed else None,
        average_rating_by_kind={
            kind: round(sum(values) / len(values), 2) for kind, values in ratings.items()
        },
        top_tags=[(labels[key], count) for key, count in tag_counts.most_common(STATS_TOP_TAGS)],
        recent_completed=sorted(completed, key=_completion_key, reverse=True)[:STATS_RECENT_COMPLETED],
        total_rewatches=sum(i.rewatch_count for i in items),
    )
