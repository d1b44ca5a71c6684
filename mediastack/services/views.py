"""
Vues de la bibliotheque : filtrage, tri et regroupement par date.

Fonctions pures utilisees par les ecrans de liste (tout, termines, en
cours, a voir, abandonnes).
"""

from datetime import datetime, time, timezone
from enum import Enum
from typing import Optional

from mediastack.core.entities import LibraryItem
from mediastack.core.value_objects import ItemStatus
from mediastack.utils.helpers import to_utc


class SortMode(Enum):
    """Ordre d'affichage."""

    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE = "title"
    RATING_HIGH = "rating_high"
    RATING_LOW = "rating_low"


class GroupMode(Enum):
    """Regroupement par date (fin, sinon creation)."""

    NONE = "none"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


UNDATED = "Undated"

_GROUP_KEY_LENGTH = {GroupMode.DAY: 10, GroupMode.MONTH: 7, GroupMode.YEAR: 4}


def reference_date(item: LibraryItem) -> Optional[str]:
    """Date de reference ISO (YYYY-MM-DD) : date de fin, sinon date de creation."""
    if item.date_finished is not None:
        return item.date_finished.isoformat()
    if item.created_at is not None:
        return to_utc(item.created_at).date().isoformat()
    return None


def _timestamp(item: LibraryItem) -> float:
    if item.date_finished is not None:
        return datetime.combine(item.date_finished, time.min, tzinfo=timezone.utc).timestamp()
    if item.created_at is not None:
        return to_utc(item.created_at).timestamp()
    return 0.0


def filter_items(
    items: list[LibraryItem],
    status: Optional[ItemStatus] = None,
    query: Optional[str] = None,
) -> list[LibraryItem]:
    """Filtre par statut et par texte (titre, note, tags)."""
    out = [i for i in items if status is None or i.status is status]
    if query:
        needle = query.lower()
        out = [
            i
            for i in out
            if any(needle in (v or "").lower() for v in (i.title, i.note, " ".join(i.tags)))
        ]
    return out


def sort_items(items: list[LibraryItem], mode: SortMode = SortMode.NEWEST) -> list[LibraryItem]:
    """Trie une copie de la liste selon le mode demande."""
    if mode is SortMode.TITLE:
        return sorted(items, key=lambda i: i.title.lower())
    if mode is SortMode.RATING_HIGH:
        return sorted(items, key=lambda i: i.rating if i.rating is not None else -1, reverse=True)
    if mode is SortMode.RATING_LOW:
        return sorted(items, key=lambda i: i.rating if i.rating is not None else 999)
    return sorted(items, key=_timestamp, reverse=mode is SortMode.NEWEST)


def group_items(
    items: list[LibraryItem],
    mode: GroupMode = GroupMode.MONTH,
) -> list[tuple[str, list[LibraryItem]]]:
    """
    Regroupe les elements par jour, mois ou annee.

    Les groupes sont tries du plus recent au plus ancien (sans date en
    dernier) ; l'ordre des elements dans chaque groupe est conserve.
    """
    if mode is GroupMode.NONE:
        return [("All", list(items))]

    groups: dict[str, list[LibraryItem]] = {}
    for item in items:
        ref = reference_date(item)
        key = ref[: _GROUP_KEY_LENGTH[mode]] if ref else UNDATED
        groups.setdefault(key, []).append(item)

    dated = sorted((g for g in groups.items() if g[0] != UNDATED), key=lambda g: g[0], reverse=True)
    if UNDATED in groups:
        dated.append((UNDATED, groups[UNDATED]))
    return dated
