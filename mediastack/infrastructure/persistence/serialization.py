"""
Conversion entre LibraryItem et enregistrement JSON.

Format commun a la sauvegarde locale et aux echanges : un dict de types
JSON simples. Au chargement, chaque enregistrement est valide et ramene a
des valeurs coherentes (note bornee, tags dedoublonnes, compteurs >= 0) ;
un enregistrement au type ou statut inconnu est ecarte.
"""

from datetime import datetime
from typing import Any, Iterable, Optional
from uuid import uuid4

from loguru import logger

from mediastack.core.entities import LibraryItem
from mediastack.core.value_objects import MediaKind, ProviderFamily, ProviderRef
from mediastack.services.progress import coerce_field
from mediastack.utils.helpers import to_utc

_SIMPLE_FIELDS = (
    "title",
    "rating",
    "note",
    "rewatch_count",
    "runtime_minutes",
    "cover_url",
    "progress_current",
    "progress_total",
    "manual_progress_current",
    "manual_progress_total",
)


def provider_to_record(ref: Optional[ProviderRef]) -> Optional[dict[str, str]]:
    if ref is None:
        return None
    return {"family": ref.family.value, "id": ref.provider_id, "kind": ref.kind.value}


def provider_from_record(data: Optional[dict[str, Any]]) -> Optional[ProviderRef]:
    """Reconstruit une ProviderRef ; None si la reference est incomplete ou inconnue."""
    if not data or not data.get("family") or not data.get("id"):
        return None
    try:
        return ProviderRef(
            family=ProviderFamily(data["family"]),
            provider_id=str(data["id"]),
            kind=MediaKind(data["kind"]),
        )
    except (KeyError, ValueError):
        return None


def item_to_record(item: LibraryItem) -> dict[str, Any]:
    """Serialise un element en dict JSON."""
    return {
        "id": item.id,
        "title": item.title,
        "kind": item.kind.value,
        "status": item.status.value,
        "rating": item.rating,
        "date_finished": item.date_finished.isoformat() if item.date_finished else None,
        "note": item.note,
        "auto_tags": list(item.auto_tags),
        "manual_tags": list(item.manual_tags),
        "created_at": item.created_at.isoformat() if item.created_at else None,
        "rewatch_count": item.rewatch_count,
        "runtime_minutes": item.runtime_minutes,
        "cover_url": item.cover_url,
        "provider": provider_to_record(item.provider),
        "progress_current": item.progress_current,
        "progress_total": item.progress_total,
        "manual_progress_current": item.manual_progress_current,
        "manual_progress_total": item.manual_progress_total,
    }


def item_from_record(data: dict[str, Any]) -> LibraryItem:
    """
    Reconstruit un element depuis un enregistrement.

    Raises:
        ValueError: Type ou statut inconnu, titre vide, date invalide
    """
    values = {name: coerce_field(name, data.get(name)) for name in _SIMPLE_FIELDS}
    if not values["title"]:
        raise ValueError("Titre vide")

    created_raw = data.get("created_at")
    return LibraryItem(
        id=str(data.get("id") or uuid4().hex),
        kind=coerce_field("kind", data.get("kind")),
        status=coerce_field("status", data.get("status")),
        date_finished=coerce_field("date_finished", data.get("date_finished")),
        auto_tags=coerce_field("auto_tags", data.get("auto_tags")),
        manual_tags=coerce_field("manual_tags", data.get("manual_tags")),
        created_at=to_utc(datetime.fromisoformat(created_raw)) if created_raw else None,
        provider=provider_from_record(data.get("provider")),
        **values,
    )


def items_from_records(records: Iterable[dict[str, Any]]) -> list[LibraryItem]:
    """Reconstruit une liste d'elements en ecartant les enregistrements invalides."""
    items = []
    for record in records:
        try:
            items.append(item_from_record(record))
        except (TypeError, ValueError) as e:
            logger.warning(f"Enregistrement ignore ({record.get('title')!r}): {e}")
    return items
