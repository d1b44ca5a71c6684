"""
Machine a etats statut/progression.

ProgressStatusEngine applique une mise a jour partielle a un element et
retourne un element entierement coherent. Regles, dans l'ordre :

1. Fusion de la mise a jour dans l'element (valeurs invalides ramenees
   a la valeur valide la plus proche)
2. Passage a "completed" sans date de fin : date du jour
3. Progression effective : la saisie manuelle l'emporte, champ par champ ;
   un film vaut toujours (0|1, 1)
4. Auto-completion : uniquement si le statut ne fait PAS partie de la mise
   a jour, et que courant >= total (total > 0)
5. Element termine : film force a (1, 1) ; types episodiques remontes au
   total si en dessous (jamais abaisses, ex: revisionnage en cours)

Les increments/decrements de progression sont des mises a jour comme les
autres et passent par les memes regles.
"""

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional

from loguru import logger

from mediastack.core.entities import EDITABLE_FIELDS, LibraryItem
from mediastack.core.value_objects import ItemStatus, MediaKind, ProviderRef
from mediastack.utils.helpers import clamp_non_negative, clamp_rating, merge_tags

ItemUpdate = Mapping[str, Any]

_PROGRESS_FIELDS = (
    "progress_current",
    "progress_total",
    "manual_progress_current",
    "manual_progress_total",
    "runtime_minutes",
)


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    return text or None


def _coerce_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def coerce_field(name: str, value: Any) -> Any:
    """
    Ramene la valeur d'un champ a la valeur valide la plus proche.

    Raises:
        ValueError: Si le champ n'est pas modifiable ou si une valeur
            enumeree (type, statut) est inconnue
    """
    if name not in EDITABLE_FIELDS:
        raise ValueError(f"Champ non modifiable: {name}")

    if name == "title":
        return (value or "").strip()
    if name == "kind":
        return value if isinstance(value, MediaKind) else MediaKind(value)
    if name == "status":
        return value if isinstance(value, ItemStatus) else ItemStatus(value)
    if name == "rating":
        return clamp_rating(value)
    if name == "date_finished":
        return _coerce_date(value)
    if name in ("note", "cover_url"):
        return _strip_or_none(value)
    if name in ("auto_tags", "manual_tags"):
        return merge_tags(value or ())
    if name == "rewatch_count":
        return max(0, int(value or 0))
    if name in _PROGRESS_FIELDS:
        return clamp_non_negative(value)
    if name == "provider" and value is not None and not isinstance(value, ProviderRef):
        raise ValueError(f"Reference fournisseur invalide: {value!r}")
    return value


def effective_progress(item: LibraryItem) -> tuple[Optional[int], Optional[int]]:
    """
    Progression effective (courant, total) d'un element.

    Pour un film, le total vaut toujours 1 et le courant 0 ou 1.
    """
    current = item.effective_current
    total = item.effective_total
    if item.kind is MediaKind.MOVIE:
        return (1 if (current or 0) >= 1 else 0), 1
    return current, total


def _with_current(item: LibraryItem, value: int) -> LibraryItem:
    """Ecrit le courant dans le champ qui determine la valeur effective."""
    if item.manual_progress_current is not None:
        return replace(item, manual_progress_current=value)
    return replace(item, progress_current=value)


class ProgressStatusEngine:
    """
    Service de normalisation statut/progression.

    Attributes:
        today: Fournisseur de la date courante (injectable pour les tests)

    Example:
        engine = ProgressStatusEngine()
        item = engine.apply(item, {"progress_current": 12})
        item = engine.increment(item)
    """

    def __init__(self, today: Callable[[], date] = date.today) -> None:
        self._today = today

    def _stamp_finished(self, item: LibraryItem) -> LibraryItem:
        if item.date_finished is None:
            return replace(item, date_finished=self._today())
        return item

    def _normalize(
        self,
        item: LibraryItem,
        previous_status: Optional[ItemStatus],
        explicit_status: bool,
    ) -> LibraryItem:
        if item.status is ItemStatus.COMPLETED and previous_status is not ItemStatus.COMPLETED:
            item = self._stamp_finished(item)

        current, total = effective_progress(item)

        if (
            not explicit_status
            and item.status is not ItemStatus.COMPLETED
            and total is not None
            and total > 0
            and current is not None
            and current >= total
        ):
            logger.debug(f"Auto-completion: {item.title} ({current}/{total})")
            item = self._stamp_finished(replace(item, status=ItemStatus.COMPLETED))

        if item.kind is MediaKind.MOVIE:
            done = 1 if item.status is ItemStatus.COMPLETED else 0
            return replace(
                item,
                progress_current=done,
                progress_total=1,
                manual_progress_current=None,
                manual_progress_total=None,
            )

        if total is None or total <= 0 or (current is None and item.status is not ItemStatus.COMPLETED):
            return item

        if item.status is ItemStatus.COMPLETED:
            if item.kind.is_episodic and (current or 0) < total:
                item = _with_current(item, total)
        elif current > total:
            # Statut explicite non termine : courant ramene au total
            item = _with_current(item, total)

        return item

    def apply(self, item: LibraryItem, update: ItemUpdate) -> LibraryItem:
        """
        Applique une mise a jour partielle.

        Un champ "status" present dans la mise a jour, meme inchange,
        compte comme explicite et desactive l'auto-completion.

        Args:
            item: Element courant (non modifie)
            update: Sous-ensemble arbitraire de champs modifiables

        Returns:
            Nouvel element coherent

        Raises:
            ValueError: Champ inconnu ou valeur enumeree invalide
        """
        changes = {name: coerce_field(name, value) for name, value in update.items()}
        merged = replace(item, **changes)
        return self._normalize(merged, item.status, explicit_status="status" in update)

    def create(self, draft: LibraryItem) -> LibraryItem:
        """
        Normalise un brouillon a sa creation.

        Le statut choisi dans le formulaire est explicite ; l'etat precedent
        est considere comme non termine.
        """
        changes = {name: coerce_field(name, getattr(draft, name)) for name in EDITABLE_FIELDS}
        return self._normalize(replace(draft, **changes), None, explicit_status=True)

    def increment(self, item: LibraryItem, delta: int = 1) -> LibraryItem:
        """
        Incremente (ou decremente) la progression courante.

        Le resultat est borne a [0, total] quand le total est connu, puis
        passe par apply() : atteindre le total termine l'element.
        """
        current, total = effective_progress(item)
        value = max(0, (current or 0) + delta)
        if total is not None:
            value = min(value, total)

        field = "manual_progress_current" if item.manual_progress_current is not None else "progress_current"
        return self.apply(item, {field: value})
