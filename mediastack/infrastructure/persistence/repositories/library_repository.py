"""
Implementation SQLModel du stockage de bibliotheque.

Implemente ILibraryStore : la bibliotheque d'un utilisateur est chargee
dans l'ordre de la colonne position et sauvegardee par remplacement
complet, dans une seule transaction.
"""

from typing import Any, Optional

from loguru import logger
from sqlmodel import Session, select

from mediastack.core.entities import LibraryItem
from mediastack.core.ports.repositories import ILibraryStore
from mediastack.infrastructure.persistence.models import LibraryItemModel
from mediastack.infrastructure.persistence.serialization import items_from_records
from mediastack.utils.helpers import to_utc


class SQLModelLibraryStore(ILibraryStore):
    """
    Repository SQLModel pour la bibliotheque.

    Conversion bidirectionnelle entre l'entite LibraryItem (domaine) et
    LibraryItemModel (persistance). Les lignes au type ou statut inconnu
    sont ignorees au chargement.
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_record(self, model: LibraryItemModel) -> dict[str, Any]:
        """Convertit une ligne en enregistrement brut (valide ensuite)."""
        provider = None
        if model.provider_family and model.provider_id:
            provider = {
                "family": model.provider_family,
                "id": model.provider_id,
                "kind": model.provider_kind,
            }
        return {
            "id": model.item_id,
            "title": model.title,
            "kind": model.kind,
            "status": model.status,
            "rating": model.rating,
            "date_finished": model.date_finished,
            "note": model.note,
            "auto_tags": model.auto_tags,
            "manual_tags": model.manual_tags,
            "created_at": model.created_at.isoformat() if model.created_at else None,
            "rewatch_count": model.rewatch_count,
            "runtime_minutes": model.runtime_minutes,
            "cover_url": model.cover_url,
            "provider": provider,
            "progress_current": model.progress_current,
            "progress_total": model.progress_total,
            "manual_progress_current": model.manual_progress_current,
            "manual_progress_total": model.manual_progress_total,
        }

    def _to_model(self, entity: LibraryItem, user_id: str, position: int) -> LibraryItemModel:
        """
        Convertit une entite domaine en modele DB.

        Args :
            entity : L'element du domaine
            user_id : Proprietaire de la bibliotheque
            position : Rang de l'element dans la liste
        """
        ref = entity.provider
        model = LibraryItemModel(
            user_id=user_id,
            item_id=entity.id,
            position=position,
            title=entity.title,
            kind=entity.kind.value,
            status=entity.status.value,
            rating=entity.rating,
            date_finished=entity.date_finished,
            note=entity.note,
            created_at=to_utc(entity.created_at),
            rewatch_count=entity.rewatch_count,
            runtime_minutes=entity.runtime_minutes,
            cover_url=entity.cover_url,
            provider_family=ref.family.value if ref else None,
            provider_id=ref.provider_id if ref else None,
            provider_kind=ref.kind.value if ref else None,
            progress_current=entity.progress_current,
            progress_total=entity.progress_total,
            manual_progress_current=entity.manual_progress_current,
            manual_progress_total=entity.manual_progress_total,
        )
        model.auto_tags = list(entity.auto_tags)
        model.manual_tags = list(entity.manual_tags)
        return model

    def load(self, user_id: str) -> Optional[list[LibraryItem]]:
        """Charge la bibliotheque d'un utilisateur (None si aucune ligne)."""
        statement = (
            select(LibraryItemModel)
            .where(LibraryItemModel.user_id == user_id)
            .order_by(LibraryItemModel.position)
        )
        models = self._session.exec(statement).all()
        if not models:
            return None
        return items_from_records(self._to_record(model) for model in models)

    def save(self, user_id: str, items: list[LibraryItem]) -> None:
        """Remplace la bibliotheque d'un utilisateur (transaction unique)."""
        try:
            existing = self._session.exec(
                select(LibraryItemModel).where(LibraryItemModel.user_id == user_id)
            ).all()
            for model in existing:
                self._session.delete(model)
            self._session.flush()
            for position, item in enumerate(items):
                self._session.add(self._to_model(item, user_id, position))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.debug(f"Bibliotheque sauvegardee en base: {len(items)} element(s) pour {user_id}")
