"""
Service de bibliotheque : proprietaire unique des elements et du tampon d'annulation.

Toutes les modifications remplacent un enregistrement entier, apres
normalisation par ProgressStatusEngine. La suppression conserve un seul
jeton de restauration (element + position d'origine + echeance) verifie
contre l'horloge au moment de la restauration.
"""

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from loguru import logger

from mediastack.core.entities import LibraryItem
from mediastack.core.value_objects import ItemStatus
from mediastack.services.progress import ItemUpdate, ProgressStatusEngine


@dataclass(frozen=True)
class PendingRestore:
    """Jeton de restauration de la derniere suppression.

    Attributes:
        item: Element supprime
        index: Position d'origine dans la bibliotheque
        expires_at: Echeance (horodatage epoch, secondes)
    """

    item: LibraryItem
    index: int
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Vrai si l'echeance est depassee."""
        return now > self.expires_at


class LibraryService:
    """
    Bibliotheque en memoire d'un utilisateur.

    Attributes:
        UNDO_WINDOW_SECONDS: Duree de validite par defaut d'une annulation

    Example:
        library = LibraryService(engine, items=store.load(user_id) or [])
        item = library.add(draft)
        library.increment(item.id)
        token = library.remove(item.id)
        library.restore()
    """

    UNDO_WINDOW_SECONDS: float = 10.0

    def __init__(
        self,
        engine: ProgressStatusEngine,
        items: Optional[Iterable[LibraryItem]] = None,
        undo_window_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._engine = engine
        self._items: list[LibraryItem] = list(items or [])
        self._undo_window = (
            self.UNDO_WINDOW_SECONDS if undo_window_seconds is None else undo_window_seconds
        )
        self._clock = clock
        self._pending: Optional[PendingRestore] = None

    @property
    def items(self) -> list[LibraryItem]:
        """Copie de la liste des elements (ordre d'affichage)."""
        return list(self._items)

    @property
    def pending_restore(self) -> Optional[PendingRestore]:
        """Jeton de restauration courant (peut etre expire)."""
        return self._pending

    def _index_of(self, item_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None

    def get(self, item_id: str) -> Optional[LibraryItem]:
        """Recupere un element par son identifiant."""
        index = self._index_of(item_id)
        return self._items[index] if index is not None else None

    def _replace(self, index: int, item: LibraryItem) -> LibraryItem:
        self._items[index] = item
        return item

    def add(self, draft: LibraryItem) -> Optional[LibraryItem]:
        """
        Cree un element a partir d'un brouillon.

        Le brouillon doit avoir un titre non vide ; l'element est insere en
        tete de bibliotheque.

        Returns:
            L'element cree, ou None si le titre est vide
        """
        if not (draft.title or "").strip():
            logger.debug("Ajout ignore: titre vide")
            return None

        item = self._engine.create(draft)
        item.id = uuid.uuid4().hex
        item.created_at = datetime.now(timezone.utc)
        self._items.insert(0, item)
        logger.info(f"Ajoute: {item.title} [{item.kind.value}/{item.status.value}]")
        return item

    def apply(self, item_id: str, update: ItemUpdate) -> Optional[LibraryItem]:
        """Applique une mise a jour partielle. Retourne None si l'element est inconnu."""
        index = self._index_of(item_id)
        if index is None:
            return None
        return self._replace(index, self._engine.apply(self._items[index], update))

    def increment(self, item_id: str, delta: int = 1) -> Optional[LibraryItem]:
        """Avance (ou recule) la progression d'un element."""
        index = self._index_of(item_id)
        if index is None:
            return None
        return self._replace(index, self._engine.increment(self._items[index], delta))

    def move(self, item_id: str, status: ItemStatus) -> Optional[LibraryItem]:
        """
        Changement de statut par glisser-deposer.

        Sans effet si l'element est inconnu ou deja dans ce statut.
        """
        item = self.get(item_id)
        if item is None or item.status is status:
            return None
        return self.apply(item_id, {"status": status})

    def remove(self, item_id: str) -> Optional[PendingRestore]:
        """
        Supprime un element et arme le jeton de restauration.

        Un nouveau jeton remplace le precedent.
        """
        index = self._index_of(item_id)
        if index is None:
            return None

        item = self._items.pop(index)
        self._pending = PendingRestore(
            item=item,
            index=index,
            expires_at=self._clock() + self._undo_window,
        )
        logger.info(f"Supprime: {item.title} (annulable {self._undo_window:.0f}s)")
        return self._pending

    def restore(self, token: Optional[PendingRestore] = None) -> Optional[LibraryItem]:
        """
        Restaure la derniere suppression si l'echeance n'est pas depassee.

        Args:
            token: Jeton a utiliser (par defaut celui du tampon)

        Returns:
            L'element restaure a sa position d'origine, ou None
        """
        pending = token or self._pending
        self._pending = None
        if pending is None:
            return None
        if pending.is_expired(self._clock()):
            logger.debug(f"Restauration expiree: {pending.item.title}")
            return None
        if self._index_of(pending.item.id) is not None:
            return None

        index = min(pending.index, len(self._items))
        self._items.insert(index, pending.item)
        logger.info(f"Restaure: {pending.item.title}")
        return pending.item
