"""
Stockage synchronise : base distante + sauvegarde locale.

Chargement : base distante d'abord (copie recopiee en local), repli sur
la sauvegarde locale si la base echoue. Sauvegarde : toujours en local
d'abord, puis en base ; chaque echec est journalise et reflete
dans le statut retourne, aucun n'interrompt l'autre ecriture.
"""

from dataclasses import dataclass, field

from loguru import logger

from mediastack.core.entities import LibraryItem
from mediastack.core.ports.repositories import ILibraryStore

STATUS_LOADED = "Bibliotheque chargee."
STATUS_LOADED_LOCAL = "Bibliotheque chargee (sauvegarde locale)."
STATUS_SAVED = "Enregistre."
STATUS_SAVED_LOCAL = "Enregistre en local (erreur distante)."
STATUS_SAVED_REMOTE = "Enregistre en base (erreur locale)."
STATUS_SAVE_FAILED = "Echec de l'enregistrement (base et sauvegarde locale)."


@dataclass
class SyncResult:
    """Resultat d'une operation de synchronisation."""

    items: list[LibraryItem] = field(default_factory=list)
    status: str = ""
    remote_ok: bool = True
    local_ok: bool = True


class SyncedLibraryStore:
    """
    Orchestration base distante / sauvegarde locale.

    Example:
        store = SyncedLibraryStore(remote=SQLModelLibraryStore(session), local=JsonLibraryBackup(dir))
        result = store.load("local")
        print(result.status, len(result.items))
    """

    def __init__(self, remote: ILibraryStore, local: ILibraryStore) -> None:
        self._remote = remote
        self._local = local

    def load(self, user_id: str) -> SyncResult:
        """Charge la bibliotheque ; ne leve jamais d'exception de stockage distant."""
        try:
            items = self._remote.load(user_id)
        except Exception as e:
            logger.warning(f"Chargement distant en echec, repli local: {e}")
            items = self._local.load(user_id) or []
            return SyncResult(items=items, status=STATUS_LOADED_LOCAL, remote_ok=False)

        if items is None:
            # Base vide pour cet utilisateur : la sauvegarde locale fait foi
            items = self._local.load(user_id) or []
        else:
            self._mirror(user_id, items)
        logger.info(f"{len(items)} element(s) charge(s) pour {user_id}")
        return SyncResult(items=items, status=STATUS_LOADED)

    def save(self, user_id: str, items: list[LibraryItem]) -> SyncResult:
        """Sauvegarde locale puis distante ; ne leve jamais d'exception de stockage."""
        local_ok = True
        try:
            self._local.save(user_id, items)
        except OSError as e:
            logger.warning(f"Sauvegarde locale en echec: {e}")
            local_ok = False

        remote_ok = True
        try:
            self._remote.save(user_id, items)
        except Exception as e:
            logger.warning(f"Sauvegarde distante en echec: {e}")
            remote_ok = False

        if local_ok and remote_ok:
            status = STATUS_SAVED
        elif local_ok:
            status = STATUS_SAVED_LOCAL
        elif remote_ok:
            status = STATUS_SAVED_REMOTE
        else:
            status = STATUS_SAVE_FAILED
        return SyncResult(items=items, status=status, remote_ok=remote_ok, local_ok=local_ok)

    def _mirror(self, user_id: str, items: list[LibraryItem]) -> None:
        try:
            self._local.save(user_id, items)
        except OSError as e:
            logger.warning(f"Copie locale impossible: {e}")
