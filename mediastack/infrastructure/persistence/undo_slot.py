"""
Tampon d'annulation persistant pour la CLI.

Chaque commande CLI est un processus distinct : le dernier element
supprime est conserve dans diskcache avec une expiration egale a la
fenetre d'annulation, pour qu'une commande "restore" ulterieure le
retrouve.
"""

from pathlib import Path
from typing import Optional, Union

from diskcache import Cache

from mediastack.services.library import PendingRestore


class UndoSlot:
    """
    Emplacement unique (par utilisateur) pour la derniere suppression.

    Example:
        slot = UndoSlot(".cache/api", window_seconds=10)
        slot.put("local", token)
        token = slot.take("local")  # None si expire ou deja pris
    """

    def __init__(self, directory: Union[str, Path], window_seconds: float) -> None:
        self._cache = Cache(str(Path(directory) / "undo"))
        self._window = window_seconds

    @staticmethod
    def _key(user_id: str) -> str:
        return f"undo:{user_id}"

    def put(self, user_id: str, token: PendingRestore) -> None:
        """Remplace le contenu de l'emplacement."""
        self._cache.set(self._key(user_id), token, expire=self._window)

    def take(self, user_id: str) -> Optional[PendingRestore]:
        """Retire et retourne le jeton en attente (None si absent ou expire)."""
        return self._cache.pop(self._key(user_id), default=None)

    def close(self) -> None:
        self._cache.close()
