"""
Interfaces ports pour la persistance de la bibliotheque.

Les implementations fournissent le stockage distant (SQLModel) et la
sauvegarde locale (fichier JSON), avec la meme forme.
"""

from abc import ABC, abstractmethod
from typing import Optional

from mediastack.core.entities import LibraryItem


class ILibraryStore(ABC):
    """
    Interface de stockage de la bibliotheque d'un utilisateur.

    La bibliotheque est chargee et sauvegardee en entier (remplacement).
    """

    @abstractmethod
    def load(self, user_id: str) -> Optional[list[LibraryItem]]:
        """Charge les elements d'un utilisateur (None si aucune bibliotheque connue)."""
        ...

    @abstractmethod
    def save(self, user_id: str, items: list[LibraryItem]) -> None:
        """Remplace la bibliotheque d'un utilisateur. Leve une exception en cas d'echec."""
        ...
