"""
Implementations SQLModel des repositories.

Chaque repository :
- Herite de l'interface ABC correspondante du domaine
- Recoit une session SQLModel via injection de dependances
- Convertit entre entites de domaine (dataclass) et modeles DB (SQLModel)
"""

from mediastack.infrastructure.persistence.repositories.library_repository import (
    SQLModelLibraryStore,
)

__all__ = [
    "SQLModelLibraryStore",
]
