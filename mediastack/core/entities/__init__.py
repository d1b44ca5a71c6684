"""
Entites metier representant les concepts du domaine.

Exports:
- LibraryItem: Element de bibliotheque (ou brouillon sans identifiant)
- EDITABLE_FIELDS: Champs acceptes dans une mise a jour partielle
"""

from mediastack.core.entities.library_item import EDITABLE_FIELDS, LibraryItem

__all__ = [
    "EDITABLE_FIELDS",
    "LibraryItem",
]
