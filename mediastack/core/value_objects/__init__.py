"""
Objets valeur immutables representant des concepts du domaine sans identite.

Exports :
- MediaKind : Type de media (movie, tv, anime, manga, book, game)
- ItemStatus : Statut de suivi (planned, in_progress, dropped, completed)
- ProviderFamily : Famille de fournisseur de metadonnees
- ProviderRef : Identifiant d'un element chez un fournisseur
- TasteProfile : Profil de gouts calcule pour les recommandations
"""

from mediastack.core.value_objects.media import (
    ItemStatus,
    MediaKind,
    ProviderFamily,
    ProviderRef,
    provider_family_for,
)
from mediastack.core.value_objects.taste import TasteProfile

__all__ = [
    "ItemStatus",
    "MediaKind",
    "ProviderFamily",
    "ProviderRef",
    "provider_family_for",
    "TasteProfile",
]
