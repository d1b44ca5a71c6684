"""
Objets valeur decrivant la nature d'un element de bibliotheque.

- MediaKind : type de media (film, serie, anime, manga, livre, jeu)
- ItemStatus : statut de suivi (prevu, en cours, abandonne, termine)
- ProviderFamily : domaine de metadonnees externe (TMDB, IGDB, AniList)
- ProviderRef : identifiant chez un fournisseur (union etiquetee par famille)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MediaKind(Enum):
    """Type de media suivi.

    Valeurs:
        MOVIE: Film (progression implicite 0/1)
        TV: Serie TV (episodes)
        ANIME: Anime (episodes)
        MANGA: Manga (chapitres ou volumes)
        BOOK: Livre
        GAME: Jeu video
    """

    MOVIE = "movie"
    TV = "tv"
    ANIME = "anime"
    MANGA = "manga"
    BOOK = "book"
    GAME = "game"

    @property
    def is_episodic(self) -> bool:
        """Vrai pour les types dont la progression se compte en episodes/chapitres."""
        return self in (MediaKind.TV, MediaKind.ANIME, MediaKind.MANGA)


class ItemStatus(Enum):
    """Statut de suivi d'un element.

    Aucun etat terminal : un element termine peut etre rouvert.
    """

    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    DROPPED = "dropped"
    COMPLETED = "completed"


class ProviderFamily(Enum):
    """Famille de fournisseur de metadonnees (mutuellement exclusives par element)."""

    TMDB = "tmdb"
    IGDB = "igdb"
    ANILIST = "anilist"


_FAMILY_BY_KIND: dict[MediaKind, ProviderFamily] = {
    MediaKind.MOVIE: ProviderFamily.TMDB,
    MediaKind.TV: ProviderFamily.TMDB,
    MediaKind.GAME: ProviderFamily.IGDB,
    MediaKind.ANIME: ProviderFamily.ANILIST,
    MediaKind.MANGA: ProviderFamily.ANILIST,
}


def provider_family_for(kind: MediaKind) -> Optional[ProviderFamily]:
    """Retourne la famille de fournisseur qui couvre ce type (None pour les livres)."""
    return _FAMILY_BY_KIND.get(kind)


@dataclass(frozen=True)
class ProviderRef:
    """
    Reference vers un element chez un fournisseur externe.

    Un element de bibliotheque porte au plus une ProviderRef : choisir un
    candidat d'une autre famille remplace donc la reference entiere.

    Attributs:
        family: Famille du fournisseur (tmdb, igdb, anilist)
        provider_id: ID chez le fournisseur
        kind: Type de media tel que connu du fournisseur (ex: movie vs tv pour TMDB)
    """

    family: ProviderFamily
    provider_id: str
    kind: MediaKind

    @property
    def key(self) -> tuple[str, str]:
        """Cle de deduplication famille + identifiant."""
        return (self.family.value, self.provider_id)
