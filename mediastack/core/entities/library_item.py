"""
Entite element de bibliotheque.

Un LibraryItem est l'unite persistee : un film, une serie, un jeu, un
anime/manga ou un livre suivi par l'utilisateur avec son statut, sa note
et sa progression. Un brouillon (formulaire de saisie) est un LibraryItem
sans identifiant.
"""

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Optional

from mediastack.core.value_objects import ItemStatus, MediaKind, ProviderRef
from mediastack.utils.helpers import merge_tags


@dataclass
class LibraryItem:
    """
    Element suivi dans la bibliotheque.

    La progression est une paire (courant, total) ou chaque valeur existe
    en deux versions : la valeur auto-remplie (depuis un fournisseur) et la
    valeur saisie manuellement, qui est toujours prioritaire.

    Les tags sont l'union des tags auto-remplis (remplaces a chaque
    resolution) et des tags manuels (jamais effaces par une resolution).

    Attributs:
        id: Identifiant unique (None pour un brouillon)
        title: Titre affiche
        kind: Type de media
        status: Statut de suivi
        rating: Note 0-10 par demi-points (optionnelle)
        date_finished: Date de fin (optionnelle)
        note: Note libre
        auto_tags: Tags remplis depuis le fournisseur (genres)
        manual_tags: Tags ajoutes par l'utilisateur
        created_at: Date de creation de l'enregistrement
        rewatch_count: Nombre de revisionnages (0 = jamais)
        runtime_minutes: Duree (film, episode) ou temps de jeu en minutes
        cover_url: URL de l'affiche/couverture
        provider: Reference chez le fournisseur de metadonnees (une seule famille)
        progress_current: Progression courante auto-remplie
        progress_total: Total auto-rempli (episodes, chapitres, volumes)
        manual_progress_current: Progression courante saisie (prioritaire)
        manual_progress_total: Total saisi (prioritaire)
    """

    id: Optional[str] = None
    title: str = ""
    kind: MediaKind = MediaKind.MOVIE
    status: ItemStatus = ItemStatus.COMPLETED
    rating: Optional[float] = None
    date_finished: Optional[date] = None
    note: Optional[str] = None
    auto_tags: tuple[str, ...] = ()
    manual_tags: tuple[str, ...] = ()
    created_at: Optional[datetime] = None
    rewatch_count: int = 0
    runtime_minutes: Optional[int] = None
    cover_url: Optional[str] = None
    provider: Optional[ProviderRef] = None
    progress_current: Optional[int] = None
    progress_total: Optional[int] = None
    manual_progress_current: Optional[int] = None
    manual_progress_total: Optional[int] = None

    @property
    def tags(self) -> tuple[str, ...]:
        """Tags affiches : auto-remplis puis manuels, doublons fusionnes."""
        return merge_tags(self.auto_tags, self.manual_tags)

    @property
    def effective_current(self) -> Optional[int]:
        """Progression courante effective (la saisie manuelle l'emporte)."""
        if self.manual_progress_current is not None:
            return self.manual_progress_current
        return self.progress_current

    @property
    def effective_total(self) -> Optional[int]:
        """Total effectif (la saisie manuelle l'emporte)."""
        if self.manual_progress_total is not None:
            return self.manual_progress_total
        return self.progress_total


EDITABLE_FIELDS: frozenset[str] = frozenset(
    f.name for f in fields(LibraryItem) if f.name not in ("id", "created_at")
)
"""Champs modifiables par une mise a jour partielle."""
