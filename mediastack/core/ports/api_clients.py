"""
Interfaces ports pour les fournisseurs de metadonnees.

Interfaces abstraites (ports) definissant les contrats pour les APIs media
externes. Les implementations (adaptateurs) fournissent les clients concrets
(TMDB pour films/series, IGDB pour les jeux, AniList pour anime/manga).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from mediastack.core.value_objects import MediaKind, ProviderFamily, ProviderRef


class ProviderConfigError(Exception):
    """Levee quand un fournisseur est appele sans identifiants configures."""


class ProviderResponseError(Exception):
    """Levee quand un fournisseur repond 200 avec une erreur applicative (ex: GraphQL)."""


@dataclass
class Candidate:
    """
    Correspondance non confirmee depuis un fournisseur.

    Ephemere : un candidat n'est jamais persiste. Il est propose a
    l'utilisateur puis, une fois choisi, fusionne dans le brouillon.

    Attributs :
        family : Famille du fournisseur d'origine
        provider_id : ID specifique au fournisseur
        kind : Type de media du candidat
        title : Titre tel que fourni
        subtitle : Sous-titre (annee de sortie)
        cover_url : URL complete de la couverture
        genres : Genres connus des la recherche
        runtime_minutes : Duree en minutes
        progress_total_hint : Nombre d'episodes/chapitres/volumes
        score : Similarite avec la requete (0-1) calculee par le ranker
    """

    family: ProviderFamily
    provider_id: str
    kind: MediaKind
    title: str
    subtitle: Optional[str] = None
    cover_url: Optional[str] = None
    genres: tuple[str, ...] = ()
    runtime_minutes: Optional[int] = None
    progress_total_hint: Optional[int] = None
    score: float = 0.0

    @property
    def ref(self) -> ProviderRef:
        """Reference fournisseur a stocker sur l'element."""
        return ProviderRef(family=self.family, provider_id=self.provider_id, kind=self.kind)


@dataclass
class CandidateDetails:
    """
    Details enrichis d'un candidat (second aller-retour apres la recherche).

    Attributs :
        genres : Noms de genres
        runtime_minutes : Duree (film, episode) en minutes
        progress_total_hint : Nombre d'episodes/chapitres/volumes
        cover_url : URL complete de la couverture
    """

    genres: tuple[str, ...] = ()
    runtime_minutes: Optional[int] = None
    progress_total_hint: Optional[int] = None
    cover_url: Optional[str] = None


class IMetadataProvider(ABC):
    """
    Interface de base pour un fournisseur de metadonnees.

    Une implementation par famille (films/series, jeux, anime/manga).
    """

    @property
    @abstractmethod
    def family(self) -> ProviderFamily:
        """Famille couverte par ce fournisseur."""
        ...

    @abstractmethod
    async def search(self, kind: MediaKind, query: str) -> list[Candidate]:
        """
        Recherche des candidats par titre.

        Args :
            kind : Type de media recherche
            query : Requete (titre saisi)

        Retourne :
            Liste de candidats, non scores (scoring fait par le ranker)
        """
        ...

    @abstractmethod
    async def details(self, candidate_id: str, kind: MediaKind) -> Optional[CandidateDetails]:
        """
        Recupere les details d'un candidat.

        Retourne :
            Details enrichis, ou None si introuvable
        """
        ...

    @abstractmethod
    async def similar(self, candidate_id: str, kind: MediaKind) -> list[Candidate]:
        """Liste les elements similaires/lies a un element du fournisseur."""
        ...


class ITrendingFeed(ABC):
    """Flux de tendances (films/series uniquement)."""

    @abstractmethod
    async def trending(self, sub_kind: str) -> list[Candidate]:
        """
        Retourne les elements en tendance.

        Args :
            sub_kind : "movie" ou "tv"
        """
        ...
