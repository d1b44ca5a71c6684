"""
Doubles de test : fournisseurs en memoire et fabriques d'objets du domaine.
"""

from datetime import date, datetime, timezone
from typing import Optional

from mediastack.core.entities import LibraryItem
from mediastack.core.ports.api_clients import Candidate, CandidateDetails, IMetadataProvider, ITrendingFeed
from mediastack.core.value_objects import MediaKind, ProviderFamily, provider_family_for

FIXED_TODAY = date(2024, 5, 17)


class FakeProvider(IMetadataProvider):
    """
    Fournisseur en memoire.

    Les reponses sont configurees par attribut ; une exception placee dans
    search_error/details_error est levee a l'appel correspondant.
    """

    def __init__(self, family: ProviderFamily = ProviderFamily.TMDB) -> None:
        self._family = family
        self.search_results: list[Candidate] = []
        self.search_error: Optional[Exception] = None
        self.details_by_id: dict[str, Optional[CandidateDetails]] = {}
        self.details_error: Optional[Exception] = None
        self.failing_details: set[str] = set()
        self.similar_by_id: dict[str, list[Candidate]] = {}
        self.similar_error: Optional[Exception] = None
        self.search_calls: list[tuple[MediaKind, str]] = []
        self.details_calls: list[str] = []

    @property
    def family(self) -> ProviderFamily:
        return self._family

    async def search(self, kind: MediaKind, query: str) -> list[Candidate]:
        self.search_calls.append((kind, query))
        if self.search_error is not None:
            raise self.search_error
        return list(self.search_results)

    async def details(self, candidate_id: str, kind: MediaKind) -> Optional[CandidateDetails]:
        self.details_calls.append(candidate_id)
        if self.details_error is not None or candidate_id in self.failing_details:
            raise self.details_error or RuntimeError("details indisponibles")
        return self.details_by_id.get(candidate_id)

    async def similar(self, candidate_id: str, kind: MediaKind) -> list[Candidate]:
        if self.similar_error is not None:
            raise self.similar_error
        return list(self.similar_by_id.get(candidate_id, []))


class FakeTrendingFeed(ITrendingFeed):
    """Flux de tendances en memoire."""

    def __init__(self, by_sub_kind: Optional[dict[str, list[Candidate]]] = None) -> None:
        self.by_sub_kind = by_sub_kind or {}

    async def trending(self, sub_kind: str) -> list[Candidate]:
        return list(self.by_sub_kind.get(sub_kind, []))


def make_candidate(
    provider_id: str,
    title: str,
    kind: MediaKind = MediaKind.MOVIE,
    genres: tuple[str, ...] = (),
    **kwargs,
) -> Candidate:
    """Construit un candidat pour la famille correspondant au type."""
    family = kwargs.pop("family", None) or provider_family_for(kind) or ProviderFamily.TMDB
    return Candidate(
        family=family,
        provider_id=provider_id,
        kind=kind,
        title=title,
        genres=genres,
        **kwargs,
    )


def make_item(title: str = "Inception", **kwargs) -> LibraryItem:
    """Construit un element persiste (avec id et date de creation)."""
    kwargs.setdefault("id", title.lower().replace(" ", "-"))
    kwargs.setdefault("created_at", datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))
    return LibraryItem(title=title, **kwargs)
