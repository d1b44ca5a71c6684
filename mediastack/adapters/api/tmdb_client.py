"""
Client TMDB pour les films et series TV.

Implemente IMetadataProvider (recherche, details, recommandations) et
ITrendingFeed (tendances de la semaine). Utilise le cache persistant et
le mecanisme de retry pour gerer le rate limiting.

Usage:
    cache = APICache()
    client = TMDBClient(api_key="your_key", cache=cache)
    candidates = await client.search(MediaKind.MOVIE, "Inception")
    details = await client.details(candidates[0].provider_id, MediaKind.MOVIE)
    await client.close()
"""

from typing import Any, Optional

import httpx
from loguru import logger

from mediastack.adapters.api.cache import APICache, cache_key
from mediastack.adapters.api.retry import request_with_retry
from mediastack.core.ports.api_clients import (
    Candidate,
    CandidateDetails,
    IMetadataProvider,
    ITrendingFeed,
    ProviderConfigError,
)
from mediastack.core.value_objects import MediaKind, ProviderFamily
from mediastack.utils.constants import TMDB_GENRE_MAPPING


def _tmdb_type(kind: MediaKind) -> str:
    """Segment d'URL TMDB pour un type de media ("movie" ou "tv")."""
    if kind is MediaKind.MOVIE:
        return "movie"
    if kind is MediaKind.TV:
        return "tv"
    raise ValueError(f"Type non couvert par TMDB: {kind.value}")


class TMDBClient(IMetadataProvider, ITrendingFeed):
    """
    Client API TMDB pour les films et series.

    - Recherche par titre (/search/movie, /search/tv)
    - Details : genres, duree, nombre d'episodes, affiche
    - Recommandations d'un element (/{type}/{id}/recommendations)
    - Tendances de la semaine (/trending/{type}/week)
    - Cache persistant (24h recherches, 7j details)
    - Retry automatique sur rate limiting (429)

    Attributes:
        TMDB_BASE_URL: URL de base de l'API TMDB v3
        TMDB_IMAGE_BASE_URL: URL de base pour les affiches
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"

    def __init__(self, api_key: Optional[str], cache: APICache, result_limit: int = 10) -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API v3 ou Read Access Token v4
            cache: Instance APICache pour le caching des resultats
            result_limit: Nombre maximum de candidats retournes par appel
        """
        self._api_key = api_key
        self._cache = cache
        self._result_limit = result_limit
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def family(self) -> ProviderFamily:
        return ProviderFamily.TMDB

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, le cree si necessaire (lazy init).

        Supporte les deux modes d'authentification TMDB:
        - API Key v3 (32 caracteres hex) : passe en parametre api_key
        - Read Access Token v4 (long JWT) : passe en header Bearer
        """
        if not self._api_key:
            raise ProviderConfigError("Cle TMDB manquante (MEDIASTACK_TMDB_API_KEY)")

        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            params = {}
            if len(self._api_key) > 40:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=self.TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=30.0,
            )
        return self._client

    def _poster_url(self, poster_path: Optional[str]) -> Optional[str]:
        return f"{self.TMDB_IMAGE_BASE_URL}{poster_path}" if poster_path else None

    def _to_candidate(self, item: dict[str, Any], kind: MediaKind) -> Optional[Candidate]:
        """Convertit un resultat TMDB (recherche, recommandation, tendance) en Candidate."""
        title = item.get("title") or item.get("name") or item.get("original_title") or item.get("original_name")
        if not title or "id" not in item:
            return None

        date_str = item.get("release_date") or item.get("first_air_date") or ""
        year = date_str[:4] if len(date_str) >= 4 else None

        return Candidate(
            family=self.family,
            provider_id=str(item["id"]),
            kind=kind,
            title=title,
            subtitle=year,
            cover_url=self._poster_url(item.get("poster_path")),
            genres=tuple(
                TMDB_GENRE_MAPPING[gid] for gid in item.get("genre_ids", []) if gid in TMDB_GENRE_MAPPING
            ),
        )

    def _to_candidates(
        self, results: list[dict[str, Any]], kind: MediaKind, limit: Optional[int] = None
    ) -> list[Candidate]:
        candidates = [c for c in (self._to_candidate(item, kind) for item in results) if c is not None]
        return candidates[:limit] if limit else candidates

    async def search(self, kind: MediaKind, query: str) -> list[Candidate]:
        """
        Recherche des films ou series par titre.

        Pattern cache-first : le cache est verifie AVANT l'appel API.

        Returns:
            Liste de Candidate (vide si aucun resultat)
        """
        tmdb_type = _tmdb_type(kind)
        key = cache_key("tmdb", "search", tmdb_type, query)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        client = self._get_client()
        logger.debug(f"TMDB /search/{tmdb_type}: {query!r}")
        response = await request_with_retry(
            client,
            "GET",
            f"/search/{tmdb_type}",
            params={"query": query, "include_adult": "false"},
        )
        results = self._to_candidates(response.json().get("results", []), kind, self._result_limit)

        await self._cache.set_search(key, results)
        return results

    async def details(self, candidate_id: str, kind: MediaKind) -> Optional[CandidateDetails]:
        """
        Recupere les details d'un film ou d'une serie.

        Pour une serie, la duree est celle du premier episode_run_time et le
        total de progression est number_of_episodes.

        Returns:
            CandidateDetails, ou None si non trouve (404)
        """
        tmdb_type = _tmdb_type(kind)
        key = cache_key("tmdb", "details", tmdb_type, candidate_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        client = self._get_client()
        try:
            response = await request_with_retry(client, "GET", f"/{tmdb_type}/{candidate_id}")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

        data = response.json()
        if kind is MediaKind.MOVIE:
            runtime = data.get("runtime") or None
            total_hint = None
        else:
            run_times = data.get("episode_run_time") or []
            runtime = run_times[0] if run_times else None
            total_hint = data.get("number_of_episodes") or None

        details = CandidateDetails(
            genres=tuple(g["name"] for g in data.get("genres", []) if g.get("name")),
            runtime_minutes=runtime,
            progress_total_hint=total_hint,
            cover_url=self._poster_url(data.get("poster_path")),
        )

        await self._cache.set_details(key, details)
        return details

    async def similar(self, candidate_id: str, kind: MediaKind) -> list[Candidate]:
        """Recommandations TMDB pour un film ou une serie."""
        tmdb_type = _tmdb_type(kind)
        key = cache_key("tmdb", "recommendations", tmdb_type, candidate_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        client = self._get_client()
        response = await request_with_retry(client, "GET", f"/{tmdb_type}/{candidate_id}/recommendations")
        results = self._to_candidates(response.json().get("results", []), kind)

        await self._cache.set_details(key, results)
        return results

    async def trending(self, sub_kind: str) -> list[Candidate]:
        """
        Tendances de la semaine.

        Args:
            sub_kind: "movie" ou "tv"
        """
        kind = MediaKind(sub_kind)
        tmdb_type = _tmdb_type(kind)
        key = cache_key("tmdb", "trending", tmdb_type)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        client = self._get_client()
        response = await request_with_retry(client, "GET", f"/trending/{tmdb_type}/week")
        results = self._to_candidates(response.json().get("results", []), kind)

        await self._cache.set_trending(key, results)
        return results

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
