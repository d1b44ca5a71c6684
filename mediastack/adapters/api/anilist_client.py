"""
Client AniList pour les anime et manga.

AniList expose une API GraphQL publique (pas d'authentification pour la
lecture). Une reponse HTTP 200 peut porter un tableau "errors" : il est
converti en ProviderResponseError.
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
    ProviderResponseError,
)
from mediastack.core.value_objects import MediaKind, ProviderFamily

MEDIA_FIELDS = """
    id
    type
    title { romaji english native }
    coverImage { extraLarge large medium }
    genres
    startDate { year }
"""

SEARCH_QUERY = f"""
query ($search: String, $perPage: Int, $type: MediaType) {{
  Page(perPage: $perPage) {{
    media(search: $search, type: $type, sort: POPULARITY_DESC) {{
      {MEDIA_FIELDS}
    }}
  }}
}}
"""

DETAILS_QUERY = f"""
query ($id: Int) {{
  Media(id: $id) {{
    {MEDIA_FIELDS}
    episodes
    chapters
    volumes
    duration
  }}
}}
"""

RECOMMENDATIONS_QUERY = f"""
query ($id: Int, $perPage: Int) {{
  Media(id: $id) {{
    recommendations(perPage: $perPage, sort: RATING_DESC) {{
      nodes {{
        mediaRecommendation {{
          {MEDIA_FIELDS}
        }}
      }}
    }}
  }}
}}
"""


def pick_title(title: Optional[dict[str, Any]]) -> str:
    """Titre prefere : anglais, puis romaji, puis natif, sinon "Untitled"."""
    title = title or {}
    for variant in ("english", "romaji", "native"):
        value = (title.get(variant) or "").strip()
        if value:
            return value
    return "Untitled"


def pick_cover(cover: Optional[dict[str, Any]]) -> Optional[str]:
    """Couverture preferee : extraLarge, puis large, puis medium."""
    cover = cover or {}
    return cover.get("extraLarge") or cover.get("large") or cover.get("medium") or None


def _anilist_type(kind: MediaKind) -> str:
    if kind is MediaKind.MANGA:
        return "MANGA"
    if kind is MediaKind.ANIME:
        return "ANIME"
    raise ValueError(f"Type non couvert par AniList: {kind.value}")


class AniListClient(IMetadataProvider):
    """
    Client GraphQL AniList.

    - search : Page.media(search, type, sort: POPULARITY_DESC)
    - details : episodes (anime), chapitres sinon volumes (manga), duree par episode
    - similar : recommandations de la communaute

    Example:
        client = AniListClient(cache=APICache())
        candidates = await client.search(MediaKind.ANIME, "Frieren")
        await client.close()
    """

    API_URL = "https://graphql.anilist.co"

    def __init__(self, cache: APICache, result_limit: int = 10) -> None:
        """
        Initialise le client AniList.

        Args:
            cache: Instance APICache pour le caching des resultats
            result_limit: Nombre maximum de candidats par appel (borne a 1-50)
        """
        self._cache = cache
        self._result_limit = max(1, min(50, result_limit))
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def family(self) -> ProviderFamily:
        return ProviderFamily.ANILIST

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={"Content-Type": "application/json", "Accept": "application/json"},
                timeout=30.0,
            )
        return self._client

    async def _graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Execute une requete GraphQL et retourne le bloc data."""
        response = await request_with_retry(
            self._get_client(),
            "POST",
            self.API_URL,
            json={"query": query, "variables": variables},
        )
        payload = response.json()
        errors = payload.get("errors") or []
        if errors:
            message = " | ".join(e.get("message", "") for e in errors) or "AniList error"
            raise ProviderResponseError(message)
        return payload.get("data") or {}

    def _to_candidate(self, media: Optional[dict[str, Any]], kind: MediaKind) -> Optional[Candidate]:
        if not media or "id" not in media:
            return None
        media_kind = MediaKind.MANGA if media.get("type") == "MANGA" else MediaKind.ANIME
        year = (media.get("startDate") or {}).get("year")
        return Candidate(
            family=self.family,
            provider_id=str(media["id"]),
            kind=media_kind if media.get("type") else kind,
            title=pick_title(media.get("title")),
            subtitle=str(year) if year else None,
            cover_url=pick_cover(media.get("coverImage")),
            genres=tuple(g for g in media.get("genres") or [] if g),
        )

    async def search(self, kind: MediaKind, query: str) -> list[Candidate]:
        """Recherche des anime ou manga par titre, par popularite decroissante."""
        key = cache_key("anilist", "search", kind.value, query)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        logger.debug(f"AniList search ({kind.value}): {query!r}")
        data = await self._graphql(
            SEARCH_QUERY,
            {"search": query, "perPage": self._result_limit, "type": _anilist_type(kind)},
        )
        media = (data.get("Page") or {}).get("media") or []
        results = [c for c in (self._to_candidate(m, kind) for m in media) if c is not None]

        await self._cache.set_search(key, results)
        return results

    async def details(self, candidate_id: str, kind: MediaKind) -> Optional[CandidateDetails]:
        """
        Details d'un anime ou manga.

        Le total de progression est le nombre d'episodes pour un anime, le
        nombre de chapitres (sinon de volumes) pour un manga.
        """
        key = cache_key("anilist", "details", candidate_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        data = await self._graphql(DETAILS_QUERY, {"id": int(candidate_id)})
        media = data.get("Media")
        if not media:
            return None

        if kind is MediaKind.MANGA:
            total_hint = media.get("chapters") or media.get("volumes") or None
        else:
            total_hint = media.get("episodes") or None

        details = CandidateDetails(
            genres=tuple(g for g in media.get("genres") or [] if g),
            runtime_minutes=media.get("duration") or None,
            progress_total_hint=total_hint,
            cover_url=pick_cover(media.get("coverImage")),
        )

        await self._cache.set_details(key, details)
        return details

    async def similar(self, candidate_id: str, kind: MediaKind) -> list[Candidate]:
        """Recommandations AniList pour un anime ou manga."""
        key = cache_key("anilist", "recommendations", candidate_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        data = await self._graphql(
            RECOMMENDATIONS_QUERY, {"id": int(candidate_id), "perPage": self._result_limit}
        )
        nodes = ((data.get("Media") or {}).get("recommendations") or {}).get("nodes") or []
        results = [
            c
            for c in (self._to_candidate(n.get("mediaRecommendation"), kind) for n in nodes)
            if c is not None
        ]

        await self._cache.set_details(key, results)
        return results

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
