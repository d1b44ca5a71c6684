"""
Client IGDB pour les jeux video.

IGDB s'authentifie via Twitch (client credentials) et s'interroge en POST
avec une requete Apicalypse en texte brut. Le token est obtenu a la
premiere requete et rafraichi 60 secondes avant son expiration.

Reference API: https://api-docs.igdb.com/
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
from loguru import logger

from mediastack.adapters.api.cache import APICache, cache_key
from mediastack.adapters.api.retry import request_with_retry
from mediastack.core.ports.api_clients import (
    Candidate,
    CandidateDetails,
    IMetadataProvider,
    ProviderConfigError,
)
from mediastack.core.value_objects import MediaKind, ProviderFamily

GAME_FIELDS = "id,name,cover.url,genres.name,first_release_date"


def normalize_cover_url(url: Optional[str]) -> Optional[str]:
    """
    Normalise une URL de couverture IGDB.

    IGDB retourne des URLs sans protocole en taille vignette
    (//images.igdb.com/igdb/image/upload/t_thumb/xxx.jpg) : on ajoute
    https et on demande la taille t_cover_big.
    """
    if not url:
        return None
    if url.startswith("//"):
        url = f"https:{url}"
    return url.replace("/t_thumb/", "/t_cover_big/")


def escape_search(query: str) -> str:
    """Echappe les guillemets pour une clause Apicalypse search."""
    return query.replace("\\", "\\\\").replace('"', '\\"')


class IGDBClient(IMetadataProvider):
    """
    Client IGDB pour la recherche de jeux.

    Attributes:
        BASE_URL: URL de base de l'API IGDB v4
        TOKEN_URL: Endpoint OAuth Twitch
        TOKEN_REFRESH_MARGIN: Marge avant expiration du token

    Example:
        client = IGDBClient(client_id="xxx", client_secret="yyy", cache=APICache())
        candidates = await client.search(MediaKind.GAME, "Hades")
        await client.close()
    """

    BASE_URL = "https://api.igdb.com/v4"
    TOKEN_URL = "https://id.twitch.tv/oauth2/token"
    TOKEN_REFRESH_MARGIN = timedelta(seconds=60)

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        cache: APICache,
        result_limit: int = 10,
    ) -> None:
        """
        Initialise le client IGDB.

        Args:
            client_id: Client ID de l'application Twitch
            client_secret: Secret de l'application Twitch
            cache: Instance APICache pour le caching des resultats
            result_limit: Nombre maximum de candidats par recherche
        """
        self._client_id = client_id
        self._client_secret = client_secret
        self._cache = cache
        self._result_limit = result_limit
        self._token: Optional[str] = None
        self._token_expiry: Optional[datetime] = None
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def family(self) -> ProviderFamily:
        return ProviderFamily.IGDB

    def _get_client(self) -> httpx.AsyncClient:
        if not self._client_id or not self._client_secret:
            raise ProviderConfigError(
                "Identifiants IGDB manquants (MEDIASTACK_IGDB_CLIENT_ID / MEDIASTACK_IGDB_CLIENT_SECRET)"
            )
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                timeout=httpx.Timeout(30.0, connect=10.0),
            )
        return self._client

    async def _ensure_token(self) -> str:
        """
        S'assure qu'un token Twitch valide est disponible.

        Le token est reutilise tant qu'il reste plus de 60 secondes avant
        son expiration.
        """
        if (
            self._token
            and self._token_expiry
            and datetime.now() < self._token_expiry - self.TOKEN_REFRESH_MARGIN
        ):
            return self._token

        client = self._get_client()
        logger.debug("IGDB: demande d'un token Twitch")
        response = await request_with_retry(
            client,
            "POST",
            self.TOKEN_URL,
            params={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "grant_type": "client_credentials",
            },
        )
        data = response.json()
        self._token = data["access_token"]
        self._token_expiry = datetime.now() + timedelta(seconds=int(data.get("expires_in", 0)))
        return self._token

    async def _query(self, body: str) -> list[dict[str, Any]]:
        """Execute une requete Apicalypse sur /games."""
        token = await self._ensure_token()
        response = await request_with_retry(
            self._get_client(),
            "POST",
            "/games",
            content=body,
            headers={
                "Client-ID": self._client_id,
                "Authorization": f"Bearer {token}",
                "Content-Type": "text/plain",
            },
        )
        return response.json() or []

    def _to_candidate(self, game: dict[str, Any]) -> Optional[Candidate]:
        if not game.get("name") or "id" not in game:
            return None
        released = game.get("first_release_date")
        year = str(datetime.fromtimestamp(released, tz=timezone.utc).year) if released else None
        return Candidate(
            family=self.family,
            provider_id=str(game["id"]),
            kind=MediaKind.GAME,
            title=game["name"],
            subtitle=year,
            cover_url=normalize_cover_url((game.get("cover") or {}).get("url")),
            genres=tuple(g["name"] for g in game.get("genres", []) if g.get("name")),
        )

    async def search(self, kind: MediaKind, query: str) -> list[Candidate]:
        """Recherche des jeux par titre (editions/versions derivees exclues)."""
        key = cache_key("igdb", "search", query)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        logger.debug(f"IGDB search: {query!r}")
        games = await self._query(
            f'search "{escape_search(query)}"; '
            f"fields {GAME_FIELDS}; "
            f"limit {self._result_limit}; "
            "where version_parent = null;"
        )
        results = [c for c in (self._to_candidate(g) for g in games) if c is not None]

        await self._cache.set_search(key, results)
        return results

    async def details(self, candidate_id: str, kind: MediaKind) -> Optional[CandidateDetails]:
        """Details d'un jeu (genres, couverture). None si l'ID est inconnu."""
        key = cache_key("igdb", "details", candidate_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        games = await self._query(f"fields {GAME_FIELDS}; where id = {int(candidate_id)};")
        if not games:
            return None

        game = games[0]
        details = CandidateDetails(
            genres=tuple(g["name"] for g in game.get("genres", []) if g.get("name")),
            cover_url=normalize_cover_url((game.get("cover") or {}).get("url")),
        )

        await self._cache.set_details(key, details)
        return details

    async def similar(self, candidate_id: str, kind: MediaKind) -> list[Candidate]:
        """Jeux similaires (champ similar_games)."""
        key = cache_key("igdb", "similar", candidate_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        fields = ",".join(f"similar_games.{f}" for f in GAME_FIELDS.split(","))
        games = await self._query(f"fields {fields}; where id = {int(candidate_id)};")
        similar = games[0].get("similar_games", []) if games else []
        results = [c for c in (self._to_candidate(g) for g in similar) if c is not None]

        await self._cache.set_details(key, results)
        return results

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
