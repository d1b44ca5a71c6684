"""
Cache persistant des reponses fournisseurs avec TTL differencies.

Le cache utilise diskcache pour la persistence sur disque : une recherche
deja faite pendant la saisie n'est pas refaite d'un lancement a l'autre.

TTL par defaut:
- Recherches (SEARCH_TTL): 24 heures - les resultats de recherche changent souvent
- Details (DETAILS_TTL): 7 jours - genres, durees et nombre d'episodes changent rarement
- Tendances (TRENDING_TTL): 6 heures - le flux hebdomadaire bouge dans la journee
"""

import asyncio
from functools import partial
from pathlib import Path
from typing import Any, Optional, Union

from diskcache import Cache

from mediastack.utils.helpers import safe_lower


def cache_key(family: str, operation: str, *parts: Any) -> str:
    """
    Construit une cle de cache normalisee.

    Example:
        cache_key("tmdb", "search", "movie", "Inception") -> "tmdb:search:movie:inception"
    """
    normalized = [safe_lower(str(p)) for p in parts if p is not None]
    return ":".join([family, operation, *normalized])


class APICache:
    """
    Cache asynchrone avec TTL pour les appels aux fournisseurs.

    Utilise diskcache pour la persistence et run_in_executor pour
    les operations asynchrones non-bloquantes.

    Attributes:
        SEARCH_TTL: Duree de vie des resultats de recherche (24h)
        DETAILS_TTL: Duree de vie des details et similaires (7 jours)
        TRENDING_TTL: Duree de vie des tendances (6h)

    Example:
        cache = APICache(cache_dir=".cache/api")
        await cache.set_search("tmdb:search:movie:inception", results)
        data = await cache.get("tmdb:search:movie:inception")
    """

    SEARCH_TTL = 24 * 60 * 60
    DETAILS_TTL = 7 * 24 * 60 * 60
    TRENDING_TTL = 6 * 60 * 60

    def __init__(self, cache_dir: Union[str, Path] = ".cache/api") -> None:
        """
        Initialise le cache avec un repertoire de stockage.

        Args:
            cache_dir: Chemin vers le repertoire du cache (cree si inexistant)
        """
        self._cache = Cache(str(cache_dir))

    async def get(self, key: str) -> Optional[Any]:
        """
        Recupere une valeur du cache.

        Returns:
            La valeur stockee ou None si absente ou expiree
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """
        Stocke une valeur dans le cache avec un TTL.

        Args:
            key: Cle unique identifiant la donnee
            value: Valeur a stocker (picklable)
            ttl: Duree de vie en secondes
        """
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, partial(self._cache.set, key, value, expire=ttl)
        )

    async def set_search(self, key: str, value: Any) -> None:
        """Stocke un resultat de recherche (TTL de 24h)."""
        await self.set(key, value, self.SEARCH_TTL)

    async def set_details(self, key: str, value: Any) -> None:
        """Stocke les details ou les similaires d'un element (TTL de 7 jours)."""
        await self.set(key, value, self.DETAILS_TTL)

    async def set_trending(self, key: str, value: Any) -> None:
        """Stocke un flux de tendances (TTL de 6h)."""
        await self.set(key, value, self.TRENDING_TTL)

    async def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._cache.clear)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
