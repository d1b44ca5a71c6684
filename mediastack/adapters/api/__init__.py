"""
Clients des fournisseurs de metadonnees.

- TMDBClient : films et series (+ tendances)
- IGDBClient : jeux video (token Twitch)
- AniListClient : anime et manga (GraphQL)
- APICache : cache disque partage (diskcache)
- request_with_retry : retry tenacity sur 429 et 5xx passagers
"""

from mediastack.adapters.api.anilist_client import AniListClient
from mediastack.adapters.api.cache import APICache
from mediastack.adapters.api.igdb_client import IGDBClient
from mediastack.adapters.api.retry import RateLimitError, request_with_retry
from mediastack.adapters.api.tmdb_client import TMDBClient

__all__ = [
    "AniListClient",
    "APICache",
    "IGDBClient",
    "RateLimitError",
    "TMDBClient",
    "request_with_retry",
]
