"""
Retry avec backoff exponentiel pour les appels aux fournisseurs.

Les reponses 429 (rate limiting) et les indisponibilites passageres
(502, 503, 504) sont relancees avec un delai croissant et du jitter
aleatoire. Les autres erreurs HTTP sont propagees immediatement.

Usage:
    response = await request_with_retry(client, "GET", "/search/movie", params=...)
"""

from typing import Optional

import httpx
from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

TRANSIENT_STATUS_CODES = frozenset({502, 503, 504})


class RateLimitError(Exception):
    """
    Exception levee quand le fournisseur retourne 429 Too Many Requests.

    Attributes:
        retry_after: Secondes a attendre (header Retry-After), ou None
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s")


class ProviderUnavailableError(Exception):
    """Exception levee sur une indisponibilite passagere (502, 503, 504)."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Provider unavailable ({status_code})")


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _log_retry(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome else None
    logger.debug(f"Nouvelle tentative #{state.attempt_number} apres: {error}")


def with_retry(max_attempts: int = 5, max_wait: int = 60):
    """
    Decorateur pour relancer sur RateLimitError ou ProviderUnavailableError.

    Utilise wait_random_exponential pour ajouter du jitter.

    Args:
        max_attempts: Nombre maximum de tentatives (defaut: 5)
        max_wait: Delai maximum entre les tentatives en secondes (defaut: 60)
    """
    return retry(
        retry=retry_if_exception_type((RateLimitError, ProviderUnavailableError)),
        wait=wait_random_exponential(multiplier=1, min=1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
    )


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 5,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec retry automatique.

    Args:
        client: Client httpx async a utiliser
        method: Methode HTTP (GET, POST)
        url: URL (relative a base_url du client, ou absolue)
        max_attempts: Nombre maximum de tentatives (defaut: 5)
        **kwargs: Arguments passes a client.request() (params, json, content...)

    Returns:
        httpx.Response en cas de succes

    Raises:
        RateLimitError: Si 429 apres epuisement des tentatives
        ProviderUnavailableError: Si 502/503/504 apres epuisement des tentatives
        httpx.HTTPStatusError: Pour les autres erreurs HTTP
    """

    @with_retry(max_attempts=max_attempts)
    async def _do_request() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code == 429:
            raise RateLimitError(_parse_retry_after(response.headers.get("Retry-After")))
        if response.status_code in TRANSIENT_STATUS_CODES:
            raise ProviderUnavailableError(response.status_code)
        response.raise_for_status()
        return response

    return await _do_request()
