"""
Tests unitaires pour le mecanisme de retry avec backoff exponentiel.

Ces tests verifient:
- RateLimitError capture le header Retry-After
- with_retry relance sur RateLimitError et ProviderUnavailableError
- request_with_retry detecte les 429/503 et relance automatiquement
- Les echecs permanents remontent apres epuisement des tentatives
"""

import httpx
import pytest
import respx

from mediastack.adapters.api.retry import (
    ProviderUnavailableError,
    RateLimitError,
    _parse_retry_after,
    request_with_retry,
    with_retry,
)

URL = "https://api.example.com/data"


class TestRateLimitError:
    """Tests pour l'exception RateLimitError."""

    def test_rate_limit_error_stores_retry_after(self) -> None:
        error = RateLimitError(retry_after=60)
        assert error.retry_after == 60
        assert "60" in str(error)

    def test_rate_limit_error_without_retry_after(self) -> None:
        assert RateLimitError(retry_after=None).retry_after is None

    def test_parse_retry_after(self) -> None:
        assert _parse_retry_after("30") == 30
        assert _parse_retry_after(None) is None
        assert _parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") is None


class TestWithRetryDecorator:
    """Tests pour le decorateur with_retry."""

    @pytest.mark.asyncio
    async def test_retries_on_rate_limit_error(self) -> None:
        call_count = 0

        @with_retry(max_attempts=3, max_wait=1)
        async def flaky_function() -> str:
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise RateLimitError(retry_after=1)
            return "success"

        assert await flaky_function() == "success"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_retries_on_unavailable(self) -> None:
        call_count = 0

        @with_retry(max_attempts=2, max_wait=1)
        async def flaky_function() -> str:
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                raise ProviderUnavailableError(503)
            return "success"

        assert await flaky_function() == "success"
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_stops_after_max_attempts(self) -> None:
        call_count = 0

        @with_retry(max_attempts=3, max_wait=1)
        async def always_fails() -> str:
            nonlocal call_count
            call_count += 1
            raise RateLimitError(retry_after=1)

        with pytest.raises(RateLimitError):
            await always_fails()
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_does_not_retry_other_exceptions(self) -> None:
        call_count = 0

        @with_retry(max_attempts=3, max_wait=1)
        async def raises_value_error() -> str:
            nonlocal call_count
            call_count += 1
            raise ValueError("not a rate limit error")

        with pytest.raises(ValueError):
            await raises_value_error()
        assert call_count == 1


class TestRequestWithRetry:
    """Tests pour request_with_retry avec httpx."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_raises_on_429(self, respx_mock: respx.Router) -> None:
        route = respx_mock.get(URL).mock(
            return_value=httpx.Response(429, headers={"Retry-After": "30"})
        )

        async with httpx.AsyncClient() as client:
            with pytest.raises(RateLimitError) as exc_info:
                await request_with_retry(client, "GET", URL, max_attempts=2)

        assert exc_info.value.retry_after == 30
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_then_succeeds(self, respx_mock: respx.Router) -> None:
        route = respx_mock.get(URL).mock(
            side_effect=[
                httpx.Response(503),
                httpx.Response(200, json={"status": "ok"}),
            ]
        )

        async with httpx.AsyncClient() as client:
            response = await request_with_retry(client, "GET", URL, max_attempts=3)

        assert response.json() == {"status": "ok"}
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_passes_on_success(self, respx_mock: respx.Router) -> None:
        route = respx_mock.post(URL).mock(return_value=httpx.Response(200, json={"data": "value"}))

        async with httpx.AsyncClient() as client:
            response = await request_with_retry(client, "POST", URL, content="fields *;")

        assert response.json() == {"data": "value"}
        assert route.call_count == 1
        assert route.calls[0].request.content == b"fields *;"

    @pytest.mark.asyncio
    @respx.mock
    async def test_raises_on_other_errors(self, respx_mock: respx.Router) -> None:
        route = respx_mock.get(URL).mock(return_value=httpx.Response(500, text="Internal Server Error"))

        async with httpx.AsyncClient() as client:
            with pytest.raises(httpx.HTTPStatusError):
                await request_with_retry(client, "GET", URL, max_attempts=3)

        assert route.call_count == 1
