from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from nuscout.exceptions import NetworkError
from nuscout.utils.http import HTTPClient

URL = "https://api.nuget.org/v3/index.json"


def _response(status_code: int, **kwargs: Any) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("GET", URL), **kwargs)


@pytest.fixture
def no_sleep() -> Any:
    """Skip retry backoff delays."""
    with patch("nuscout.utils.http.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


@pytest.mark.unit
class TestHTTPClientInit:
    """Tests for HTTPClient initialization and configuration."""

    def test_default_values(self) -> None:
        client = HTTPClient()

        assert client.timeout == 30
        assert client.max_retries == 3
        assert client.verify_ssl is True
        assert client.max_concurrency == 10
        assert client.user_agent.startswith("nuscout/")

    def test_custom_user_agent(self) -> None:
        assert HTTPClient(user_agent="probe/1.0").user_agent == "probe/1.0"


@pytest.mark.unit
class TestHTTPClientLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_creates_and_closes_client(self) -> None:
        client = HTTPClient()

        async with client:
            assert isinstance(client._client, httpx.AsyncClient)

        assert client._client is None

    @pytest.mark.asyncio
    async def test_close_when_no_client(self) -> None:
        client = HTTPClient()

        await client.close()

        assert client._client is None


@pytest.mark.unit
class TestHTTPClientRequestWithRetry:
    """Tests for HTTPClient retry behavior."""

    @pytest.mark.asyncio
    async def test_successful_request(self) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(200, json={})

            async with HTTPClient(max_retries=1) as client:
                response = await client.get(f'  "{URL}" ')

        assert response.status_code == 200
        mock_request.assert_awaited_once()
        assert mock_request.call_args[0][1] == URL

    @pytest.mark.asyncio
    async def test_4xx_fails_without_retry(self, no_sleep: AsyncMock) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(404, text="Not Found")

            async with HTTPClient(max_retries=3) as client:
                with pytest.raises(NetworkError) as exc_info:
                    await client.get(URL)

        assert exc_info.value.status_code == 404
        assert exc_info.value.response_body == "Not Found"
        assert mock_request.call_count == 1

    @pytest.mark.asyncio
    async def test_5xx_is_retried(self, no_sleep: AsyncMock) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = [_response(503), _response(200, json={})]

            async with HTTPClient(max_retries=1) as client:
                response = await client.get(URL)

        assert response.status_code == 200
        assert mock_request.call_count == 2
        no_sleep.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timeout_is_retried(self, no_sleep: AsyncMock) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = [
                httpx.TimeoutException("Timeout"),
                _response(200, json={}),
            ]

            async with HTTPClient(max_retries=1) as client:
                response = await client.get(URL)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_network_error(self, no_sleep: AsyncMock) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = httpx.ConnectError("refused")

            async with HTTPClient(max_retries=2) as client:
                with pytest.raises(NetworkError, match="after 3 attempts") as exc_info:
                    await client.get(URL)

        assert mock_request.call_count == 3
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_429_honors_retry_after(self, no_sleep: AsyncMock) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = [
                _response(429, headers={"Retry-After": "2"}),
                _response(200, json={}),
            ]

            async with HTTPClient(max_retries=1) as client:
                response = await client.get(URL)

        assert response.status_code == 200
        no_sleep.assert_awaited_once_with(2)


@pytest.mark.unit
class TestHTTPClientGetJson:
    @pytest.mark.asyncio
    async def test_returns_object(self) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(200, json={"version": "3.0.0"})

            async with HTTPClient() as client:
                data = await client.get_json(URL, params={"q": "serilog"})

        assert data == {"version": "3.0.0"}
        assert mock_request.call_args[1] == {"params": {"q": "serilog"}}

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(200, text="<html>")

            async with HTTPClient() as client:
                with pytest.raises(NetworkError, match="Invalid JSON"):
                    await client.get_json(URL)

    @pytest.mark.asyncio
    async def test_non_object_json_raises(self) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(200, json=["a", "b"])

            async with HTTPClient() as client:
                with pytest.raises(NetworkError, match="Expected JSON object"):
                    await client.get_json(URL)


@pytest.mark.unit
class TestRetryAfter:
    @pytest.mark.asyncio
    async def test_retry_after_is_capped(self, no_sleep: AsyncMock) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = [
                _response(503, headers={"Retry-After": "3600"}),
                _response(200, json={}),
            ]

            async with HTTPClient(max_retries=1) as client:
                await client.get(URL)

        no_sleep.assert_awaited_once_with(30.0)

    @pytest.mark.asyncio
    async def test_exhausted_5xx_keeps_status(self, no_sleep: AsyncMock) -> None:
        with patch.object(httpx.AsyncClient, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(502)

            async with HTTPClient(max_retries=1) as client:
                with pytest.raises(NetworkError) as exc_info:
                    await client.get(URL)

        assert exc_info.value.status_code == 502
        assert mock_request.call_count == 2
