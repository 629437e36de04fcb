import asyncio

import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock

from address_search.recall.nominatim_client import NominatimClient, UpstreamError


def _mock_session(status=200, payload=None, text="", json_error=None):
    resp = MagicMock()
    resp.status = status
    resp.text = AsyncMock(return_value=text)
    if json_error is not None:
        resp.json = AsyncMock(side_effect=json_error)
    else:
        resp.json = AsyncMock(return_value=payload)

    session = MagicMock()
    session.get.return_value.__aenter__.return_value = resp
    session.get.return_value.__aexit__.return_value = False
    return session


def _client(session):
    return NominatimClient(
        base_url="https://nominatim.test/",
        user_agent="address-search-tests/1.0 (qa@example.com)",
        timeout=10,
        session=session,
    )


@pytest.mark.asyncio
async def test_search_builds_request():
    session = _mock_session(payload=[{"display_name": "Berlin"}])
    client = _client(session)

    data = await client.search("Uhlandstraße 5, Berlin", limit=50)

    assert data == [{"display_name": "Berlin"}]
    args, kwargs = session.get.call_args
    assert args[0] == "https://nominatim.test/search"
    assert kwargs["params"] == {
        "q": "Uhlandstraße 5, Berlin",
        "format": "json",
        "addressdetails": "1",
        "limit": "50",
        "countrycodes": "de",
        "accept-language": "de",
    }
    assert kwargs["headers"]["User-Agent"] == "address-search-tests/1.0 (qa@example.com)"
    assert kwargs["timeout"].total == 10


@pytest.mark.asyncio
async def test_search_country_override():
    session = _mock_session(payload=[])
    await _client(session).search("Bahnhofstrasse", limit=30, country_codes="ch")
    assert session.get.call_args.kwargs["params"]["countrycodes"] == "ch"


@pytest.mark.asyncio
async def test_search_non_2xx_raises_upstream_error():
    session = _mock_session(status=503, text="Service Unavailable")
    with pytest.raises(UpstreamError) as exc_info:
        await _client(session).search("Uhlandstraße", limit=30)
    assert exc_info.value.status == 503


@pytest.mark.asyncio
async def test_search_invalid_json_raises_upstream_error():
    session = _mock_session(json_error=ValueError("Expecting value"))
    with pytest.raises(UpstreamError):
        await _client(session).search("Uhlandstraße", limit=30)


@pytest.mark.asyncio
async def test_search_non_list_body_raises_upstream_error():
    session = _mock_session(payload={"error": "Bad request"})
    with pytest.raises(UpstreamError):
        await _client(session).search("Uhlandstraße", limit=30)


@pytest.mark.asyncio
async def test_search_connection_error_raises_upstream_error():
    session = MagicMock()
    session.get.side_effect = aiohttp.ClientConnectionError("connection refused")
    with pytest.raises(UpstreamError):
        await _client(session).search("Uhlandstraße", limit=30)


@pytest.mark.asyncio
async def test_search_timeout_is_not_an_upstream_error():
    session = MagicMock()
    session.get.side_effect = asyncio.TimeoutError()
    with pytest.raises(asyncio.TimeoutError):
        await _client(session).search("Uhlandstraße", limit=30)


@pytest.mark.asyncio
async def test_reverse_builds_request():
    session = _mock_session(payload={"display_name": "Berlin", "lat": "52.5", "lon": "13.4"})
    data = await _client(session).reverse(52.5, 13.4)

    assert data["display_name"] == "Berlin"
    args, kwargs = session.get.call_args
    assert args[0] == "https://nominatim.test/reverse"
    assert kwargs["params"]["lat"] == "52.5"
    assert kwargs["params"]["lon"] == "13.4"
    assert kwargs["params"]["addressdetails"] == "1"


@pytest.mark.asyncio
async def test_reverse_non_object_body_raises_upstream_error():
    session = _mock_session(payload=[])
    with pytest.raises(UpstreamError):
        await _client(session).reverse(52.5, 13.4)


@pytest.mark.asyncio
async def test_search_undecodable_error_body_raises_upstream_error():
    session = _mock_session(status=502)
    resp = session.get.return_value.__aenter__.return_value
    resp.text = AsyncMock(
        side_effect=UnicodeDecodeError("utf-8", b"\xff\xfe", 0, 1, "invalid start byte")
    )

    with pytest.raises(UpstreamError) as exc_info:
        await _client(session).search("Uhlandstrase 5, Berlin", limit=50)
    assert exc_info.value.status == 502


@pytest.mark.asyncio
async def test_search_error_body_decoded_leniently():
    session = _mock_session(status=502, text="�� bad gateway")
    with pytest.raises(UpstreamError):
        await _client(session).search("Uhlandstraße", limit=30)
    resp = session.get.return_value.__aenter__.return_value
    resp.text.assert_awaited_once_with(errors="replace")
