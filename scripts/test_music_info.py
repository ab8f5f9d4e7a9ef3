import asyncio

import httpx
import pytest

from song_library.core.errors import SongInfoDecodeError, SongInfoUnavailable
from song_library.core.http_client import HttpClientManager
from song_library.services.music_info import MusicInfoClient


def make_client(handler) -> MusicInfoClient:
    return MusicInfoClient("http://info.test/", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def test_fetch_info_decodes_detail():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"releaseDate": "16.07.2006", "lyrics": "a\n\nb", "link": "https://x.test"})

    detail = asyncio.run(make_client(handler).fetch_info("Muse", "Supermassive Black Hole"))

    assert detail.release_date == "16.07.2006"
    assert detail.lyrics == "a\n\nb"
    assert detail.link == "https://x.test"
    assert seen[0].url.path == "/info"
    assert seen[0].url.params["song"] == "Supermassive Black Hole"


def test_query_values_are_percent_encoded():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={})

    asyncio.run(make_client(handler).fetch_info("Simon & Garfunkel", "Mrs. Robinson?"))

    raw_query = seen[0].url.query.decode()
    assert " " not in raw_query
    assert "Simon+%26+Garfunkel" in raw_query or "Simon%20%26%20Garfunkel" in raw_query
    assert seen[0].url.params["group"] == "Simon & Garfunkel"


def test_missing_fields_decode_as_none():
    detail = asyncio.run(make_client(lambda request: httpx.Response(200, json={"lyrics": "la"})).fetch_info("g", "s"))

    assert detail.lyrics == "la"
    assert detail.release_date is None


@pytest.mark.parametrize("status", [404, 500, 201])
def test_non_ok_status_is_unavailable(status):
    with pytest.raises(SongInfoUnavailable):
        asyncio.run(make_client(lambda request: httpx.Response(status, json={})).fetch_info("g", "s"))


def test_transport_error_is_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SongInfoUnavailable):
        asyncio.run(make_client(handler).fetch_info("g", "s"))


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b'{"lyrics": 42}'])
def test_malformed_body_is_decode_error(body):
    with pytest.raises(SongInfoDecodeError):
        asyncio.run(make_client(lambda request: httpx.Response(200, content=body)).fetch_info("g", "s"))


def test_shared_client_uses_configured_timeout():
    HttpClientManager.configure(5.0)
    try:
        client = HttpClientManager.get_client()
        assert client.timeout.read == 5.0
        assert HttpClientManager.get_client() is client
        asyncio.run(HttpClientManager.close())
        assert HttpClientManager._client is None
    finally:
        HttpClientManager.configure(20.0)
