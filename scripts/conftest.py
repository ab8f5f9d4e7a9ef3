import re
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from song_library.main import create_app
from song_library.services.music_info import MusicInfoClient
from song_library.services.song_service import SongService

FILTER_RE = re.compile(r"(\w+) (ILIKE|=) \$(\d+)")


class FakeDatabase:
    """
    In-memory stand-in for the asyncpg connector. Understands the handful of
    statements SongService issues and records every call.
    """

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self.songs: Dict[int, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None
        self.connected = False
        for row in rows or []:
            self.songs[row["song_id"]] = dict(row)

    def add(self, group, song, release_date=None, lyrics=None, link=None) -> int:
        song_id = max(self.songs, default=0) + 1
        self.songs[song_id] = {
            "song_id": song_id,
            "group_name": group,
            "song_name": song,
            "release_date": release_date,
            "lyrics": lyrics,
            "link": link,
        }
        return song_id

    def _record(self, method: str, query: str, args: tuple) -> None:
        self.calls.append((method, " ".join(query.split()), args))
        if self.fail_with is not None:
            raise self.fail_with

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.connected = False

    async def ping(self) -> bool:
        self._record("ping", "SELECT 1", ())
        return True

    async def fetch(self, query: str, *args: Any) -> List[Dict[str, Any]]:
        self._record("fetch", query, args)
        rows = [self.songs[k] for k in sorted(self.songs)]
        for column, op, index in FILTER_RE.findall(query.split("ORDER BY")[0]):
            value = args[int(index) - 1]
            if op == "ILIKE":
                needle = re.sub(r"\\(.)", r"\1", value[1:-1]).lower()
                rows = [r for r in rows if needle in (r[column] or "").lower()]
            else:
                rows = [r for r in rows if r[column] == value]
        limit, offset = args[-2], args[-1]
        return rows[offset:offset + limit]

    async def fetchrow(self, query: str, *args: Any) -> Optional[Dict[str, Any]]:
        self._record("fetchrow", query, args)
        row = self.songs.get(args[0])
        return {"lyrics": row["lyrics"]} if row else None

    async def fetchval(self, query: str, *args: Any) -> Any:
        self._record("fetchval", query, args)
        return self.add(*args)

    async def execute(self, query: str, *args: Any) -> int:
        self._record("execute", query, args)
        if query.strip().startswith("DELETE"):
            return 1 if self.songs.pop(args[0], None) else 0
        song_id = args[-1]
        if song_id not in self.songs:
            return 0
        group, song, release_date, lyrics, link = args[:5]
        self.songs[song_id].update(
            group_name=group, song_name=song, release_date=release_date, lyrics=lyrics, link=link
        )
        return 1


class InfoApi:
    """Programmable fake of the external song info API."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.respond: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200,
            json={
                "releaseDate": "16.07.2006",
                "lyrics": "Ooh baby, don't you know I suffer?\n\nOoh baby, can you hear me moan?",
                "link": "https://www.youtube.com/watch?v=Xsp3_a-PMTw",
            },
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def info_api():
    return InfoApi()


@pytest.fixture
def music_info(info_api):
    transport = httpx.MockTransport(info_api.handler)
    return MusicInfoClient("http://info.test", client=httpx.AsyncClient(transport=transport))


@pytest.fixture
def service(db, music_info):
    return SongService(db, music_info)


@pytest.fixture
def client(service):
    with TestClient(create_app(service=service)) as test_client:
        yield test_client
