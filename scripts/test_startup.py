import asyncio

import asyncpg
import pytest
from fastapi.testclient import TestClient

from song_library.core.database import Database
from song_library.main import create_app
from song_library.services.song_service import SongService


class UnreachableDatabase:
    async def connect(self):
        raise ConnectionRefusedError("connection refused")

    async def close(self):
        pass


def test_unreachable_database_aborts_startup(music_info):
    app = create_app(service=SongService(UnreachableDatabase(), music_info))

    with pytest.raises(ConnectionRefusedError):
        with TestClient(app):
            pass


class BrokenPool:
    def __init__(self):
        self.closed = False

    async def fetchval(self, query, *args):
        raise asyncpg.InterfaceError("server closed the connection")

    async def close(self):
        self.closed = True


def test_failed_ping_closes_pool(monkeypatch):
    pool = BrokenPool()
    created = []

    async def create_pool(dsn, **kwargs):
        created.append((dsn, kwargs))
        return pool

    monkeypatch.setattr(asyncpg, "create_pool", create_pool)
    db = Database("postgresql://songs@localhost/songs", min_size=2, max_size=4)

    with pytest.raises(asyncpg.InterfaceError):
        asyncio.run(db.connect())

    assert pool.closed
    assert db._pool is None
    assert created[0][1]["min_size"] == 2
    assert created[0][1]["max_size"] == 4


def test_connect_keeps_healthy_pool(monkeypatch):
    class Pool(BrokenPool):
        async def fetchval(self, query, *args):
            return 1

    pool = Pool()

    async def create_pool(dsn, **kwargs):
        return pool

    monkeypatch.setattr(asyncpg, "create_pool", create_pool)
    db = Database("postgresql://songs@localhost/songs")
    asyncio.run(db.connect())

    assert db.pool is pool
    assert not pool.closed
