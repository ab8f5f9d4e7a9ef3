import asyncio
import logging
from typing import List, Optional, Tuple

import asyncpg
from pydantic import ValidationError

from song_library.core.database import Database
from song_library.core.errors import InvalidSongId, SongNotFound, StorageError
from song_library.core.query import SongQuery
from song_library.schemas.models import Song, SongCreate, SongUpdate
from song_library.services.music_info import MusicInfoClient

logger = logging.getLogger(__name__)

# asyncpg statement errors, lost connections and command_timeout expiry
DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

DEFAULT_PAGE = 1
DEFAULT_SONG_LIMIT = 10
DEFAULT_VERSE_LIMIT = 1


def parse_song_id(raw: str) -> int:
    try:
        song_id = int(raw)
    except (TypeError, ValueError):
        raise InvalidSongId(f"not an integer: {raw!r}")
    if song_id < 1:
        raise InvalidSongId(f"not positive: {song_id}")
    return song_id


def parse_positive(raw: Optional[str], default: int) -> int:
    """Parse a pagination value, falling back to default if it is not an integer >= 1."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def split_verses(lyrics: str) -> List[str]:
    verses = lyrics.split("\n\n")
    if len(verses) == 1:
        # No blank lines: every line is a verse
        verses = lyrics.split("\n")
    return verses


def paginate_verses(verses: List[str], page: int, limit: int) -> List[str]:
    start = (page - 1) * limit
    if start >= len(verses):
        return []
    end = min(start + limit, len(verses))
    return verses[start:end]


class SongService:
    """
    Song entity operations: list, lyrics, delete, update, create.
    Each method is request-scoped; the only shared state is the connector.
    """

    def __init__(self, db: Database, music_info: MusicInfoClient):
        self.db = db
        self.music_info = music_info

    async def list_songs(
        self,
        group: Optional[str] = None,
        song: Optional[str] = None,
        release_date: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> Tuple[List[Song], int]:
        """
        Filter and paginate songs ordered by id.

        Returns:
            The decoded songs and the number of rows skipped because they
            could not be decoded.
        """
        query = SongQuery()
        if group:
            query.ilike("group_name", group)
        if song:
            query.ilike("song_name", song)
        if release_date:
            query.equals("release_date", release_date)
        query.paginate(parse_positive(page, DEFAULT_PAGE), parse_positive(limit, DEFAULT_SONG_LIMIT))

        sql, args = query.render()
        logger.debug(f"Executing database query: {sql} with args {args}")

        try:
            rows = await self.db.fetch(sql, *args)
        except DB_ERRORS as e:
            logger.error(f"Database request error: {e}")
            raise StorageError(str(e)) from e

        songs = []
        skipped = 0
        for row in rows:
            try:
                songs.append(Song(
                    id=row["song_id"],
                    group=row["group_name"],
                    song=row["song_name"],
                    release_date=row["release_date"],
                    lyrics=row["lyrics"],
                    link=row["link"],
                ))
            except ValidationError as e:
                skipped += 1
                logger.warning(f"Skipping song row {row['song_id']}: {e}")

        if skipped:
            logger.warning(f"Returned partial result: {skipped} rows could not be decoded")
        logger.info(f"Found {len(songs)} songs")
        return songs, skipped

    async def get_lyrics(self, song_id: int, page: Optional[str] = None, limit: Optional[str] = None) -> List[str]:
        try:
            row = await self.db.fetchrow("SELECT lyrics FROM songs WHERE song_id = $1", song_id)
        except DB_ERRORS as e:
            logger.error(f"Error reading lyrics for song ID {song_id}: {e}")
            raise SongNotFound(str(e)) from e

        if row is None:
            logger.warning(f"Song with ID {song_id} not found")
            raise SongNotFound(f"id {song_id}")

        verses = split_verses(row["lyrics"] or "")

        if not page and not limit:
            return verses

        page_num = parse_positive(page, DEFAULT_PAGE)
        limit_num = parse_positive(limit, DEFAULT_VERSE_LIMIT)
        logger.info(f"Returning lyrics for song ID {song_id} (page {page_num}, limit {limit_num})")
        return paginate_verses(verses, page_num, limit_num)

    async def delete_song(self, song_id: int) -> None:
        try:
            count = await self.db.execute("DELETE FROM songs WHERE song_id = $1", song_id)
        except DB_ERRORS as e:
            logger.error(f"Error deleting song: {e}")
            raise StorageError(str(e)) from e

        if count == 0:
            logger.warning(f"Song with ID {song_id} not found")
            raise SongNotFound(f"id {song_id}")
        logger.info(f"Song with ID {song_id} deleted")

    async def update_song(self, song_id: int, data: SongUpdate) -> None:
        """Overwrite every mutable field of the song in one statement."""
        query = """
            UPDATE songs
            SET group_name = $1, song_name = $2, release_date = $3, lyrics = $4, link = $5
            WHERE song_id = $6
        """
        try:
            count = await self.db.execute(
                query, data.group, data.song, data.release_date, data.lyrics, data.link, song_id
            )
        except DB_ERRORS as e:
            logger.error(f"Error updating song: {e}")
            raise StorageError(str(e)) from e

        if count == 0:
            logger.warning(f"Song with ID {song_id} not found")
            raise SongNotFound(f"id {song_id}")
        logger.info(f"Song with ID {song_id} updated")

    async def create_song(self, data: SongCreate) -> int:
        """
        Fetch song details from the external API and insert a new row.
        Lookup errors propagate before anything is written.
        """
        detail = await self.music_info.fetch_info(data.group, data.song)

        query = """
            INSERT INTO songs (group_name, song_name, release_date, lyrics, link)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING song_id
        """
        try:
            song_id = await self.db.fetchval(
                query, data.group, data.song, detail.release_date, detail.lyrics, detail.link
            )
        except DB_ERRORS as e:
            logger.error(f"Error inserting song into database: {e}")
            raise StorageError(str(e)) from e

        if song_id is None:
            raise StorageError("insert returned no id")
        logger.info(f"Song with ID {song_id} added")
        return song_id
