import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from song_library.core.errors import SongInfoDecodeError, SongInfoUnavailable
from song_library.core.http_client import HttpClientManager
from song_library.schemas.models import SongDetail

logger = logging.getLogger(__name__)


class MusicInfoClient:
    """
    Client for the external song info API: GET {base_url}/info?group=..&song=..
    """

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Injected client if any, otherwise the process-wide shared one."""
        return self._client or HttpClientManager.get_client()

    async def fetch_info(self, group: str, song: str) -> SongDetail:
        """
        Look up release date, lyrics and link for a song.

        Raises:
            SongInfoUnavailable: transport error, timeout or non-200 status.
            SongInfoDecodeError: the body is not a JSON SongDetail object.
        """
        url = f"{self.base_url}/info"
        # params= always percent-encodes, so spaces and '&' in names are safe
        params = {"group": group, "song": song}
        logger.info(f"Calling external API: {url} group={group!r} song={song!r}")

        try:
            response = await self.client.get(url, params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"External API call failed: {e}")
            raise SongInfoUnavailable(str(e)) from e

        if response.status_code != httpx.codes.OK:
            logger.error(f"External API returned status {response.status_code}")
            raise SongInfoUnavailable(f"status {response.status_code}")

        try:
            return SongDetail.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Error decoding external API response: {e}")
            raise SongInfoDecodeError(str(e)) from e
