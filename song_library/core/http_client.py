# song_library/core/http_client.py
"""
Global HTTP client manager for connection reuse.
Outbound calls to the song info API share a single httpx.AsyncClient instance.
"""

import httpx


class HttpClientManager:
    """
    Holds the one AsyncClient used for song info lookups. The timeout is
    read when the client is first created, so configure() must run before
    the first request.
    """
    _client: httpx.AsyncClient | None = None
    timeout: float = 20.0

    @classmethod
    def configure(cls, timeout: float) -> None:
        """Set the timeout used for the next client that gets created."""
        cls.timeout = timeout

    @classmethod
    def get_client(cls) -> httpx.AsyncClient:
        """Get or create the shared HTTP client instance."""
        if cls._client is None or cls._client.is_closed:
            limits = httpx.Limits(
                max_keepalive_connections=20,
                max_connections=40
            )
            cls._client = httpx.AsyncClient(
                http2=True,  # HTTP/2 for multiplexing (requires httpx[http2])
                timeout=cls.timeout,
                limits=limits,
                headers={
                    'User-Agent': 'SongLibrary/1.0',
                    'Accept': 'application/json'
                }
            )
        return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the shared client. Call on app shutdown."""
        if cls._client is not None and not cls._client.is_closed:
            await cls._client.aclose()
            cls._client = None
