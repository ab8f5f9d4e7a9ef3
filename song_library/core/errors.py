class SongLibraryError(Exception):
    """Base class for errors that map to an HTTP error response."""
    status_code = 500
    message = "Internal error"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.message)
        self.detail = detail

    def to_body(self) -> dict:
        # Public message only; the detail stays in the logs.
        return {"error": self.message}


class InvalidSongId(SongLibraryError):
    status_code = 400
    message = "Invalid song ID"


class InvalidPayload(SongLibraryError):
    status_code = 400
    message = "Invalid data format"


class SongNotFound(SongLibraryError):
    status_code = 404
    message = "Song is not found"


class SongInfoUnavailable(SongLibraryError):
    """External lookup failed or answered with a non-200 status."""
    status_code = 400
    message = "Couldn't get song info"


class SongInfoDecodeError(SongLibraryError):
    status_code = 500
    message = "Song info processing error"


class StorageError(SongLibraryError):
    status_code = 500
    message = "Database error"


class DatabaseUnavailable(SongLibraryError):
    status_code = 503
    message = "Database unavailable"


class ConfigError(Exception):
    """Raised at startup when a required setting is missing or malformed."""
    pass
