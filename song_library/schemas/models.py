from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

class Song(BaseModel):
    """A row of the songs table, as returned by the API."""
    id: int
    group: str
    song: str
    release_date: Optional[str] = Field(None, alias="releaseDate", description="Free-form, e.g. 16.07.2006")
    lyrics: Optional[str] = None # Verses separated by a blank line
    link: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

class SongUpdate(BaseModel):
    """Full replacement payload. Omitted fields are stored as empty strings."""
    group: str = ""
    song: str = ""
    release_date: str = Field("", alias="releaseDate")
    lyrics: str = ""
    link: str = ""

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("group", "song", "release_date", "lyrics", "link", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        # JSON null is written as an empty string, like an omitted field
        return "" if value is None else value

class SongCreate(BaseModel):
    group: str = Field(..., min_length=1)
    song: str = Field(..., min_length=1)

class SongDetail(BaseModel):
    """Body of a successful song info lookup."""
    release_date: Optional[str] = Field(None, alias="releaseDate")
    lyrics: Optional[str] = None
    link: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

class SongCreated(BaseModel):
    song_id: int

class Message(BaseModel):
    message: str

class ErrorMessage(BaseModel):
    error: str
