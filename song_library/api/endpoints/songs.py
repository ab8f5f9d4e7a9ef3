from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from song_library.core.errors import InvalidPayload, SongLibraryError
from song_library.schemas.models import ErrorMessage, Message, Song, SongCreate, SongCreated, SongUpdate
from song_library.services.song_service import SongService, parse_song_id
import logging

router = APIRouter(tags=["Songs"])
logger = logging.getLogger(__name__)

# Dependency Injection for Service
def get_song_service(request: Request) -> SongService:
    return request.app.state.song_service

def error_response(error: SongLibraryError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_body())

def _errors(*codes: int) -> dict:
    return {code: {"model": ErrorMessage} for code in codes}

async def _parse_body(request: Request, model):
    """Validate the raw body so bad JSON is a 400 instead of FastAPI's 422."""
    body = await request.body()
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        logger.error(f"Error binding JSON: {e}")
        raise InvalidPayload(str(e)) from e

@router.get(
    "/songs",
    response_model=List[Song],
    response_model_exclude_none=True,
    summary="Get a list of songs",
    responses=_errors(500),
)
async def get_songs(
    response: Response,
    group: Optional[str] = None,
    song: Optional[str] = None,
    releaseDate: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    service: SongService = Depends(get_song_service)
):
    """
    Returns songs filtered by group name and song name (case-insensitive
    substrings) and exact release date, ordered by id.
    `page` defaults to 1 and `limit` to 10.
    """
    logger.debug("Processing GetSongs request")
    try:
        songs, skipped = await service.list_songs(group, song, releaseDate, page, limit)
    except SongLibraryError as e:
        return error_response(e)

    if skipped:
        response.headers["X-Skipped-Rows"] = str(skipped)
    return songs

@router.get(
    "/songs/{song_id}/lyrics",
    response_model=List[str],
    summary="Get song lyrics",
    tags=["Lyrics"],
    responses=_errors(400, 404),
)
async def get_song_lyrics(
    song_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    service: SongService = Depends(get_song_service)
):
    """
    Returns the lyrics split into verses. Without `page` and `limit` all
    verses are returned, otherwise `limit` verses (default 1) of page `page`.
    """
    logger.debug("Processing GetSongLyrics request")
    try:
        return await service.get_lyrics(parse_song_id(song_id), page, limit)
    except SongLibraryError as e:
        return error_response(e)

@router.delete(
    "/songs/{song_id}",
    response_model=Message,
    summary="Delete a song",
    responses=_errors(400, 404, 500),
)
async def delete_song(song_id: str, service: SongService = Depends(get_song_service)):
    logger.debug("Processing DeleteSong request")
    try:
        await service.delete_song(parse_song_id(song_id))
    except SongLibraryError as e:
        return error_response(e)
    return Message(message="Song was deleted")

@router.put(
    "/songs/{song_id}",
    response_model=Message,
    summary="Update a song",
    responses=_errors(400, 404, 500),
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": SongUpdate.model_json_schema(by_alias=True)}},
        }
    },
)
async def update_song(song_id: str, request: Request, service: SongService = Depends(get_song_service)):
    """Replaces every field of the song. Omitted fields are stored empty."""
    logger.debug("Processing UpdateSong request")
    try:
        song_id_num = parse_song_id(song_id)
        data = await _parse_body(request, SongUpdate)
        await service.update_song(song_id_num, data)
    except SongLibraryError as e:
        return error_response(e)
    return Message(message="Song was updated")

@router.post(
    "/songs",
    response_model=SongCreated,
    summary="Add a song",
    responses=_errors(400, 500),
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": SongCreate.model_json_schema()}},
        }
    },
)
async def add_song(request: Request, service: SongService = Depends(get_song_service)):
    """
    Adds a song. Release date, lyrics and link are fetched from the
    external song info API.
    """
    logger.debug("Processing AddSong request")
    try:
        data = await _parse_body(request, SongCreate)
        song_id = await service.create_song(data)
    except SongLibraryError as e:
        return error_response(e)
    return SongCreated(song_id=song_id)
