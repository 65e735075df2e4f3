"""
api/routes/v1/favorites.py -- The authenticated user's favorite movies.

Routes (all require a bearer token):
  GET    /api/v1/favorites               -- paginated list, optional ?title= substring filter
  GET    /api/v1/favorites/{favorite_id} -- one favorite, owner only
  POST   /api/v1/favorites/{title}       -- look the title up in OMDb and save it
  DELETE /api/v1/favorites/{favorite_id} -- remove, owner only

Ownership: user_id always comes from the token, never from the request, and
every store query is scoped by it. Another user's favorite id is a 404.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from api.dependencies import failure_to_http, get_favorites_service
from api.models import FavoriteEnvelope, FavoriteResponse, MessageResponse
from auth.dependencies import get_current_user_id
from core.results import ErrorKind, Failure
from favorites.service import FavoritesService

router = APIRouter()


@router.get("/favorites", response_model=list[FavoriteResponse])
def list_favorites(
    title: Annotated[Optional[str], Query(max_length=255)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 10,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> list[FavoriteResponse]:
    """Return one page of favorites, oldest first."""
    favorites = service.list(user_id, title=title, page=page, page_size=page_size)
    return [FavoriteResponse.from_favorite(f) for f in favorites]


@router.get("/favorites/{favorite_id}", response_model=FavoriteEnvelope)
def get_favorite(
    favorite_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteEnvelope:
    result = service.get_by_id(user_id, favorite_id)
    if isinstance(result, Failure):
        raise failure_to_http(result)
    return FavoriteEnvelope(message=result.message, favorite=FavoriteResponse.from_favorite(result.value))


@router.post("/favorites/{title}", response_model=FavoriteEnvelope, status_code=201)
def add_favorite(
    title: str,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteEnvelope | JSONResponse:
    """Save a movie by exact title.

    404 if OMDb has no such title, 409 if it is already saved. The 409 body
    includes the stored favorite so the client can link to it.
    """
    result = service.add(user_id, title)
    if isinstance(result, Failure):
        if result.kind is ErrorKind.CONFLICT and result.existing is not None:
            return JSONResponse(
                status_code=409,
                content={
                    "error": {"code": result.kind.value, "message": result.message},
                    "favorite": FavoriteResponse.from_favorite(result.existing).model_dump(),
                },
            )
        raise failure_to_http(result)
    return FavoriteEnvelope(message=result.message, favorite=FavoriteResponse.from_favorite(result.value))


@router.delete("/favorites/{favorite_id}", response_model=MessageResponse)
def remove_favorite(
    favorite_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> MessageResponse:
    if not service.remove(user_id, favorite_id):
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Favorite not found."},
        )
    return MessageResponse(message="Favorite movie removed successfully.")
