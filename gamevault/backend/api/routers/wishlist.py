from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from gamevault.backend.api.errors import raise_for_result
from gamevault.backend.api.schemas import CamelModel, GameResponse, game_to_response
from gamevault.backend.database import get_db
from gamevault.backend.models import User
from gamevault.backend.services import ErrorKind
from gamevault.backend.services.wishlist_service import WishlistService

from .auth_routes import get_current_user

router = APIRouter()


class WishlistCreateRequest(CamelModel):
    game_id: UUID


class WishlistEntryResponse(CamelModel):
    id: str
    user_id: str
    game_id: str
    added_at: datetime


class WishlistItemResponse(CamelModel):
    id: str
    game: GameResponse
    added_at: datetime


@router.get("", response_model=List[WishlistItemResponse])
def read_wishlist(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entries = WishlistService(db).get_user_wishlist(current_user.id)
    return [
        WishlistItemResponse(
            id=entry.id,
            game=game_to_response(entry.game),
            added_at=entry.added_at,
        )
        for entry in entries
    ]


@router.post(
    "", response_model=WishlistEntryResponse, status_code=status.HTTP_201_CREATED
)
def add_to_wishlist(
    body: WishlistCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = WishlistService(db).add(current_user.id, str(body.game_id))
    # unknown game is a bad request here, not a missing resource
    raise_for_result(result, {ErrorKind.NOT_FOUND: status.HTTP_400_BAD_REQUEST})
    return WishlistEntryResponse.model_validate(result.value)


@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_from_wishlist(
    game_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    removed = WishlistService(db).remove(current_user.id, str(game_id))
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Game not found in wishlist"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/check/{game_id}", response_model=bool)
def is_in_wishlist(
    game_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return WishlistService(db).exists(current_user.id, str(game_id))
