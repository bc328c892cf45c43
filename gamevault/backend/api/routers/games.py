from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from gamevault.backend.api.errors import raise_for_result
from gamevault.backend.api.schemas import CamelModel, GameResponse, game_to_response
from gamevault.backend.database import get_db
from gamevault.backend.models import User
from gamevault.backend.services.game_service import GamePayload, GameService

from .auth_routes import get_current_user

router = APIRouter()


def _validate_title(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("Title is required")
    return stripped


class GameCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    publisher: Optional[str] = Field(None, max_length=255)
    platform: Optional[str] = Field(None, max_length=255)
    image: Optional[str] = Field(None, max_length=1000)
    release_date: Optional[datetime] = None
    genres: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _validate_title(value)


class GameUpdateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    publisher: Optional[str] = Field(None, max_length=255)
    platform: Optional[str] = Field(None, max_length=255)
    image: Optional[str] = Field(None, max_length=1000)
    release_date: Optional[datetime] = None
    # None keeps the current genres
    genres: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _validate_title(value)


def _payload(body) -> GamePayload:
    release_date = body.release_date
    if release_date is not None and release_date.tzinfo is not None:
        release_date = release_date.replace(tzinfo=None) - release_date.utcoffset()
    return GamePayload(
        title=body.title,
        publisher=body.publisher,
        platform=body.platform,
        image=body.image,
        release_date=release_date,
        genres=body.genres,
    )


@router.get("/all", response_model=List[GameResponse])
def list_all_games(db: Session = Depends(get_db)):
    return [game_to_response(game) for game in GameService(db).get_all_games()]


@router.get("/my-games", response_model=List[GameResponse])
def list_my_games(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    games = GameService(db).get_user_games(current_user.id)
    return [game_to_response(game) for game in games]


@router.get("/{game_id}", response_model=GameResponse)
def read_game(game_id: UUID, db: Session = Depends(get_db)):
    result = GameService(db).get_game(str(game_id))
    raise_for_result(result)
    return game_to_response(result.value)


@router.post("", response_model=GameResponse, status_code=status.HTTP_201_CREATED)
def create_game(
    body: GameCreateRequest,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = GameService(db).create_game(current_user.id, _payload(body))
    raise_for_result(result)
    response.headers["Location"] = f"/api/game/{result.value.id}"
    return game_to_response(result.value)


@router.put("/{game_id}", response_model=GameResponse)
def update_game(
    game_id: UUID,
    body: GameUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = GameService(db).update_game(str(game_id), current_user.id, _payload(body))
    raise_for_result(result)
    return game_to_response(result.value)


@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_game(
    game_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = GameService(db).delete_game(str(game_id), current_user.id)
    raise_for_result(result)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
