"""Wire models shared by the routers.

Field names are camelCase on the wire; request bodies also accept the
snake_case attribute names.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from gamevault.backend.models import Game


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OwnerSummary(CamelModel):
    id: str
    username: str


class GameResponse(CamelModel):
    id: str
    title: str
    publisher: str
    platform: str
    image: str
    release_date: datetime
    genres: List[str]
    user_id: str
    owner: Optional[OwnerSummary] = None


def game_to_response(game: Game) -> GameResponse:
    owner = None
    if game.user is not None:
        owner = OwnerSummary(id=game.user.id, username=game.user.username)
    return GameResponse(
        id=game.id,
        title=game.name,
        publisher=game.publisher or "",
        platform=game.platform or "",
        image=game.image or "",
        release_date=game.release_date,
        genres=game.genre_names,
        user_id=game.user_id,
        owner=owner,
    )
