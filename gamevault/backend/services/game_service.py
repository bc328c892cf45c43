from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from gamevault.backend.database import utcnow
from gamevault.backend.models import Game, GameGenre, Genre

from .results import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)

GAME_NOT_FOUND = "Game not found."


@dataclass
class GamePayload:
    title: str
    publisher: Optional[str] = None
    platform: Optional[str] = None
    image: Optional[str] = None
    release_date: Optional[datetime] = None
    genres: Optional[List[str]] = field(default=None)


def clean_genre_names(names: Optional[Iterable[str]]) -> List[str]:
    cleaned: List[str] = []
    for raw in names or []:
        name = (raw or "").strip()
        if name and name not in cleaned:
            cleaned.append(name)
    return cleaned


class GenreRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_name(self, name: str) -> Optional[Genre]:
        return self.db.query(Genre).filter(Genre.name == name).first()

    def find_or_create(self, name: str) -> Genre:
        """Return the genre called ``name``, inserting it when missing.

        The insert runs in a savepoint so a concurrent insert of the same name
        only rolls back this step; the unique index decides the winner and the
        loser re-reads the committed row.
        """
        genre = self.get_by_name(name)
        if genre is not None:
            return genre
        try:
            with self.db.begin_nested():
                genre = Genre(name=name)
                self.db.add(genre)
        except IntegrityError:
            genre = self.get_by_name(name)
            if genre is None:
                raise
        return genre


class GameService:
    def __init__(self, db: Session):
        self.db = db
        self.genres = GenreRepository(db)

    def _query(self):
        return self.db.query(Game).options(
            joinedload(Game.game_genres).joinedload(GameGenre.genre),
            joinedload(Game.user),
        )

    def get_all_games(self) -> List[Game]:
        return self._query().order_by(Game.name).all()

    def get_user_games(self, owner_id: str) -> List[Game]:
        return self._query().filter(Game.user_id == owner_id).order_by(Game.name).all()

    def get_game(self, game_id: str) -> ServiceResult[Game]:
        game = self._query().filter(Game.id == game_id).first()
        if game is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, GAME_NOT_FOUND)
        return ServiceResult.success(game)

    def create_game(self, owner_id: str, payload: GamePayload) -> ServiceResult[Game]:
        game = Game(
            name=payload.title,
            publisher=payload.publisher or "",
            platform=payload.platform or "",
            image=payload.image or "",
            release_date=payload.release_date or utcnow(),
            user_id=owner_id,
        )
        self.db.add(game)
        self.db.flush()
        for genre in self._resolve_genres(clean_genre_names(payload.genres)).values():
            self.db.add(GameGenre(game_id=game.id, genre_id=genre.id))
        self.db.commit()
        logger.info("User %s created game %s", owner_id, game.id)
        return self.get_game(game.id)

    def update_game(
        self, game_id: str, owner_id: str, payload: GamePayload
    ) -> ServiceResult[Game]:
        game = self._owned(game_id, owner_id)
        if game is None:
            return ServiceResult.failure(
                ErrorKind.NOT_FOUND,
                "Game not found or you don't have permission to update it.",
            )

        game.name = payload.title
        if payload.publisher is not None:
            game.publisher = payload.publisher
        if payload.platform is not None:
            game.platform = payload.platform
        if payload.image is not None:
            game.image = payload.image
        if payload.release_date is not None:
            game.release_date = payload.release_date
        if payload.genres is not None:
            self._replace_genres(game, clean_genre_names(payload.genres))

        self.db.commit()
        logger.info("User %s updated game %s", owner_id, game_id)
        return self.get_game(game_id)

    def delete_game(self, game_id: str, owner_id: str) -> ServiceResult[bool]:
        game = self._owned(game_id, owner_id)
        if game is None:
            return ServiceResult.failure(
                ErrorKind.NOT_FOUND,
                "Game not found or you don't have permission to delete it.",
            )
        self.db.delete(game)
        try:
            self.db.commit()
        except IntegrityError:
            # wishlist rows still point at the game
            self.db.rollback()
            logger.warning("Refused to delete wishlisted game %s", game_id)
            return ServiceResult.failure(
                ErrorKind.CONFLICT,
                "Game is saved in one or more wishlists and cannot be deleted.",
            )
        logger.info("User %s deleted game %s", owner_id, game_id)
        return ServiceResult.success(True)

    def _owned(self, game_id: str, owner_id: str) -> Optional[Game]:
        return (
            self.db.query(Game)
            .filter(Game.id == game_id, Game.user_id == owner_id)
            .first()
        )

    def _resolve_genres(self, names: List[str]) -> Dict[str, Genre]:
        # names that differ only by case can collate to the same row
        resolved: Dict[str, Genre] = {}
        for name in names:
            genre = self.genres.find_or_create(name)
            resolved.setdefault(genre.id, genre)
        return resolved

    def _replace_genres(self, game: Game, names: List[str]) -> None:
        wanted = self._resolve_genres(names)
        for link in list(game.game_genres):
            if link.genre_id in wanted:
                wanted.pop(link.genre_id)
            else:
                game.game_genres.remove(link)
        for genre in wanted.values():
            game.game_genres.append(GameGenre(game_id=game.id, genre_id=genre.id))
