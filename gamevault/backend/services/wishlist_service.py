"""Per-user wishlist of saved games."""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from gamevault.backend.models import Game, GameGenre, Wishlist

from .results import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)


class WishlistService:
    """Wishlist entries are unique per (user, game).

    Duplicates are rejected by the ``uq_wishlist_user_game`` constraint rather
    than a read-before-write, so two concurrent adds of the same game still
    leave a single row and the loser gets ``CONFLICT``.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_user_wishlist(self, user_id: str) -> List[Wishlist]:
        return (
            self.db.query(Wishlist)
            .options(
                joinedload(Wishlist.game)
                .joinedload(Game.game_genres)
                .joinedload(GameGenre.genre)
            )
            .filter(Wishlist.user_id == user_id)
            .order_by(Wishlist.added_at.desc())
            .all()
        )

    def add(self, user_id: str, game_id: str) -> ServiceResult[Wishlist]:
        if self.db.get(Game, game_id) is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, "Game not found")

        entry = Wishlist(user_id=user_id, game_id=game_id)
        self.db.add(entry)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Game %s already in wishlist of user %s", game_id, user_id)
            return ServiceResult.failure(
                ErrorKind.CONFLICT, "Game is already in wishlist"
            )
        self.db.refresh(entry)
        logger.info("User %s added game %s to wishlist", user_id, game_id)
        return ServiceResult.success(entry)

    def remove(self, user_id: str, game_id: str) -> bool:
        deleted = (
            self.db.query(Wishlist)
            .filter(Wishlist.user_id == user_id, Wishlist.game_id == game_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if deleted:
            logger.info("User %s removed game %s from wishlist", user_id, game_id)
        return bool(deleted)

    def exists(self, user_id: str, game_id: str) -> bool:
        return (
            self.db.query(Wishlist.id)
            .filter(Wishlist.user_id == user_id, Wishlist.game_id == game_id)
            .first()
            is not None
        )
