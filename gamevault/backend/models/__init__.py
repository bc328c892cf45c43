from .game import Game, GameGenre, Genre
from .user import User, generate_id
from .wishlist import Wishlist

__all__ = [
    "User",
    "Game",
    "Genre",
    "GameGenre",
    "Wishlist",
    "generate_id",
]
