"""Router package for API endpoints."""

from .auth_routes import router as auth_routes
from .games import router as games
from .wishlist import router as wishlist

__all__ = [
    "auth_routes",
    "games",
    "wishlist",
]
