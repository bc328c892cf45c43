from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from gamevault.backend.database import Base, utcnow

from .user import generate_id


class Wishlist(Base):
    __tablename__ = "wishlists"
    __table_args__ = (
        UniqueConstraint("user_id", "game_id", name="uq_wishlist_user_game"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # NO ACTION: a wishlisted game cannot be deleted out from under its entries
    game_id = Column(
        String(36),
        ForeignKey("games.id", ondelete="NO ACTION"),
        nullable=False,
        index=True,
    )
    added_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="wishlist_entries")
    game = relationship("Game")
