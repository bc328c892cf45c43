import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from gamevault.backend.database import Base, utcnow


def generate_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    username = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    bio = Column(String(2000), nullable=True)
    image = Column(String(1000), nullable=True)
    refresh_token = Column(String(255), nullable=True)
    refresh_token_expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    games = relationship(
        "Game",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    wishlist_entries = relationship(
        "Wishlist",
        back_populates="user",
        cascade="all, delete-orphan",
    )
