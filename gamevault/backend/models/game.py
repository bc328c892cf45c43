from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from gamevault.backend.database import Base, utcnow

from .user import generate_id


class Game(Base):
    __tablename__ = "games"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    publisher = Column(String(255), nullable=False, default="")
    platform = Column(String(255), nullable=False, default="")
    image = Column(String(1000), nullable=False, default="")
    release_date = Column(DateTime, nullable=False, default=utcnow)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user = relationship("User", back_populates="games")
    game_genres = relationship(
        "GameGenre",
        back_populates="game",
        cascade="all, delete-orphan",
    )

    @property
    def genre_names(self) -> list[str]:
        return [gg.genre.name for gg in self.game_genres if gg.genre is not None]


class Genre(Base):
    __tablename__ = "genres"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(100), nullable=False, unique=True)

    game_genres = relationship(
        "GameGenre",
        back_populates="genre",
        cascade="all, delete-orphan",
    )


class GameGenre(Base):
    __tablename__ = "game_genres"

    game_id = Column(
        String(36),
        ForeignKey("games.id", ondelete="CASCADE"),
        primary_key=True,
    )
    genre_id = Column(
        String(36),
        ForeignKey("genres.id", ondelete="CASCADE"),
        primary_key=True,
    )

    game = relationship("Game", back_populates="game_genres")
    genre = relationship("Genre", back_populates="game_genres")
