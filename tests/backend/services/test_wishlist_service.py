from __future__ import annotations

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from gamevault.backend.database import Base, enable_sqlite_foreign_keys
from gamevault.backend.models import Game, User, Wishlist
from gamevault.backend.services import ErrorKind
from gamevault.backend.services.wishlist_service import WishlistService


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite:///:memory:", connect_args={"check_same_thread": False}
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False)
    session = TestingSession()
    session.add(User(id="u1", username="u1", email="u1@x.com", password_hash="h"))
    session.add(User(id="u2", username="u2", email="u2@x.com", password_hash="h"))
    session.flush()
    session.add(Game(id="g1", name="Hades", user_id="u2"))
    session.commit()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


def test_add_rejects_duplicates_and_unknown_games(db_session: Session):
    service = WishlistService(db_session)
    assert service.add("u1", "g1").ok
    duplicate = service.add("u1", "g1")
    assert duplicate.error is ErrorKind.CONFLICT
    assert service.add("u1", "nope").error is ErrorKind.NOT_FOUND
    # another user may save the same game
    assert service.add("u2", "g1").ok
    assert db_session.query(Wishlist).count() == 2


def test_remove_and_exists(db_session: Session):
    service = WishlistService(db_session)
    assert service.remove("u1", "g1") is False
    service.add("u1", "g1")
    assert service.exists("u1", "g1")
    assert not service.exists("u2", "g1")
    assert service.remove("u1", "g1") is True
    assert not service.exists("u1", "g1")
    assert service.get_user_wishlist("u1") == []


def test_deleting_user_cascades_to_wishlist(db_session: Session):
    service = WishlistService(db_session)
    service.add("u1", "g1")
    db_session.delete(db_session.get(User, "u1"))
    db_session.commit()
    assert db_session.query(Wishlist).count() == 0
