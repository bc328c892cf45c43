import json

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.requests import Request

from gamevault.backend.api.app import app, general_exception_handler
from gamevault.backend.database import Base, get_db


def _override_db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    return engine, override_get_db


def test_health():
    client = TestClient(app)
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_validation_errors_are_bad_requests():
    engine, override_get_db = _override_db()
    app.dependency_overrides[get_db] = override_get_db
    try:
        client = TestClient(app)
        bad_email = client.post(
            "/api/auth/register",
            json={"username": "a", "email": "not-an-email", "password": "p"},
        )
        assert bad_email.status_code == 400

        missing_password = client.post(
            "/api/auth/register", json={"username": "a", "email": "a@x.com"}
        )
        assert missing_password.status_code == 400

        bad_id = client.get("/api/game/not-a-uuid")
        assert bad_id.status_code == 400
    finally:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def test_register_then_use_token_across_routers():
    engine, override_get_db = _override_db()
    app.dependency_overrides[get_db] = override_get_db
    try:
        client = TestClient(app)
        registered = client.post(
            "/api/auth/register",
            json={"username": "a", "email": "a@x.com", "password": "p"},
        )
        assert registered.status_code == 200
        headers = {"Authorization": f"Bearer {registered.json()['accessToken']}"}

        created = client.post(
            "/api/game", headers=headers, json={"title": "Hollow Knight"}
        )
        assert created.status_code == 201
        game_id = created.json()["id"]

        added = client.post("/api/wishlist", headers=headers, json={"gameId": game_id})
        assert added.status_code == 201
        assert client.get(f"/api/wishlist/check/{game_id}", headers=headers).json()

        assert client.get("/api/wishlist").status_code == 401
    finally:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def test_blank_username_and_title_are_rejected():
    engine, override_get_db = _override_db()
    app.dependency_overrides[get_db] = override_get_db
    try:
        client = TestClient(app)
        blank_user = client.post(
            "/api/auth/register",
            json={"username": "   ", "email": "a@x.com", "password": "p"},
        )
        assert blank_user.status_code == 400
        assert "Username is required" in blank_user.json()["detail"][0]["msg"]

        registered = client.post(
            "/api/auth/register",
            json={"username": "  a  ", "email": "a@x.com", "password": "p"},
        )
        assert registered.status_code == 200
        assert registered.json()["username"] == "a"
        headers = {"Authorization": f"Bearer {registered.json()['accessToken']}"}

        blank_title = client.post("/api/game", headers=headers, json={"title": " \t"})
        assert blank_title.status_code == 400
        assert "Title is required" in blank_title.json()["detail"][0]["msg"]
        assert client.get("/api/game/all").json() == []

        renamed = client.put(
            "/api/auth/profile",
            headers=headers,
            json={"username": "  ", "email": "a@x.com"},
        )
        assert renamed.status_code == 400

        patched = client.patch(
            "/api/auth/profile", headers=headers, json={"username": "   "}
        )
        assert patched.status_code == 200
        assert patched.json()["username"] == "a"
    finally:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def test_unhandled_errors_hide_internal_detail():
    request = Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/api/game/all",
            "headers": [],
            "query_string": b"",
            "scheme": "http",
            "server": ("testserver", 80),
            "root_path": "",
        }
    )
    response = general_exception_handler(request, RuntimeError("db password leaked"))
    assert response.status_code == 500
    assert json.loads(response.body) == {"detail": "Internal server error"}
