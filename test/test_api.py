import pytest
from fastapi.testclient import TestClient

import updates
from shopbot import main
from shopbot.database import get_db
from shopbot.main import app, get_gateway, get_sessions

ADMIN = 1000


@pytest.fixture
def client(db, gateway, sessions):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_sessions] = lambda: sessions
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_root(client):
    assert client.get("/").json() == {"status": "ok"}


def test_products_listing(client, catalog):
    catalog.create("Chair", "Wooden chair", "file-1")
    response = client.get("/api/products")
    assert response.status_code == 200
    [product] = response.json()
    assert product["name"] == "Chair"
    assert product["description"] == "Wooden chair"
    assert product["image_id"] == "file-1"
    assert product["image_url"] == "/api/image/file-1"


def test_image_proxy(client, gateway):
    gateway.files["file-1"] = b"\xff\xd8jpeg"
    response = client.get("/api/image/file-1")
    assert response.status_code == 200
    assert response.content == b"\xff\xd8jpeg"
    assert response.headers["content-type"] == "image/jpeg"


def test_image_proxy_unknown_file(client):
    assert client.get("/api/image/nope").status_code == 404


def test_webhook_runs_admin_wizard(client, sessions, catalog):
    def send(body):
        assert client.post("/webhook", json=body).status_code == 200

    send(updates.text(ADMIN, "/add"))
    send(updates.text(ADMIN, "Chair"))
    send(updates.text(ADMIN, "Wooden chair"))
    send(updates.photo(ADMIN, ("small", 10, 10), ("big", 99, 99)))

    [product] = catalog.list_products()
    assert product.image_id == "big"
    assert sessions.get(ADMIN) is None


def test_webhook_ignores_unknown_update(client, gateway):
    response = client.post("/webhook", json={
        "update_id": 5,
        "channel_post": {"message_id": 1, "date": 1700000000, "chat": {"id": -100, "type": "channel"}, "text": "hi"},
    })
    assert response.status_code == 200
    assert gateway.texts == []


def test_webhook_secret_is_enforced(client, monkeypatch):
    monkeypatch.setattr(main, "WEBHOOK_SECRET", "s3cret")
    assert client.post("/webhook", json={"update_id": 1}).status_code == 403

    response = client.post(
        "/webhook",
        json={"update_id": 1},
        headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
    )
    assert response.status_code == 200
