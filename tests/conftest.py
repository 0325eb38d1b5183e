from __future__ import annotations

import pytest

from bivo.app import create_app
from bivo.db import connect, init_schema
from bivo.ledger import LedgerStore


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "DB_PATH": str(tmp_path / "bivo-test.db"),
        "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
        "LOG_LEVEL": "WARNING",
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def conn(tmp_path):
    conn = connect(str(tmp_path / "ledger.db"))
    init_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def store(conn):
    return LedgerStore(conn)


@pytest.fixture
def make_user(conn):
    def _make(name="Sari", email="sari@example.com"):
        cur = conn.execute(
            "INSERT INTO users (name, email, password_hash, is_guest) VALUES (?,?,?,0)",
            (name, email, "x"),
        )
        conn.commit()
        return cur.lastrowid
    return _make


def register_and_login(client, name="Budi", email="budi@example.com", password="rahasia123"):
    """Register a user and return (user dict, Authorization headers)."""
    resp = client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.get_json()
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    return body["user"], {"Authorization": f"Bearer {body['access_token']}"}


@pytest.fixture
def auth_headers(client):
    _, headers = register_and_login(client)
    return headers


def category_id(client, headers, name):
    for category in client.get("/categories", headers=headers).get_json():
        if category["name"] == name:
            return category["id"]
    raise AssertionError(f"category {name!r} not found")
