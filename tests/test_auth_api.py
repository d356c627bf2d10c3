"""Tests for registration, login and the bearer guard."""
from fastapi.testclient import TestClient

from videohub.auth import get_token_service
from videohub.models.user import User


class TestRegister:
    def test_register_returns_201(self, client: TestClient):
        resp = client.post("/api/auth/register", json={"name": "A", "email": "a@x.com", "password": "p1"})
        assert resp.status_code == 201
        assert resp.json() == {"message": "Registered successfully"}

    def test_duplicate_email_returns_400(self, client: TestClient):
        body = {"name": "A", "email": "a@x.com", "password": "p1"}
        assert client.post("/api/auth/register", json=body).status_code == 201
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "User already exists"

    def test_duplicate_email_is_case_insensitive(self, client: TestClient):
        client.post("/api/auth/register", json={"name": "A", "email": "a@x.com", "password": "p1"})
        resp = client.post("/api/auth/register", json={"name": "B", "email": "  A@X.com ", "password": "p2"})
        assert resp.status_code == 400

    def test_missing_fields_returns_400(self, client: TestClient):
        resp = client.post("/api/auth/register", json={"name": "A", "email": "a@x.com"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "All fields are required"

    def test_password_is_stored_hashed(self, client: TestClient, db_session):
        client.post("/api/auth/register", json={"name": "A", "email": "a@x.com", "password": "p1"})
        user = db_session.query(User).filter(User.email == "a@x.com").one()
        assert user.password != "p1"
        assert user.password.startswith("$argon2")


class TestLogin:
    def test_login_returns_token_and_user(self, client: TestClient):
        client.post("/api/auth/register", json={"name": "A", "email": "a@x.com", "password": "p1"})
        resp = client.post("/api/auth/login", json={"email": "a@x.com", "password": "p1"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["user"]["name"] == "A"
        assert data["user"]["email"] == "a@x.com"
        assert get_token_service().verify(data["token"]) == data["user"]["id"]

    def test_unknown_email_and_wrong_password_look_the_same(self, client: TestClient):
        client.post("/api/auth/register", json={"name": "A", "email": "a@x.com", "password": "p1"})
        wrong_pw = client.post("/api/auth/login", json={"email": "a@x.com", "password": "nope"})
        no_user = client.post("/api/auth/login", json={"email": "b@x.com", "password": "p1"})
        assert wrong_pw.status_code == no_user.status_code == 400
        assert wrong_pw.json() == no_user.json() == {"detail": "Invalid credentials"}

    def test_missing_credentials_returns_400(self, client: TestClient):
        resp = client.post("/api/auth/login", json={"email": "a@x.com"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing credentials"


class TestGuard:
    def test_no_token_returns_401(self, client: TestClient):
        resp = client.get("/api/videos")
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_garbage_token_returns_401(self, client: TestClient):
        resp = client.get("/api/videos", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid credentials"

    def test_me_returns_current_account(self, client: TestClient, auth_headers: dict):
        resp = client.get("/api/auth/me", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["email"] == "a@x.com"


def test_register_login_then_empty_listing(client: TestClient):
    assert client.post("/api/auth/register", json={"name": "A", "email": "a@x.com", "password": "p1"}).status_code == 201
    login = client.post("/api/auth/login", json={"email": "a@x.com", "password": "p1"})
    assert login.status_code == 200
    resp = client.get("/api/videos", headers={"Authorization": f"Bearer {login.json()['token']}"})
    assert resp.status_code == 200
    assert resp.json() == []
