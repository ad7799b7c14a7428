"""
Authentication Endpoint Tests
-----------------------------
Full HTTP round trips through the FastAPI app with in-memory stores.
"""

import pytest

from tests.api_helpers import REGISTER_URL, bearer, login, promote_to_admin, register
from tests.fakes import TEST_PASSWORD


class TestRegister:
    def test_register_returns_user_without_password(self, client):
        response = register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User registered successfully"
        assert body["data"]["username"] == "ann"
        assert body["data"]["role"] == "USER"
        assert "password" not in body["data"]
        assert "password_hash" not in body["data"]

    def test_email_is_normalized(self, client):
        response = register(client, email="Ann@Example.COM")
        assert response.json()["data"]["email"] == "ann@example.com"

    def test_duplicate_email(self, client):
        register(client)
        response = register(client, username="other", email="ann@example.com")

        assert response.status_code == 409
        assert response.json() == {"detail": "Email already registered"}

    def test_duplicate_username(self, client):
        register(client)
        response = register(client, email="other@example.com")

        assert response.status_code == 409
        assert response.json() == {"detail": "Username already taken"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"username": "ab", "email": "ann@example.com", "password": TEST_PASSWORD},
            {"username": "ann!", "email": "ann@example.com", "password": TEST_PASSWORD},
            {"username": "ann", "email": "not-an-email", "password": TEST_PASSWORD},
            {"username": "ann", "email": "ann@example.com", "password": "short1A"},
            {"username": "ann", "email": "ann@example.com", "password": "alllowercase1"},
            {"username": "ann", "email": "ann@example.com"},
        ],
    )
    def test_invalid_payload_is_400(self, client, payload):
        response = client.post(REGISTER_URL, json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Validation failed"
        assert body["errors"]


class TestLogin:
    def test_login_returns_pair_and_user(self, client):
        register(client)
        response = login(client)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["user"]["email"] == "ann@example.com"

    def test_login_email_case_insensitive(self, client):
        register(client)
        assert login(client, email="ANN@example.com").status_code == 200

    @pytest.mark.parametrize(
        "email,password",
        [("ann@example.com", "WrongPass999"), ("nobody@example.com", TEST_PASSWORD)],
    )
    def test_bad_credentials_are_indistinguishable(self, client, email, password):
        register(client)
        response = login(client, email=email, password=password)

        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid credentials"}
        assert response.headers["www-authenticate"] == "Bearer"


class TestSessions:
    def test_refresh_rotates_once(self, client):
        register(client)
        refresh_token = login(client).json()["data"]["refresh_token"]

        first = client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
        replay = client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})

        assert first.status_code == 200
        assert first.json()["data"]["refresh_token"] != refresh_token
        assert replay.status_code == 401
        assert replay.json()["detail"] == "Refresh token not found"

    def test_refresh_with_garbage(self, client):
        response = client.post("/api/v1/auth/refresh", json={"refresh_token": "garbage"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid refresh token"

    def test_logout_then_logout_again(self, client):
        register(client)
        refresh_token = login(client).json()["data"]["refresh_token"]

        first = client.post("/api/v1/auth/logout", json={"refresh_token": refresh_token})
        second = client.post("/api/v1/auth/logout", json={"refresh_token": refresh_token})

        assert first.status_code == 200
        assert first.json()["message"] == "Logged out successfully"
        assert second.status_code == 401
        assert second.json()["detail"] == "Refresh token not found or already invalidated"

    def test_logout_all(self, client):
        register(client)
        first = login(client).json()["data"]
        second = login(client).json()["data"]

        response = client.post("/api/v1/auth/logout-all", headers=bearer(first["access_token"]))

        assert response.json()["data"] == {"deleted": 2}
        refreshed = client.post(
            "/api/v1/auth/refresh", json={"refresh_token": second["refresh_token"]}
        )
        assert refreshed.status_code == 401

    def test_me(self, client):
        register(client)
        access_token = login(client).json()["data"]["access_token"]

        response = client.get("/api/v1/auth/me", headers=bearer(access_token))

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "ann@example.com"
        assert response.json()["data"]["role"] == "USER"

    @pytest.mark.parametrize(
        "headers,detail",
        [
            ({}, "No authorization header provided"),
            ({"Authorization": "Basic abc"}, "Invalid authorization format. Use: Bearer <token>"),
            ({"Authorization": "Bearer not-a-token"}, "Invalid or expired token"),
        ],
    )
    def test_me_requires_valid_bearer(self, client, headers, detail):
        response = client.get("/api/v1/auth/me", headers=headers)

        assert response.status_code == 401
        assert response.json() == {"detail": detail}

    def test_refresh_token_is_not_an_access_token(self, client):
        register(client)
        refresh_token = login(client).json()["data"]["refresh_token"]

        response = client.get("/api/v1/auth/me", headers=bearer(refresh_token))
        assert response.status_code == 401


class TestAdminSweep:
    def test_purge_requires_admin(self, client):
        register(client)
        token = login(client).json()["data"]["access_token"]

        response = client.post("/api/v1/admin/sessions/purge-expired", headers=bearer(token))

        assert response.status_code == 403
        assert response.json() == {"detail": "Insufficient permissions"}

    def test_admin_purges_expired_sessions(self, client, stores, clock):
        register(client)
        login(client)
        register(client, username="root")
        promote_to_admin(stores, "root@example.com")
        clock.advance(days=8)
        token = login(client, email="root@example.com").json()["data"]["access_token"]

        response = client.post("/api/v1/admin/sessions/purge-expired", headers=bearer(token))

        assert response.status_code == 200
        assert response.json()["data"] == {"deleted": 1}
