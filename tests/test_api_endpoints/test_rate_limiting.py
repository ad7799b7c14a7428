"""
Rate Limiting Endpoint Tests
----------------------------
Auth, API and global quotas over HTTP. Limits are read from the container's
settings on every request, so each test switches them on with small quotas.
"""

from tests.api_helpers import login, register, signed_in

TASKS_URL = "/api/v1/tasks"


def enable_limits(container, **limits):
    update = {
        "rate_limit_enabled": True,
        "rate_limit_global_requests": 1000,
        "rate_limit_auth_requests": 1000,
        "rate_limit_api_requests": 1000,
    }
    update.update(limits)
    container.settings = container.settings.model_copy(update=update)


class TestAuthLimit:
    def test_login_attempts_limited(self, client, container):
        register(client)
        enable_limits(container, rate_limit_auth_requests=3)

        for _ in range(3):
            assert login(client, password="WrongPass999").status_code == 401
        response = login(client)

        assert response.status_code == 429
        assert response.json() == {
            "detail": "Too many authentication attempts, please try again later"
        }
        assert response.headers["retry-after"] == "900"
        assert response.headers["ratelimit-remaining"] == "0"

    def test_register_shares_the_auth_quota(self, client, container):
        enable_limits(container, rate_limit_auth_requests=2)

        register(client, username="ann")
        login(client)
        response = register(client, username="bob")

        assert response.status_code == 429

    def test_refresh_is_not_an_auth_attempt(self, client, container):
        enable_limits(container, rate_limit_auth_requests=1)
        register(client)

        response = client.post("/api/v1/auth/refresh", json={"refresh_token": "garbage"})

        assert response.status_code == 401

    def test_quota_returns_after_window(self, client, container, clock):
        register(client)
        enable_limits(container, rate_limit_auth_requests=1)
        assert login(client).status_code == 200
        assert login(client).status_code == 429

        clock.advance(seconds=900)

        assert login(client).status_code == 200

    def test_counters_stored_in_redis(self, client, container, fake_redis):
        enable_limits(container)
        register(client)

        assert any(key.startswith("ratelimit:auth:testclient:") for key in fake_redis.data)
        assert any(key.startswith("ratelimit:global:testclient:") for key in fake_redis.data)


class TestApiLimit:
    def test_task_routes_limited(self, client, container):
        _, ann = signed_in(client, "ann")
        enable_limits(container, rate_limit_api_requests=2)

        first = client.get(TASKS_URL, headers=ann)
        second = client.get(f"{TASKS_URL}/stats", headers=ann)
        third = client.get(TASKS_URL, headers=ann)

        assert first.status_code == 200
        assert first.headers["ratelimit-limit"] == "2"
        assert first.headers["ratelimit-remaining"] == "1"
        assert second.status_code == 200
        assert third.status_code == 429
        assert third.json() == {"detail": "Too many API requests, please try again later"}

    def test_health_not_counted_against_api_quota(self, client, container):
        _, ann = signed_in(client, "ann")
        enable_limits(container, rate_limit_api_requests=1)

        for _ in range(3):
            assert client.get("/api/v1/health/").status_code == 200
        assert client.get(TASKS_URL, headers=ann).status_code == 200


class TestGlobalLimit:
    def test_every_route_counts(self, client, container):
        enable_limits(container, rate_limit_global_requests=2)

        assert client.get("/").status_code == 200
        assert client.get("/api/v1/health/").status_code == 200
        response = client.get("/")

        assert response.status_code == 429
        assert response.json() == {
            "detail": "Too many requests from this IP, please try again later"
        }


def test_disabled_by_settings(client):
    register(client)
    for _ in range(20):
        assert login(client, password="WrongPass999").status_code == 401
