"""
HTTP tests for accounts, whole-map data, views and health.

Each test talks to the FastAPI app through TestClient with the store
dependency pointed at a temporary FileStore.
"""

import pytest

from api.auth import is_auth_enabled

# =============================================================================
# Accounts
# =============================================================================


class TestAccounts:
    def test_create_then_login(self, api_client):
        r = api_client.post("/api/create", json={"username": "alice", "password": "pw"})
        assert r.status_code == 200
        assert r.json() == {"success": True}

        r = api_client.post("/api/login", json={"username": "alice", "password": "pw"})
        assert r.status_code == 200
        assert r.json() == {"clients": {}}

    def test_create_user_alias(self, api_client):
        r = api_client.post("/api/create-user", json={"username": "carol"})
        assert r.status_code == 200
        assert api_client.get("/api/users").json() == [
            {"username": "carol", "hasPassword": False}
        ]

    def test_duplicate_is_conflict(self, api_client):
        api_client.post("/api/create", json={"username": "alice"})
        r = api_client.post("/api/create", json={"username": "alice"})
        assert r.status_code == 409
        assert r.json()["detail"] == "User already exists"

    def test_username_required(self, api_client):
        assert api_client.post("/api/create", json={"username": "  "}).status_code == 400
        assert api_client.post("/api/login", json={}).status_code == 400

    def test_login_unknown_user(self, api_client):
        r = api_client.post("/api/login", json={"username": "nobody"})
        assert r.status_code == 404
        assert r.json()["detail"] == "User not found"

    def test_login_wrong_password(self, api_client, board_store):
        r = api_client.post("/api/login", json={"username": "bob", "password": "nope"})
        assert r.status_code == 403
        assert r.json()["detail"] == "Incorrect password"

    def test_login_returns_personal_clients(self, api_client, board_store):
        r = api_client.post("/api/login", json={"username": "alice"})
        assert list(r.json()["clients"]) == ["acme"]

    def test_users_never_expose_passwords(self, api_client, board_store):
        assert api_client.get("/api/users").json() == [
            {"username": "alice", "hasPassword": False},
            {"username": "bob", "hasPassword": True},
        ]


class TestAdminRoutes:
    def test_open_without_admin_token(self, api_client, board_store):
        r = api_client.put("/api/users/bob", json={"password": ""})
        assert r.status_code == 200
        assert board_store.list_users()[1]["hasPassword"] is False

        assert api_client.delete("/api/users/bob").status_code == 200
        assert [u["username"] for u in board_store.list_users()] == ["alice"]

    def test_token_required_when_configured(self, api_client, board_store, monkeypatch):
        monkeypatch.setenv("MONA_ADMIN_TOKEN", "s3cret")
        assert api_client.delete("/api/users/bob").status_code == 401
        r = api_client.delete("/api/users/bob", headers={"Authorization": "Bearer wrong"})
        assert r.status_code == 401

        r = api_client.delete("/api/users/bob", headers={"Authorization": "Bearer s3cret"})
        assert r.status_code == 200

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"headers": {"X-API-Token": "s3cret"}},
            {"params": {"api_token": "s3cret"}},
        ],
    )
    def test_alternate_token_locations(self, api_client, board_store, monkeypatch, kwargs):
        monkeypatch.setenv("MONA_ADMIN_TOKEN", "s3cret")
        r = api_client.put("/api/users/bob", json={"password": "new"}, **kwargs)
        assert r.status_code == 200

    def test_delete_unknown_user(self, api_client):
        assert api_client.delete("/api/users/ghost").status_code == 404


# =============================================================================
# Whole-map data
# =============================================================================


class TestData:
    def test_read_and_replace_personal_map(self, api_client, board_store, globex):
        assert list(api_client.get("/api/data/alice").json()) == ["acme"]

        r = api_client.post("/api/data/alice", json={"globex": globex})
        assert r.status_code == 200
        assert list(board_store.get_user_state("alice")["clients"]) == ["globex"]

    def test_unknown_user(self, api_client):
        assert api_client.get("/api/data/ghost").status_code == 404
        assert api_client.post("/api/data/ghost", json={}).status_code == 404

    def test_legacy_save(self, api_client, board_store):
        r = api_client.post("/api/save", json={"username": "bob", "clients": {"x": {"id": "x"}}})
        assert r.status_code == 200
        assert board_store.get_user_state("bob")["clients"] == {"x": {"id": "x"}}

    def test_shared_map_replacement(self, api_client, board_store):
        assert api_client.get("/api/shared").json() == {}
        api_client.post("/api/shared", json={"s1": {"id": "s1", "owner": "bob"}})
        assert api_client.get("/api/shared").json() == {"s1": {"id": "s1", "owner": "bob"}}

    def test_shared_upsert_keeps_other_entries(self, api_client, board_store):
        board_store.put_shared_state({"s1": {"id": "s1", "owner": "bob", "shared": True}})
        r = api_client.post("/api/shared/s2?username=alice", json={"name": "Two"})
        assert r.status_code == 200

        shared = board_store.get_shared_state()
        assert set(shared) == {"s1", "s2"}
        assert shared["s2"] == {"name": "Two", "id": "s2", "shared": True, "owner": "alice"}

    def test_shared_upsert_by_non_owner_is_forbidden(self, api_client, board_store):
        board_store.put_shared_state({"s1": {"id": "s1", "owner": "bob", "shared": True}})
        r = api_client.post("/api/shared/s1?username=alice", json={"name": "Mine now"})
        assert r.status_code == 403
        assert board_store.get_shared_state()["s1"]["owner"] == "bob"


# =============================================================================
# Views
# =============================================================================


class TestViews:
    @pytest.fixture
    def monday_store(self, board_store, acme):
        # 2026-03-16 is a Monday
        acme["meetings"][1]["deliverables"][0]["tasks"][0]["due"] = "03/16"
        board_store.put_user_state("alice", {"acme": acme})
        return board_store

    def test_week(self, api_client, monday_store):
        r = api_client.get("/api/views/alice/week", params={"anchor": "2026-03-18"})
        body = r.json()
        assert r.status_code == 200
        assert body["username"] == "alice"
        assert body["stale"] is False
        assert list(body["days"]) == [
            "2026-03-16",
            "2026-03-17",
            "2026-03-18",
            "2026-03-19",
            "2026-03-20",
        ]
        assert [t["id"] for t in body["days"]["2026-03-16"]] == ["acme::m1::d1::t1"]

    def test_calendar(self, api_client, monday_store):
        body = api_client.get("/api/views/alice/calendar", params={"anchor": "2026-03-02"}).json()
        assert body["month"] == "2026-03"
        cell = next(c for c in body["cells"] if c["dayKey"] == "2026-03-16")
        assert cell["inMonth"] is True
        assert cell["tasks"][0]["taskName"] == "Draft"

    def test_invalid_anchor(self, api_client, monday_store):
        r = api_client.get("/api/views/alice/week", params={"anchor": "03/16"})
        assert r.status_code == 400

    def test_upcoming(self, api_client, monday_store):
        body = api_client.get("/api/views/alice/upcoming").json()
        assert body["total"] == 1
        assert body["tasks"][0]["assignees"] == ["Pat"]
        assert api_client.get("/api/views/alice/upcoming?assignee=sam").json()["total"] == 0

    def test_buckets(self, api_client, board_store):
        buckets = api_client.get("/api/views/alice/buckets").json()["buckets"]
        assert [d["id"] for d in buckets["Active Work"]] == ["acme::m1::d1"]
        assert buckets["Unassigned"] == []

        filtered = api_client.get("/api/views/alice/buckets?search=nothing").json()["buckets"]
        assert filtered["Active Work"] == []

    def test_search(self, api_client, board_store):
        body = api_client.get("/api/views/alice/search", params={"q": "draft"}).json()
        assert body["total"] == 1
        assert body["results"][0]["id"] == "acme::m1::d1::t1"

    def test_shared_clients_are_visible(self, api_client, board_store, globex):
        board_store.put_shared_state({"globex": {**globex, "shared": True}})
        body = api_client.get("/api/views/bob/search", params={"q": "outline"}).json()
        assert body["results"][0]["clientId"] == "globex"

    def test_unknown_user(self, api_client):
        assert api_client.get("/api/views/ghost/upcoming").status_code == 404


# =============================================================================
# Health and request ids
# =============================================================================


class TestHealth:
    def test_health(self, api_client):
        body = api_client.get("/api/health").json()
        assert body["status"] == "healthy"
        assert body["store"] == "file"

    def test_reports_snapshot_cache(self, api_client, board_store):
        assert api_client.get("/api/health").json()["cache"]["size"] == 0

        api_client.get("/api/views/alice/upcoming")

        cache = api_client.get("/api/health").json()["cache"]
        assert cache["size"] == 1
        assert set(cache) == {"hits", "misses", "size", "hit_rate"}

    def test_request_id_is_echoed(self, api_client):
        r = api_client.get("/api/health", headers={"X-Request-ID": "req-test-1"})
        assert r.headers["x-request-id"] == "req-test-1"

    def test_request_id_is_generated(self, api_client):
        assert api_client.get("/api/health").headers["x-request-id"].startswith("req-")


class TestAuthConfig:
    def test_is_auth_enabled(self, monkeypatch):
        assert is_auth_enabled() is False
        monkeypatch.setenv("MONA_ADMIN_TOKEN", "x")
        assert is_auth_enabled() is True
