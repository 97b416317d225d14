"""
RemoteStore speaks the store contract over HTTP.

The transport is FastAPI's TestClient (an httpx.Client), so these tests run
the real routers against a temporary FileStore.
"""

import httpx
import pytest

from mona.errors import InvalidCredentials, StoreError, UserExists, UserNotFound
from mona.store import RemoteStore
from mona.workspace import Workspace


@pytest.fixture
def remote(api_client):
    return RemoteStore(client=api_client)


class TestRemoteContract:
    def test_create_and_authenticate(self, remote, file_store):
        remote.create_user("alice", "pw")
        assert remote.authenticate("alice", "pw") == {"clients": {}}
        assert file_store.list_users() == [{"username": "alice", "hasPassword": True}]

    def test_errors_map_back_to_domain_errors(self, remote):
        remote.create_user("alice", "pw")
        with pytest.raises(UserExists):
            remote.create_user("alice")
        with pytest.raises(InvalidCredentials):
            remote.authenticate("alice", "wrong")
        with pytest.raises(UserNotFound):
            remote.get_user_state("ghost")

    def test_blank_username_rejected_locally(self, remote):
        with pytest.raises(ValueError):
            remote.create_user(" ")

    def test_full_replacement_round_trip(self, remote, acme, globex):
        remote.create_user("alice")
        remote.put_user_state("alice", {"acme": acme})
        remote.put_user_state("alice", {"globex": globex})
        assert remote.get_user_state("alice") == {"clients": {"globex": globex}}

        remote.put_shared_state({"acme": acme})
        assert remote.get_shared_state() == {"acme": acme}

    def test_admin_operations(self, remote, api_client, file_store, monkeypatch):
        remote.create_user("bob", "pw")
        monkeypatch.setenv("MONA_ADMIN_TOKEN", "tok")
        with pytest.raises(InvalidCredentials):
            remote.delete_user("bob")

        admin = RemoteStore(client=api_client, admin_token="tok")
        admin.set_password("bob", None)
        assert admin.list_users() == [{"username": "bob", "hasPassword": False}]
        admin.delete_user("bob")
        assert file_store.list_users() == []

    def test_transport_failure_is_store_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        store = RemoteStore(
            client=httpx.Client(base_url="http://mona.test", transport=httpx.MockTransport(handler))
        )
        with pytest.raises(StoreError):
            store.get_shared_state()

    def test_server_error_is_store_error(self):
        store = RemoteStore(
            client=httpx.Client(
                base_url="http://mona.test",
                transport=httpx.MockTransport(
                    lambda r: httpx.Response(500, json={"detail": "Server error"})
                ),
            )
        )
        with pytest.raises(StoreError):
            store.put_shared_state({})


class TestRemoteWorkspace:
    def test_session_edits_reach_the_server_store(self, remote, file_store, acme):
        file_store.create_user("alice")
        file_store.put_user_state("alice", {"acme": acme})

        workspace = Workspace("alice", remote)
        workspace.load()
        workspace.apply("acme", lambda c: {**c, "notes": "via http"})

        assert file_store.get_user_state("alice")["clients"]["acme"]["notes"] == "via http"
        assert len(workspace.outbox) == 0
