"""
Test configuration - ensures repo root is in sys.path and isolates storage.

This allows tests to import from top-level packages (mona, api, cli).
Every test runs with MONA_HOME pointed at a temporary directory, so nothing
touches a real ~/.mona.
"""

import sys
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import mona.*, api.*, cli.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from api.deps import get_store  # noqa: E402
from api.server import app  # noqa: E402
from mona.cache import get_cache  # noqa: E402
from mona.store import DocumentStore, FileStore  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point every path helper at a per-test directory."""
    home = tmp_path / "mona-home"
    monkeypatch.setenv("MONA_HOME", str(home))
    monkeypatch.delenv("MONA_DATA_DIR", raising=False)
    monkeypatch.delenv("MONA_DB", raising=False)
    monkeypatch.delenv("MONA_ADMIN_TOKEN", raising=False)
    get_cache().clear()
    yield home
    get_cache().clear()


@pytest.fixture
def file_store(tmp_path):
    return FileStore(tmp_path / "data")


@pytest.fixture
def document_store(tmp_path):
    return DocumentStore(tmp_path / "mona.db")


@pytest.fixture(params=["file", "document"])
def any_store(request, tmp_path):
    """Both local backends, for contract tests."""
    if request.param == "file":
        return FileStore(tmp_path / "data")
    return DocumentStore(tmp_path / "mona.db")


@pytest.fixture
def acme():
    """Acme -> Kickoff -> Spec -> Draft (due 03/15, Pat), plus an undated task."""
    return {
        "id": "acme",
        "name": "Acme",
        "logo": "",
        "owner": "alice",
        "shared": False,
        "team": ["Pat"],
        "status": {},
        "notes": "",
        "meetings": [
            {"id": "adhoc", "isAdHoc": True, "name": "", "date": "", "deliverables": []},
            {
                "id": "m1",
                "name": "Kickoff",
                "date": "03/01",
                "isAdHoc": False,
                "deliverables": [
                    {
                        "id": "d1",
                        "name": "Spec",
                        "bucket": "Active Work",
                        "isDeliverableComplete": False,
                        "tasks": [
                            {
                                "id": "t1",
                                "name": "Draft",
                                "assignees": ["Pat"],
                                "due": "03/15",
                                "complete": False,
                            },
                            {
                                "id": "t2",
                                "name": "Review",
                                "assignees": [],
                                "due": "",
                                "complete": False,
                            },
                        ],
                    }
                ],
            },
        ],
        "pastMeetings": [
            {"id": "adhoc_past", "isAdHoc": True, "name": "", "date": "", "deliverables": []}
        ],
    }


@pytest.fixture
def globex():
    """A legacy client: no ad-hoc meetings, single-assignee tasks."""
    return {
        "id": "globex",
        "name": "Globex Corp",
        "owner": "alice",
        "meetings": [
            {
                "id": "m9",
                "name": "Planning",
                "date": "04/02",
                "isAdHoc": False,
                "deliverables": [
                    {
                        "id": "d9",
                        "name": "Roadmap",
                        "tasks": [
                            {"id": "t9", "name": "Outline", "assignee": "Sam", "due": "04/10"},
                            {"id": "t10", "name": "Bad date", "due": "13/40"},
                        ],
                    }
                ],
            }
        ],
        "pastMeetings": [],
    }


@pytest.fixture
def api_client(file_store):
    """TestClient over the app, backed by a temporary FileStore."""
    app.dependency_overrides[get_store] = lambda: file_store
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def board_store(file_store, acme):
    """alice owns Acme; bob has an empty board."""
    file_store.create_user("alice")
    file_store.create_user("bob", "secret")
    file_store.put_user_state("alice", {"acme": acme})
    return file_store
