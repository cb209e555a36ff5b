"""Tests for the REST API router."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.interface.api_router import register_error_handlers
from src.interface.api_router import router as api_router


@pytest.fixture
def client(patched_db) -> TestClient:
    """Create test client for the API router backed by the in-memory database."""
    test_app = FastAPI()
    test_app.include_router(api_router)
    register_error_handlers(test_app)
    return TestClient(test_app)


def _register(client: TestClient, code: str = "SMITH01", members: list[str] | None = None) -> dict:
    response = client.post(
        "/api/families/register",
        json={
            "name": "Smith",
            "code": code,
            "password": "hunter2",
            "members": [{"name": name} for name in (members if members is not None else ["Alice", "Bob"])],
        },
    )
    assert response.status_code == 201
    return response.json()


def _login(client: TestClient, code: str = "SMITH01") -> dict[str, str]:
    response = client.post("/api/families/login", json={"code": code, "password": "hunter2"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth(client: TestClient) -> dict[str, str]:
    """Register the Smith family and return its auth header."""
    _register(client)
    return _login(client)


def test_register_returns_summary(client: TestClient) -> None:
    """Test registration returns the family without its password."""
    body = _register(client)

    assert body["name"] == "Smith"
    assert body["code"] == "SMITH01"
    assert "password" not in body
    assert "password_hash" not in body


def test_register_duplicate_code_conflicts(client: TestClient) -> None:
    """Test registering a taken code returns 409."""
    _register(client)

    response = client.post("/api/families/register", json={"name": "X", "code": "SMITH01", "password": "pw"})

    assert response.status_code == 409
    assert response.json()["code"] == "ERR_CONFLICT"


def test_login_wrong_password(client: TestClient) -> None:
    """Test a wrong password returns 401."""
    _register(client)

    response = client.post("/api/families/login", json={"code": "SMITH01", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid code or password"


@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Bearer not-a-token"}, {"Authorization": "Basic abc"}],
)
def test_protected_routes_require_valid_token(client: TestClient, headers: dict[str, str]) -> None:
    """Test missing, invalid or malformed tokens return 401."""
    response = client.get("/api/tasks", headers=headers)

    assert response.status_code == 401


def test_members_add_and_list(client: TestClient, auth: dict[str, str]) -> None:
    """Test added members appear with score 0 after the initial members."""
    created = client.post("/api/members", json={"name": "Carol"}, headers=auth)
    listed = client.get("/api/members", headers=auth)

    assert created.status_code == 201
    assert created.json()["score"] == 0
    assert [m["name"] for m in listed.json()] == ["Alice", "Bob", "Carol"]


def test_blank_task_title_rejected(client: TestClient, auth: dict[str, str]) -> None:
    """Test request validation rejects blank titles."""
    response = client.post("/api/tasks", json={"title": "   "}, headers=auth)

    assert response.status_code == 422


def test_task_lifecycle(client: TestClient, auth: dict[str, str]) -> None:
    """Test create, assign, complete twice, and the resulting statistics."""
    task = client.post("/api/tasks", json={"title": "Dishes", "priority": "high"}, headers=auth).json()
    assert task["completed"] is False
    assert task["priority"] == "high"

    assigned = client.post(f"/api/tasks/{task['id']}/assign", json={"member": "Alice"}, headers=auth)
    assert assigned.json() == {"id": task["id"], "assigned_to": "Alice"}

    first = client.post(f"/api/tasks/{task['id']}/complete", headers=auth)
    second = client.post(f"/api/tasks/{task['id']}/complete", headers=auth)

    assert first.status_code == 200
    assert first.json()["member_score"] == 1
    assert second.status_code == 200
    assert "member_score" not in second.json()
    assert second.json()["completed_at"] == first.json()["completed_at"]

    stats = client.get("/api/stats/members", headers=auth).json()
    assert stats[0] == {"member": "Alice", "total_tasks": 1, "completed_tasks": 1, "score": 1}


def test_complete_with_explicit_date(client: TestClient, auth: dict[str, str]) -> None:
    """Test the completion date can be supplied by the client."""
    task = client.post("/api/tasks", json={"title": "Dishes"}, headers=auth).json()

    response = client.post(
        f"/api/tasks/{task['id']}/complete", json={"date": "2024-01-02T12:00:00Z"}, headers=auth
    )

    assert datetime.fromisoformat(response.json()["completed_at"]) == datetime(2024, 1, 2, 12, tzinfo=UTC)


def test_assign_unknown_member(client: TestClient, auth: dict[str, str]) -> None:
    """Test assigning to a non-member returns 404."""
    task = client.post("/api/tasks", json={"title": "Dishes"}, headers=auth).json()

    response = client.post(f"/api/tasks/{task['id']}/assign", json={"member": "Zed"}, headers=auth)

    assert response.status_code == 404
    assert response.json()["error"] == "Member not found"


def test_update_and_delete_task(client: TestClient, auth: dict[str, str]) -> None:
    """Test partial updates and deletion."""
    task = client.post("/api/tasks", json={"title": "Dishes"}, headers=auth).json()

    updated = client.put(f"/api/tasks/{task['id']}", json={"title": "Wash dishes"}, headers=auth)
    deleted = client.delete(f"/api/tasks/{task['id']}", headers=auth)
    missing = client.put(f"/api/tasks/{task['id']}", json={"title": "Gone"}, headers=auth)

    assert updated.json()["title"] == "Wash dishes"
    assert deleted.status_code == 204
    assert missing.status_code == 404


@pytest.mark.parametrize("payload", [{"title": None}, {"title": "  "}, {"priority": None}])
def test_update_rejects_clearing_required_fields(client: TestClient, auth: dict[str, str], payload: dict) -> None:
    """Test updates cannot null or blank the title or priority."""
    task = client.post("/api/tasks", json={"title": "Dishes"}, headers=auth).json()

    response = client.put(f"/api/tasks/{task['id']}", json=payload, headers=auth)
    listed = client.get("/api/tasks", headers=auth).json()

    assert response.status_code == 422
    assert [(t["title"], t["priority"]) for t in listed] == [("Dishes", "medium")]


def test_list_tasks_completed_filter(client: TestClient, auth: dict[str, str]) -> None:
    """Test the completed query parameter filters tasks."""
    done = client.post("/api/tasks", json={"title": "Dishes"}, headers=auth).json()
    client.post("/api/tasks", json={"title": "Laundry"}, headers=auth)
    client.post(f"/api/tasks/{done['id']}/complete", headers=auth)

    open_titles = [t["title"] for t in client.get("/api/tasks?completed=false", headers=auth).json()]
    all_titles = [t["title"] for t in client.get("/api/tasks", headers=auth).json()]

    assert open_titles == ["Laundry"]
    assert all_titles == ["Dishes", "Laundry"]


def test_comments(client: TestClient, auth: dict[str, str]) -> None:
    """Test comments are appended and returned."""
    task = client.post("/api/tasks", json={"title": "Dishes"}, headers=auth).json()

    response = client.post(
        f"/api/tasks/{task['id']}/comments", json={"member": "Bob", "text": "Done soon"}, headers=auth
    )

    assert response.status_code == 201
    assert [(c["member"], c["text"]) for c in response.json()["comments"]] == [("Bob", "Done soon")]


def test_families_cannot_see_each_other(client: TestClient, auth: dict[str, str]) -> None:
    """Test another family's task is reported as not found."""
    task = client.post("/api/tasks", json={"title": "Dishes"}, headers=auth).json()
    _register(client, code="JONES01", members=["Carol"])
    jones = _login(client, code="JONES01")

    assert client.post(f"/api/tasks/{task['id']}/complete", headers=jones).status_code == 404
    assert client.get("/api/tasks", headers=jones).json() == []


def test_overdue_alerts(client: TestClient, auth: dict[str, str]) -> None:
    """Test a past-due task is listed until completed."""
    due = (datetime.now(UTC) - timedelta(days=1)).isoformat()
    task = client.post("/api/tasks", json={"title": "Taxes", "due_date": due}, headers=auth).json()

    before = client.get("/api/alerts/overdue", headers=auth).json()
    client.post(f"/api/tasks/{task['id']}/complete", headers=auth)
    after = client.get("/api/alerts/overdue", headers=auth).json()

    assert [o["id"] for o in before] == [task["id"]]
    assert after == []


def test_history_period_validation(client: TestClient, auth: dict[str, str]) -> None:
    """Test history accepts week or month only."""
    client.post("/api/tasks", json={"title": "Dishes"}, headers=auth)

    weekly = client.get("/api/stats/history", headers=auth)
    monthly = client.get("/api/stats/history?period=month", headers=auth)
    invalid = client.get("/api/stats/history?period=year", headers=auth)

    assert weekly.json()[0]["total"] == 1
    assert "-W" in weekly.json()[0]["period"]
    assert len(monthly.json()) == 1
    assert invalid.status_code == 422
