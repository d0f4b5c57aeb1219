"""
HTTP endpoint tests for the task tracker service.

Tests the FastAPI endpoints via TestClient, exercising the full
request -> Pydantic validation -> CRUD -> response serialization path.
"""

from sqlalchemy.exc import SQLAlchemyError

from task_tracker import crud


def _payload(**overrides):
    defaults = {
        "title": "Write report",
        "description": "Quarterly summary",
        "priority": 2,
        "category": "Work",
        "tags": ["office", "urgent"],
    }
    defaults.update(overrides)
    return defaults


def _create(client, **overrides):
    resp = client.post("/tasks/", json=_payload(**overrides))
    assert resp.status_code == 201
    return resp.json()


# -------------------------------------------------------------------
# Health endpoints
# -------------------------------------------------------------------

class TestHealthEndpoints:

    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["docs"] == "/docs"

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_health_ready(self, client):
        resp = client.get("/health/ready")
        assert resp.status_code == 200
        assert resp.json()["database"] == "connected"


# -------------------------------------------------------------------
# Task endpoints
# -------------------------------------------------------------------

class TestCreateEndpoint:

    def test_create(self, client):
        data = _create(client)

        assert data["id"] is not None
        assert data["status"] == "Pending"
        assert data["tags"] == ["office", "urgent"]
        assert data["completed_at"] is None
        assert "active" not in data

    def test_create_ignores_status_and_id(self, client):
        data = _create(client, status="Completed", id=42)
        assert data["status"] == "Pending"
        assert data["id"] != 42

    def test_create_strips_title(self, client):
        assert _create(client, title="  Padded  ")["title"] == "Padded"

    def test_blank_title_rejected(self, client):
        resp = client.post("/tasks/", json=_payload(title="   "))
        assert resp.status_code == 422

    def test_long_title_rejected(self, client):
        resp = client.post("/tasks/", json=_payload(title="x" * 201))
        assert resp.status_code == 422

    def test_long_description_rejected(self, client):
        resp = client.post("/tasks/", json=_payload(description="x" * 1001))
        assert resp.status_code == 422

    def test_priority_out_of_range_rejected(self, client):
        resp = client.post("/tasks/", json=_payload(priority=4))
        assert resp.status_code == 422

    def test_default_priority_is_low(self, client):
        payload = _payload()
        del payload["priority"]
        resp = client.post("/tasks/", json=payload)
        assert resp.json()["priority"] == 3


class TestReadEndpoints:

    def test_read_empty(self, client):
        resp = client.get("/tasks/")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_read_task(self, client):
        created = _create(client)
        resp = client.get(f"/tasks/{created['id']}")
        assert resp.status_code == 200
        assert resp.json()["title"] == "Write report"

    def test_read_task_not_found(self, client):
        resp = client.get("/tasks/9999")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Task with ID 9999 not found"

    def test_filter(self, client):
        _create(client, title="A", category="Work")
        _create(client, title="B", category="Home")
        _create(client, title="C", category="Work")

        resp = client.get("/tasks/filter", params={"category": "Work", "sort_by": "titulo", "descending": False})
        assert resp.status_code == 200
        assert [t["title"] for t in resp.json()] == ["A", "C"]

    def test_filter_unknown_status_ignored(self, client):
        _create(client)
        resp = client.get("/tasks/filter", params={"status": "bogus"})
        assert len(resp.json()) == 1

    def test_paged(self, client):
        for i in range(25):
            _create(client, title=f"Task {i}")

        resp = client.get("/tasks/paged", params={"page": 3, "page_size": 10})
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["tasks"]) == 5
        assert body["pagination"] == {
            "page": 3,
            "page_size": 10,
            "total_items": 25,
            "total_pages": 3,
            "has_next": False,
            "has_previous": True,
        }

    def test_paged_invalid_page(self, client):
        resp = client.get("/tasks/paged", params={"page": 0})
        assert resp.status_code == 400

    def test_count(self, client):
        _create(client, category="Work")
        _create(client, category="Home")
        assert client.get("/tasks/count").json() == {"total": 2}
        assert client.get("/tasks/count", params={"category": "Home"}).json() == {"total": 1}

    def test_statistics(self, client):
        created = _create(client, priority=1)
        _create(client, priority=3)
        client.patch(f"/tasks/{created['id']}/complete")

        body = client.get("/tasks/statistics").json()
        assert body["total"] == 2
        assert body["completed"] == 1
        assert body["pending"] == 1
        assert body["by_priority"] == {"high": 1, "medium": 0, "low": 1}


class TestMutationEndpoints:

    def test_update(self, client):
        created = _create(client)
        resp = client.put(
            f"/tasks/{created['id']}",
            json=_payload(title="Updated", status="Completed", tags=["done"]),
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Updated"
        assert data["status"] == "Completed"
        assert data["completed_at"] is not None
        assert data["tags"] == ["done"]

    def test_update_invalid_status(self, client):
        created = _create(client)
        resp = client.put(f"/tasks/{created['id']}", json=_payload(status="Archived"))
        assert resp.status_code == 422

    def test_update_not_found(self, client):
        resp = client.put("/tasks/9999", json=_payload())
        assert resp.status_code == 404

    def test_complete(self, client):
        created = _create(client)
        resp = client.patch(f"/tasks/{created['id']}/complete")
        assert resp.status_code == 200
        assert resp.json()["status"] == "Completed"
        assert resp.json()["completed_at"] is not None

    def test_complete_not_found(self, client):
        assert client.patch("/tasks/9999/complete").status_code == 404

    def test_delete(self, client):
        created = _create(client)

        resp = client.delete(f"/tasks/{created['id']}")
        assert resp.status_code == 200
        assert resp.json()["task_id"] == created["id"]

        assert client.get(f"/tasks/{created['id']}").status_code == 404
        assert client.get("/tasks/").json() == []
        assert client.delete(f"/tasks/{created['id']}").status_code == 404


class TestTimezoneHandling:

    def test_offset_due_date_stored_as_utc(self, client):
        data = _create(client, due_date="2024-06-01T10:00:00+02:00")
        assert data["due_date"] == "2024-06-01T08:00:00"

        stored = client.get(f"/tasks/{data['id']}").json()
        assert stored["due_date"] == "2024-06-01T08:00:00"

    def test_offset_due_date_counts_as_overdue(self, client, clock):
        # 13:30+02:00 is 11:30 UTC, before the clock's 12:00 UTC
        _create(client, due_date="2024-06-01T13:30:00+02:00")

        assert client.get("/tasks/statistics").json()["overdue"] == 1

    def test_offset_range_bounds_converted(self, client, clock):
        created = _create(client)
        assert created["created_at"] == "2024-06-01T12:00:01"

        # 14:00:01+02:00 is exactly the creation time in UTC
        resp = client.get("/tasks/filter", params={"end_date": "2024-06-01T14:00:01+02:00"})
        assert [t["id"] for t in resp.json()] == [created["id"]]

        resp = client.get("/tasks/filter", params={"end_date": "2024-06-01T14:00:00+02:00"})
        assert resp.json() == []


class TestTitleWhitespace:

    def test_padded_max_length_title_accepted(self, client):
        title = "x" * 200
        assert _create(client, title=f"  {title}  ")["title"] == title

    def test_padded_description_stripped_before_length_check(self, client):
        description = "d" * 1000
        assert _create(client, description=f" {description} ")["description"] == description


class TestDatabaseErrors:

    def test_database_error_returns_500(self, client, monkeypatch):
        def broken_get_tasks(db):
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(crud, "get_tasks", broken_get_tasks)
        resp = client.get("/tasks/")

        assert resp.status_code == 500
        assert resp.json() == {"detail": "Database error occurred"}
