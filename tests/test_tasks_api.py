from fastapi.testclient import TestClient

from catalog_api.main import create_app
from catalog_api.settings import Settings

client = TestClient(create_app(Settings(persistence_backend="memory")))

BASE = "/api/v1/tasks/"


def create_task(title="Buy milk", description=None, **extra):
    payload = {"title": title, "description": description, **extra}
    res = client.post(BASE, json=payload)
    assert res.status_code == 201
    return res.json()


class TestTaskLifecycle:
    def test_create_complete_delete_scenario(self):
        task = create_task("Buy milk")
        assert task["completed"] is False
        assert task["id"] is not None
        tid = task["id"]

        res_done = client.put(f"{BASE}{tid}/complete")
        assert res_done.status_code == 200
        done = res_done.json()
        assert done["completed"] is True
        assert done["title"] == "Buy milk"

        res_del = client.delete(f"{BASE}{tid}")
        assert res_del.status_code == 204

        res_get = client.get(f"{BASE}{tid}")
        assert res_get.status_code == 404
        assert res_get.json()["detail"] == "Task not found"

    def test_uncomplete_reopens_task(self):
        tid = create_task("Reopen me", completed=True)["id"]
        res = client.put(f"{BASE}{tid}/uncomplete")
        assert res.status_code == 200
        assert res.json()["completed"] is False

    def test_toggle_flips_only_completed(self):
        task = create_task("Toggle me", description="keep this")
        tid = task["id"]

        first = client.patch(f"{BASE}{tid}/toggle").json()
        assert first["completed"] is True
        second = client.patch(f"{BASE}{tid}/toggle").json()
        assert second["completed"] is False

        for key in ("id", "title", "description", "created_at"):
            assert first[key] == task[key]
            assert second[key] == task[key]

    def test_put_replaces_and_keeps_identity(self):
        task = create_task("Initial", description="A")
        tid = task["id"]

        res = client.put(f"{BASE}{tid}", json={"title": "Replaced", "completed": True, "id": 77})
        assert res.status_code == 200
        updated = res.json()
        assert updated["id"] == tid
        assert updated["created_at"] == task["created_at"]
        assert updated["title"] == "Replaced"
        assert updated["description"] is None
        assert updated["completed"] is True

    def test_list_contains_created(self):
        tid = create_task("Listed")["id"]
        res = client.get(BASE)
        assert res.status_code == 200
        assert tid in {t["id"] for t in res.json()}


class TestTaskAbsence:
    def test_get_missing(self):
        assert client.get(f"{BASE}999999").status_code == 404

    def test_update_missing_leaves_storage_unchanged(self):
        before = len(client.get(BASE).json())
        res = client.put(f"{BASE}999", json={"title": "Nope"})
        assert res.status_code == 404
        assert len(client.get(BASE).json()) == before

    def test_completion_changes_on_missing(self):
        assert client.put(f"{BASE}999999/complete").status_code == 404
        assert client.put(f"{BASE}999999/uncomplete").status_code == 404
        assert client.patch(f"{BASE}999999/toggle").status_code == 404

    def test_delete_missing(self):
        res = client.delete(f"{BASE}999999")
        assert res.status_code == 404
        assert res.json()["detail"] == "Task not found"


class TestTaskValidation:
    def test_blank_title_rejected(self):
        res = client.post(BASE, json={"title": "  "})
        assert res.status_code == 422
        body = res.json()
        assert body["error"] == "ValidationError"
        assert isinstance(body["detail"], list)

    def test_title_is_stripped(self):
        task = create_task("  Padded  ")
        assert task["title"] == "Padded"

    def test_padded_title_at_max_length_accepted(self):
        task = create_task("   " + "t" * 100 + "   ")
        assert task["title"] == "t" * 100

    def test_overlong_title_rejected(self):
        res = client.post(BASE, json={"title": "t" * 101})
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"

    def test_non_integer_id_rejected(self):
        res = client.get(f"{BASE}abc")
        assert res.status_code == 422
