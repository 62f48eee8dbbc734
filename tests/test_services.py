import pytest

from catalog_api.repositories import InMemoryProductRepository, InMemoryTaskRepository
from catalog_api.schemas import ProductIn, TaskIn
from catalog_api.services import ProductService, TaskService


@pytest.fixture
def product_repo():
    return InMemoryProductRepository()


@pytest.fixture
def products(product_repo):
    return ProductService(product_repo)


@pytest.fixture
def tasks():
    return TaskService(InMemoryTaskRepository())


def product_in(**overrides):
    data = {"name": "Lamp", "description": "Desk lamp", "price": 19.5, "stock": 3, "category": "home"}
    data.update(overrides)
    return ProductIn(**data)


class TestProductService:
    def test_create_assigns_id_and_created_at(self, products):
        created = products.create(product_in())
        assert created["id"] is not None
        assert created["created_at"] is not None
        assert products.get(created["id"]) == created

    def test_create_ignores_extra_identity_fields(self, products):
        payload = ProductIn(name="X", price=1.0, id=55, created_at="2001-01-01T00:00:00")
        created = products.create(payload)
        assert created["id"] == 1
        assert created["created_at"].year != 2001

    def test_update_preserves_id_and_created_at(self, products):
        existing = products.create(product_in())
        updated = products.update(existing["id"], product_in(name="Floor lamp", stock=0, category=None))
        assert updated["id"] == existing["id"]
        assert updated["created_at"] == existing["created_at"]
        assert updated["name"] == "Floor lamp"
        assert updated["stock"] == 0
        assert updated["category"] is None
        assert products.get(existing["id"]) == updated

    def test_update_missing_returns_none_without_writing(self, products):
        products.create(product_in())
        before = products.list_all()
        assert products.update(999, product_in()) is None
        assert products.list_all() == before

    def test_get_missing_returns_none(self, products):
        assert products.get(42) is None

    def test_delete_true_then_false(self, products):
        pid = products.create(product_in())["id"]
        assert products.delete(pid) is True
        assert products.get(pid) is None
        assert products.delete(pid) is False

    def test_delete_missing_does_not_mutate(self, products):
        products.create(product_in())
        assert products.delete(999) is False
        assert len(products.list_all()) == 1

    def test_list_is_snapshot(self, products):
        products.create(product_in())
        listed = products.list_all()
        listed[0]["name"] = "mutated"
        listed.clear()
        assert products.list_all()[0]["name"] == "Lamp"

    def test_search_by_name(self, products):
        tarea = products.create(product_in(name="Tarea"))
        products.create(product_in(name="Chair"))
        assert products.search_by_name("tar") == [tarea]

    def test_find_by_category_exact(self, products):
        home = products.create(product_in(category="home"))
        products.create(product_in(category="Home"))
        products.create(product_in(category=None))
        assert products.find_by_category("home") == [home]

    def test_min_stock_inclusive(self, products):
        products.create(product_in(stock=4))
        five = products.create(product_in(stock=5))
        six = products.create(product_in(stock=6))
        assert products.find_with_min_stock(5) == [five, six]

    def test_storage_failure_propagates(self, product_repo, products, monkeypatch):
        def boom(entity_id):
            raise RuntimeError("store down")

        monkeypatch.setattr(product_repo, "find_by_id", boom)
        with pytest.raises(RuntimeError, match="store down"):
            products.update(1, product_in())


class TestTaskService:
    def test_create_defaults_to_not_completed(self, tasks):
        created = tasks.create(TaskIn(title="Buy milk"))
        assert created["completed"] is False
        assert created["id"] is not None

    def test_set_completed_changes_only_completed(self, tasks):
        before = tasks.create(TaskIn(title="Write report", description="Q3"))
        after = tasks.set_completed(before["id"], True)
        assert after["completed"] is True
        assert {k: v for k, v in after.items() if k != "completed"} == {
            k: v for k, v in before.items() if k != "completed"
        }

    def test_toggle_flips(self, tasks):
        tid = tasks.create(TaskIn(title="Flip"))["id"]
        assert tasks.toggle_completed(tid)["completed"] is True
        assert tasks.toggle_completed(tid)["completed"] is False

    def test_completion_on_missing_returns_none(self, tasks):
        assert tasks.set_completed(5, True) is None
        assert tasks.toggle_completed(5) is None
        assert tasks.list_all() == []

    def test_update_preserves_identity(self, tasks):
        existing = tasks.create(TaskIn(title="Old", completed=True))
        updated = tasks.update(existing["id"], TaskIn(title="New"))
        assert updated["id"] == existing["id"]
        assert updated["created_at"] == existing["created_at"]
        assert updated["title"] == "New"
        assert updated["completed"] is False

    def test_update_missing_returns_none(self, tasks):
        tasks.create(TaskIn(title="Only"))
        assert tasks.update(999, TaskIn(title="Ghost")) is None
        assert len(tasks.list_all()) == 1

    def test_scenario_create_toggle_delete(self, tasks):
        task = tasks.create(TaskIn(title="Buy milk"))
        done = tasks.set_completed(task["id"], True)
        assert done["completed"] is True
        assert done["title"] == "Buy milk"
        assert tasks.delete(task["id"]) is True
        assert tasks.get(task["id"]) is None
