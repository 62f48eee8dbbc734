"""
Entity services: the read/merge/write rules for products and tasks.

Services are stateless and take their repository at construction. Absence is
reported as None (get/update/completion) or False (delete), never raised.

Update and completion changes run as read-existing, merge-fields,
write-merged. The sequence is not isolated: two concurrent updates of the same
id race and the last write wins.
"""
from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from .models import PRODUCT_MUTABLE_FIELDS, TASK_MUTABLE_FIELDS, ProductEntity, TaskEntity
from .repositories import ProductRepository, Repository, TaskRepository
from .schemas import ProductIn, TaskIn

logger = logging.getLogger(__name__)


def _merge(existing: dict, replacement: Mapping, fields: Sequence[str]) -> dict:
    """Overwrite `fields` of a copy of `existing` from `replacement`."""
    merged = existing.copy()
    for name in fields:
        merged[name] = replacement[name]
    return merged


def _delete_if_exists(repo: Repository, entity_id: int) -> bool:
    if not repo.exists_by_id(entity_id):
        return False
    repo.delete_by_id(entity_id)
    return True


# PUBLIC_INTERFACE
class ProductService:
    """Business operations over a ProductRepository."""

    def __init__(self, repository: ProductRepository) -> None:
        self._repo = repository

    def list_all(self) -> List[ProductEntity]:
        return self._repo.find_all()

    def get(self, product_id: int) -> Optional[ProductEntity]:
        return self._repo.find_by_id(product_id)

    def create(self, data: ProductIn) -> ProductEntity:
        """Persist a new product; id and created_at are always assigned by storage."""
        draft = _merge(
            {"id": None, "created_at": None}, data.model_dump(), PRODUCT_MUTABLE_FIELDS
        )
        created = self._repo.save(draft)  # type: ignore[arg-type]
        logger.info("Created product %s", created["id"])
        return created

    def update(self, product_id: int, data: ProductIn) -> Optional[ProductEntity]:
        """
        Full replace of every mutable field. Returns None when the id is absent;
        nothing is written in that case.
        """
        existing = self._repo.find_by_id(product_id)
        if existing is None:
            logger.debug("Product %s not found for update", product_id)
            return None
        merged = _merge(existing, data.model_dump(), PRODUCT_MUTABLE_FIELDS)
        updated = self._repo.save(merged)  # type: ignore[arg-type]
        logger.info("Updated product %s", product_id)
        return updated

    def delete(self, product_id: int) -> bool:
        """Return True if a product was removed, False if there was nothing to remove."""
        deleted = _delete_if_exists(self._repo, product_id)
        if deleted:
            logger.info("Deleted product %s", product_id)
        else:
            logger.debug("Product %s not found for delete", product_id)
        return deleted

    def find_by_category(self, category: str) -> List[ProductEntity]:
        return self._repo.find_by_category(category)

    def search_by_name(self, text: str) -> List[ProductEntity]:
        return self._repo.find_by_name_containing_ignore_case(text)

    def find_with_min_stock(self, minimum: int) -> List[ProductEntity]:
        return self._repo.find_by_stock_greater_than_equal(minimum)


# PUBLIC_INTERFACE
class TaskService:
    """Business operations over a TaskRepository."""

    def __init__(self, repository: TaskRepository) -> None:
        self._repo = repository

    def list_all(self) -> List[TaskEntity]:
        return self._repo.find_all()

    def get(self, task_id: int) -> Optional[TaskEntity]:
        return self._repo.find_by_id(task_id)

    def create(self, data: TaskIn) -> TaskEntity:
        draft = _merge({"id": None, "created_at": None}, data.model_dump(), TASK_MUTABLE_FIELDS)
        created = self._repo.save(draft)  # type: ignore[arg-type]
        logger.info("Created task %s", created["id"])
        return created

    def update(self, task_id: int, data: TaskIn) -> Optional[TaskEntity]:
        existing = self._repo.find_by_id(task_id)
        if existing is None:
            logger.debug("Task %s not found for update", task_id)
            return None
        merged = _merge(existing, data.model_dump(), TASK_MUTABLE_FIELDS)
        updated = self._repo.save(merged)  # type: ignore[arg-type]
        logger.info("Updated task %s", task_id)
        return updated

    def delete(self, task_id: int) -> bool:
        deleted = _delete_if_exists(self._repo, task_id)
        if deleted:
            logger.info("Deleted task %s", task_id)
        else:
            logger.debug("Task %s not found for delete", task_id)
        return deleted

    def set_completed(self, task_id: int, completed: bool) -> Optional[TaskEntity]:
        """
        Set the completion flag, keeping title and description from the stored
        record. Runs through update(), so it is a full replace where only
        `completed` differs.
        """
        existing = self._repo.find_by_id(task_id)
        if existing is None:
            logger.debug("Task %s not found for completion change", task_id)
            return None
        replacement = TaskIn.model_construct(
            title=existing["title"],
            description=existing["description"],
            completed=completed,
        )
        return self.update(task_id, replacement)

    def toggle_completed(self, task_id: int) -> Optional[TaskEntity]:
        existing = self._repo.find_by_id(task_id)
        if existing is None:
            logger.debug("Task %s not found for toggle", task_id)
            return None
        return self.set_completed(task_id, not existing["completed"])
