from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from threading import RLock
from typing import Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from .models import ProductEntity, TaskEntity
from .settings import Settings

logger = logging.getLogger(__name__)

E = TypeVar("E", ProductEntity, TaskEntity)


# PUBLIC_INTERFACE
class Repository(ABC, Generic[E]):
    """
    Abstract storage contract shared by both resource kinds.

    Implementations hand out copies: mutating a returned entity never changes
    stored state until it is passed back to save().
    """

    @abstractmethod
    def save(self, entity: E) -> E:
        """
        Insert the entity when its id is None, otherwise overwrite the record with that id.
        Return the persisted form with id and created_at populated.
        """

    @abstractmethod
    def find_by_id(self, entity_id: int) -> Optional[E]:
        """Return the stored entity, or None if no record has this id."""

    @abstractmethod
    def find_all(self) -> List[E]:
        """Return every stored record ordered by id."""

    @abstractmethod
    def exists_by_id(self, entity_id: int) -> bool:
        """Return True when a record with this id is stored."""

    @abstractmethod
    def delete_by_id(self, entity_id: int) -> None:
        """Remove the record with this id; no-op when absent."""


# PUBLIC_INTERFACE
class ProductRepository(Repository[ProductEntity]):
    """Storage contract for products, with the product read filters."""

    @abstractmethod
    def find_by_category(self, category: str) -> List[ProductEntity]:
        """Return products whose category equals the argument exactly."""

    @abstractmethod
    def find_by_name_containing_ignore_case(self, text: str) -> List[ProductEntity]:
        """Return products whose name contains the text, ignoring case."""

    @abstractmethod
    def find_by_stock_greater_than_equal(self, minimum: int) -> List[ProductEntity]:
        """Return products with stock >= minimum."""


# PUBLIC_INTERFACE
class TaskRepository(Repository[TaskEntity]):
    """Storage contract for tasks."""


class _InMemoryStore(Generic[E]):
    """
    Thread-safe dict-backed store. Each call is atomic; sequences of calls are not.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[int, E] = {}
        self._next_id = 1

    def _now(self) -> datetime:
        return datetime.now()

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def save(self, entity: E) -> E:
        stored = entity.copy()
        with self._lock:
            if stored["id"] is None:
                stored["id"] = self._allocate_id()
                if stored["created_at"] is None:
                    stored["created_at"] = self._now()
            else:
                existing = self._items.get(stored["id"])
                if existing is not None:
                    stored["created_at"] = existing["created_at"]
                elif stored["created_at"] is None:
                    stored["created_at"] = self._now()
                # Keep generated ids ahead of explicitly saved ones
                self._next_id = max(self._next_id, stored["id"] + 1)
            self._items[stored["id"]] = stored
            return stored.copy()

    def find_by_id(self, entity_id: int) -> Optional[E]:
        with self._lock:
            item = self._items.get(entity_id)
            return None if item is None else item.copy()

    def find_all(self) -> List[E]:
        with self._lock:
            return [self._items[k].copy() for k in sorted(self._items)]

    def exists_by_id(self, entity_id: int) -> bool:
        with self._lock:
            return entity_id in self._items

    def delete_by_id(self, entity_id: int) -> None:
        with self._lock:
            self._items.pop(entity_id, None)

    def _select(self, predicate: Callable[[E], bool]) -> List[E]:
        return [t for t in self.find_all() if predicate(t)]


class InMemoryProductRepository(_InMemoryStore[ProductEntity], ProductRepository):
    """
    In-memory product store suitable for testing and default runtime.
    """

    def find_by_category(self, category: str) -> List[ProductEntity]:
        return self._select(lambda p: p["category"] == category)

    def find_by_name_containing_ignore_case(self, text: str) -> List[ProductEntity]:
        s = text.casefold()
        return self._select(lambda p: s in (p["name"] or "").casefold())

    def find_by_stock_greater_than_equal(self, minimum: int) -> List[ProductEntity]:
        return self._select(lambda p: p["stock"] >= minimum)


class InMemoryTaskRepository(_InMemoryStore[TaskEntity], TaskRepository):
    """
    In-memory task store suitable for testing and default runtime.
    """


# PUBLIC_INTERFACE
def get_repositories(settings: Settings) -> Tuple[ProductRepository, TaskRepository]:
    """
    Factory returning the (products, tasks) repositories configured by settings.
    - memory: in-memory stores (state lives as long as the process)
    - sqlite: SQLite stores sharing one database file
    """
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteProductRepository, SQLiteTaskRepository

        logger.info("Using SQLite storage at %s", settings.sqlite_db_path)
        return (
            SQLiteProductRepository(settings.sqlite_db_path),
            SQLiteTaskRepository(settings.sqlite_db_path),
        )
    logger.info("Using in-memory storage")
    return InMemoryProductRepository(), InMemoryTaskRepository()
