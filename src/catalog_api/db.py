from __future__ import annotations

import os
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Generator, List, Optional, Sequence, Tuple

from .models import ProductEntity, TaskEntity
from .repositories import ProductRepository, TaskRepository


# SQLite INTEGER is a signed 64-bit value; no stored id lies outside this range.
_SQLITE_INT_MIN = -(2 ** 63)
_SQLITE_INT_MAX = 2 ** 63 - 1


def _storable(value: int) -> bool:
    return _SQLITE_INT_MIN <= value <= _SQLITE_INT_MAX


def _casefold(value: Optional[str]) -> Optional[str]:
    return None if value is None else value.casefold()


def _parse_dt(s: Optional[str]) -> Optional[datetime]:
    if s is None:
        return None
    return datetime.fromisoformat(s)


class _SQLiteTable(ABC):
    """
    Shared plumbing for one table whose primary key is an autoincrement `id`
    and whose `created_at` column is written on insert only.

    Subclasses declare the table name, the DDL for their data columns and the
    ordered tuple of data column names.
    """

    table: str = ""
    columns: Tuple[str, ...] = ()
    column_ddl: str = ""

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    {self.column_ddl},
                    created_at TEXT NOT NULL
                )
                """
            )

    @abstractmethod
    def _row_to_entity(self, row: sqlite3.Row) -> Dict[str, Any]:
        """Convert a fetched row into the resource entity dict."""

    def _values(self, entity: Dict[str, Any]) -> List[Any]:
        return [entity[c] for c in self.columns]

    def _fetch_one(self, conn: sqlite3.Connection, entity_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {self.table} WHERE id = ?", (entity_id,)).fetchone()

    def _select(self, where_sql: str = "", params: Sequence[Any] = ()) -> List[Any]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {self.table} {where_sql} ORDER BY id", list(params)
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def save(self, entity: Any) -> Any:
        created = (entity["created_at"] or datetime.now()).isoformat()
        values = self._values(entity)
        placeholders = ", ".join("?" for _ in self.columns)
        with self._conn() as conn:
            entity_id = entity["id"]
            updated = 0
            if entity_id is not None:
                assignments = ", ".join(f"{c} = ?" for c in self.columns)
                updated = conn.execute(
                    f"UPDATE {self.table} SET {assignments} WHERE id = ?",
                    [*values, entity_id],
                ).rowcount
            if not updated:
                if entity_id is None:
                    cur = conn.execute(
                        f"INSERT INTO {self.table} ({', '.join(self.columns)}, created_at) "
                        f"VALUES ({placeholders}, ?)",
                        [*values, created],
                    )
                    entity_id = cur.lastrowid
                else:
                    conn.execute(
                        f"INSERT INTO {self.table} (id, {', '.join(self.columns)}, created_at) "
                        f"VALUES (?, {placeholders}, ?)",
                        [entity_id, *values, created],
                    )
            row = self._fetch_one(conn, entity_id)
            if row is None:
                raise sqlite3.DatabaseError(f"{self.table} row {entity_id} missing after save")
            return self._row_to_entity(row)

    def find_by_id(self, entity_id: int) -> Any:
        if not _storable(entity_id):
            return None
        with self._conn() as conn:
            row = self._fetch_one(conn, entity_id)
            return self._row_to_entity(row) if row else None

    def find_all(self) -> List[Any]:
        return self._select()

    def exists_by_id(self, entity_id: int) -> bool:
        if not _storable(entity_id):
            return False
        with self._conn() as conn:
            row = conn.execute(f"SELECT 1 FROM {self.table} WHERE id = ?", (entity_id,)).fetchone()
            return row is not None

    def delete_by_id(self, entity_id: int) -> None:
        if not _storable(entity_id):
            return
        with self._conn() as conn:
            conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (entity_id,))


class SQLiteProductRepository(_SQLiteTable, ProductRepository):
    """
    SQLite-backed product store implementing the ProductRepository interface.
    """

    table = "products"
    columns = ("name", "description", "price", "stock", "category")
    column_ddl = """
        name TEXT NOT NULL,
        description TEXT NULL,
        price REAL NOT NULL,
        stock INTEGER NOT NULL DEFAULT 0,
        category TEXT NULL
    """

    def _init_db(self) -> None:
        super()._init_db()
        with self._conn() as conn:
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{self.table}_category ON {self.table}(category)")
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{self.table}_stock ON {self.table}(stock)")

    def _row_to_entity(self, row: sqlite3.Row) -> ProductEntity:
        return {
            "id": int(row["id"]),
            "name": str(row["name"]),
            "description": row["description"],
            "price": float(row["price"]),
            "stock": int(row["stock"]),
            "category": row["category"],
            "created_at": _parse_dt(row["created_at"]),
        }

    def find_by_category(self, category: str) -> List[ProductEntity]:
        return self._select("WHERE category = ?", (category,))

    def find_by_name_containing_ignore_case(self, text: str) -> List[ProductEntity]:
        # instr() avoids LIKE wildcard handling for '%' and '_' in the search text
        return self._select("WHERE instr(casefold(name), ?) > 0", (text.casefold(),))

    def find_by_stock_greater_than_equal(self, minimum: int) -> List[ProductEntity]:
        if minimum > _SQLITE_INT_MAX:
            return []
        return self._select("WHERE stock >= ?", (max(minimum, _SQLITE_INT_MIN),))


class SQLiteTaskRepository(_SQLiteTable, TaskRepository):
    """
    SQLite-backed task store implementing the TaskRepository interface.
    """

    table = "tasks"
    columns = ("title", "description", "completed")
    column_ddl = """
        title TEXT NOT NULL,
        description TEXT NULL,
        completed INTEGER NOT NULL DEFAULT 0
    """

    def _values(self, entity: Dict[str, Any]) -> List[Any]:
        return [entity["title"], entity["description"], 1 if entity["completed"] else 0]

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": int(row["id"]),
            "title": str(row["title"]),
            "description": row["description"],
            "completed": bool(row["completed"]),
            "created_at": _parse_dt(row["created_at"]),
        }
