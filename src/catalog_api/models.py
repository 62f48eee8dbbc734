from __future__ import annotations

from datetime import datetime
from typing import Optional, TypedDict

# Fields a full-replace update copies from the payload onto the stored record.
# id and created_at are write-once and never copied.
PRODUCT_MUTABLE_FIELDS = ("name", "description", "price", "stock", "category")
TASK_MUTABLE_FIELDS = ("title", "description", "completed")


# PUBLIC_INTERFACE
class ProductEntity(TypedDict):
    """
    An inventory item as held by the storage backends.

    Fields:
    - id: Integer identifier assigned by storage on insert (None before the first save)
    - name: Product name (1..100 chars)
    - description: Optional description (<= 500 chars)
    - price: Unit price
    - stock: Units on hand (>= 0)
    - category: Optional short category label (<= 50 chars)
    - created_at: Creation timestamp, set once on insert
    """

    id: Optional[int]
    name: str
    description: Optional[str]
    price: float
    stock: int
    category: Optional[str]
    created_at: Optional[datetime]


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A titled work item with a completion flag.

    Fields:
    - id: Integer identifier assigned by storage on insert (None before the first save)
    - title: Short title (1..100 chars)
    - description: Optional description (<= 500 chars)
    - completed: Boolean completion flag
    - created_at: Creation timestamp, set once on insert
    """

    id: Optional[int]
    title: str
    description: Optional[str]
    completed: bool
    created_at: Optional[datetime]
