from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_required(value: str, field_name: str, max_length: int) -> str:
    """
    Strip whitespace from a required text field and enforce 1..max_length.
    """
    if value is None:
        raise ValueError(f"{field_name} is required")
    s = value.strip()
    if not (1 <= len(s) <= max_length):
        raise ValueError(f"{field_name} length must be between 1 and {max_length} characters")
    return s


# PUBLIC_INTERFACE
class ProductIn(BaseModel):
    """
    Payload for creating or fully replacing a Product.

    Unknown keys (including any client-sent id or created_at) are ignored.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Wireless mouse",
                "description": "2.4 GHz, two AA batteries",
                "price": 24.99,
                "stock": 40,
                "category": "peripherals",
            }
        }
    )

    name: str = Field(..., description="Product name (1..100 chars after stripping)")
    description: Optional[str] = Field(default=None, description="Optional description", max_length=500)
    price: float = Field(..., description="Unit price")
    stock: int = Field(default=0, ge=0, description="Units on hand")
    category: Optional[str] = Field(default=None, description="Optional category label", max_length=50)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..100 length.
        """
        return _strip_required(v, "name", 100)


# PUBLIC_INTERFACE
class ProductOut(BaseModel):
    """
    Schema returned by the API for a Product.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 7,
                "name": "Wireless mouse",
                "description": "2.4 GHz, two AA batteries",
                "price": 24.99,
                "stock": 40,
                "category": "peripherals",
                "created_at": "2025-01-25T10:15:30.123456",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the product")
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    category: Optional[str] = None
    created_at: datetime = Field(..., description="Creation timestamp")


# PUBLIC_INTERFACE
class TaskIn(BaseModel):
    """
    Payload for creating or fully replacing a Task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "Semi-skimmed, two litres",
                "completed": False,
            }
        }
    )

    title: str = Field(..., description="Short title for the task (1..100 chars after stripping)")
    description: Optional[str] = Field(default=None, description="Optional description", max_length=500)
    completed: bool = Field(default=False, description="Completion status flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _strip_required(v, "title", 100)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a Task.
    """

    id: int = Field(..., description="Unique identifier of the task")
    title: str
    description: Optional[str] = None
    completed: bool
    created_at: datetime = Field(..., description="Creation timestamp")
