"""Pydantic schemas for items.

Learn: Pydantic v2 models validate request/response data. Separate
"Create" schemas (input) from "Read" schemas (output) for clean APIs.
Neither input schema has an owner field: whatever owner a client sends
is dropped, the ownership guard supplies the real one.
"""

import datetime as dt
import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

# Clients send "01.02.2024"; ISO dates and datetimes are accepted too
_DATE_FORMATS = ("%d.%m.%Y", "%Y-%m-%d")


def parse_item_date(value: Any) -> Optional[dt.date]:
    """Parse a client date. Empty means "not given"."""
    if value is None or isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        raise ValueError("Invalid date format")
    value = value.strip()
    if not value:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError("Invalid date format")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ItemFields(BaseModel):
    """Shared coercion for create and update payloads."""

    @field_validator("amount", mode="before", check_fields=False)
    @classmethod
    def amount_as_text(cls, value: Any) -> Any:
        # JSON clients may send 5 instead of "5"
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("product", "time", mode="before", check_fields=False)
    @classmethod
    def optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("date", mode="before", check_fields=False)
    @classmethod
    def client_date(cls, value: Any) -> Optional[dt.date]:
        return parse_item_date(value)


class ItemCreate(ItemFields):
    name: str = Field(..., min_length=1, max_length=255)
    amount: str = Field(..., min_length=1, max_length=100)
    product: Optional[str] = Field(None, max_length=255)
    date: Optional[dt.date] = None
    time: Optional[str] = Field(None, max_length=20)


class ItemUpdate(ItemFields):
    """Partial update: only fields present in the payload change."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[str] = Field(None, min_length=1, max_length=100)
    product: Optional[str] = Field(None, max_length=255)
    date: Optional[dt.date] = None
    time: Optional[str] = Field(None, max_length=20)


class ItemRead(BaseModel):
    id: uuid.UUID
    owner: uuid.UUID = Field(validation_alias=AliasChoices("owner", "owner_id"))
    name: str
    amount: str
    product: Optional[str] = None
    image: Optional[str] = None
    date: dt.date
    time: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ItemResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    item: ItemRead


class ItemListResponse(BaseModel):
    success: bool = True
    items: list[ItemRead]
