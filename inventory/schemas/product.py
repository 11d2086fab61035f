from datetime import datetime, timezone
from typing import Annotated

from pydantic import AllowInfNan, BaseModel, Strict, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from inventory.models.product import StockStatus

# JSON uses camelCase (minStock, createdAt); Python code keeps snake_case.
_camel = {"alias_generator": to_camel, "populate_by_name": True}

# No booleans, no NaN/Infinity
Price = Annotated[float, Strict(), AllowInfNan(False)]


class ProductCreate(BaseModel):
    # Left optional so a missing field surfaces as "All fields are required"
    name: str | None = None
    sku: str | None = None
    price: Price | None = None
    stock: StrictInt | None = None
    min_stock: StrictInt | None = None

    model_config = _camel


class ProductUpdate(BaseModel):
    name: str | None = None
    sku: str | None = None
    price: Price | None = None
    stock: StrictInt | None = None
    min_stock: StrictInt | None = None

    model_config = _camel


def as_utc(v: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class ProductOut(BaseModel):
    id: str
    name: str
    sku: str
    price: float
    stock: int
    min_stock: int
    stock_status: StockStatus
    created_at: datetime
    updated_at: datetime

    model_config = {**_camel, "from_attributes": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v):
        return as_utc(v)


class MessageOut(BaseModel):
    message: str
