from datetime import datetime

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

from inventory.models.stock_history import ChangeType
from inventory.schemas.product import as_utc


class StockHistoryOut(BaseModel):
    id: int
    product_id: str
    product_name: str
    old_stock: int
    new_stock: int
    change: int
    change_type: ChangeType
    created_at: datetime

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v):
        return as_utc(v)
