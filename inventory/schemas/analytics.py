from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from inventory.schemas.product import ProductOut


class AnalyticsSummary(BaseModel):
    total_products: int
    total_inventory_value: float
    low_stock_count: int
    out_of_stock_count: int
    low_stock_items: list[ProductOut] = []
    out_of_stock_items: list[ProductOut] = []

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}
