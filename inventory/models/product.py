import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory.database import Base

NAME_MAX_LENGTH = 100
SKU_MAX_LENGTH = 50


class StockStatus(str, PyEnum):
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"


def stock_status(stock: int, min_stock: int) -> StockStatus:
    if stock == 0:
        return StockStatus.OUT_OF_STOCK
    if stock <= min_stock:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False, index=True)
    # Always stored uppercase, so the unique index is case-insensitive in effect
    sku: Mapped[str] = mapped_column(String(SKU_MAX_LENGTH), unique=True, index=True, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    min_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def stock_status(self) -> StockStatus:
        return stock_status(self.stock, self.min_stock)
