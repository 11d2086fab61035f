from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory.database import Base
from inventory.models.product import utcnow


class ChangeType(str, PyEnum):
    INITIAL = "INITIAL"
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"
    UPDATE = "UPDATE"


class StockHistory(Base):
    """Append-only record of one stock transition.

    ``product_id`` is deliberately not a foreign key: entries outlive the
    product they describe.
    """

    __tablename__ = "stock_history"
    __table_args__ = (Index("ix_stock_history_product_created", "product_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    product_name: Mapped[str] = mapped_column(String, nullable=False)
    old_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    new_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    change: Mapped[int] = mapped_column(Integer, nullable=False)  # new_stock - old_stock
    change_type: Mapped[ChangeType] = mapped_column(
        Enum(ChangeType, native_enum=False, length=16), nullable=False, default=ChangeType.UPDATE
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
