import logging
from contextlib import contextmanager
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory.database import init_db, make_engine, make_session_factory
from inventory.exceptions import ConflictError
from inventory.models.product import Product
from inventory.models.stock_history import StockHistory
from inventory.repositories.base import InventoryRepository, Storage

logger = logging.getLogger(__name__)


def _is_sku_conflict(exc: IntegrityError) -> bool:
    """True for a unique violation on products.sku, not for NOT NULL and the like."""
    msg = str(exc.orig).lower()
    # SQLite: "UNIQUE constraint failed: products.sku"
    # PostgreSQL: duplicate key value violates unique constraint "ix_products_sku"
    return ("unique" in msg or "duplicate" in msg) and "sku" in msg


class SqlRepository(InventoryRepository):
    backend = "sql"

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    @contextmanager
    def transaction(self):
        self._depth += 1
        try:
            yield
            if self._depth == 1:
                self.db.commit()
        except IntegrityError as e:
            if self._depth == 1:
                self.db.rollback()
            logger.warning("Integrity error, rolled back: %s", e.orig)
            if _is_sku_conflict(e):
                raise ConflictError("SKU must be unique") from e
            raise
        except Exception:
            if self._depth == 1:
                self.db.rollback()
            raise
        finally:
            self._depth -= 1

    def list_products(self) -> list[Product]:
        return self.db.query(Product).order_by(Product.created_at.desc()).all()

    def get_product(self, product_id: str) -> Product | None:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_product_by_sku(self, sku: str) -> Product | None:
        return self.db.query(Product).filter(Product.sku == sku).first()

    def add_product(self, *, name: str, sku: str, price: float, stock: int, min_stock: int) -> Product:
        product = Product(name=name, sku=sku, price=price, stock=stock, min_stock=min_stock)
        self.db.add(product)
        self.db.flush()
        return product

    def save_product(self, product: Product, changes: dict[str, Any]) -> Product:
        for field, value in changes.items():
            setattr(product, field, value)
        self.db.flush()
        return product

    def delete_product(self, product: Product) -> None:
        self.db.delete(product)
        self.db.flush()

    def add_history(
        self,
        *,
        product_id: str,
        product_name: str,
        old_stock: int,
        new_stock: int,
        change: int,
        change_type: str,
    ) -> StockHistory:
        entry = StockHistory(
            product_id=product_id,
            product_name=product_name,
            old_stock=old_stock,
            new_stock=new_stock,
            change=change,
            change_type=change_type,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_history(self, product_id: str | None = None, limit: int | None = None) -> list[StockHistory]:
        q = self.db.query(StockHistory)
        if product_id:
            q = q.filter(StockHistory.product_id == product_id)
        q = q.order_by(StockHistory.created_at.desc(), StockHistory.id.desc())
        if limit is not None:
            q = q.limit(limit)
        return q.all()


class SqlStorage(Storage):
    backend = "sql"

    def __init__(self, database_url: str | None = None, engine: Engine | None = None):
        if engine is None:
            engine = make_engine(database_url)
        self.engine = engine
        self.SessionLocal = make_session_factory(engine)

    def init(self) -> None:
        init_db(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def open(self):
        db = self.SessionLocal()
        try:
            yield SqlRepository(db)
        finally:
            db.close()
